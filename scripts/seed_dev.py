import time

from prizepool.config import RaffleConfig
from prizepool.db.engine import get_sessionmaker, make_engine
from prizepool.models import Account, Base
from prizepool.workflows import create_raffle, enter_raffle


def main() -> None:
    """Seed the development database with an open raffle and a few entries."""
    engine = make_engine()

    # Drop and recreate all tables for a clean reset of the schema.
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    config = RaffleConfig(
        entrance_fee=10_000_000_000_000_000,
        interval_seconds=30,
        oracle_identity="dev-oracle",
        key_hash="0x474e34a077df58807dbe9c96d3c009b23b3c6d0cce433e59bbf5b34f823bc56c",
        subscription_id=1,
    )

    with Session.begin() as session:
        # Started one interval ago so the first draw is immediately eligible.
        raffle = create_raffle(
            session, config, clock=lambda: int(time.time()) - config.interval_seconds - 1
        )

        players = ["alice@example.com", "bob@example.com", "carol@example.com"]
        session.add_all([Account(address=p, balance=0) for p in players])
        # A wallet that refuses payouts, handy for exercising failed resolutions.
        session.add(Account(address="mallory@example.com", balance=0, accepts_payouts=False))

        for player in players:
            enter_raffle(session, raffle, player, config.entrance_fee)
        enter_raffle(session, raffle, "alice@example.com", config.entrance_fee * 2)

        print(
            f"Seeded raffle {raffle.id} with {raffle.number_of_entrants} entries "
            f"and a pool of {raffle.pooled_balance}"
        )


if __name__ == "__main__":
    main()
