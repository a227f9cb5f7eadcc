from __future__ import annotations

import argparse
import logging
import time

from prizepool.blockchain.adapters import ChainRandomnessOracle
from prizepool.blockchain.api import ChainClient
from prizepool.config import RaffleConfig
from prizepool.db.engine import get_sessionmaker, make_engine
from prizepool.models import RaffleRound
from prizepool.raffle import UpkeepNotNeeded
from prizepool.workflows import check_upkeep, perform_upkeep

logger = logging.getLogger("prizepool.upkeep")


def run_once(Session, round_id: int, oracle: ChainRandomnessOracle) -> bool:
    """Trigger a draw for ``round_id`` if it is eligible. Returns ``True`` when one was issued."""
    with Session.begin() as session:
        raffle = RaffleRound.get_for_update(session, round_id)
        if raffle is None:
            raise ValueError(f"Raffle {round_id} does not exist")

        needed, _ = check_upkeep(session, raffle)
        if not needed:
            return False
        try:
            request_id = perform_upkeep(session, raffle, oracle)
        except UpkeepNotNeeded as exc:
            # Another scheduler got there first.
            logger.info(f"Upkeep skipped: {exc}")
            return False
        logger.info(f"Requested randomness {request_id} for raffle {round_id}")
        return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Poll a raffle and trigger draws when eligible.")
    parser.add_argument("round_id", type=int)
    parser.add_argument("--poll-seconds", type=float, default=15.0)
    parser.add_argument("--consumer", required=True, help="Callback target handed to the oracle")
    parser.add_argument("--once", action="store_true", help="Check a single time and exit")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    config = RaffleConfig.from_env()
    oracle = ChainRandomnessOracle(
        ChainClient(), identity=config.oracle_identity, consumer=args.consumer
    )
    Session = get_sessionmaker(make_engine())

    while True:
        run_once(Session, args.round_id, oracle)
        if args.once:
            return 0
        time.sleep(args.poll_seconds)


if __name__ == "__main__":
    raise SystemExit(main())
