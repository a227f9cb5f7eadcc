from typing import Optional, Sequence

from sqlalchemy.orm import Session

from .config import RaffleConfig
from .models import RaffleEntry, RaffleRound
from .raffle.engine import Clock, RaffleEngine, unix_now
from .raffle.events import EventBus
from .raffle.oracle import RandomnessOracle
from .raffle.payout import LedgerPayoutGateway, PayoutExecutor


def create_raffle(
    session: Session,
    config: RaffleConfig,
    *,
    clock: Optional[Clock] = None,
) -> RaffleRound:
    """Persist a new open round built from ``config``.

    The round starts with no entrants, an empty pool and
    ``last_draw_timestamp`` set to the current time.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    config : RaffleConfig
        Settings fixed for the round's lifetime.
    clock : Optional[Callable[[], int]], default: None
        Source of Unix timestamps. Defaults to the system clock.

    Returns
    -------
    RaffleRound
        The persisted round with a populated ``id``.
    """

    raffle = RaffleRound(
        entrance_fee=config.entrance_fee,
        interval_seconds=config.interval_seconds,
        oracle_identity=config.oracle_identity,
        key_hash=config.key_hash,
        subscription_id=config.subscription_id,
        callback_gas_limit=config.callback_gas_limit,
        last_draw_timestamp=(clock or unix_now)(),
    )
    session.add(raffle)
    session.flush()
    return raffle


def enter_raffle(
    session: Session,
    raffle: RaffleRound,
    participant: str,
    amount: int,
    *,
    events: Optional[EventBus] = None,
) -> RaffleEntry:
    """Record ``participant``'s paid entry in ``raffle``.

    Raises
    ------
    InsufficientPayment
        If ``amount`` is below the entrance fee.
    RoundNotOpen
        If the round is calculating.
    """

    engine = RaffleEngine(session, raffle, events=events)
    return engine.enter(participant, amount)


def check_upkeep(
    session: Session,
    raffle: RaffleRound,
    *,
    clock: Optional[Clock] = None,
) -> tuple[bool, bytes]:
    """Return whether a draw may be triggered for ``raffle`` right now."""

    return RaffleEngine(session, raffle, clock=clock).check_upkeep()


def perform_upkeep(
    session: Session,
    raffle: RaffleRound,
    oracle: RandomnessOracle,
    *,
    events: Optional[EventBus] = None,
    clock: Optional[Clock] = None,
) -> str:
    """Trigger a draw and return the oracle's request identifier.

    Redundant calls from an at-least-once scheduler fail cleanly with
    ``UpkeepNotNeeded`` once the round is calculating.
    """

    engine = RaffleEngine(session, raffle, oracle=oracle, events=events, clock=clock)
    return engine.trigger_draw()


def fulfill_random_words(
    session: Session,
    raffle: RaffleRound,
    request_id: str,
    random_words: Sequence[int],
    *,
    caller: str,
    payout: Optional[PayoutExecutor] = None,
    events: Optional[EventBus] = None,
    clock: Optional[Clock] = None,
) -> str:
    """Deliver the oracle's random words and settle the round.

    Only the first random word is used. When ``payout`` is omitted the
    prize is credited to the winner's internal account through
    :class:`LedgerPayoutGateway`.

    Returns
    -------
    str
        The winning participant.

    Raises
    ------
    ValueError
        If ``random_words`` is empty.
    TransferFailed
        If the payout is refused; the round is left untouched.
    """

    if not random_words:
        raise ValueError("At least one random word is required")

    executor = payout or PayoutExecutor(LedgerPayoutGateway(session))
    engine = RaffleEngine(session, raffle, payout=executor, events=events, clock=clock)
    return engine.resolve(request_id, random_words[0], caller=caller)
