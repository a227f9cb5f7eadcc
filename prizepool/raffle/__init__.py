"""Raffle round state machine and its collaborators."""

from .engine import RaffleEngine, unix_now
from .errors import (
    InsufficientPayment,
    OnlyOracleCanFulfill,
    RaffleError,
    RoundNotOpen,
    TransferFailed,
    UnknownDrawRequest,
    UpkeepNotNeeded,
)
from .events import DrawRequested, Entered, EventBus, WinnerSelected
from .oracle import NUM_WORDS, REQUEST_CONFIRMATIONS, RandomnessOracle, RandomnessRequest
from .payout import LedgerPayoutGateway, PayoutExecutor, PayoutGateway
from .selection import derive_winner_index

__all__ = [
    "DrawRequested",
    "Entered",
    "EventBus",
    "InsufficientPayment",
    "LedgerPayoutGateway",
    "NUM_WORDS",
    "OnlyOracleCanFulfill",
    "PayoutExecutor",
    "PayoutGateway",
    "REQUEST_CONFIRMATIONS",
    "RaffleEngine",
    "RaffleError",
    "RandomnessOracle",
    "RandomnessRequest",
    "RoundNotOpen",
    "TransferFailed",
    "UnknownDrawRequest",
    "UpkeepNotNeeded",
    "WinnerSelected",
    "derive_winner_index",
    "unix_now",
]
