from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .account import Account  # noqa: F401
from .round import RaffleEntry, RaffleRound, RaffleState  # noqa: F401
from .draw_request import DrawRequest  # noqa: F401

__all__ = [
    "Base",
    "Account",
    "RaffleEntry",
    "RaffleRound",
    "RaffleState",
    "DrawRequest",
]
