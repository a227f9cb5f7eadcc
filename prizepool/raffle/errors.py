"""Domain errors raised by the raffle state machine."""

from __future__ import annotations

from typing import Optional

from ..models.round import RaffleState


class RaffleError(Exception):
    """Base class for every failure surfaced by the raffle core."""


class InsufficientPayment(RaffleError):
    """The entry payment is below the round's entrance fee."""

    def __init__(self, amount: int, required: int) -> None:
        super().__init__(f"payment of {amount} is below the entrance fee of {required}")
        self.amount = amount
        self.required = required


class RoundNotOpen(RaffleError):
    """The round is not accepting entries."""

    def __init__(self, state: RaffleState) -> None:
        super().__init__(f"raffle round is not open (state={state.value})")
        self.state = state


class UpkeepNotNeeded(RaffleError):
    """A draw was triggered while the round was not eligible.

    The diagnostic values describe the round at the time of the rejection.
    """

    def __init__(self, balance: int, entrant_count: int, state: RaffleState) -> None:
        super().__init__(
            "draw not eligible "
            f"(balance={balance}, entrants={entrant_count}, state={state.value})"
        )
        self.balance = balance
        self.entrant_count = entrant_count
        self.state = state


class TransferFailed(RaffleError):
    """The winner could not be paid; the whole resolution is aborted."""

    def __init__(self, recipient: str, amount: int, reason: Optional[str] = None) -> None:
        message = f"transfer of {amount} to {recipient} failed"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.recipient = recipient
        self.amount = amount
        self.reason = reason


class OnlyOracleCanFulfill(RaffleError):
    """``resolve`` was invoked by someone other than the registered oracle."""

    def __init__(self, have: str, want: str) -> None:
        super().__init__(f"only the registered oracle {want!r} can fulfil, got {have!r}")
        self.have = have
        self.want = want


class UnknownDrawRequest(RaffleError):
    """The fulfilled request does not match the round's pending request."""

    def __init__(self, request_id: str, pending_request_id: Optional[str]) -> None:
        super().__init__(
            f"request {request_id!r} does not match pending request {pending_request_id!r}"
        )
        self.request_id = request_id
        self.pending_request_id = pending_request_id


__all__ = [
    "RaffleError",
    "InsufficientPayment",
    "RoundNotOpen",
    "UpkeepNotNeeded",
    "TransferFailed",
    "OnlyOracleCanFulfill",
    "UnknownDrawRequest",
]
