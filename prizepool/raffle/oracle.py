"""Contract expected from the randomness oracle collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

REQUEST_CONFIRMATIONS = 3
"""Block confirmations the oracle waits before answering."""

NUM_WORDS = 1
"""Random words requested per draw; only the first selects the winner."""


@dataclass(frozen=True)
class RandomnessRequest:
    """Parameters forwarded to the oracle for one draw."""

    key_hash: str
    subscription_id: int
    request_confirmations: int
    callback_gas_limit: int
    num_words: int


class RandomnessOracle(Protocol):
    """Issues asynchronous randomness requests.

    ``request_random_words`` must not block on fulfilment: it returns the
    request identifier and the oracle later calls back through
    :meth:`prizepool.raffle.engine.RaffleEngine.resolve` under ``identity``.
    """

    identity: str

    def request_random_words(self, request: RandomnessRequest) -> str:
        ...


__all__ = [
    "NUM_WORDS",
    "REQUEST_CONFIRMATIONS",
    "RandomnessOracle",
    "RandomnessRequest",
]
