"""Bind the raffle's collaborator contracts to :class:`ChainClient`."""

from __future__ import annotations

import logging

import requests

from .api import ChainClient
from ..raffle.errors import TransferFailed
from ..raffle.oracle import RandomnessRequest

logger = logging.getLogger(__name__)


class ChainRandomnessOracle:
    """Randomness oracle backed by the gateway's VRF endpoint.

    ``identity`` is the caller name the gateway uses when it delivers the
    random words back, and ``consumer`` is the callback target it is told
    to invoke.
    """

    def __init__(self, client: ChainClient, *, identity: str, consumer: str) -> None:
        self._client = client
        self.identity = identity
        self.consumer = consumer

    def request_random_words(self, request: RandomnessRequest) -> str:
        request_id = self._client.request_random_words(
            key_hash=request.key_hash,
            subscription_id=request.subscription_id,
            request_confirmations=request.request_confirmations,
            callback_gas_limit=request.callback_gas_limit,
            num_words=request.num_words,
            consumer=self.consumer,
        )
        logger.debug(f"Randomness request {request_id} submitted for {self.consumer}")
        return request_id


class ChainPayoutGateway:
    """Pay winners from the operator wallet through the gateway."""

    def __init__(self, client: ChainClient) -> None:
        self._client = client

    def transfer(self, recipient: str, amount: int) -> None:
        try:
            response = self._client.transfer(recipient, amount)
        except requests.RequestException as exc:
            raise TransferFailed(recipient, amount, str(exc)) from exc

        if not isinstance(response, dict) or response.get("status") != "success":
            message = response.get("message") if isinstance(response, dict) else None
            raise TransferFailed(recipient, amount, message or f"unexpected response {response!r}")


__all__ = ["ChainPayoutGateway", "ChainRandomnessOracle"]
