"""Notifications published by the raffle for external monitoring."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, Iterable, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entered:
    round_id: int
    participant: str
    amount: int


@dataclass(frozen=True)
class DrawRequested:
    round_id: int
    request_id: str


@dataclass(frozen=True)
class WinnerSelected:
    round_id: int
    winner: str
    prize: int


RaffleEvent = Union[Entered, DrawRequested, WinnerSelected]
EventHandler = Callable[[RaffleEvent], None]


class EventBus:
    """Synchronous publish/subscribe hub for raffle notifications.

    Handlers are invoked in subscription order. A failing handler is logged
    and skipped; no raffle logic depends on delivery.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: RaffleEvent) -> None:
        logger.info(f"{type(event).__name__} {asdict(event)}")
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Event handler {handler!r} failed on {type(event).__name__}")

    def publish_all(self, events: Iterable[RaffleEvent]) -> None:
        for event in events:
            self.publish(event)


__all__ = [
    "Entered",
    "DrawRequested",
    "WinnerSelected",
    "RaffleEvent",
    "EventHandler",
    "EventBus",
]
