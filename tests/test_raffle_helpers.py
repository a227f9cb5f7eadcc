from __future__ import annotations

import unittest

from prizepool.raffle import (
    DrawRequested,
    Entered,
    EventBus,
    InsufficientPayment,
    RaffleError,
    RoundNotOpen,
    TransferFailed,
    UpkeepNotNeeded,
    derive_winner_index,
)
from prizepool.models import RaffleState


class WinnerIndexTests(unittest.TestCase):
    def test_index_is_random_value_mod_count(self) -> None:
        self.assertEqual(derive_winner_index(0, 4), 0)
        self.assertEqual(derive_winner_index(7, 4), 3)
        self.assertEqual(derive_winner_index(12345, 1), 0)
        big = 78541660797044910968829902406342334108369226379826116161446442989268089806461
        self.assertEqual(derive_winner_index(big, 10), big % 10)

    def test_empty_round_raises(self) -> None:
        with self.assertRaises(ValueError):
            derive_winner_index(5, 0)

    def test_negative_or_non_integer_random_value_raises(self) -> None:
        with self.assertRaises(ValueError):
            derive_winner_index(-1, 3)
        with self.assertRaises(TypeError):
            derive_winner_index("7", 3)  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            derive_winner_index(True, 3)


class EventBusTests(unittest.TestCase):
    def test_failing_handler_does_not_block_others(self) -> None:
        bus = EventBus()
        received = []

        def broken(_event):
            raise RuntimeError("monitor down")

        bus.subscribe(broken)
        bus.subscribe(received.append)
        event = Entered(round_id=1, participant="alice", amount=5)
        with self.assertLogs("prizepool.raffle.events", level="ERROR"):
            bus.publish(event)
        self.assertEqual(received, [event])

    def test_unsubscribe_and_duplicate_subscription(self) -> None:
        bus = EventBus()
        received = []
        bus.subscribe(received.append)
        bus.subscribe(received.append)
        bus.publish_all(
            [DrawRequested(round_id=1, request_id="a"), DrawRequested(round_id=1, request_id="b")]
        )
        self.assertEqual(len(received), 2)

        bus.unsubscribe(received.append)
        bus.publish(DrawRequested(round_id=1, request_id="c"))
        self.assertEqual(len(received), 2)


class ErrorTests(unittest.TestCase):
    def test_errors_share_a_base_class(self) -> None:
        for exc in (
            InsufficientPayment(1, 2),
            RoundNotOpen(RaffleState.CALCULATING),
            UpkeepNotNeeded(0, 0, RaffleState.OPEN),
            TransferFailed("bob", 3),
        ):
            self.assertIsInstance(exc, RaffleError)

    def test_upkeep_not_needed_exposes_diagnostics(self) -> None:
        exc = UpkeepNotNeeded(balance=40, entrant_count=4, state=RaffleState.CALCULATING)
        self.assertEqual((exc.balance, exc.entrant_count, exc.state), (40, 4, RaffleState.CALCULATING))
        self.assertIn("calculating", str(exc))


if __name__ == "__main__":
    unittest.main()
