from __future__ import annotations

import unittest

from prizepool.config import RaffleConfig
from prizepool.db.engine import get_sessionmaker, make_engine
from prizepool.models import Account, Base, DrawRequest, RaffleRound, RaffleState
from prizepool.raffle import (
    EventBus,
    PayoutExecutor,
    TransferFailed,
    UpkeepNotNeeded,
    WinnerSelected,
)
from prizepool.workflows import (
    check_upkeep,
    create_raffle,
    enter_raffle,
    fulfill_random_words,
    perform_upkeep,
)

ORACLE = "vrf-coordinator"


class StepClock:
    def __init__(self, now: int = 1_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class RecordingOracle:
    identity = ORACLE

    def __init__(self):
        self.requests = []

    def request_random_words(self, request):
        self.requests.append(request)
        return f"0x{len(self.requests):064x}"


class RejectingGateway:
    def __init__(self):
        self.calls = []

    def transfer(self, recipient: str, amount: int) -> None:
        self.calls.append((recipient, amount))
        raise TransferFailed(recipient, amount, "recipient reverted")


class RaffleWorkflowTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)
        self.clock = StepClock()
        self.oracle = RecordingOracle()
        self.config = RaffleConfig(
            entrance_fee=10,
            interval_seconds=60,
            oracle_identity=ORACLE,
            key_hash="0xlane",
            subscription_id=42,
        )

    def tearDown(self):
        self.engine.dispose()

    def _open_round_with(self, players) -> int:
        with self.Session.begin() as session:
            raffle = create_raffle(session, self.config, clock=self.clock)
            for player in players:
                enter_raffle(session, raffle, player, self.config.entrance_fee)
            return raffle.id

    def _request_draw(self, round_id: int) -> str:
        self.clock.now += self.config.interval_seconds + 1
        with self.Session.begin() as session:
            raffle = RaffleRound.get_for_update(session, round_id)
            self.assertEqual(check_upkeep(session, raffle, clock=self.clock), (True, b""))
            return perform_upkeep(session, raffle, self.oracle, clock=self.clock)

    def test_request_and_fulfilment_in_separate_transactions(self):
        round_id = self._open_round_with(["alice", "bob", "carol"])
        request_id = self._request_draw(round_id)

        with self.Session() as session:
            raffle = session.get(RaffleRound, round_id)
            self.assertEqual(raffle.raffle_state, RaffleState.CALCULATING)
            self.assertEqual(raffle.pending_request_id, request_id)
            pending = DrawRequest.get_by_request_id(session, request_id)
            self.assertEqual(pending.round_id, round_id)
            self.assertEqual(pending.num_words, 1)

        self.clock.now += 12
        bus = EventBus()
        seen = []
        bus.subscribe(seen.append)
        with self.Session.begin() as session:
            raffle = RaffleRound.get_for_update(session, round_id)
            winner = fulfill_random_words(
                session,
                raffle,
                request_id,
                [8, 99],
                caller=ORACLE,
                events=bus,
                clock=self.clock,
            )

        self.assertEqual(winner, "carol")
        self.assertEqual(seen, [WinnerSelected(round_id=round_id, winner="carol", prize=30)])

        with self.Session() as session:
            raffle = session.get(RaffleRound, round_id)
            self.assertEqual(raffle.raffle_state, RaffleState.OPEN)
            self.assertEqual(raffle.recent_winner, "carol")
            self.assertEqual(raffle.number_of_entrants, 0)
            self.assertEqual(raffle.pooled_balance, 0)
            self.assertEqual(raffle.last_draw_timestamp, self.clock.now)
            self.assertIsNone(raffle.pending_request_id)
            self.assertIsNone(DrawRequest.get_by_request_id(session, request_id))
            self.assertEqual(Account.get_by_address(session, "carol").balance, 30)

    def test_redundant_upkeep_is_rejected(self):
        round_id = self._open_round_with(["alice"])
        self._request_draw(round_id)

        with self.Session.begin() as session:
            raffle = session.get(RaffleRound, round_id)
            self.assertEqual(check_upkeep(session, raffle, clock=self.clock), (False, b""))
            with self.assertRaises(UpkeepNotNeeded):
                perform_upkeep(session, raffle, self.oracle, clock=self.clock)
        self.assertEqual(len(self.oracle.requests), 1)

    def test_refused_payout_keeps_committed_round_calculating(self):
        round_id = self._open_round_with(["alice", "bob"])
        request_id = self._request_draw(round_id)
        gateway = RejectingGateway()

        with self.Session.begin() as session:
            raffle = session.get(RaffleRound, round_id)
            with self.assertRaises(TransferFailed):
                fulfill_random_words(
                    session,
                    raffle,
                    request_id,
                    [1],
                    caller=ORACLE,
                    payout=PayoutExecutor(gateway),
                    clock=self.clock,
                )

        self.assertEqual(gateway.calls, [("bob", 20)])
        with self.Session() as session:
            raffle = session.get(RaffleRound, round_id)
            self.assertEqual(raffle.raffle_state, RaffleState.CALCULATING)
            self.assertEqual(raffle.pending_request_id, request_id)
            self.assertEqual([e.participant for e in raffle.entries], ["alice", "bob"])
            self.assertIsNone(raffle.recent_winner)
            self.assertEqual(raffle.pooled_balance, 20)

    def test_fulfilment_requires_random_words(self):
        round_id = self._open_round_with(["alice"])
        request_id = self._request_draw(round_id)
        with self.Session.begin() as session:
            raffle = session.get(RaffleRound, round_id)
            with self.assertRaises(ValueError):
                fulfill_random_words(session, raffle, request_id, [], caller=ORACLE)

    def test_new_round_accepts_entries_after_resolution(self):
        round_id = self._open_round_with(["alice"])
        request_id = self._request_draw(round_id)
        with self.Session.begin() as session:
            raffle = session.get(RaffleRound, round_id)
            fulfill_random_words(
                session, raffle, request_id, [0], caller=ORACLE, clock=self.clock
            )

        with self.Session.begin() as session:
            raffle = session.get(RaffleRound, round_id)
            entry = enter_raffle(session, raffle, "dave", 10)
            self.assertEqual(entry.slot, 0)
            self.assertEqual(raffle.get_entrant(0), "dave")
            self.assertEqual(raffle.recent_winner, "alice")


if __name__ == "__main__":
    unittest.main()
