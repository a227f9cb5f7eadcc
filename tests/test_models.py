import unittest

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from prizepool.db.engine import get_sessionmaker, make_engine
from prizepool.models import Account, Base, DrawRequest, RaffleEntry, RaffleRound, RaffleState


def _round(**overrides) -> RaffleRound:
    fields = dict(
        entrance_fee=5,
        interval_seconds=10,
        oracle_identity="oracle",
        key_hash="0xlane",
        subscription_id=1,
        callback_gas_limit=100000,
        last_draw_timestamp=1_000,
    )
    fields.update(overrides)
    return RaffleRound(**fields)


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)

    def tearDown(self):
        self.engine.dispose()

    def test_round_defaults(self):
        with self.Session.begin() as session:
            raffle = _round()
            session.add(raffle)
            session.flush()
            self.assertIsNotNone(raffle.id)
            self.assertEqual(raffle.raffle_state, RaffleState.OPEN)
            self.assertEqual(raffle.pooled_balance, 0)
            self.assertIsNone(raffle.recent_winner)
            self.assertIsNone(raffle.pending_request_id)
            self.assertIsNotNone(raffle.created_at)

    def test_state_constraint(self):
        with self.Session() as session:
            raffle = _round()
            raffle.state = "paused"
            session.add(raffle)
            with self.assertRaises(IntegrityError):
                session.flush()

    def test_entries_are_ordered_by_slot_and_unique(self):
        with self.Session() as session:
            raffle = _round()
            session.add(raffle)
            session.flush()
            raffle.entries.append(RaffleEntry(slot=1, participant="bob", amount=5))
            raffle.entries.append(RaffleEntry(slot=0, participant="alice", amount=5))
            session.flush()
            session.expire(raffle, ["entries"])
            self.assertEqual([e.participant for e in raffle.entries], ["alice", "bob"])
            self.assertEqual(raffle.get_entrant(1), "bob")

            raffle.entries.append(RaffleEntry(slot=1, participant="eve", amount=5))
            with self.assertRaises(IntegrityError):
                session.flush()

    def test_request_ids_are_unique(self):
        with self.Session() as session:
            raffle = _round(state=RaffleState.CALCULATING)
            raffle.pending_request = DrawRequest(
                request_id="r-1", num_words=1, request_confirmations=3
            )
            session.add(raffle)
            session.flush()
            self.assertEqual(raffle.pending_request_id, "r-1")
            self.assertEqual(DrawRequest.get_by_request_id(session, "r-1").round_id, raffle.id)

            session.add(
                DrawRequest(
                    request_id="r-2",
                    num_words=1,
                    request_confirmations=3,
                    raffle_round=_round(),
                )
            )
            session.flush()
            session.add(
                DrawRequest(
                    request_id="r-1",
                    num_words=1,
                    request_confirmations=3,
                    raffle_round=_round(),
                )
            )
            with self.assertRaises(IntegrityError):
                session.flush()

    def test_get_for_update(self):
        with self.Session.begin() as session:
            raffle = _round()
            session.add(raffle)
            session.flush()
            self.assertIs(RaffleRound.get_for_update(session, raffle.id), raffle)
            self.assertIsNone(RaffleRound.get_for_update(session, raffle.id + 100))

    def test_write_once_columns_survive_reload(self):
        with self.Session.begin() as session:
            raffle = _round()
            session.add(raffle)
            session.flush()
            round_id = raffle.id

        with self.Session.begin() as session:
            raffle = session.get(RaffleRound, round_id)
            with self.assertRaises(ValueError):
                raffle.key_hash = "0xother"
            with self.assertRaises(ValueError):
                raffle.callback_gas_limit = 1
            raffle.recent_winner = "carol"

        with self.Session() as session:
            raffle = session.scalar(select(RaffleRound).where(RaffleRound.id == round_id))
            self.assertEqual(raffle.key_hash, "0xlane")
            self.assertEqual(raffle.recent_winner, "carol")

    def test_account_address_normalization(self):
        with self.Session.begin() as session:
            session.add(Account(address="  alice@wallet  ", balance=0))
            session.flush()
            self.assertEqual(Account.get_by_address(session, "alice@wallet").address, "alice@wallet")
            self.assertIsNone(Account.get_by_address(session, "bob@wallet"))
            with self.assertRaises(ValueError):
                Account(address="   ")


if __name__ == "__main__":
    unittest.main()
