"""State machine driving a raffle round from entry to payout."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .errors import (
    InsufficientPayment,
    OnlyOracleCanFulfill,
    RoundNotOpen,
    UnknownDrawRequest,
    UpkeepNotNeeded,
)
from .events import DrawRequested, Entered, EventBus, RaffleEvent, WinnerSelected
from .oracle import NUM_WORDS, REQUEST_CONFIRMATIONS, RandomnessOracle, RandomnessRequest
from .payout import PayoutExecutor
from .selection import derive_winner_index
from ..models import DrawRequest, RaffleEntry, RaffleRound, RaffleState

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def unix_now() -> int:
    """Return the current Unix time in whole seconds."""
    return int(time.time())


class RaffleEngine:
    """Engine that owns every mutation of a :class:`RaffleRound`.

    Each public operation runs to completion against the bound session.
    ``trigger_draw`` and ``resolve`` are the two halves of the oracle round
    trip; they are correlated only through the round's pending request and
    may run in unrelated processes.
    """

    def __init__(
        self,
        session: Session,
        raffle_round: RaffleRound,
        *,
        oracle: Optional[RandomnessOracle] = None,
        payout: Optional[PayoutExecutor] = None,
        events: Optional[EventBus] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Bind the engine to a persisted round.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session. The caller owns the outer transaction.
        raffle_round : RaffleRound
            Round to operate on.
        oracle : Optional[RandomnessOracle], default: None
            Randomness collaborator; required by :meth:`trigger_draw`.
        payout : Optional[PayoutExecutor], default: None
            Payout executor; required by :meth:`resolve`.
        events : Optional[EventBus], default: None
            Bus receiving notifications. A private bus is used when omitted.
        clock : Optional[Callable[[], int]], default: None
            Source of Unix timestamps. Defaults to the system clock.
        """

        self._session = session
        self._round = raffle_round
        self._oracle = oracle
        self._payout = payout
        self._events = events or EventBus()
        self._clock = clock or unix_now

    # -------- read-only views --------
    @property
    def raffle_round(self) -> RaffleRound:
        return self._round

    @property
    def entrance_fee(self) -> int:
        return self._round.entrance_fee

    @property
    def interval(self) -> int:
        return self._round.interval_seconds

    @property
    def state(self) -> RaffleState:
        return self._round.raffle_state

    @property
    def recent_winner(self) -> Optional[str]:
        return self._round.recent_winner

    @property
    def last_draw_timestamp(self) -> int:
        return self._round.last_draw_timestamp

    @property
    def pooled_balance(self) -> int:
        return self._round.pooled_balance

    @property
    def number_of_entrants(self) -> int:
        return self._round.number_of_entrants

    @property
    def pending_request_id(self) -> Optional[str]:
        return self._round.pending_request_id

    @property
    def request_confirmations(self) -> int:
        return REQUEST_CONFIRMATIONS

    @property
    def num_words(self) -> int:
        return NUM_WORDS

    def get_entrant(self, index: int) -> str:
        return self._round.get_entrant(index)

    # -------- entry ledger --------
    def enter(self, participant: str, amount: int) -> RaffleEntry:
        """Record a paid entry for ``participant``.

        The same participant may enter several times; every entry takes its
        own slot.

        Raises
        ------
        InsufficientPayment
            If ``amount`` is below the entrance fee.
        RoundNotOpen
            If a draw is in flight.
        ValueError
            If ``participant`` is empty or ``amount`` is negative.
        """

        if not participant or not participant.strip():
            raise ValueError("participant must not be empty")
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")

        raffle = self._round
        if amount < raffle.entrance_fee:
            raise InsufficientPayment(amount, raffle.entrance_fee)
        if raffle.raffle_state is not RaffleState.OPEN:
            raise RoundNotOpen(raffle.raffle_state)

        with self._session.begin_nested():
            entry = RaffleEntry(
                slot=len(raffle.entries),
                participant=participant,
                amount=amount,
            )
            raffle.entries.append(entry)
            raffle.pooled_balance = raffle.pooled_balance + amount
            self._session.flush()

        self._events.publish(Entered(round_id=raffle.id, participant=participant, amount=amount))
        return entry

    # -------- eligibility --------
    def is_draw_eligible(self) -> bool:
        """Return ``True`` when a draw may be requested right now.

        All of the following must hold: the round is open, strictly more
        than ``interval`` seconds have passed since the last draw, and there
        is at least one entrant and a positive pooled balance. The answer is
        recomputed on every call.
        """

        raffle = self._round
        is_open = raffle.raffle_state is RaffleState.OPEN
        time_passed = (self._clock() - raffle.last_draw_timestamp) > raffle.interval_seconds
        has_entrants = len(raffle.entries) > 0
        has_balance = raffle.pooled_balance > 0
        return is_open and time_passed and has_entrants and has_balance

    def check_upkeep(self) -> tuple[bool, bytes]:
        """Scheduler-facing form of :meth:`is_draw_eligible`.

        Returns
        -------
        tuple[bool, bytes]
            The eligibility flag and an (always empty) payload to hand back
            to :meth:`trigger_draw`.
        """

        return self.is_draw_eligible(), b""

    # -------- draw request issuer --------
    def trigger_draw(self) -> str:
        """Close the round and ask the oracle for randomness.

        The round is flipped to ``calculating`` before the request is sent,
        so a second trigger for the same round fails eligibility. If the
        oracle call raises, the state change is rolled back with it.

        Returns
        -------
        str
            Identifier of the issued request.

        Raises
        ------
        UpkeepNotNeeded
            If the round is not eligible for a draw.
        ValueError
            If the engine has no oracle or the oracle returns no identifier.
        """

        raffle = self._round
        if not self.is_draw_eligible():
            raise UpkeepNotNeeded(
                balance=raffle.pooled_balance,
                entrant_count=len(raffle.entries),
                state=raffle.raffle_state,
            )
        if self._oracle is None:
            raise ValueError("An oracle is required to trigger a draw")

        with self._session.begin_nested():
            raffle.state = RaffleState.CALCULATING.value
            self._session.flush()

            request_id = self._oracle.request_random_words(
                RandomnessRequest(
                    key_hash=raffle.key_hash,
                    subscription_id=raffle.subscription_id,
                    request_confirmations=REQUEST_CONFIRMATIONS,
                    callback_gas_limit=raffle.callback_gas_limit,
                    num_words=NUM_WORDS,
                )
            )
            if not request_id:
                raise ValueError("Oracle did not return a request id")
            request_id = str(request_id)

            raffle.pending_request = DrawRequest(
                request_id=request_id,
                num_words=NUM_WORDS,
                request_confirmations=REQUEST_CONFIRMATIONS,
            )
            self._session.flush()

        logger.debug(f"Round {raffle.id} is calculating, pending request {request_id}")
        self._events.publish(DrawRequested(round_id=raffle.id, request_id=request_id))
        return request_id

    # -------- winner resolver --------
    def resolve(self, request_id: str, random_value: int, *, caller: str) -> str:
        """Pick the winner for the pending request, reset the round and pay out.

        Parameters
        ----------
        request_id : str
            Identifier of the request being fulfilled.
        random_value : int
            Random word delivered by the oracle.
        caller : str
            Identity of the collaborator invoking the callback.

        Returns
        -------
        str
            The winning participant.

        Notes
        -----
        Winner selection, the round reset and the payout form a single
        unit inside a SAVEPOINT. When the payout raises, the savepoint is
        rolled back and the round keeps its entrants, its pending request,
        its previous winner and the ``calculating`` state. Nothing recovers
        such a round automatically.

        Raises
        ------
        OnlyOracleCanFulfill
            If ``caller`` is not the round's registered oracle.
        UnknownDrawRequest
            If ``request_id`` is not the pending request.
        TransferFailed
            If the winner cannot be paid.
        """

        raffle = self._round
        if caller != raffle.oracle_identity:
            raise OnlyOracleCanFulfill(have=caller, want=raffle.oracle_identity)
        pending_id = raffle.pending_request_id
        if pending_id is None or pending_id != request_id:
            raise UnknownDrawRequest(request_id, pending_id)
        if self._payout is None:
            raise ValueError("A payout executor is required to resolve a draw")

        staged: list[RaffleEvent] = []
        with self._session.begin_nested():
            index = derive_winner_index(random_value, len(raffle.entries))
            winner = raffle.entries[index].participant
            prize = raffle.pooled_balance

            raffle.entries.clear()
            raffle.pending_request = None
            raffle.state = RaffleState.OPEN.value
            raffle.last_draw_timestamp = self._clock()
            raffle.recent_winner = winner
            raffle.pooled_balance = 0
            staged.append(WinnerSelected(round_id=raffle.id, winner=winner, prize=prize))
            self._session.flush()

            self._payout.pay(winner, prize)

        logger.debug(f"Round {raffle.id} resolved: slot {index} ({winner}) won {prize}")
        self._events.publish_all(staged)
        return winner


__all__ = ["Clock", "RaffleEngine", "unix_now"]
