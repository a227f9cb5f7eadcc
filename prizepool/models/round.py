"""Database models for raffle rounds and their entrants."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    inspect,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from .base import Base
from .id_type import AMOUNT_TYPE, ID_TYPE, UNIX_TIME_TYPE, Uint256

if TYPE_CHECKING:
    from .draw_request import DrawRequest


class RaffleState(str, enum.Enum):
    """Lifecycle states of a raffle round."""

    OPEN = "open"
    CALCULATING = "calculating"


# Columns fixed at construction time; reassigning them is rejected.
_WRITE_ONCE_COLUMNS = (
    "entrance_fee",
    "interval_seconds",
    "oracle_identity",
    "key_hash",
    "subscription_id",
    "callback_gas_limit",
)


class RaffleRound(Base):
    """Singleton-per-raffle state machine row.

    The row cycles between ``open`` and ``calculating`` indefinitely: it is
    created once, mutated by entries, draw requests and resolutions, and
    never deleted.
    """

    __tablename__ = "raffle_rounds"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RaffleState.OPEN.value
    )
    """Current lifecycle state (``"open"`` or ``"calculating"``)."""

    entrance_fee: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    """Minimum payment required for one entry."""

    interval_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    """Seconds that must strictly elapse between draws."""

    pooled_balance: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Funds escrowed by the round, released only by a resolution."""

    last_draw_timestamp: Mapped[int] = mapped_column(UNIX_TIME_TYPE, nullable=False)
    """Unix time of construction or of the last resolved draw."""

    recent_winner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Participant who won the last resolved draw, if any."""

    oracle_identity: Mapped[str] = mapped_column(String(255), nullable=False)
    """Identity of the only collaborator allowed to resolve draws."""

    key_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    """Oracle key (gas lane) parameter forwarded with each request."""

    subscription_id: Mapped[int] = mapped_column(Uint256(), nullable=False)
    """Oracle subscription funding the randomness requests."""

    callback_gas_limit: Mapped[int] = mapped_column(Integer, nullable=False)
    """Upper bound the oracle may spend when calling back."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    entries: Mapped[list["RaffleEntry"]] = relationship(
        back_populates="raffle_round",
        cascade="all, delete-orphan",
        order_by="RaffleEntry.slot",
    )
    """Entrants of the current round in slot order."""

    pending_request: Mapped[Optional["DrawRequest"]] = relationship(
        back_populates="raffle_round",
        cascade="all, delete-orphan",
        uselist=False,
    )
    """Outstanding randomness request; present iff the round is calculating."""

    __table_args__ = (
        CheckConstraint("state IN ('open','calculating')", name="state_enum"),
        CheckConstraint("pooled_balance >= 0", name="pooled_balance_non_negative"),
        CheckConstraint("entrance_fee >= 0", name="entrance_fee_non_negative"),
        CheckConstraint("interval_seconds >= 0", name="interval_non_negative"),
    )

    def __init__(
        self,
        *,
        entrance_fee: int,
        interval_seconds: int,
        oracle_identity: str,
        key_hash: str,
        subscription_id: int,
        callback_gas_limit: int,
        last_draw_timestamp: int,
        state: RaffleState = RaffleState.OPEN,
        pooled_balance: int = 0,
        recent_winner: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.entrance_fee = entrance_fee
        self.interval_seconds = interval_seconds
        self.oracle_identity = oracle_identity
        self.key_hash = key_hash
        self.subscription_id = subscription_id
        self.callback_gas_limit = callback_gas_limit
        self.last_draw_timestamp = last_draw_timestamp
        self.state = RaffleState(state).value
        self.pooled_balance = pooled_balance
        self.recent_winner = recent_winner
        if created_at is not None:
            self.created_at = created_at

    @validates(*_WRITE_ONCE_COLUMNS)
    def _reject_reconfiguration(self, key: str, value: Any) -> Any:
        state = inspect(self)
        current = getattr(self, key) if state.persistent else self.__dict__.get(key)
        if current is not None and current != value:
            raise ValueError(f"{key} is fixed once the raffle has been created")
        return value

    @property
    def raffle_state(self) -> RaffleState:
        return RaffleState(self.state)

    @property
    def pending_request_id(self) -> Optional[str]:
        if self.pending_request is None:
            return None
        return self.pending_request.request_id

    @property
    def number_of_entrants(self) -> int:
        return len(self.entries)

    def get_entrant(self, index: int) -> str:
        """Return the participant occupying slot ``index`` of the current round."""

        if index < 0 or index >= len(self.entries):
            raise IndexError(f"no entrant at index {index}")
        return self.entries[index].participant

    @classmethod
    def get_for_update(cls, session: Session, round_id: int) -> Optional["RaffleRound"]:
        """Load the round while holding a row lock for the rest of the transaction."""

        return session.scalar(select(cls).where(cls.id == round_id).with_for_update())

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<RaffleRound(id={self.id}, state='{self.state}', "
            f"pooled_balance={self.pooled_balance}, entrants={len(self.entries)})>"
        )


class RaffleEntry(Base):
    """One paid slot in the current round; a participant may hold many."""

    __tablename__ = "raffle_entries"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("raffle_rounds.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slot: Mapped[int] = mapped_column(Integer, nullable=False)
    """Zero-based index used for winner selection."""

    participant: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    raffle_round: Mapped["RaffleRound"] = relationship(back_populates="entries")

    __table_args__ = (
        UniqueConstraint("round_id", "slot", name="uq_raffle_entry_slot"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<RaffleEntry(round_id={self.round_id}, slot={self.slot}, "
            f"participant={self.participant}, amount={self.amount})>"
        )


__all__ = ["RaffleState", "RaffleRound", "RaffleEntry"]
