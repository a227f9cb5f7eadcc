"""Registry of outstanding randomness requests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .id_type import ID_TYPE

if TYPE_CHECKING:
    from .round import RaffleRound


class DrawRequest(Base):
    """A randomness request issued for a round and not yet resolved.

    The row only lives between ``trigger_draw`` and a successful
    ``resolve``; a round owns at most one.
    """

    __tablename__ = "draw_requests"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    round_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("raffle_rounds.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    """Round waiting on this request."""

    request_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    """Identifier returned by the oracle and echoed back on fulfilment."""

    num_words: Mapped[int] = mapped_column(Integer, nullable=False)
    request_confirmations: Mapped[int] = mapped_column(Integer, nullable=False)

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    raffle_round: Mapped["RaffleRound"] = relationship(back_populates="pending_request")

    def __init__(
        self,
        *,
        request_id: str,
        num_words: int,
        request_confirmations: int,
        raffle_round: Optional["RaffleRound"] = None,
        requested_at: Optional[datetime] = None,
    ) -> None:
        self.request_id = request_id
        self.num_words = num_words
        self.request_confirmations = request_confirmations
        if raffle_round is not None:
            self.raffle_round = raffle_round
        if requested_at is not None:
            self.requested_at = requested_at

    @classmethod
    def get_by_request_id(cls, session: Session, request_id: str) -> Optional["DrawRequest"]:
        """Return the pending request carrying ``request_id`` if it exists."""

        return session.scalar(select(cls).where(cls.request_id == request_id))

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<DrawRequest(round_id={self.round_id}, request_id={self.request_id})>"


__all__ = ["DrawRequest"]
