from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, Session, mapped_column, validates

from .base import Base
from .id_type import AMOUNT_TYPE, ID_TYPE


class Account(Base):
    """Internal wallet credited by ledger payouts."""

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, index=True, autoincrement=True)
    address: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    balance: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    accepts_payouts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (CheckConstraint("balance >= 0", name="balance_non_negative"),)

    @validates("address")
    def _normalize_address(self, _key: str, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("address must not be empty")
        return normalized

    @classmethod
    def get_by_address(cls, session: Session, address: str) -> Optional["Account"]:
        return session.query(cls).filter(cls.address == address.strip()).one_or_none()

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Account(address={self.address}, balance={self.balance})>"
