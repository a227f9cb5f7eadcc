"""Release of the pooled funds to a round's winner."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.orm import Session

from .errors import TransferFailed
from ..models.account import Account

logger = logging.getLogger(__name__)


class PayoutGateway(Protocol):
    """Moves funds to a recipient or raises :class:`TransferFailed`."""

    def transfer(self, recipient: str, amount: int) -> None:
        ...


class LedgerPayoutGateway:
    """Credit winners on internal :class:`Account` rows.

    The credit is written through ``session`` so it commits or rolls back
    together with the resolution that produced it.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def transfer(self, recipient: str, amount: int) -> None:
        account = Account.get_by_address(self._session, recipient)
        if account is None:
            account = Account(address=recipient, balance=0, accepts_payouts=True)
            self._session.add(account)
        elif not account.accepts_payouts:
            raise TransferFailed(recipient, amount, "account does not accept payouts")

        account.balance = (account.balance or 0) + amount
        self._session.flush()


class PayoutExecutor:
    """Pay a recipient through a gateway, surfacing refusals as :class:`TransferFailed`."""

    def __init__(self, gateway: PayoutGateway) -> None:
        self._gateway = gateway

    def pay(self, recipient: str, amount: int) -> None:
        """Transfer ``amount`` to ``recipient``.

        Raises
        ------
        TransferFailed
            If the recipient cannot or will not accept the funds. The error
            is never swallowed so the enclosing resolution aborts as a unit.
        ValueError
            If ``amount`` is negative.
        """

        if amount < 0:
            raise ValueError("payout amount must be non-negative")

        logger.debug(f"Paying {amount} to {recipient}")
        try:
            self._gateway.transfer(recipient, amount)
        except TransferFailed as exc:
            logger.warning(f"Payout rejected: {exc}")
            raise
        logger.debug(f"Payout of {amount} to {recipient} completed")


__all__ = ["LedgerPayoutGateway", "PayoutExecutor", "PayoutGateway"]
