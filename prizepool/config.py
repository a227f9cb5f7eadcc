"""Construction-time settings for a raffle."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_CALLBACK_GAS_LIMIT = 500_000


def _read_int(environ: Mapping[str, str], name: str, default: Optional[int] = None) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        if default is None:
            raise ValueError(f"Environment variable '{name}' is not set")
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Environment variable '{name}' must be an integer, got {raw!r}") from exc


def _read_str(environ: Mapping[str, str], name: str) -> str:
    value = (environ.get(name) or "").strip()
    if not value:
        raise ValueError(f"Environment variable '{name}' is not set")
    return value


@dataclass(frozen=True)
class RaffleConfig:
    """Immutable raffle settings.

    Attributes
    ----------
    entrance_fee : int
        Minimum payment per entry, in the smallest currency unit.
    interval_seconds : int
        Seconds that must strictly elapse between draws.
    oracle_identity : str
        Only caller allowed to deliver randomness.
    key_hash : str
        Oracle key (gas lane) forwarded with each request.
    subscription_id : int
        Oracle subscription paying for requests.
    callback_gas_limit : int
        Gas limit granted to the fulfilment callback.
    """

    entrance_fee: int
    interval_seconds: int
    oracle_identity: str
    key_hash: str
    subscription_id: int
    callback_gas_limit: int = DEFAULT_CALLBACK_GAS_LIMIT

    def __post_init__(self) -> None:
        if self.entrance_fee < 0:
            raise ValueError("entrance_fee must be non-negative")
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must be non-negative")
        if self.callback_gas_limit <= 0:
            raise ValueError("callback_gas_limit must be positive")
        if not self.oracle_identity:
            raise ValueError("oracle_identity must not be empty")
        if not self.key_hash:
            raise ValueError("key_hash must not be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RaffleConfig":
        """Build a config from ``environ`` (``os.environ`` after loading ``.env`` by default)."""

        if environ is None:
            load_dotenv()
            environ = os.environ
        return cls(
            entrance_fee=_read_int(environ, "RAFFLE_ENTRANCE_FEE"),
            interval_seconds=_read_int(environ, "RAFFLE_INTERVAL_SECONDS"),
            oracle_identity=_read_str(environ, "ORACLE_IDENTITY"),
            key_hash=_read_str(environ, "ORACLE_KEY_HASH"),
            subscription_id=_read_int(environ, "ORACLE_SUBSCRIPTION_ID"),
            callback_gas_limit=_read_int(
                environ, "ORACLE_CALLBACK_GAS_LIMIT", DEFAULT_CALLBACK_GAS_LIMIT
            ),
        )


__all__ = ["DEFAULT_CALLBACK_GAS_LIMIT", "RaffleConfig"]
