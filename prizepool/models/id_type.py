from decimal import Decimal

from sqlalchemy import BigInteger, Integer, Numeric, String
from sqlalchemy.types import TypeDecorator

# Use BigInteger by default, with a SQLite-safe Integer variant for autoincrement PKs.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

# Unix timestamps in whole seconds.
UNIX_TIME_TYPE = BigInteger().with_variant(Integer, "sqlite")

UINT256_DIGITS = 78


class Uint256(TypeDecorator):
    """Unsigned 256-bit integer column, mapped to Python ``int``.

    Amounts are denominated in the smallest unit (wei), so a single payment
    already exceeds 64 bits. Backends with arbitrary-precision decimals store
    ``NUMERIC(78, 0)``. SQLite integers stop at 64 bits and its NUMERIC
    affinity degrades larger values to REAL, so the value is kept there as a
    decimal string.
    """

    impl = Numeric(UINT256_DIGITS, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(UINT256_DIGITS))
        return dialect.type_descriptor(Numeric(UINT256_DIGITS, 0))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if dialect.name == "sqlite":
            return str(value)
        return Decimal(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


AMOUNT_TYPE = Uint256()
