"""
Column types for monetary values.

No floats anywhere in the ledger. Amounts are Decimal values
with exactly two fractional digits, and the Money column type
makes sure the store never turns them into floats either.
"""

from decimal import Decimal

from sqlalchemy import BigInteger, Numeric
from sqlalchemy.types import TypeDecorator

MONEY_PLACES = 2
CENT = Decimal("0.01")

# Largest amount and balance every backend can hold: SQLite's
# signed 64-bit INTEGER in cents. NUMERIC(19, 2) is wider.
MAX_AMOUNT = Decimal(2**63 - 1).scaleb(-MONEY_PLACES)


class Money(TypeDecorator):
    """
    Two-decimal monetary amount.

    PostgreSQL stores NUMERIC(19, 2) natively. SQLite has no
    exact decimal type (NUMERIC columns become REAL), so there
    the value is stored as integer minor units. Either way the
    store's SUM() is exact, and Python always sees a Decimal
    quantized to cents.
    """

    impl = Numeric(19, MONEY_PLACES)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(19, MONEY_PLACES))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value).quantize(CENT)
        if dialect.name == "sqlite":
            return int(value.scaleb(MONEY_PLACES))
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "sqlite":
            return Decimal(int(value)).scaleb(-MONEY_PLACES).quantize(CENT)
        return Decimal(value).quantize(CENT)
