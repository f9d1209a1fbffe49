"""
Column types for money.

Servers with a real fixed-point type (PostgreSQL NUMERIC) store
money as Numeric(19, 2). SQLite has no such type: its NUMERIC
affinity keeps large values as floats, so there the amount is
stored as an integer number of cents instead.
"""

from decimal import Decimal

from sqlalchemy import BigInteger, Numeric
from sqlalchemy.types import TypeDecorator

from admin_ledger.config import MONEY_QUANTUM


class Money(TypeDecorator):
    """Cent-precision Decimal, exact on every supported backend."""

    impl = Numeric(19, 2)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(19, 2, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value).quantize(MONEY_QUANTUM)
        if dialect.name == "sqlite":
            return int(value.scaleb(2))
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "sqlite":
            return Decimal(int(value)).scaleb(-2).quantize(MONEY_QUANTUM)
        return Decimal(value).quantize(MONEY_QUANTUM)
