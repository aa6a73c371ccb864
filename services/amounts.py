"""Exact arithmetic for money amounts that arrive as JSON floats."""
from decimal import Decimal
from typing import Iterable, Optional


def to_decimal(amount: Optional[float]) -> Decimal:
    # str() keeps the amount as written (0.1 stays 0.1, not its binary expansion)
    return Decimal(str(amount or 0))


def decimal_sum(amounts: Iterable[Optional[float]]) -> Decimal:
    return sum((to_decimal(a) for a in amounts), Decimal("0"))
