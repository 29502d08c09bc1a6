from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..core.constants import MONEY_PLACES

_QUANT = Decimal(1).scaleb(-MONEY_PLACES)


def clamp_non_negative(value: float) -> float:
    return value if value > 0 else 0.0


def round_money(value: float) -> Decimal:
    """Round half-up to cents; goes through str() so 1.005 stays 1.01."""
    return Decimal(str(value or 0)).quantize(_QUANT, rounding=ROUND_HALF_UP)
