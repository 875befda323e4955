"""
Decimal Utilities Module - Conversions between display amounts and base units
Ledger amounts are integers in the currency's smallest unit; Decimals are only
used at the edges (input parsing and display).
"""

import logging
from decimal import ROUND_DOWN, Decimal, Inexact, InvalidOperation, localcontext
from typing import Union

from parimutuel.config import config

logger = logging.getLogger(__name__)

Numeric = Union[Decimal, float, str, int]

__all__ = [
    "ZERO",
    "format_amount",
    "from_base_units",
    "to_base_units",
    "to_decimal",
]

ZERO = Decimal("0")


def _unit_decimals(decimals: int | None) -> int:
    if decimals is None:
        decimals = config.get("financial", "unit_decimals", 18)
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")
    return decimals


def to_decimal(value: Numeric, default: Decimal | None = None) -> Decimal:
    """
    Safely convert value to Decimal

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion.

    Raises:
        ValueError if conversion fails and no default provided
    """
    if isinstance(value, Decimal):
        return value

    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        if default is not None:
            logger.warning(f"Failed to convert {value} to Decimal: {e}, using default {default}")
            return default
        raise ValueError(f"Cannot convert {value} to Decimal: {e}")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value}")
    return result


def to_base_units(value: Numeric, decimals: int | None = None) -> int:
    """
    Convert a display amount to integer base units (like parseEther)

    Args:
        value: Display amount, e.g. "1.5"
        decimals: Unit decimals (defaults to config FINANCIAL unit_decimals)

    Raises:
        ValueError: If the amount has more precision than the unit allows
    """
    decimals = _unit_decimals(decimals)
    amount = to_decimal(value)

    with localcontext() as ctx:
        # Wide enough for every digit of the input plus the scale shift
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + decimals)
        ctx.traps[Inexact] = True
        try:
            scaled = amount.scaleb(decimals)
        except Inexact as e:
            raise ValueError(f"Cannot scale {value} to {decimals} decimals exactly") from e

    integral = scaled.to_integral_value(rounding=ROUND_DOWN)
    if integral != scaled:
        raise ValueError(f"{value} has more than {decimals} decimal places")
    return int(integral)


def from_base_units(amount: int, decimals: int | None = None) -> Decimal:
    """Convert integer base units back to a display Decimal (like formatEther)"""
    decimals = _unit_decimals(decimals)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(str(abs(amount))))
        return Decimal(amount).scaleb(-decimals)


def format_amount(amount: int, decimals: int | None = None, precision: int | None = None) -> str:
    """
    Format base units for display, truncated to `precision` places

    Example:
        format_amount(2_400_000_000_000_000_000) -> "2.400000 ETH"
    """
    if precision is None:
        precision = config.get("financial", "display_precision", 6)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(str(abs(amount))) + precision)
        value = from_base_units(amount, decimals).quantize(
            Decimal(10) ** -precision, rounding=ROUND_DOWN
        )
    symbol = config.get("financial", "currency_symbol", "")
    return f"{value} {symbol}".strip()
