"""
Utility modules for the parimutuel ledger
"""

from .decimal_utils import (
    ZERO,
    format_amount,
    from_base_units,
    to_base_units,
    to_decimal,
)

__all__ = [
    "ZERO",
    "format_amount",
    "from_base_units",
    "to_base_units",
    "to_decimal",
]
