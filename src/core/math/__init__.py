"""
Core math modules для launch-ядра

Целочисленная fixed-point арифметика (u64/u128) и bonding curve.
"""

# Fixed-point primitives
from src.core.math.fixed_point import (
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    percent_of,
    pow10,
    require_u64,
    to_u64,
)

# Bonding curve
from src.core.math.bonding_curve import compute_cost, compute_payout, spot_price

__all__ = [
    # Fixed-point — validation
    "require_u64",
    "to_u64",
    # Fixed-point — checked arithmetic
    "checked_add",
    "checked_sub",
    "checked_mul",
    "checked_div",
    "pow10",
    "percent_of",
    # Bonding curve
    "compute_cost",
    "compute_payout",
    "spot_price",
]
