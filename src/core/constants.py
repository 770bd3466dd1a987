"""
Контрактные константы launch-ядра.

Значения фиксированы и одинаковы на всех репликах. Изменение любой из них
меняет результат вычислений и ломает детерминизм между узлами.
"""

from typing import Final


# =============================================================================
# РАЗРЯДНОСТЬ
# =============================================================================

# Входы и результаты — u64, промежуточные вычисления — u128
U64_MAX: Final[int] = 2**64 - 1
U128_MAX: Final[int] = 2**128 - 1


# =============================================================================
# ВРЕМЯ И ОКНА
# =============================================================================

DAY_SECONDS: Final[int] = 86_400
WINDOW_DURATION: Final[int] = 900  # 15 минут
MIN_GAP: Final[int] = 43_200  # 12 часов между стартами окон
MAX_GAP: Final[int] = 64_800  # 18 часов


# =============================================================================
# RATE LIMITS
# =============================================================================

SELL_LIMIT_PERCENT: Final[int] = 10
TRANSFER_LIMIT_PERCENT: Final[int] = 20


# =============================================================================
# SUPPLY И DECIMALS
# =============================================================================

MAX_DECIMALS: Final[int] = 18
DEFAULT_DECIMALS: Final[int] = 9

# Общий supply в целых единицах (масштабируется на 10^decimals)
TOTAL_SUPPLY_WHOLE_UNITS: Final[int] = 1_000_000_000

# Минимальная базовая цена при создании launch (наименьшие единицы reserve)
MIN_BASE_PRICE: Final[int] = 1


def total_supply_cap(decimals: int, whole_units: int = TOTAL_SUPPLY_WHOLE_UNITS) -> int:
    """
    Общий supply launch в наименьших единицах.

    Args:
        decimals: Fixed-point экспонента актива
        whole_units: Supply в целых единицах (default: 1e9)

    Returns:
        whole_units × 10^decimals
    """
    return whole_units * 10**decimals
