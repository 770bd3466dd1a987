"""
Fixed-Point Math — целочисленная арифметика с проверкой переполнения

Модуль эмулирует беззнаковую арифметику фиксированной разрядности:
- Входы и результаты операций — u64
- Промежуточные вычисления — u128 (double-width)
- Любое переполнение или уход ниже нуля → MathOverflow

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Никакого float: все операции — над int
2. Деление только floor (усечение к нулю для неотрицательных чисел)
3. Переполнение никогда не "заворачивается" (no wrap-around)
4. Результат бит-в-бит одинаков на всех репликах
"""

from typing import Final

from src.core.constants import MAX_DECIMALS, U64_MAX, U128_MAX
from src.core.errors import InvalidDecimals, InvalidParams, MathOverflow


# Разрядность для промежуточных вычислений по умолчанию
WIDE_LIMIT: Final[int] = U128_MAX


# =============================================================================
# ВАЛИДАЦИЯ ВХОДОВ
# =============================================================================


def require_u64(value: int, name: str = "value") -> int:
    """
    Проверка, что значение — целое в диапазоне u64.

    bool отвергается явно: True/False не являются количествами.

    Args:
        value: Проверяемое значение
        name: Имя параметра для сообщения об ошибке

    Returns:
        value без изменений

    Raises:
        InvalidParams: Если не int или вне [0, 2^64 - 1]
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParams(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > U64_MAX:
        raise InvalidParams(f"{name}={value} outside u64 range")
    return value


def to_u64(value: int) -> int:
    """
    Сужение широкого результата до u64.

    Raises:
        MathOverflow: Если value не помещается в u64
    """
    if value < 0 or value > U64_MAX:
        raise MathOverflow(f"result {value} does not fit u64")
    return value


# =============================================================================
# CHECKED ОПЕРАЦИИ
# =============================================================================


def checked_add(a: int, b: int, limit: int = WIDE_LIMIT) -> int:
    """a + b с проверкой верхней границы."""
    result = a + b
    if result > limit:
        raise MathOverflow(f"{a} + {b} exceeds {limit.bit_length()}-bit range")
    return result


def checked_sub(a: int, b: int) -> int:
    """a - b; результат ниже нуля считается переполнением."""
    if b > a:
        raise MathOverflow(f"{a} - {b} underflows")
    return a - b


def checked_mul(a: int, b: int, limit: int = WIDE_LIMIT) -> int:
    """a * b с проверкой верхней границы."""
    result = a * b
    if result > limit:
        raise MathOverflow(f"{a} * {b} exceeds {limit.bit_length()}-bit range")
    return result


def checked_div(numerator: int, denominator: int) -> int:
    """
    Floor-деление неотрицательных целых.

    Raises:
        MathOverflow: При делении на ноль
    """
    if denominator == 0:
        raise MathOverflow("division by zero")
    return numerator // denominator


def pow10(decimals: int) -> int:
    """
    Масштаб m = 10^decimals.

    Args:
        decimals: Fixed-point экспонента, 0 ≤ decimals ≤ 18

    Returns:
        10^decimals (всегда помещается в u64)

    Raises:
        InvalidDecimals: Если decimals вне [0, MAX_DECIMALS]
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidDecimals(f"decimals must be an integer, got {type(decimals).__name__}")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise InvalidDecimals(f"decimals={decimals}")
    return 10**decimals


def percent_of(value: int, percent: int) -> int:
    """
    floor(value × percent / 100) в u128-промежутке.

    Examples:
        >>> percent_of(1000, 10)
        100
        >>> percent_of(99, 10)
        9
    """
    return checked_mul(value, percent) // 100
