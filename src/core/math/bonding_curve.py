"""
Bonding Curve — стоимость покупки и выплата при продаже

Линейная кривая цены над текущим supply:
    price(supply) = base_price + slope × supply

Цена задана в наименьших единицах reserve за наименьшую единицу актива
и масштабирована на m = 10^decimals. Покупка и продажа — дискретные
интегралы кривой с ОДНИМ И ТЕМ ЖЕ знаменателем m²:

    cost(S, q)   = floor((base·q·m + slope·(S·q + q·(q+1)/2)) / m²)
    payout(S, q) = floor((base·q·m + slope·(S·q − q·(q−1)/2)) / m²)

cost интегрирует от S до S+q, payout — от S−q до S. При одинаковом
знаменателе payout(S+q, q) == cost(S, q): обратная продажа никогда не
приносит больше, чем было заплачено.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Только целочисленная арифметика, u128-промежуточные значения
2. Переполнение промежуточного или итогового (u64) результата → MathOverflow
3. Единственный режим округления — floor
4. q = 0 → 0 (вызов разрешён, проверка q > 0 — на стороне вызывающего)
"""

import logging
from typing import Optional

from src.core.constants import total_supply_cap
from src.core.errors import InsufficientSupply, PayoutTooLow, SlippageExceeded
from src.core.math.fixed_point import (
    checked_add,
    checked_mul,
    checked_sub,
    pow10,
    require_u64,
    to_u64,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ОБЩИЕ ЧАСТИ ФОРМУЛ
# =============================================================================


def _validated_inputs(
    base_price: int,
    slope: int,
    decimals: int,
    current_supply: int,
    qty: int,
) -> int:
    """Проверка входов; возвращает масштаб m."""
    m = pow10(decimals)
    require_u64(base_price, "base_price")
    require_u64(slope, "slope")
    require_u64(current_supply, "current_supply")
    require_u64(qty, "qty")
    return m


def _base_component(base_price: int, qty: int, m: int) -> int:
    """base·q·m"""
    return checked_mul(checked_mul(base_price, qty), m)


def _finish(numerator: int, m: int) -> int:
    """numerator / m² (floor) с сужением до u64."""
    denom = checked_mul(m, m)
    return to_u64(numerator // denom)


# =============================================================================
# ПОКУПКА
# =============================================================================


def compute_cost(
    base_price: int,
    slope: int,
    decimals: int,
    current_supply: int,
    qty: int,
    max_cost: Optional[int] = None,
    supply_cap: Optional[int] = None,
) -> int:
    """
    Стоимость покупки qty единиц при текущем supply.

    Args:
        base_price: Базовая цена кривой (u64)
        slope: Наклон кривой (u64)
        decimals: Fixed-point экспонента актива (≤ 18)
        current_supply: Текущий проданный supply (u64)
        qty: Количество к покупке (u64)
        max_cost: Потолок стоимости от вызывающего (slippage guard)
        supply_cap: Общий supply (default: 1e9 × 10^decimals)

    Returns:
        Стоимость в наименьших единицах reserve

    Raises:
        InvalidDecimals: decimals > 18
        InvalidParams: Вход вне диапазона u64
        InsufficientSupply: qty > supply_cap − current_supply
        MathOverflow: Переполнение промежуточного или итогового результата
        SlippageExceeded: Стоимость > max_cost

    Examples:
        >>> compute_cost(1, 1, 0, 0, 100)
        5150
    """
    m = _validated_inputs(base_price, slope, decimals, current_supply, qty)
    cap = total_supply_cap(decimals) if supply_cap is None else supply_cap

    if current_supply > cap:
        raise InsufficientSupply(f"current_supply={current_supply} above cap={cap}")
    available = cap - current_supply
    if qty > available:
        raise InsufficientSupply(f"qty={qty} > available={available}")

    if qty == 0:
        cost = 0
    else:
        triangle = checked_mul(qty, checked_add(qty, 1)) // 2
        inner = checked_add(checked_mul(current_supply, qty), triangle)
        numerator = checked_add(_base_component(base_price, qty, m), checked_mul(slope, inner))
        cost = _finish(numerator, m)

    if max_cost is not None and cost > max_cost:
        raise SlippageExceeded(f"cost={cost} > max_cost={max_cost}")

    logger.debug("curve cost: supply=%d qty=%d cost=%d", current_supply, qty, cost)
    return cost


# =============================================================================
# ПРОДАЖА
# =============================================================================


def compute_payout(
    base_price: int,
    slope: int,
    decimals: int,
    current_supply: int,
    qty: int,
    min_payout: Optional[int] = None,
) -> int:
    """
    Выплата за продажу qty единиц обратно в кривую.

    Args:
        base_price: Базовая цена кривой (u64)
        slope: Наклон кривой (u64)
        decimals: Fixed-point экспонента актива (≤ 18)
        current_supply: Текущий проданный supply (u64)
        qty: Количество к продаже (u64)
        min_payout: Минимально допустимая выплата (slippage guard)

    Returns:
        Выплата в наименьших единицах reserve

    Raises:
        InvalidDecimals: decimals > 18
        InvalidParams: Вход вне диапазона u64
        InsufficientSupply: qty > current_supply
        MathOverflow: Переполнение промежуточного или итогового результата
        PayoutTooLow: Выплата < min_payout

    Examples:
        >>> compute_payout(1, 1, 0, 100, 100)
        5150
    """
    m = _validated_inputs(base_price, slope, decimals, current_supply, qty)

    if qty > current_supply:
        raise InsufficientSupply(f"qty={qty} > current_supply={current_supply}")

    if qty == 0:
        payout = 0
    else:
        triangle = checked_mul(qty, qty - 1) // 2
        inner = checked_sub(checked_mul(current_supply, qty), triangle)
        numerator = checked_add(_base_component(base_price, qty, m), checked_mul(slope, inner))
        payout = _finish(numerator, m)

    if min_payout is not None and payout < min_payout:
        raise PayoutTooLow(f"payout={payout} < min_payout={min_payout}")

    logger.debug("curve payout: supply=%d qty=%d payout=%d", current_supply, qty, payout)
    return payout


# =============================================================================
# СПОТ-ЦЕНА
# =============================================================================


def spot_price(base_price: int, slope: int, decimals: int, current_supply: int) -> int:
    """
    Маржинальная цена одной наименьшей единицы при текущем supply.

    floor((base·m + slope·supply) / m²) — подынтегральное выражение cost/payout.
    """
    m = pow10(decimals)
    require_u64(base_price, "base_price")
    require_u64(slope, "slope")
    require_u64(current_supply, "current_supply")
    numerator = checked_add(checked_mul(base_price, m), checked_mul(slope, current_supply))
    return _finish(numerator, m)
