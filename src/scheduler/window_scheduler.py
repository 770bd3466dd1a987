"""Window Scheduler — два ежедневных торговых окна из seed.

Размещение окон:
- window1_start = seed mod (day_length − max_gap − window_len)
- gap = min_gap + ((seed >> 8) mod (max_gap − min_gap))
- window2_start = window1_start + gap

Постусловие проверяется, а не предполагается:
window2_start + window_len ≤ day_length, иначе InvalidWindowTimes.

Граница доверия: псевдослучайность НЕ криптографическая. Её задача —
помешать предвычислению окон стороной без доступа к seed-источнику
в момент генерации. Это механизм fairness, а не security boundary.
"""

import logging
from dataclasses import dataclass

from src.core.constants import (
    DAY_SECONDS,
    MAX_GAP,
    MIN_GAP,
    U64_MAX,
    WINDOW_DURATION,
)
from src.core.domain.launch import TradingWindow
from src.core.errors import InvalidWindowTimes
from src.core.math.fixed_point import require_u64

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class WindowSchedulerConfig:
    """Конфигурация размещения окон.

    Все значения в секундах. Default-значения — контрактные константы.
    """

    day_length: int = DAY_SECONDS
    window_len: int = WINDOW_DURATION
    min_gap: int = MIN_GAP
    max_gap: int = MAX_GAP

    def __post_init__(self):
        # Launch хранит окна в пределах контрактных суток
        if self.day_length > DAY_SECONDS:
            raise InvalidWindowTimes(f"day_length={self.day_length} exceeds {DAY_SECONDS}")
        _check_geometry(self.day_length, self.window_len, self.min_gap, self.max_gap)


def _check_geometry(day_length: int, window_len: int, min_gap: int, max_gap: int) -> None:
    if window_len <= 0:
        raise InvalidWindowTimes(f"window_len={window_len} must be positive")
    if min_gap < window_len:
        raise InvalidWindowTimes(f"min_gap={min_gap} shorter than window_len={window_len}")
    if max_gap <= min_gap:
        raise InvalidWindowTimes(f"max_gap={max_gap} must exceed min_gap={min_gap}")
    if day_length - max_gap - window_len <= 0:
        raise InvalidWindowTimes(
            f"day_length={day_length} too short for max_gap={max_gap} + window_len={window_len}"
        )


# =============================================================================
# ЧИСТЫЕ ФУНКЦИИ
# =============================================================================


def derive_seed(seed_material: int, launch_id: int) -> int:
    """
    Seed окна для конкретного launch: (seed_material + launch_id) mod 2^64.

    Разные launch с общим seed-источником получают разные окна.
    """
    require_u64(seed_material, "seed_material")
    require_u64(launch_id, "launch_id")
    return (seed_material + launch_id) & U64_MAX


def generate(
    seed: int,
    day_length: int = DAY_SECONDS,
    window_len: int = WINDOW_DURATION,
    min_gap: int = MIN_GAP,
    max_gap: int = MAX_GAP,
) -> tuple[int, int]:
    """
    Старты двух окон суток из 64-битного seed.

    Args:
        seed: u64 seed (replica-consistent)
        day_length: Длина суток (сек)
        window_len: Длина окна (сек)
        min_gap: Минимальный разрыв между стартами окон
        max_gap: Максимальный разрыв между стартами окон (исключительно)

    Returns:
        (window1_start, window2_start)

    Raises:
        InvalidParams: seed вне u64
        InvalidWindowTimes: Геометрия невалидна или постусловие нарушено

    Examples:
        >>> generate(0)
        (0, 43200)
    """
    require_u64(seed, "seed")
    _check_geometry(day_length, window_len, min_gap, max_gap)

    window1_start = seed % (day_length - max_gap - window_len)
    gap = min_gap + ((seed >> 8) % (max_gap - min_gap))
    window2_start = window1_start + gap

    if window2_start < window1_start + window_len:
        raise InvalidWindowTimes(f"windows overlap: w1={window1_start} w2={window2_start}")
    if window2_start + window_len > day_length:
        raise InvalidWindowTimes(
            f"window2 {window2_start}+{window_len} past day boundary {day_length}"
        )

    return window1_start, window2_start


def is_open(window1: TradingWindow, window2: TradingWindow, now_within_day: int) -> bool:
    """
    Открыто ли одно из окон в момент внутри суток.

    Полуинтервалы: start входит, start + duration — нет.
    """
    return window1.contains(now_within_day) or window2.contains(now_within_day)


# =============================================================================
# SCHEDULER
# =============================================================================


class WindowScheduler:
    """Генерация и проверка торговых окон с фиксированной конфигурацией.

    Stateless: идемпотентность "одни окна на сутки" обеспечивает
    LaunchStateMachine, вызывая generate только при смене trading_day.
    """

    def __init__(self, config: WindowSchedulerConfig | None = None):
        self.config = config or WindowSchedulerConfig()

    def generate(self, seed: int) -> tuple[TradingWindow, TradingWindow]:
        """Окна суток как TradingWindow-пара."""
        cfg = self.config
        w1_start, w2_start = generate(
            seed,
            day_length=cfg.day_length,
            window_len=cfg.window_len,
            min_gap=cfg.min_gap,
            max_gap=cfg.max_gap,
        )
        logger.debug("generated windows seed=%d w1=%d w2=%d", seed, w1_start, w2_start)
        return (
            TradingWindow(start_offset=w1_start, duration=cfg.window_len),
            TradingWindow(start_offset=w2_start, duration=cfg.window_len),
        )

    def explicit(self, window1_start: int, window2_start: int) -> tuple[TradingWindow, TradingWindow]:
        """
        Окна, заданные администратором вручную.

        Raises:
            InvalidWindowTimes: Старт отрицательный, окна пересекаются
                или второе окно выходит за границу суток
        """
        cfg = self.config
        if window1_start < 0 or window2_start < 0:
            raise InvalidWindowTimes(f"negative window start: w1={window1_start} w2={window2_start}")
        if window2_start < window1_start + cfg.window_len:
            raise InvalidWindowTimes(f"windows overlap: w1={window1_start} w2={window2_start}")
        if window2_start + cfg.window_len > cfg.day_length:
            raise InvalidWindowTimes(
                f"window2 {window2_start}+{cfg.window_len} past day boundary {cfg.day_length}"
            )
        return (
            TradingWindow(start_offset=window1_start, duration=cfg.window_len),
            TradingWindow(start_offset=window2_start, duration=cfg.window_len),
        )

    def day_of(self, timestamp: int) -> int:
        """Epoch-день для wall-clock секунд."""
        return timestamp // self.config.day_length

    def is_open_at(self, window1: TradingWindow, window2: TradingWindow, timestamp: int) -> bool:
        """is_open для wall-clock секунд (приводятся к моменту внутри суток)."""
        return is_open(window1, window2, timestamp % self.config.day_length)
