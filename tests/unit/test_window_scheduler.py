"""Тесты для Window Scheduler.

Coverage:
- Размещение окон из seed (формула и постусловие)
- Sweep по seed, включая 0 и 2^64 − 1
- Полуинтервалы is_open
- Валидация конфигурации и ручных окон
- derive_seed с переполнением u64
"""

import random

import pytest

from src.core.constants import DAY_SECONDS, MAX_GAP, MIN_GAP, U64_MAX, WINDOW_DURATION
from src.core.domain.launch import TradingWindow
from src.core.errors import InvalidParams, InvalidWindowTimes
from src.scheduler.window_scheduler import (
    WindowScheduler,
    WindowSchedulerConfig,
    derive_seed,
    generate,
    is_open,
)


def _window(start: int) -> TradingWindow:
    return TradingWindow(start_offset=start, duration=WINDOW_DURATION)


class TestGenerate:
    """Тесты generate: формула размещения и постусловие."""

    def test_zero_seed(self):
        assert generate(0) == (0, MIN_GAP)

    def test_formula(self):
        """seed=20699: w1 = 20699, gap = 43200 + (80 mod 21600)."""
        w1, w2 = generate(20_699)
        assert w1 == 20_699
        assert w2 == 20_699 + MIN_GAP + 80

    def test_max_seed(self):
        w1, w2 = generate(U64_MAX)
        assert w2 + WINDOW_DURATION <= DAY_SECONDS
        assert w2 >= w1 + WINDOW_DURATION

    def test_seed_sweep_postcondition(self):
        """Для любых seed: окна внутри суток и не пересекаются."""
        rng = random.Random(20240601)
        seeds = [0, 1, 255, 256, 20_699, 20_700, U64_MAX, U64_MAX - 1]
        seeds += [rng.getrandbits(64) for _ in range(5_000)]
        for seed in seeds:
            w1, w2 = generate(seed)
            assert 0 <= w1 < DAY_SECONDS - MAX_GAP - WINDOW_DURATION
            assert MIN_GAP <= w2 - w1 < MAX_GAP
            assert w2 + WINDOW_DURATION <= DAY_SECONDS

    def test_worst_case_seed(self):
        """Максимальные w1 и gap одновременно всё ещё помещаются в сутки."""
        # seed mod 20700 = 20699 и (seed >> 8) mod 21600 = 21599
        seed = 127_180_799
        assert seed % (DAY_SECONDS - MAX_GAP - WINDOW_DURATION) == 20_699
        assert (seed >> 8) % (MAX_GAP - MIN_GAP) == MAX_GAP - MIN_GAP - 1
        w1, w2 = generate(seed)
        assert w1 == 20_699
        assert w2 == 20_699 + MAX_GAP - 1
        assert w2 + WINDOW_DURATION == DAY_SECONDS - 2

    def test_deterministic(self):
        assert generate(987_654_321) == generate(987_654_321)

    def test_seed_outside_u64(self):
        with pytest.raises(InvalidParams):
            generate(-1)
        with pytest.raises(InvalidParams):
            generate(U64_MAX + 1)

    def test_impossible_geometry(self):
        with pytest.raises(InvalidWindowTimes):
            generate(1, day_length=1_000)

    def test_window_cannot_fit(self):
        """Геометрия, при которой второе окно не помещается, отвергается."""
        with pytest.raises(InvalidWindowTimes):
            generate(0, day_length=100, window_len=10, min_gap=50, max_gap=95)


class TestIsOpen:
    """Полуинтервалы [start, start + 900)."""

    def test_window1_start_inclusive(self):
        assert is_open(_window(1_000), _window(50_000), 1_000)

    def test_window1_end_exclusive(self):
        assert not is_open(_window(1_000), _window(50_000), 1_000 + WINDOW_DURATION)

    def test_window1_last_second(self):
        assert is_open(_window(1_000), _window(50_000), 1_000 + WINDOW_DURATION - 1)

    def test_before_window(self):
        assert not is_open(_window(1_000), _window(50_000), 999)

    def test_window2(self):
        assert is_open(_window(1_000), _window(50_000), 50_000)
        assert not is_open(_window(1_000), _window(50_000), 50_000 + WINDOW_DURATION)

    def test_between_windows(self):
        assert not is_open(_window(1_000), _window(50_000), 25_000)

    def test_wall_clock_timestamp(self):
        scheduler = WindowScheduler()
        ts = 19_000 * DAY_SECONDS + 50_100
        assert scheduler.is_open_at(_window(1_000), _window(50_000), ts)
        assert scheduler.day_of(ts) == 19_000


class TestSchedulerConfig:

    def test_defaults(self):
        cfg = WindowSchedulerConfig()
        assert cfg.day_length == DAY_SECONDS
        assert cfg.window_len == WINDOW_DURATION

    def test_max_gap_not_above_min_gap(self):
        with pytest.raises(InvalidWindowTimes):
            WindowSchedulerConfig(max_gap=MIN_GAP)

    def test_day_longer_than_contract(self):
        with pytest.raises(InvalidWindowTimes):
            WindowSchedulerConfig(day_length=DAY_SECONDS + 1)

    def test_generate_returns_trading_windows(self):
        w1, w2 = WindowScheduler().generate(0)
        assert w1 == _window(0)
        assert w2 == _window(MIN_GAP)


class TestExplicitWindows:

    def test_valid(self):
        w1, w2 = WindowScheduler().explicit(100, 100 + WINDOW_DURATION)
        assert w1.start_offset == 100
        assert w2.start_offset == 1_000

    def test_overlap(self):
        with pytest.raises(InvalidWindowTimes):
            WindowScheduler().explicit(100, 100 + WINDOW_DURATION - 1)

    def test_past_day_boundary(self):
        with pytest.raises(InvalidWindowTimes):
            WindowScheduler().explicit(0, DAY_SECONDS - WINDOW_DURATION + 1)

    def test_negative_start(self):
        with pytest.raises(InvalidWindowTimes):
            WindowScheduler().explicit(-1, 40_000)


class TestDeriveSeed:

    def test_sum(self):
        assert derive_seed(1_000, 7) == 1_007

    def test_wraps_u64(self):
        assert derive_seed(U64_MAX, 1) == 0
        assert derive_seed(U64_MAX, 5) == 4

    def test_distinct_launches_distinct_seeds(self):
        assert derive_seed(42, 0) != derive_seed(42, 1)
