"""
Тесты для доменных моделей: TradingWindow, Launch, AccountActionRecord

Покрывает:
- Инварианты supply и окон на уровне Pydantic валидации
- Immutability (frozen=True)
- Сериализация в JSON-совместимый dict и обратно
"""

import pytest
from pydantic import ValidationError

from src.core.constants import DAY_SECONDS, U64_MAX, WINDOW_DURATION
from src.core.domain import AccountActionRecord, Launch, TradingWindow


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def launch_data():
    """Валидный Launch (decimals=0, cap=1e9)."""
    return {
        "id": 0,
        "decimals": 0,
        "base_price": 1,
        "slope": 1,
        "total_supply_cap": 1_000_000_000,
        "current_supply": 100,
        "trading_day": 19_000,
        "window1": {"start_offset": 1_000, "duration": WINDOW_DURATION},
        "window2": {"start_offset": 50_000, "duration": WINDOW_DURATION},
    }


# =============================================================================
# TRADING WINDOW
# =============================================================================


class TestTradingWindow:

    def test_end_and_contains(self):
        w = TradingWindow(start_offset=100, duration=900)
        assert w.end == 1_000
        assert w.contains(100)
        assert w.contains(999)
        assert not w.contains(1_000)

    def test_start_inside_day(self):
        with pytest.raises(ValidationError):
            TradingWindow(start_offset=DAY_SECONDS, duration=900)

    def test_positive_duration(self):
        with pytest.raises(ValidationError):
            TradingWindow(start_offset=0, duration=0)

    def test_frozen(self):
        w = TradingWindow(start_offset=0, duration=900)
        with pytest.raises(ValidationError):
            w.start_offset = 5


# =============================================================================
# LAUNCH
# =============================================================================


class TestLaunch:

    def test_valid(self, launch_data):
        launch = Launch(**launch_data)
        assert launch.available_supply == 1_000_000_000 - 100
        assert launch.vault_account == "launch:0"

    def test_supply_above_cap(self, launch_data):
        launch_data["current_supply"] = launch_data["total_supply_cap"] + 1
        with pytest.raises(ValidationError, match="exceeds total_supply_cap"):
            Launch(**launch_data)

    def test_negative_supply(self, launch_data):
        launch_data["current_supply"] = -1
        with pytest.raises(ValidationError):
            Launch(**launch_data)

    def test_decimals_above_max(self, launch_data):
        launch_data["decimals"] = 19
        with pytest.raises(ValidationError):
            Launch(**launch_data)

    def test_slope_above_u64(self, launch_data):
        launch_data["slope"] = U64_MAX + 1
        with pytest.raises(ValidationError):
            Launch(**launch_data)

    def test_overlapping_windows(self, launch_data):
        launch_data["window2"] = {"start_offset": 1_899, "duration": WINDOW_DURATION}
        with pytest.raises(ValidationError, match="overlaps"):
            Launch(**launch_data)

    def test_adjacent_windows_allowed(self, launch_data):
        launch_data["window2"] = {"start_offset": 1_900, "duration": WINDOW_DURATION}
        assert Launch(**launch_data).window2.start_offset == 1_900

    def test_window2_before_window1(self, launch_data):
        launch_data["window1"] = {"start_offset": 60_000, "duration": WINDOW_DURATION}
        with pytest.raises(ValidationError):
            Launch(**launch_data)

    def test_window2_past_day(self, launch_data):
        launch_data["window2"] = {"start_offset": DAY_SECONDS - 100, "duration": WINDOW_DURATION}
        with pytest.raises(ValidationError, match="past day boundary"):
            Launch(**launch_data)

    def test_frozen(self, launch_data):
        launch = Launch(**launch_data)
        with pytest.raises(ValidationError):
            launch.current_supply = 5

    def test_json_round_trip(self, launch_data):
        launch = Launch(**launch_data)
        assert Launch.model_validate(launch.model_dump(mode="json")) == launch


# =============================================================================
# ACCOUNT ACTION RECORD
# =============================================================================


class TestAccountActionRecord:

    def test_never_acted(self):
        record = AccountActionRecord(launch_id=1, account="alice")
        assert record.last_action_day is None
        assert not record.has_acted_on(0)
        assert record.key == (1, "alice")

    def test_has_acted_on(self):
        record = AccountActionRecord(launch_id=1, account="alice", last_action_day=19_000)
        assert record.has_acted_on(19_000)
        assert not record.has_acted_on(19_001)

    def test_empty_account(self):
        with pytest.raises(ValidationError):
            AccountActionRecord(launch_id=1, account="")
