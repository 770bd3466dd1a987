"""
Launch — Модель bonding-curve рынка

Immutable Pydantic модель одного launch. Все изменения состояния
(supply, trading_day, окна) выполняются только LaunchStateMachine через
model_copy(update=...) и фиксируются хранилищем целиком.
Полная совместимость с JSON Schema (contracts/schema/launch.json).
"""

from pydantic import BaseModel, Field, field_validator

from src.core.constants import DAY_SECONDS, MAX_DECIMALS, U64_MAX


# =============================================================================
# TRADING WINDOW
# =============================================================================


class TradingWindow(BaseModel):
    """
    Торговое окно внутри суток.

    Полуинтервал [start_offset, start_offset + duration) в секундах
    от начала суток trading_day.
    """

    start_offset: int = Field(..., ge=0, lt=DAY_SECONDS, description="Старт окна от начала суток (сек)")
    duration: int = Field(..., gt=0, le=DAY_SECONDS, description="Длительность окна (сек)")

    model_config = {"frozen": True}

    @property
    def end(self) -> int:
        """Конец окна (исключительно)."""
        return self.start_offset + self.duration

    def contains(self, now_within_day: int) -> bool:
        """Попадает ли момент внутри суток в окно (полуинтервал)."""
        return self.start_offset <= now_within_day < self.end


# =============================================================================
# LAUNCH MODEL
# =============================================================================


class Launch(BaseModel):
    """
    Модель одного launch.

    Immutable модель (frozen=True). Параметры кривой (decimals, base_price,
    slope, total_supply_cap) задаются при создании и не меняются.

    Инварианты:
    - 0 ≤ current_supply ≤ total_supply_cap
    - window2.start ≥ window1.end, window2.end ≤ DAY_SECONDS (окна не пересекаются)
    """

    # Идентификация
    id: int = Field(..., ge=0, le=U64_MAX, description="Уникальный идентификатор launch")

    # Параметры кривой (immutable после создания)
    decimals: int = Field(..., ge=0, le=MAX_DECIMALS, description="Fixed-point экспонента актива")
    base_price: int = Field(..., ge=0, le=U64_MAX, description="Базовая цена кривой")
    slope: int = Field(..., ge=0, le=U64_MAX, description="Наклон кривой")
    total_supply_cap: int = Field(..., gt=0, le=U64_MAX, description="Общий supply (наименьшие единицы)")

    # Изменяемое состояние
    current_supply: int = Field(..., ge=0, le=U64_MAX, description="Проданный supply")
    trading_day: int = Field(..., ge=0, le=U64_MAX, description="Счётчик торговых суток")
    window1: TradingWindow = Field(..., description="Первое торговое окно суток")
    window2: TradingWindow = Field(..., description="Второе торговое окно суток")

    model_config = {"frozen": True}

    @field_validator("current_supply")
    @classmethod
    def validate_supply_within_cap(cls, v: int, info) -> int:
        """Проверка, что current_supply ≤ total_supply_cap"""
        if "total_supply_cap" in info.data:
            cap = info.data["total_supply_cap"]
            if v > cap:
                raise ValueError(f"current_supply {v} exceeds total_supply_cap {cap}")
        return v

    @field_validator("window2")
    @classmethod
    def validate_windows_disjoint(cls, v: TradingWindow, info) -> TradingWindow:
        """Проверка, что окна не пересекаются и не выходят за границу суток"""
        if v.end > DAY_SECONDS:
            raise ValueError(f"window2 ends at {v.end}, past day boundary {DAY_SECONDS}")
        if "window1" in info.data:
            w1 = info.data["window1"]
            if v.start_offset < w1.end:
                raise ValueError(
                    f"window2 start {v.start_offset} overlaps window1 ending at {w1.end}"
                )
        return v

    @property
    def vault_account(self) -> str:
        """Счёт хранилища launch у custody (актив и reserve)."""
        return f"launch:{self.id}"

    @property
    def available_supply(self) -> int:
        """Остаток supply, доступный к покупке."""
        return self.total_supply_cap - self.current_supply
