"""
External Collaborators — интерфейсы окружения launch-ядра

Ядро не владеет балансами, временем, правами и хранилищем. Оно обращается
к ним через Protocol-интерфейсы:
- Clock: wall-clock секунды и replica-consistent seed material
- Custody: балансы актива/reserve и их перемещение
- Authorization: проверка прав администратора
- StateStore: загрузка/сохранение Launch и AccountActionRecord

In-memory реализации ниже используются тестами и встраивающими системами
без собственного окружения.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Protocol, Sequence, Tuple

from src.core.constants import U64_MAX
from src.core.contracts import validate_account_action_record, validate_launch
from src.core.domain.account_record import AccountActionRecord
from src.core.domain.launch import Launch
from src.core.errors import InsufficientFunds, InvalidParams
from src.core.math.fixed_point import checked_add, require_u64

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================


class Asset(str, Enum):
    """Вид баланса у custody"""

    TOKEN = "token"  # торгуемый актив launch
    RESERVE = "reserve"  # резервная валюта


@dataclass(frozen=True)
class CustodyMove:
    """Одно перемещение баланса (leg операции)."""

    source: str
    destination: str
    asset: Asset
    amount: int


# =============================================================================
# PROTOCOLS
# =============================================================================


class Clock(Protocol):
    def now(self) -> int:
        """Wall-clock секунды (Unix)."""
        ...

    def seed_material(self) -> int:
        """u64, непредсказуемый заранее, но одинаковый на всех репликах."""
        ...


class Custody(Protocol):
    def balance_of(self, account: str, asset: Asset) -> int:
        ...

    def move(self, source: str, destination: str, asset: Asset, amount: int) -> None:
        """Перемещение amount; InsufficientFunds при нехватке баланса."""
        ...

    def move_many(self, moves: Sequence[CustodyMove]) -> None:
        """Атомарный набор перемещений: применяются все или ни одно."""
        ...


class Authorization(Protocol):
    def is_admin(self, caller: str, launch: Optional[Launch]) -> bool:
        """launch=None — права на создание нового launch."""
        ...


class StateStore(Protocol):
    def next_launch_id(self) -> int:
        ...

    def load_launch(self, launch_id: int) -> Launch:
        ...

    def load_record(self, launch_id: int, account: str) -> Optional[AccountActionRecord]:
        ...

    def commit(self, launch: Launch, record: Optional[AccountActionRecord] = None) -> None:
        """Атомарное сохранение launch и (опционально) записи аккаунта."""
        ...


# =============================================================================
# IN-MEMORY РЕАЛИЗАЦИИ
# =============================================================================


class FixedClock:
    """Часы с явно задаваемым временем и seed material."""

    def __init__(self, now: int = 0, seed_material: int = 0):
        self._now = now
        self._seed_material = seed_material

    def now(self) -> int:
        return self._now

    def seed_material(self) -> int:
        return self._seed_material

    def set(self, now: int, seed_material: Optional[int] = None) -> None:
        self._now = now
        if seed_material is not None:
            self._seed_material = seed_material

    def advance(self, seconds: int) -> None:
        self._now += seconds


class InMemoryCustody:
    """Балансы по ключу (account, asset); значения — u64."""

    def __init__(self):
        self._balances: Dict[Tuple[str, Asset], int] = {}

    def balance_of(self, account: str, asset: Asset) -> int:
        return self._balances.get((account, asset), 0)

    def deposit(self, account: str, asset: Asset, amount: int) -> None:
        """Зачисление извне (funding vault, начальные балансы)."""
        require_u64(amount, "amount")
        key = (account, asset)
        self._balances[key] = checked_add(self._balances.get(key, 0), amount, limit=U64_MAX)

    def total(self, asset: Asset) -> int:
        """Сумма балансов актива по всем аккаунтам."""
        return sum(v for (_, a), v in self._balances.items() if a is asset)

    def move(self, source: str, destination: str, asset: Asset, amount: int) -> None:
        self.move_many([CustodyMove(source, destination, asset, amount)])

    def move_many(self, moves: Sequence[CustodyMove]) -> None:
        """
        Атомарное применение перемещений по порядку.

        Все legs проверяются на промежуточных балансах (каждый следующий
        видит результат предыдущих), затем применяются одним update.

        Raises:
            InvalidParams: amount вне u64
            InsufficientFunds: source не хватает баланса
            MathOverflow: баланс destination выходит за u64
        """
        pending: Dict[Tuple[str, Asset], int] = {}
        for mv in moves:
            require_u64(mv.amount, "amount")
            source_key = (mv.source, mv.asset)
            available = pending.get(source_key, self.balance_of(mv.source, mv.asset))
            if mv.amount > available:
                raise InsufficientFunds(
                    f"{mv.source} holds {available} {mv.asset.value}, needs {mv.amount}"
                )
            pending[source_key] = available - mv.amount

            destination_key = (mv.destination, mv.asset)
            held = pending.get(destination_key, self.balance_of(mv.destination, mv.asset))
            pending[destination_key] = checked_add(held, mv.amount, limit=U64_MAX)

        self._balances.update(pending)
        for mv in moves:
            logger.debug(
                "custody move %s -> %s: %d %s",
                mv.source, mv.destination, mv.amount, mv.asset.value,
            )


class StaticAuthorization:
    """Фиксированный набор администраторов для всех launch."""

    def __init__(self, admins: Iterable[str]):
        self._admins = frozenset(admins)

    def is_admin(self, caller: str, launch: Optional[Launch]) -> bool:
        return caller in self._admins


class InMemoryStateStore:
    """
    Хранилище записей в виде JSON-совместимых dict.

    Каждая запись проверяется JSON Schema контрактом при сохранении
    и восстанавливается через Pydantic при загрузке.
    """

    def __init__(self):
        self._launches: Dict[int, dict] = {}
        self._records: Dict[Tuple[int, str], dict] = {}
        self._launch_count = 0

    def next_launch_id(self) -> int:
        launch_id = self._launch_count
        self._launch_count += 1
        return launch_id

    def load_launch(self, launch_id: int) -> Launch:
        try:
            data = self._launches[launch_id]
        except KeyError:
            raise InvalidParams(f"unknown launch id={launch_id}") from None
        return Launch.model_validate(data)

    def load_record(self, launch_id: int, account: str) -> Optional[AccountActionRecord]:
        data = self._records.get((launch_id, account))
        if data is None:
            return None
        return AccountActionRecord.model_validate(data)

    def commit(self, launch: Launch, record: Optional[AccountActionRecord] = None) -> None:
        # Обе записи валидируются до первой записи в хранилище
        launch_data = launch.model_dump(mode="json")
        validate_launch(launch_data)
        record_data = None
        if record is not None:
            record_data = record.model_dump(mode="json")
            validate_account_action_record(record_data)

        self._launches[launch.id] = launch_data
        if record is not None:
            self._records[record.key] = record_data
