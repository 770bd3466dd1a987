"""Launch State Machine — оркестрация операций над launch.

Единственное состояние launch — Active. Операции:
- create_launch: новый launch с окнами текущих суток
- buy / sell / transfer: торговые операции пользователей
- advance_day_admin / set_windows_admin: административный сдвиг цикла

Порядок шагов каждой торговой операции:
1. maybe_advance_day — смена trading_day и регенерация окон при переходе суток
2. Окно торговли (sell/transfer) → NotInTradingWindow
3. Цена по bonding curve (buy/sell)
4. RateLimitLedger (sell/transfer)
5. Атомарный набор перемещений custody (move_many)
6. Атомарный commit Launch + AccountActionRecord в StateStore

Все проверки выполняются до первого перемещения custody; записи
сохраняются только после успешных перемещений. Ошибка на любом шаге
не оставляет изменений в хранилище. Ошибки компонентов пробрасываются
без перехвата и трансляции.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from src.core.constants import (
    DEFAULT_DECIMALS,
    MIN_BASE_PRICE,
    SELL_LIMIT_PERCENT,
    TOTAL_SUPPLY_WHOLE_UNITS,
    TRANSFER_LIMIT_PERCENT,
    U64_MAX,
    total_supply_cap,
)
from src.core.domain.account_record import AccountActionRecord, ActionKind
from src.core.domain.launch import Launch, TradingWindow
from src.core.errors import (
    InsufficientFunds,
    InsufficientLiquidity,
    InsufficientSupply,
    InvalidParams,
    LaunchError,
    NotInTradingWindow,
    Unauthorized,
)
from src.core.math.bonding_curve import compute_cost, compute_payout, spot_price
from src.core.math.fixed_point import checked_add, checked_sub, pow10, require_u64, to_u64
from src.gatekeeper.rate_limit_ledger import RateLimitLedger
from src.launch.collaborators import (
    Asset,
    Authorization,
    Clock,
    Custody,
    CustodyMove,
    StateStore,
)
from src.scheduler.window_scheduler import WindowScheduler, derive_seed

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class LaunchConfig:
    """Конфигурация launch-ядра.

    max_final_price: верхняя граница спот-цены при полностью проданном
    supply (None — только проверка на переполнение).
    """

    sell_limit_percent: int = SELL_LIMIT_PERCENT
    transfer_limit_percent: int = TRANSFER_LIMIT_PERCENT
    supply_whole_units: int = TOTAL_SUPPLY_WHOLE_UNITS
    default_decimals: int = DEFAULT_DECIMALS
    min_base_price: int = MIN_BASE_PRICE
    max_final_price: Optional[int] = None


# =============================================================================
# РЕЗУЛЬТАТЫ ОПЕРАЦИЙ
# =============================================================================


@dataclass(frozen=True)
class LaunchCreated:
    """Результат create_launch."""

    launch_id: int
    vault_account: str
    total_supply_cap: int
    trading_day: int
    window1: TradingWindow
    window2: TradingWindow


@dataclass(frozen=True)
class DayAdvanced:
    """Смена trading_day с регенерацией (или ручной установкой) окон."""

    launch_id: int
    previous_day: int
    trading_day: int
    window1: TradingWindow
    window2: TradingWindow
    reason: str  # "wall_clock_rollover" | "admin_advance" | "admin_set_windows"


@dataclass(frozen=True)
class PurchaseEvent:
    launch_id: int
    buyer: str
    qty: int
    cost: int
    current_supply: int
    day_advanced: Optional[DayAdvanced]


@dataclass(frozen=True)
class SellEvent:
    launch_id: int
    seller: str
    qty: int
    payout: int
    current_supply: int
    action_day: int
    day_advanced: Optional[DayAdvanced]


@dataclass(frozen=True)
class TransferEvent:
    launch_id: int
    source: str
    destination: str
    qty: int
    action_day: int
    day_advanced: Optional[DayAdvanced]


# =============================================================================
# STATE MACHINE
# =============================================================================


class LaunchStateMachine:
    """Оркестратор bonding curve, окон торговли и rate limits.

    Владеет изменяемыми полями Launch (current_supply, trading_day, окна)
    только через StateStore: никакого глобального состояния процесса.
    Сериализация операций над одним launch — ответственность хоста.
    """

    def __init__(
        self,
        store: StateStore,
        custody: Custody,
        clock: Clock,
        authorization: Authorization,
        config: Optional[LaunchConfig] = None,
        scheduler: Optional[WindowScheduler] = None,
        ledger: Optional[RateLimitLedger] = None,
    ):
        self.store = store
        self.custody = custody
        self.clock = clock
        self.authorization = authorization
        self.config = config or LaunchConfig()
        self.scheduler = scheduler or WindowScheduler()
        self.ledger = ledger or RateLimitLedger(
            sell_limit_percent=self.config.sell_limit_percent,
            transfer_limit_percent=self.config.transfer_limit_percent,
        )

    # -------------------------------------------------------------------------
    # Создание
    # -------------------------------------------------------------------------

    def create_launch(
        self,
        caller: str,
        base_price: int,
        slope: int,
        decimals: Optional[int] = None,
    ) -> LaunchCreated:
        """Создание launch администратором.

        Вся кривая (от 0 до total_supply_cap) обязана вычисляться без
        переполнения: это гарантирует, что MathOverflow на buy/sell
        возможен только из-за некорректного ввода.

        Raises:
            Unauthorized: caller не администратор
            InvalidDecimals: decimals > 18
            InvalidParams: base_price < min_base_price, slope == 0,
                финальная цена выше max_final_price
            MathOverflow: supply cap, финальная цена или стоимость всей
                кривой не помещаются в u64
        """
        with self._rejections("create_launch", None):
            if not self.authorization.is_admin(caller, None):
                raise Unauthorized(f"caller={caller} may not create launches")

            if decimals is None:
                decimals = self.config.default_decimals
            pow10(decimals)
            require_u64(base_price, "base_price")
            require_u64(slope, "slope")
            if base_price < self.config.min_base_price:
                raise InvalidParams(
                    f"base_price={base_price} below minimum {self.config.min_base_price}"
                )
            if slope == 0:
                raise InvalidParams("slope must be positive")

            cap = to_u64(total_supply_cap(decimals, self.config.supply_whole_units))
            final_price = spot_price(base_price, slope, decimals, cap)
            if self.config.max_final_price is not None and final_price > self.config.max_final_price:
                raise InvalidParams(
                    f"final price {final_price} exceeds {self.config.max_final_price}"
                )
            compute_cost(base_price, slope, decimals, 0, cap, supply_cap=cap)

            now = require_u64(self.clock.now(), "now")
            launch_id = self.store.next_launch_id()
            window1, window2 = self.scheduler.generate(
                derive_seed(self.clock.seed_material(), launch_id)
            )
            launch = Launch(
                id=launch_id,
                decimals=decimals,
                base_price=base_price,
                slope=slope,
                total_supply_cap=cap,
                current_supply=0,
                trading_day=self.scheduler.day_of(now),
                window1=window1,
                window2=window2,
            )
            self.store.commit(launch)

        logger.info(
            "launch created: id=%d base_price=%d slope=%d decimals=%d cap=%d",
            launch.id, base_price, slope, decimals, cap,
        )
        return LaunchCreated(
            launch_id=launch.id,
            vault_account=launch.vault_account,
            total_supply_cap=cap,
            trading_day=launch.trading_day,
            window1=window1,
            window2=window2,
        )

    # -------------------------------------------------------------------------
    # Смена суток
    # -------------------------------------------------------------------------

    def maybe_advance_day(self, launch: Launch, now: int) -> tuple[Launch, Optional[DayAdvanced]]:
        """Переход trading_day при пересечении границы wall-clock суток.

        Единственная точка регенерации окон в торговых операциях;
        выполняется до любой проверки окна в той же операции.
        Чистая функция: возвращает новый Launch, ничего не сохраняет.
        """
        require_u64(now, "now")
        today = self.scheduler.day_of(now)
        if today <= launch.trading_day:
            return launch, None

        seed = derive_seed(self.clock.seed_material(), launch.id)
        window1, window2 = self.scheduler.generate(seed)
        advanced = _evolve(launch, trading_day=today, window1=window1, window2=window2)
        return advanced, DayAdvanced(
            launch_id=launch.id,
            previous_day=launch.trading_day,
            trading_day=today,
            window1=window1,
            window2=window2,
            reason="wall_clock_rollover",
        )

    def advance_day_admin(self, launch_id: int, caller: str) -> DayAdvanced:
        """Принудительный новый цикл: trading_day + 1 и новые окна.

        Raises:
            Unauthorized: caller не администратор launch
            MathOverflow: trading_day == u64 max
        """
        with self._rejections("advance_day_admin", launch_id):
            launch = self.store.load_launch(launch_id)
            self._require_admin(caller, launch)

            next_day = checked_add(launch.trading_day, 1, limit=U64_MAX)
            window1, window2 = self.scheduler.generate(
                derive_seed(self.clock.seed_material(), launch.id)
            )
            updated = _evolve(launch, trading_day=next_day, window1=window1, window2=window2)
            self.store.commit(updated)

        event = DayAdvanced(
            launch_id=launch_id,
            previous_day=launch.trading_day,
            trading_day=next_day,
            window1=window1,
            window2=window2,
            reason="admin_advance",
        )
        self._log_day_advanced(event)
        return event

    def set_windows_admin(
        self,
        launch_id: int,
        caller: str,
        window1_start: int,
        window2_start: int,
    ) -> DayAdvanced:
        """Новый цикл с окнами, заданными администратором вручную.

        Raises:
            Unauthorized: caller не администратор launch
            InvalidWindowTimes: окна пересекаются или выходят за сутки
        """
        with self._rejections("set_windows_admin", launch_id):
            launch = self.store.load_launch(launch_id)
            self._require_admin(caller, launch)

            window1, window2 = self.scheduler.explicit(window1_start, window2_start)
            next_day = checked_add(launch.trading_day, 1, limit=U64_MAX)
            updated = _evolve(launch, trading_day=next_day, window1=window1, window2=window2)
            self.store.commit(updated)

        event = DayAdvanced(
            launch_id=launch_id,
            previous_day=launch.trading_day,
            trading_day=next_day,
            window1=window1,
            window2=window2,
            reason="admin_set_windows",
        )
        self._log_day_advanced(event)
        return event

    # -------------------------------------------------------------------------
    # Торговые операции
    # -------------------------------------------------------------------------

    def buy(self, launch_id: int, buyer: str, qty: int, max_cost: int) -> PurchaseEvent:
        """Покупка qty у кривой не дороже max_cost.

        Raises:
            InvalidParams: qty == 0 или вне u64, buyer — vault launch
            InvalidDecimals, InsufficientSupply, MathOverflow, SlippageExceeded:
                из bonding curve
            InsufficientFunds: у покупателя не хватает reserve
            MathOverflow: баланс покупателя выходит за u64
        """
        with self._rejections("buy", launch_id):
            _require_positive_qty(qty)
            require_u64(max_cost, "max_cost")
            now = self.clock.now()
            launch, day_advanced = self.maybe_advance_day(self.store.load_launch(launch_id), now)
            vault = launch.vault_account
            _require_distinct(buyer, vault)

            cost = compute_cost(
                launch.base_price,
                launch.slope,
                launch.decimals,
                launch.current_supply,
                qty,
                max_cost=max_cost,
                supply_cap=launch.total_supply_cap,
            )
            buyer_reserve = self.custody.balance_of(buyer, Asset.RESERVE)
            if cost > buyer_reserve:
                raise InsufficientFunds(f"cost={cost} > reserve balance={buyer_reserve}")
            vault_tokens = self.custody.balance_of(vault, Asset.TOKEN)
            if qty > vault_tokens:
                raise InsufficientSupply(f"qty={qty} > vault holdings={vault_tokens}")
            new_supply = checked_add(launch.current_supply, qty, limit=U64_MAX)
            updated = _evolve(launch, current_supply=new_supply)

            self.custody.move_many([
                CustodyMove(buyer, vault, Asset.RESERVE, cost),
                CustodyMove(vault, buyer, Asset.TOKEN, qty),
            ])
            self.store.commit(updated)

        logger.info(
            "buy committed: launch=%d buyer=%s qty=%d cost=%d supply=%d",
            launch_id, buyer, qty, cost, new_supply,
        )
        return PurchaseEvent(
            launch_id=launch_id,
            buyer=buyer,
            qty=qty,
            cost=cost,
            current_supply=new_supply,
            day_advanced=day_advanced,
        )

    def sell(self, launch_id: int, seller: str, qty: int, min_payout: int) -> SellEvent:
        """Продажа qty обратно в кривую не дешевле min_payout.

        Raises:
            InvalidParams: qty == 0 или вне u64, seller — vault launch
            NotInTradingWindow: окна закрыты
            InvalidDecimals, InsufficientSupply, MathOverflow, PayoutTooLow:
                из bonding curve
            InsufficientLiquidity: в vault не хватает reserve
            ActionAlreadyPerformed, ExceedsSellLimit: из rate-limit ledger
        """
        with self._rejections("sell", launch_id):
            _require_positive_qty(qty)
            require_u64(min_payout, "min_payout")
            now = self.clock.now()
            launch, day_advanced = self.maybe_advance_day(self.store.load_launch(launch_id), now)
            self._require_window_open(launch, now)
            vault = launch.vault_account
            _require_distinct(seller, vault)

            payout = compute_payout(
                launch.base_price,
                launch.slope,
                launch.decimals,
                launch.current_supply,
                qty,
                min_payout=min_payout,
            )
            liquidity = self.custody.balance_of(vault, Asset.RESERVE)
            if payout > liquidity:
                raise InsufficientLiquidity(f"payout={payout} > vault reserve={liquidity}")

            today = self.scheduler.day_of(now)
            record = self._record_for(launch_id, seller)
            holding = self.custody.balance_of(seller, Asset.TOKEN)
            updated_record = self.ledger.check_and_record(
                record, today, ActionKind.SELL, holding, qty
            )
            new_supply = checked_sub(launch.current_supply, qty)
            updated = _evolve(launch, current_supply=new_supply)

            self.custody.move_many([
                CustodyMove(seller, vault, Asset.TOKEN, qty),
                CustodyMove(vault, seller, Asset.RESERVE, payout),
            ])
            self.store.commit(updated, updated_record)

        logger.info(
            "sell committed: launch=%d seller=%s qty=%d payout=%d supply=%d",
            launch_id, seller, qty, payout, new_supply,
        )
        return SellEvent(
            launch_id=launch_id,
            seller=seller,
            qty=qty,
            payout=payout,
            current_supply=new_supply,
            action_day=today,
            day_advanced=day_advanced,
        )

    def transfer(self, launch_id: int, source: str, destination: str, qty: int) -> TransferEvent:
        """Перевод актива между аккаунтами (без кривой и без изменения supply).

        Raises:
            InvalidParams: qty == 0 или вне u64, source == destination
            NotInTradingWindow: окна закрыты
            MathOverflow: баланс получателя выходит за u64
            ActionAlreadyPerformed, ExceedsTransferLimit: из rate-limit ledger
        """
        with self._rejections("transfer", launch_id):
            _require_positive_qty(qty)
            _require_distinct(source, destination)
            now = self.clock.now()
            launch, day_advanced = self.maybe_advance_day(self.store.load_launch(launch_id), now)
            self._require_window_open(launch, now)

            today = self.scheduler.day_of(now)
            record = self._record_for(launch_id, source)
            holding = self.custody.balance_of(source, Asset.TOKEN)
            updated_record = self.ledger.check_and_record(
                record, today, ActionKind.TRANSFER, holding, qty
            )

            self.custody.move_many([CustodyMove(source, destination, Asset.TOKEN, qty)])
            self.store.commit(launch, updated_record)

        logger.info(
            "transfer committed: launch=%d %s -> %s qty=%d",
            launch_id, source, destination, qty,
        )
        return TransferEvent(
            launch_id=launch_id,
            source=source,
            destination=destination,
            qty=qty,
            action_day=today,
            day_advanced=day_advanced,
        )

    # -------------------------------------------------------------------------
    # Read-only
    # -------------------------------------------------------------------------

    def quote_buy(self, launch_id: int, qty: int) -> int:
        """Стоимость покупки qty без изменения состояния."""
        launch = self.store.load_launch(launch_id)
        return compute_cost(
            launch.base_price,
            launch.slope,
            launch.decimals,
            launch.current_supply,
            qty,
            supply_cap=launch.total_supply_cap,
        )

    def quote_sell(self, launch_id: int, qty: int) -> int:
        """Выплата за продажу qty без изменения состояния."""
        launch = self.store.load_launch(launch_id)
        return compute_payout(
            launch.base_price, launch.slope, launch.decimals, launch.current_supply, qty
        )

    def spot_price(self, launch_id: int) -> int:
        launch = self.store.load_launch(launch_id)
        return spot_price(launch.base_price, launch.slope, launch.decimals, launch.current_supply)

    def is_window_open(self, launch_id: int) -> bool:
        """Открыто ли окно сейчас (с учётом непроизошедшей смены суток)."""
        now = self.clock.now()
        launch, _ = self.maybe_advance_day(self.store.load_launch(launch_id), now)
        return self.scheduler.is_open_at(launch.window1, launch.window2, now)

    # -------------------------------------------------------------------------
    # Внутренние шаги
    # -------------------------------------------------------------------------

    def _require_admin(self, caller: str, launch: Launch) -> None:
        if not self.authorization.is_admin(caller, launch):
            raise Unauthorized(f"caller={caller} is not admin of launch={launch.id}")

    def _require_window_open(self, launch: Launch, now: int) -> None:
        if not self.scheduler.is_open_at(launch.window1, launch.window2, now):
            raise NotInTradingWindow(
                f"t={now % self.scheduler.config.day_length} "
                f"windows=[{launch.window1.start_offset}, {launch.window1.end}) "
                f"[{launch.window2.start_offset}, {launch.window2.end})"
            )

    def _record_for(self, launch_id: int, account: str) -> AccountActionRecord:
        record = self.store.load_record(launch_id, account)
        if record is None:
            return self.ledger.fresh_record(launch_id, account)
        return record

    def _log_day_advanced(self, event: DayAdvanced) -> None:
        logger.info(
            "day advanced: launch=%d %d -> %d reason=%s windows=%d/%d",
            event.launch_id, event.previous_day, event.trading_day, event.reason,
            event.window1.start_offset, event.window2.start_offset,
        )

    @contextmanager
    def _rejections(self, operation: str, launch_id: Optional[int]) -> Iterator[None]:
        """Логирование отказа операции; ошибка пробрасывается как есть."""
        try:
            yield
        except LaunchError as e:
            logger.warning(
                "%s rejected: launch=%s code=%s %s", operation, launch_id, e.code, e
            )
            raise


# =============================================================================
# HELPERS
# =============================================================================


def _evolve(launch: Launch, **changes) -> Launch:
    """Новый Launch с изменёнными полями и повторной валидацией инвариантов."""
    return Launch.model_validate({**launch.model_dump(), **changes})


def _require_positive_qty(qty: int) -> None:
    require_u64(qty, "qty")
    if qty == 0:
        raise InvalidParams("qty must be positive")


def _require_distinct(source: str, destination: str) -> None:
    if source == destination:
        raise InvalidParams(f"source and destination are the same account: {source}")
