"""Rate-Limit Ledger — одно действие в сутки и лимиты от holdings.

Правила для продажи и перевода (rate-limited действия):
1. last_action_day == today → ActionAlreadyPerformed
2. cap = floor(holding_balance × cap_percent / 100);
   requested_qty > cap → ExceedsSellLimit / ExceedsTransferLimit
3. Успех → запись с last_action_day = today

holding_balance — снапшот баланса у custody на момент вызова (не блокируется).
Обновлённая запись возвращается вызывающему и должна быть зафиксирована
атомарно вместе с изменением балансов операции.
"""

import logging
from typing import Optional

from src.core.constants import SELL_LIMIT_PERCENT, TRANSFER_LIMIT_PERCENT
from src.core.domain.account_record import AccountActionRecord, ActionKind
from src.core.errors import (
    ActionAlreadyPerformed,
    ExceedsSellLimit,
    ExceedsTransferLimit,
    InvalidParams,
)
from src.core.math.fixed_point import percent_of, require_u64

logger = logging.getLogger(__name__)


class RateLimitLedger:
    """Проверка и запись rate-limited действий аккаунтов.

    Порядок проверок:
    1. Одно действие в сутки → ActionAlreadyPerformed
    2. Лимит от holdings → ExceedsSellLimit / ExceedsTransferLimit
    """

    def __init__(
        self,
        sell_limit_percent: int = SELL_LIMIT_PERCENT,
        transfer_limit_percent: int = TRANSFER_LIMIT_PERCENT,
    ):
        """
        Args:
            sell_limit_percent: Лимит продажи, % от holdings (default 10)
            transfer_limit_percent: Лимит перевода, % от holdings (default 20)
        """
        for name, pct in (
            ("sell_limit_percent", sell_limit_percent),
            ("transfer_limit_percent", transfer_limit_percent),
        ):
            if not 0 <= pct <= 100:
                raise InvalidParams(f"{name}={pct} outside [0, 100]")
        self.sell_limit_percent = sell_limit_percent
        self.transfer_limit_percent = transfer_limit_percent

    def cap_percent_for(self, action_kind: ActionKind) -> int:
        """Лимит в % от holdings для вида действия."""
        if action_kind is ActionKind.SELL:
            return self.sell_limit_percent
        return self.transfer_limit_percent

    def allowance(
        self,
        holding_balance: int,
        action_kind: ActionKind,
        cap_percent: Optional[int] = None,
    ) -> int:
        """Максимальное количество для действия: floor(balance × pct / 100)."""
        require_u64(holding_balance, "holding_balance")
        pct = self.cap_percent_for(action_kind) if cap_percent is None else cap_percent
        return percent_of(holding_balance, pct)

    @staticmethod
    def fresh_record(launch_id: int, account: str) -> AccountActionRecord:
        """Запись "никогда не действовал" для первого действия аккаунта."""
        return AccountActionRecord(launch_id=launch_id, account=account, last_action_day=None)

    def check_and_record(
        self,
        record: AccountActionRecord,
        today: int,
        action_kind: ActionKind,
        holding_balance: int,
        requested_qty: int,
        cap_percent: Optional[int] = None,
    ) -> AccountActionRecord:
        """Проверка действия и обновлённая запись.

        Args:
            record: Текущая запись аккаунта (или fresh_record)
            today: Epoch-день действия
            action_kind: SELL или TRANSFER
            holding_balance: Текущий баланс актива аккаунта
            requested_qty: Запрошенное количество
            cap_percent: Лимит в % (default: по action_kind)

        Returns:
            Новая запись с last_action_day = today (исходная не меняется)

        Raises:
            ActionAlreadyPerformed: Аккаунт уже действовал сегодня
            ExceedsSellLimit: Продажа больше лимита
            ExceedsTransferLimit: Перевод больше лимита
        """
        if record.has_acted_on(today):
            raise ActionAlreadyPerformed(
                f"account={record.account} launch={record.launch_id} day={today}"
            )

        require_u64(requested_qty, "requested_qty")
        cap = self.allowance(holding_balance, action_kind, cap_percent)
        if requested_qty > cap:
            detail = f"requested={requested_qty} cap={cap} balance={holding_balance}"
            if action_kind is ActionKind.SELL:
                raise ExceedsSellLimit(detail)
            raise ExceedsTransferLimit(detail)

        logger.debug(
            "rate limit passed: account=%s kind=%s qty=%d cap=%d day=%d",
            record.account, action_kind.value, requested_qty, cap, today,
        )
        return record.model_copy(update={"last_action_day": today})
