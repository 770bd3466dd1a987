"""
AccountActionRecord — запись о последнем rate-limited действии аккаунта

Ключ записи — (launch_id, account). Запись создаётся лениво при первой
продаже/переводе и не удаляется, пока существует launch.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.core.constants import U64_MAX


# =============================================================================
# ENUMS
# =============================================================================


class ActionKind(str, Enum):
    """Вид rate-limited действия"""

    SELL = "sell"
    TRANSFER = "transfer"


# =============================================================================
# RECORD MODEL
# =============================================================================


class AccountActionRecord(BaseModel):
    """
    Последний день rate-limited действия аккаунта в рамках одного launch.

    last_action_day = None — sentinel "никогда не действовал".
    Immutable модель (frozen=True): обновление создаёт новый экземпляр.
    """

    launch_id: int = Field(..., ge=0, le=U64_MAX, description="Идентификатор launch")
    account: str = Field(..., min_length=1, description="Аккаунт")
    last_action_day: Optional[int] = Field(
        None, ge=0, le=U64_MAX, description="Epoch-день последней продажи/перевода"
    )

    model_config = {"frozen": True}

    @property
    def key(self) -> tuple[int, str]:
        """Составной ключ записи."""
        return (self.launch_id, self.account)

    def has_acted_on(self, day: int) -> bool:
        """Было ли rate-limited действие в epoch-день day."""
        return self.last_action_day is not None and self.last_action_day == day
