"""
Launch Errors — иерархия исключений ядра

Каждый вид ошибки — отдельный подкласс LaunchError:
- code: стабильный машинный код (имя вида ошибки)
- message: человекочитаемое сообщение (default + контекст)

Все ошибки терминальные и синхронные: операция отклоняется целиком,
состояние не изменяется, повторы — ответственность вызывающей стороны.
"""

from typing import Optional


class LaunchError(Exception):
    """Базовое исключение для всех отказов операций launch."""

    default_message: str = "Launch operation rejected"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        message = self.default_message
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    @property
    def code(self) -> str:
        """Машинный код ошибки (имя класса)."""
        return type(self).__name__


class InvalidDecimals(LaunchError):
    default_message = "Decimals must be 18 or fewer"


class InvalidParams(LaunchError):
    default_message = "Invalid launch parameters."


class MathOverflow(LaunchError):
    default_message = "Math overflow"


class InsufficientSupply(LaunchError):
    default_message = "Insufficient token supply available for purchase."


class SlippageExceeded(LaunchError):
    default_message = "Final cost is higher than max_cost (slippage)"


class InsufficientFunds(LaunchError):
    default_message = "Insufficient funds to complete the purchase."


class PayoutTooLow(LaunchError):
    default_message = "Payout lower than specified min_payout"


class InsufficientLiquidity(LaunchError):
    default_message = "Insufficient liquidity in pool for the sell amount."


class NotInTradingWindow(LaunchError):
    default_message = "Trading is not allowed at this time."


class ActionAlreadyPerformed(LaunchError):
    default_message = "This account has already performed an action in the current cycle."


class ExceedsSellLimit(LaunchError):
    default_message = "Sell amount exceeds the daily 10% limit of holdings."


class ExceedsTransferLimit(LaunchError):
    default_message = "Transfer amount exceeds the daily 20% limit of holdings."


class InvalidWindowTimes(LaunchError):
    default_message = "Invalid trading window parameters."


class Unauthorized(LaunchError):
    default_message = "Unauthorized access or incorrect signer."
