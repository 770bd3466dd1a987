"""
Domain models and value objects.

Contains the persisted entities of the launch core: Launch, TradingWindow,
AccountActionRecord.
"""

from src.core.domain.account_record import AccountActionRecord, ActionKind
from src.core.domain.launch import Launch, TradingWindow

__all__ = [
    # Launch model
    "Launch",
    "TradingWindow",
    # Rate-limit record
    "AccountActionRecord",
    "ActionKind",
]
