"""Gatekeeper — ограничения пользовательских действий над launch.

- Одно rate-limited действие (sell или transfer) в сутки на аккаунт
- Лимит sell: 10% holdings, лимит transfer: 20% holdings
"""

from .rate_limit_ledger import RateLimitLedger

__all__ = [
    "RateLimitLedger",
]
