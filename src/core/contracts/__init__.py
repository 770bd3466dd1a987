"""
Contract Validation Module

Модуль для валидации JSON контрактов сохраняемого состояния launch.
"""

from .validators import (
    AccountActionRecordValidator,
    ContractValidator,
    LaunchValidator,
    SchemaLoader,
    validate_account_action_record,
    validate_launch,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "LaunchValidator",
    "AccountActionRecordValidator",
    # Functions
    "validate_launch",
    "validate_account_action_record",
]
