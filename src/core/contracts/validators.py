"""
JSON Schema Contract Validators

Модуль для валидации сохраняемых записей launch-ядра согласно формальным
JSON Schema контрактам. Использует библиотеку jsonschema.

Схемы:
- launch.json (Launch)
- account_action_record.json (AccountActionRecord)
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Без явного schema_dir ищет contracts/schema/ в ближайшем родительском
    каталоге этого модуля (корень репозитория при editable install).
    """

    def __init__(self, schema_dir: Optional[Path] = None):
        self._schema_dir = Path(schema_dir) if schema_dir is not None else _find_schema_dir()
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'launch')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


def _find_schema_dir() -> Path:
    """Первый contracts/schema вверх по дереву от этого файла."""
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / "contracts" / "schema"
        if candidate.is_dir():
            return candidate
    return here.parents[3] / "contracts" / "schema"


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Базовый класс: валидация dict против JSON Schema."""

    def __init__(self, schema_name: str, loader: Optional[SchemaLoader] = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        return self.validator.iter_errors(data)


class LaunchValidator(ContractValidator):
    def __init__(self, loader: Optional[SchemaLoader] = None):
        super().__init__("launch", loader)


class AccountActionRecordValidator(ContractValidator):
    def __init__(self, loader: Optional[SchemaLoader] = None):
        super().__init__("account_action_record", loader)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_launch(data: Dict[str, Any]) -> None:
    """
    Валидация сериализованного Launch.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    LaunchValidator().validate(data)


def validate_account_action_record(data: Dict[str, Any]) -> None:
    """
    Валидация сериализованного AccountActionRecord.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    AccountActionRecordValidator().validate(data)
