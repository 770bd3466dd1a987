"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов:
- Валидность самих схем
- Валидация правильных данных
- Детекция нарушений required полей и типов
- Детекция нарушений constraints (u64, decimals, границы окна)
- Совместимость с сериализацией Pydantic моделей
"""

import pytest
from jsonschema import ValidationError

from src.core.contracts import (
    AccountActionRecordValidator,
    LaunchValidator,
    SchemaLoader,
    validate_account_action_record,
    validate_launch,
)
from src.core.domain import AccountActionRecord, Launch


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def valid_launch():
    """Валидный сериализованный launch."""
    return {
        "id": 4,
        "decimals": 9,
        "base_price": 1,
        "slope": 1,
        "total_supply_cap": 1_000_000_000_000_000_000,
        "current_supply": 0,
        "trading_day": 19_876,
        "window1": {"start_offset": 12_345, "duration": 900},
        "window2": {"start_offset": 60_000, "duration": 900},
    }


@pytest.fixture
def valid_record():
    return {"launch_id": 4, "account": "alice", "last_action_day": 19_876}


# =============================================================================
# SCHEMAS
# =============================================================================


class TestSchemaLoader:

    def test_schemas_load(self):
        loader = SchemaLoader()
        for name in ("launch", "account_action_record"):
            schema = loader.load_schema(name)
            assert schema["type"] == "object"

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("order_book")

    def test_default_dir_found_from_source_tree(self):
        loader = SchemaLoader()
        assert loader.load_schema("launch")["title"] == "Launch"

    def test_explicit_schema_dir(self, tmp_path):
        (tmp_path / "launch.json").write_text(
            '{"$schema": "https://json-schema.org/draft/2020-12/schema",'
            ' "type": "object", "required": ["id"]}',
            encoding="utf-8",
        )
        validator = LaunchValidator(loader=SchemaLoader(schema_dir=tmp_path))
        assert validator.is_valid({"id": 1})
        assert not validator.is_valid({})

    def test_missing_schema_dir(self, tmp_path):
        with pytest.raises(RuntimeError):
            SchemaLoader(schema_dir=tmp_path / "absent")


# =============================================================================
# LAUNCH CONTRACT
# =============================================================================


class TestLaunchContract:

    def test_valid(self, valid_launch):
        validate_launch(valid_launch)

    def test_missing_required(self, valid_launch):
        del valid_launch["current_supply"]
        with pytest.raises(ValidationError):
            validate_launch(valid_launch)

    def test_decimals_above_max(self, valid_launch):
        valid_launch["decimals"] = 19
        assert not LaunchValidator().is_valid(valid_launch)

    def test_u64_overflow(self, valid_launch):
        valid_launch["slope"] = 2**64
        with pytest.raises(ValidationError):
            validate_launch(valid_launch)

    def test_float_rejected(self, valid_launch):
        valid_launch["base_price"] = 1.5
        with pytest.raises(ValidationError):
            validate_launch(valid_launch)

    def test_window_start_outside_day(self, valid_launch):
        valid_launch["window2"]["start_offset"] = 86_400
        with pytest.raises(ValidationError):
            validate_launch(valid_launch)

    def test_unknown_field(self, valid_launch):
        valid_launch["admin"] = "root"
        with pytest.raises(ValidationError):
            validate_launch(valid_launch)

    def test_pydantic_dump_complies(self, valid_launch):
        launch = Launch.model_validate(valid_launch)
        validate_launch(launch.model_dump(mode="json"))

    def test_iter_errors_reports_all(self, valid_launch):
        valid_launch["decimals"] = 40
        valid_launch["slope"] = -1
        errors = list(LaunchValidator().iter_errors(valid_launch))
        assert len(errors) == 2


# =============================================================================
# ACCOUNT ACTION RECORD CONTRACT
# =============================================================================


class TestAccountActionRecordContract:

    def test_valid(self, valid_record):
        validate_account_action_record(valid_record)

    def test_never_acted_null(self, valid_record):
        valid_record["last_action_day"] = None
        validate_account_action_record(valid_record)

    def test_negative_day(self, valid_record):
        valid_record["last_action_day"] = -1
        assert not AccountActionRecordValidator().is_valid(valid_record)

    def test_empty_account(self, valid_record):
        valid_record["account"] = ""
        with pytest.raises(ValidationError):
            validate_account_action_record(valid_record)

    def test_pydantic_dump_complies(self):
        record = AccountActionRecord(launch_id=0, account="bob")
        validate_account_action_record(record.model_dump(mode="json"))
