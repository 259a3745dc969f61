"""Tests for custom scalar handlers."""

from gql_nsgen.core.scalars import (
    FALLBACK_TYPE,
    DateHandler,
    DateTimeHandler,
    JSONHandler,
    ScalarHandler,
    ScalarRegistry,
    UUIDHandler,
)


class TestHandlers:
    """Tests for the built-in handlers."""

    def test_datetime(self):
        handler = DateTimeHandler()
        assert handler.python_type == "_datetime.datetime"
        assert handler.import_statement == "import datetime as _datetime"

    def test_date_shares_import(self):
        assert DateHandler().import_statement == DateTimeHandler().import_statement
        assert DateHandler().python_type == "_datetime.date"

    def test_uuid(self):
        handler = UUIDHandler()
        assert handler.python_type == "_uuid.UUID"
        assert handler.import_statement == "import uuid as _uuid"

    def test_json_needs_no_import(self):
        handler = JSONHandler()
        assert handler.python_type == FALLBACK_TYPE
        assert handler.import_statement == ""


class TestScalarRegistry:
    """Tests for ScalarRegistry."""

    def test_default_handlers_registered(self):
        registry = ScalarRegistry()
        for name in ("DateTime", "Date", "UUID", "JSON", "JSONObject", "GenericScalar", "BigInt"):
            assert registry.get(name) is not None, name

    def test_builtin_scalars(self):
        registry = ScalarRegistry()
        assert registry.python_type("String") == "str"
        assert registry.python_type("ID") == "str"
        assert registry.python_type("Int") == "int"
        assert registry.python_type("Float") == "float"
        assert registry.python_type("Boolean") == "bool"

    def test_unknown_scalar_falls_back_to_any(self):
        registry = ScalarRegistry()
        assert registry.get("Unknown") is None
        assert registry.python_type("Unknown") == "_Any"

    def test_register_custom_handler(self):
        class MoneyHandler:
            python_type = "_decimal.Decimal"
            import_statement = "import decimal as _decimal"

        registry = ScalarRegistry()
        registry.register("Money", MoneyHandler())
        assert isinstance(registry.get("Money"), ScalarHandler)
        assert registry.python_type("Money") == "_decimal.Decimal"

    def test_override_default(self):
        registry = ScalarRegistry()
        registry.register("BigInt", JSONHandler())
        assert registry.python_type("BigInt") == "_Any"

    def test_imports_are_sorted_and_unique(self):
        registry = ScalarRegistry()
        imports = registry.imports_for(["UUID", "DateTime", "Date", "GenericScalar", "Unknown"])
        assert imports == ["import datetime as _datetime", "import uuid as _uuid"]
