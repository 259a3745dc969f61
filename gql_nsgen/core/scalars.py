"""Custom scalar handlers for GraphQL code generation.

Maps GraphQL scalars to the Python annotations used in generated models.
Generated modules import standard-library types under private aliases so that
a model field named ``date`` or ``datetime`` cannot shadow its own annotation.

Example usage:
    from gql_nsgen.core.scalars import ScalarRegistry

    class MoneyHandler:
        python_type = "_decimal.Decimal"
        import_statement = "import decimal as _decimal"

    registry = ScalarRegistry()
    registry.register("Money", MoneyHandler())
"""

from typing import Protocol, runtime_checkable

BUILTIN_TYPES = {
    "String": "str",
    "ID": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
}

FALLBACK_TYPE = "_Any"


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for custom scalar handlers.

    Attributes:
        python_type: The annotation written into generated code
        import_statement: The import that annotation needs, or "" for none
    """

    python_type: str
    import_statement: str


class DateTimeHandler:
    """DateTime scalars, parsed by pydantic from ISO 8601 strings."""

    python_type = "_datetime.datetime"
    import_statement = "import datetime as _datetime"


class DateHandler:
    python_type = "_datetime.date"
    import_statement = "import datetime as _datetime"


class UUIDHandler:
    python_type = "_uuid.UUID"
    import_statement = "import uuid as _uuid"


class JSONHandler:
    """JSON-like scalars pass through untouched."""

    python_type = FALLBACK_TYPE
    import_statement = ""


class IntHandler:
    python_type = "int"
    import_statement = ""


class ScalarRegistry:
    """Registry for custom scalar handlers.

    Manages the mapping between GraphQL scalar names and their handlers.
    Custom scalars without a handler map to ``Any``.

    Example:
        registry = ScalarRegistry()
        registry.python_type("DateTime")  # "_datetime.datetime"
        registry.python_type("Unknown")   # "_Any"
    """

    def __init__(self):
        self._handlers: dict[str, ScalarHandler] = {}
        self._register_defaults()

    def _register_defaults(self):
        """Register built-in default handlers."""
        self.register("DateTime", DateTimeHandler())
        self.register("Date", DateHandler())
        self.register("UUID", UUIDHandler())
        self.register("JSON", JSONHandler())
        self.register("JSONObject", JSONHandler())
        self.register("GenericScalar", JSONHandler())
        self.register("BigInt", IntHandler())

    def register(self, scalar_name: str, handler: ScalarHandler):
        """Register a handler for a scalar type."""
        self._handlers[scalar_name] = handler

    def get(self, scalar_name: str) -> ScalarHandler | None:
        """Get the handler for a scalar type, or None if not registered."""
        return self._handlers.get(scalar_name)

    def python_type(self, scalar_name: str) -> str:
        """The annotation for a built-in or custom scalar."""
        if scalar_name in BUILTIN_TYPES:
            return BUILTIN_TYPES[scalar_name]
        handler = self.get(scalar_name)
        return handler.python_type if handler else FALLBACK_TYPE

    def imports_for(self, scalar_names) -> list[str]:
        """Sorted, de-duplicated import statements needed by ``scalar_names``."""
        imports = set()
        for name in scalar_names:
            handler = self.get(name)
            if handler is not None and handler.import_statement:
                imports.add(handler.import_statement)
        return sorted(imports)
