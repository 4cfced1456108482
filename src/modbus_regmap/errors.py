"""Clear exceptions for modbus-regmap: schema loading/compilation, decode/encode, and Modbus I/O."""


class RegMapError(Exception):
    """Base exception for modbus-regmap."""

    pass


class SchemaIOError(RegMapError):
    """Raised when the schema resource cannot be read."""

    def __init__(self, source: str, message: str | None = None) -> None:
        self.source = source
        super().__init__(message or f"Cannot read schema: {source}")


class SchemaFormatError(RegMapError):
    """Raised when the schema is malformed or an entry misses a required field."""

    def __init__(
        self,
        message: str,
        *,
        category: str | None = None,
        index: int | None = None,
        description: str | None = None,
    ) -> None:
        self.category = category
        self.index = index
        self.description = description
        if category is not None and index is not None:
            where = f"{category}[{index}]"
            if description is not None:
                where += f" ({description!r})"
            message = f"{where}: {message}"
        super().__init__(message)


class UnsupportedTypeError(SchemaFormatError):
    """Raised when a register entry uses a type tag its category does not support."""

    def __init__(
        self,
        type_tag: object,
        *,
        category: str | None = None,
        index: int | None = None,
        description: str | None = None,
    ) -> None:
        self.type_tag = type_tag
        super().__init__(
            f"Unsupported register type {type_tag!r}",
            category=category,
            index=index,
            description=description,
        )


class DecodeError(RegMapError, ValueError):
    """Raised when a decode function gets the wrong number or range of raw units."""

    pass


class EncodeError(RegMapError, ValueError):
    """Raised when a value cannot be encoded into raw register units."""

    pass


class UnknownRegisterError(RegMapError):
    """Raised when a register name or address is not in the compiled map."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Unknown register: {name!r}")


class ModbusIOError(RegMapError):
    """Raised when a Modbus read/write fails (wraps pymodbus or connection errors)."""

    def __init__(
        self,
        message: str,
        *,
        register: str | None = None,
        category: str | None = None,
        address: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.register = register
        self.category = category
        self.address = address
        self.cause = cause
        super().__init__(message)
