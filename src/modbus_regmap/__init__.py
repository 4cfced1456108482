"""modbus-regmap: compile a declarative Modbus register schema into typed register accessors."""

__version__ = "0.1.0"

from .builder import build_descriptors
from .client import RegisterClient
from .descriptors import CompiledSchema, EnumVariant
from .emit import render_module, render_package, write_package
from .errors import (
    DecodeError,
    EncodeError,
    ModbusIOError,
    RegMapError,
    SchemaFormatError,
    SchemaIOError,
    UnknownRegisterError,
    UnsupportedTypeError,
)
from .naming import synthesize_identifier, topic_name
from .registers import (
    BooleanRegister,
    EnumRegister,
    FloatRegister,
    ModbusRegister,
    SignedRegister,
    UnsignedRegister,
    materialize,
)
from .regmap import RegisterMap, get_default_regmap
from .schema import get_default_schema, load_schema, parse_schema
from .types import RegisterCategory, Schema, ValueKind

__all__ = [
    "__version__",
    "build_descriptors",
    "RegisterClient",
    "CompiledSchema",
    "EnumVariant",
    "render_module",
    "render_package",
    "write_package",
    "DecodeError",
    "EncodeError",
    "ModbusIOError",
    "RegMapError",
    "SchemaFormatError",
    "SchemaIOError",
    "UnknownRegisterError",
    "UnsupportedTypeError",
    "synthesize_identifier",
    "topic_name",
    "BooleanRegister",
    "EnumRegister",
    "FloatRegister",
    "ModbusRegister",
    "SignedRegister",
    "UnsignedRegister",
    "materialize",
    "RegisterMap",
    "get_default_regmap",
    "get_default_schema",
    "load_schema",
    "parse_schema",
    "RegisterCategory",
    "Schema",
    "ValueKind",
]
