"""
Register types: the runtime bases every compiled register derives from.

Each register type carries its constant category, address and topic, a `reg()`
accessor, a pure `decode(raw)` taking exactly one raw unit (a 16-bit word for
holding/input, a bit for coil/discrete), and `encode(value)` for writes.
Types are built either in-process by `materialize` or as source by `modbus_regmap.emit`.
"""

import math
import types
from enum import Enum, nonmember
from typing import Any, ClassVar, Sequence

from .codec import check_count, int16_to_word, register_to_i16, register_to_u16, uint16_to_word
from .descriptors import (
    BooleanDescriptor,
    Descriptor,
    EnumDescriptor,
    FloatDescriptor,
    SignedDescriptor,
    UnsignedDescriptor,
)
from .errors import EncodeError
from .types import RegisterCategory, ValueKind

# Every register kind occupies one coil or one 16-bit word.
UNITS_PER_REGISTER = 1


class ModbusRegister:
    """Decoded value of one register; subclasses fix category, address and decode rule."""

    category: ClassVar[RegisterCategory]
    address: ClassVar[int]
    topic: ClassVar[str]
    description: ClassVar[str] = ""
    kind: ClassVar[ValueKind]

    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    @classmethod
    def reg(cls) -> int:
        return cls.address

    @classmethod
    def decode(cls, raw: Sequence[Any]) -> "ModbusRegister":
        check_count(raw, UNITS_PER_REGISTER)
        return cls(cls._decode_value(raw))

    @classmethod
    def _decode_value(cls, raw: Sequence[Any]) -> Any:
        raise NotImplementedError

    @classmethod
    def encode(cls, value: Any) -> list[Any]:
        raise NotImplementedError

    def render(self) -> str:
        return str(self._value)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash((type(self), self._value))


class FloatRegister(ModbusRegister):
    """One raw word cast to float and multiplied by `gain`."""

    kind = ValueKind.FLOAT
    gain: ClassVar[float] = 1.0

    __slots__ = ()

    @classmethod
    def _decode_value(cls, raw: Sequence[int]) -> float:
        return float(register_to_u16(raw)) * cls.gain

    @classmethod
    def encode(cls, value: float) -> list[int]:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise EncodeError(f"{cls.__name__}: expected a finite number, got {value!r}")
        if cls.gain == 0.0:
            raise EncodeError(f"{cls.__name__}: gain is 0, no raw word encodes {value!r}")
        try:
            return [uint16_to_word(round(value / cls.gain))]
        except EncodeError as e:
            raise EncodeError(f"{cls.__name__}: {value!r} does not fit one register word ({e})") from None

    def render(self) -> str:
        # fixed point, six decimals: drops gain noise and never switches to exponent notation
        return f"{self._value + 0.0:.6f}".rstrip("0").rstrip(".")


class SignedRegister(ModbusRegister):
    """Two's-complement 16-bit integer, no gain."""

    kind = ValueKind.SIGNED

    __slots__ = ()

    @classmethod
    def _decode_value(cls, raw: Sequence[int]) -> int:
        return register_to_i16(raw)

    @classmethod
    def encode(cls, value: int) -> list[int]:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{cls.__name__}: expected an int, got {value!r}")
        return [int16_to_word(value)]


class UnsignedRegister(ModbusRegister):
    kind = ValueKind.UNSIGNED

    __slots__ = ()

    @classmethod
    def _decode_value(cls, raw: Sequence[int]) -> int:
        return register_to_u16(raw)

    @classmethod
    def encode(cls, value: int) -> list[int]:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{cls.__name__}: expected an int, got {value!r}")
        return [uint16_to_word(value)]


class BooleanRegister(ModbusRegister):
    """Coil or discrete input; renders as its true or false label."""

    kind = ValueKind.BOOLEAN
    true_label: ClassVar[str] = "true"
    false_label: ClassVar[str] = "false"

    __slots__ = ()

    @classmethod
    def _decode_value(cls, raw: Sequence[bool]) -> bool:
        return bool(raw[0])

    @classmethod
    def encode(cls, value: bool | str) -> list[bool]:
        """Accepts a bool or one of the two labels."""
        if isinstance(value, bool):
            return [value]
        if isinstance(value, str):
            if value == cls.true_label:
                return [True]
            if value == cls.false_label:
                return [False]
            raise EncodeError(
                f"{cls.__name__}: {value!r} is neither {cls.true_label!r} nor {cls.false_label!r}"
            )
        raise EncodeError(f"{cls.__name__}: expected a bool or label, got {value!r}")

    def render(self) -> str:
        return self.true_label if self._value else self.false_label


class EnumRegister(Enum):
    """
    Base for enum-valued registers. Members map codes to variants; the Unknown member
    (value None) is returned for every code without a declared variant.
    Subclasses declare category, address, topic and description as enum.nonmember.
    """

    kind = nonmember(ValueKind.ENUM)

    @classmethod
    def _missing_(cls, value: object) -> "EnumRegister":
        return cls["Unknown"]

    @classmethod
    def reg(cls) -> int:
        return cls.address

    @classmethod
    def decode(cls, raw: Sequence[int]) -> "EnumRegister":
        check_count(raw, UNITS_PER_REGISTER)
        return cls(register_to_u16(raw))

    @classmethod
    def encode(cls, value: "EnumRegister | str") -> list[int]:
        """Accepts a member or a variant name; Unknown has no code to write."""
        if isinstance(value, str):
            try:
                value = cls[value]
            except KeyError:
                raise EncodeError(f"{cls.__name__}: no variant named {value!r}") from None
        if not isinstance(value, cls):
            raise EncodeError(f"{cls.__name__}: expected a variant, got {value!r}")
        if value.value is None:
            raise EncodeError(f"{cls.__name__}: {value.name} cannot be encoded")
        return [value.value]

    def render(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


RegisterType = type[ModbusRegister] | type[EnumRegister]

_BASES: dict[type, type[ModbusRegister]] = {
    FloatDescriptor: FloatRegister,
    SignedDescriptor: SignedRegister,
    UnsignedDescriptor: UnsignedRegister,
    BooleanDescriptor: BooleanRegister,
}


def is_register_type(obj: object) -> bool:
    return isinstance(obj, type) and issubclass(obj, (ModbusRegister, EnumRegister))


def _materialize_enum(descriptor: EnumDescriptor) -> type[EnumRegister]:
    def body(ns: dict[str, Any]) -> None:
        ns["__module__"] = __name__
        ns["__qualname__"] = descriptor.name
        ns["category"] = nonmember(descriptor.category)
        ns["address"] = nonmember(descriptor.address)
        ns["topic"] = nonmember(descriptor.topic)
        ns["description"] = nonmember(descriptor.description)
        for variant in descriptor.variants:
            ns[variant.name] = variant.code

    return types.new_class(descriptor.name, (EnumRegister,), exec_body=body)


def materialize(descriptor: Descriptor) -> RegisterType:
    """Build the register type for one descriptor in-process."""
    if isinstance(descriptor, EnumDescriptor):
        return _materialize_enum(descriptor)
    attrs: dict[str, Any] = {
        "__module__": __name__,
        "__qualname__": descriptor.name,
        "__slots__": (),
        "category": descriptor.category,
        "address": descriptor.address,
        "topic": descriptor.topic,
        "description": descriptor.description,
    }
    if isinstance(descriptor, FloatDescriptor):
        attrs["gain"] = descriptor.gain
    elif isinstance(descriptor, BooleanDescriptor):
        attrs["true_label"] = descriptor.true_label
        attrs["false_label"] = descriptor.false_label
    return type(descriptor.name, (_BASES[type(descriptor)],), attrs)
