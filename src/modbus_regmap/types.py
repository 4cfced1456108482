"""Core data model: register categories, value kinds, schema entries, and the Schema root."""

from dataclasses import dataclass, field
from enum import Enum

MAX_ADDRESS = 0xFFFF


class RegisterCategory(str, Enum):
    """Modbus register categories, named as in the schema document."""

    HOLDING = "holding"
    COIL = "coil"
    DISCRETE = "discrete"
    INPUT = "input"

    @property
    def is_bit(self) -> bool:
        return self in (RegisterCategory.COIL, RegisterCategory.DISCRETE)

    @property
    def is_writable(self) -> bool:
        return self in (RegisterCategory.COIL, RegisterCategory.HOLDING)


class ValueKind(str, Enum):
    """Decoded value kinds; the value is the schema type tag where one exists."""

    ENUM = "enum"
    FLOAT = "float"
    SIGNED = "i8"
    UNSIGNED = "u16"
    BOOLEAN = "bool"


def _check_address(reg: int) -> None:
    if not 0 <= reg <= MAX_ADDRESS:
        raise ValueError(f"reg must be within 0..{MAX_ADDRESS}, got {reg}")


@dataclass(frozen=True)
class EnumEntry:
    """Enum-valued register; enum_values keeps the schema's label order."""

    description: str
    reg: int
    enum_values: tuple[tuple[str, int], ...] | None = None

    kind = ValueKind.ENUM

    def __post_init__(self) -> None:
        _check_address(self.reg)


@dataclass(frozen=True)
class FloatEntry:
    description: str
    reg: int
    gain: float = 1.0
    data_type: str | None = None

    kind = ValueKind.FLOAT

    def __post_init__(self) -> None:
        _check_address(self.reg)


@dataclass(frozen=True)
class SignedEntry:
    description: str
    reg: int
    data_type: str | None = None

    kind = ValueKind.SIGNED

    def __post_init__(self) -> None:
        _check_address(self.reg)


@dataclass(frozen=True)
class UnsignedEntry:
    """Unsigned 16-bit register; only valid in the input category."""

    description: str
    reg: int
    data_type: str | None = None

    kind = ValueKind.UNSIGNED

    def __post_init__(self) -> None:
        _check_address(self.reg)


@dataclass(frozen=True)
class BooleanEntry:
    """Coil or discrete input with the labels shown for true and false."""

    description: str
    reg: int
    true_label: str
    false_label: str

    kind = ValueKind.BOOLEAN

    def __post_init__(self) -> None:
        _check_address(self.reg)


RegisterEntry = EnumEntry | FloatEntry | SignedEntry | UnsignedEntry


@dataclass(frozen=True)
class Schema:
    """Root document: four ordered register collections."""

    holding: tuple[RegisterEntry, ...] = field(default_factory=tuple)
    coil: tuple[BooleanEntry, ...] = field(default_factory=tuple)
    discrete: tuple[BooleanEntry, ...] = field(default_factory=tuple)
    input: tuple[RegisterEntry, ...] = field(default_factory=tuple)

    def entries(self, category: RegisterCategory) -> tuple[RegisterEntry | BooleanEntry, ...]:
        return getattr(self, RegisterCategory(category).value)

    def __len__(self) -> int:
        return len(self.holding) + len(self.coil) + len(self.discrete) + len(self.input)
