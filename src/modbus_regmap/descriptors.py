"""Compiled register descriptors: one frozen record per register, a closed set of five kinds."""

from dataclasses import dataclass
from typing import ClassVar

from .naming import topic_name
from .types import RegisterCategory, ValueKind

UNKNOWN_VARIANT = "Unknown"


@dataclass(frozen=True)
class EnumVariant:
    """One decode outcome of an enum register; the Unknown fallback has code None."""

    name: str
    label: str
    code: int | None

    @property
    def is_unknown(self) -> bool:
        return self.code is None


@dataclass(frozen=True)
class RegisterDescriptor:
    name: str
    category: RegisterCategory
    address: int
    description: str

    kind: ClassVar[ValueKind]

    @property
    def topic(self) -> str:
        return topic_name(self.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.category.value}.{self.name}"


@dataclass(frozen=True)
class EnumDescriptor(RegisterDescriptor):
    """Ordered variants in declaration order, the Unknown fallback last."""

    variants: tuple[EnumVariant, ...] = ()

    kind: ClassVar[ValueKind] = ValueKind.ENUM

    @property
    def unknown(self) -> EnumVariant:
        return self.variants[-1]

    def resolve(self, code: int) -> EnumVariant:
        """Variant whose code equals `code`, else Unknown. Total over all codes."""
        for variant in self.variants:
            if variant.code == code:
                return variant
        return self.unknown


@dataclass(frozen=True)
class FloatDescriptor(RegisterDescriptor):
    gain: float = 1.0

    kind: ClassVar[ValueKind] = ValueKind.FLOAT


@dataclass(frozen=True)
class SignedDescriptor(RegisterDescriptor):
    kind: ClassVar[ValueKind] = ValueKind.SIGNED


@dataclass(frozen=True)
class UnsignedDescriptor(RegisterDescriptor):
    kind: ClassVar[ValueKind] = ValueKind.UNSIGNED


@dataclass(frozen=True)
class BooleanDescriptor(RegisterDescriptor):
    true_label: str = "true"
    false_label: str = "false"

    kind: ClassVar[ValueKind] = ValueKind.BOOLEAN

    def render(self, value: bool) -> str:
        return self.true_label if value else self.false_label


Descriptor = EnumDescriptor | FloatDescriptor | SignedDescriptor | UnsignedDescriptor | BooleanDescriptor


@dataclass(frozen=True)
class CompiledSchema:
    """Descriptors per category, in schema order."""

    holding: tuple[Descriptor, ...] = ()
    coil: tuple[BooleanDescriptor, ...] = ()
    discrete: tuple[BooleanDescriptor, ...] = ()
    input: tuple[Descriptor, ...] = ()

    def descriptors(self, category: RegisterCategory) -> tuple[Descriptor, ...]:
        return getattr(self, RegisterCategory(category).value)

    def __iter__(self):
        for category in RegisterCategory:
            yield from self.descriptors(category)

    def __len__(self) -> int:
        return sum(len(self.descriptors(category)) for category in RegisterCategory)
