"""Enum variant resolver: ordered variant set plus the mandatory Unknown fallback."""

import logging

from .descriptors import UNKNOWN_VARIANT, EnumDescriptor, EnumVariant
from .errors import SchemaFormatError
from .naming import is_valid_identifier, synthesize_identifier
from .types import EnumEntry, RegisterCategory

logger = logging.getLogger(__name__)


def resolve_variants(
    enum_values: tuple[tuple[str, int], ...] | None,
    *,
    category: str | None = None,
    index: int | None = None,
    description: str | None = None,
) -> tuple[EnumVariant, ...]:
    """
    Build variants in label declaration order, then append Unknown.

    Labels become variant names through the identifier synthesizer. A name that is
    not a valid identifier, two labels with the same name, a label named Unknown,
    or two labels sharing one code are schema errors.
    """

    def error(message: str) -> SchemaFormatError:
        return SchemaFormatError(message, category=category, index=index, description=description)

    variants: list[EnumVariant] = []
    seen_names: dict[str, str] = {}
    seen_codes: dict[int, str] = {}
    for label, code in enum_values or ():
        name = synthesize_identifier(label)
        if not is_valid_identifier(name):
            raise error(f"enum label {label!r} does not yield a valid variant name ({name!r})")
        if name == UNKNOWN_VARIANT:
            raise error(f"enum label {label!r} collides with the reserved {UNKNOWN_VARIANT} variant")
        if name in seen_names:
            raise error(f"enum labels {seen_names[name]!r} and {label!r} both yield variant {name!r}")
        if code in seen_codes:
            raise error(f"enum labels {seen_codes[code]!r} and {label!r} share code {code}")
        seen_names[name] = label
        seen_codes[code] = label
        variants.append(EnumVariant(name=name, label=label, code=code))

    variants.append(EnumVariant(name=UNKNOWN_VARIANT, label=UNKNOWN_VARIANT, code=None))
    return tuple(variants)


def resolve_enum(
    entry: EnumEntry,
    name: str,
    category: RegisterCategory,
    index: int | None = None,
) -> EnumDescriptor:
    """EnumDescriptor for one enum entry; `name` is the register's synthesized identifier."""
    if entry.enum_values is None:
        logger.debug("%s.%s declares no enum values; only %s is generated", category.value, name, UNKNOWN_VARIANT)
    variants = resolve_variants(
        entry.enum_values,
        category=category.value,
        index=index,
        description=entry.description,
    )
    return EnumDescriptor(
        name=name,
        category=category,
        address=entry.reg,
        description=entry.description,
        variants=variants,
    )
