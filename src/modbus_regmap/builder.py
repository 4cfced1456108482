"""Register descriptor builder: dispatch each schema entry by value kind into a descriptor."""

import logging

from .descriptors import (
    BooleanDescriptor,
    CompiledSchema,
    Descriptor,
    FloatDescriptor,
    SignedDescriptor,
    UnsignedDescriptor,
)
from .enums import resolve_enum
from .errors import SchemaFormatError, UnsupportedTypeError
from .naming import is_valid_identifier, synthesize_identifier
from .types import (
    BooleanEntry,
    EnumEntry,
    FloatEntry,
    RegisterCategory,
    Schema,
    SignedEntry,
    UnsignedEntry,
)

logger = logging.getLogger(__name__)


def build_descriptor(
    entry: EnumEntry | FloatEntry | SignedEntry | UnsignedEntry | BooleanEntry,
    category: RegisterCategory,
    index: int | None = None,
) -> Descriptor:
    """Build the descriptor for one entry. Raises SchemaFormatError on a bad identifier."""
    name = synthesize_identifier(entry.description)
    if not is_valid_identifier(name):
        raise SchemaFormatError(
            f"description does not yield a valid identifier ({name!r})",
            category=category.value,
            index=index,
            description=entry.description,
        )

    common = dict(name=name, category=category, address=entry.reg, description=entry.description)
    if category.is_bit:
        if not isinstance(entry, BooleanEntry):
            raise UnsupportedTypeError(entry.kind.value, category=category.value, index=index, description=entry.description)
        return BooleanDescriptor(**common, true_label=entry.true_label, false_label=entry.false_label)

    if isinstance(entry, EnumEntry):
        return resolve_enum(entry, name, category, index)
    if isinstance(entry, FloatEntry):
        return FloatDescriptor(**common, gain=entry.gain)
    if isinstance(entry, SignedEntry):
        return SignedDescriptor(**common)
    if isinstance(entry, UnsignedEntry) and category == RegisterCategory.INPUT:
        return UnsignedDescriptor(**common)
    raise UnsupportedTypeError(
        entry.kind.value,
        category=category.value,
        index=index,
        description=entry.description,
    )


def build_descriptors(schema: Schema) -> CompiledSchema:
    """
    Compile every schema entry into descriptors, keeping schema order per category.

    Two entries of one category with the same identifier are rejected; two entries
    sharing an address are allowed and logged.
    """
    compiled: dict[str, tuple[Descriptor, ...]] = {}
    for category in RegisterCategory:
        descriptors: list[Descriptor] = []
        by_name: dict[str, int] = {}
        by_address: dict[int, str] = {}
        for index, entry in enumerate(schema.entries(category)):
            descriptor = build_descriptor(entry, category, index)
            if descriptor.name in by_name:
                raise SchemaFormatError(
                    f"identifier {descriptor.name!r} already used by {category.value}[{by_name[descriptor.name]}]",
                    category=category.value,
                    index=index,
                    description=entry.description,
                )
            if descriptor.address in by_address:
                logger.warning(
                    "%s.%s shares address %d with %s",
                    category.value,
                    descriptor.name,
                    descriptor.address,
                    by_address[descriptor.address],
                )
            else:
                by_address[descriptor.address] = descriptor.name
            by_name[descriptor.name] = index
            descriptors.append(descriptor)
        compiled[category.value] = tuple(descriptors)

    result = CompiledSchema(**compiled)
    logger.debug("Compiled %d register descriptors", len(result))
    return result
