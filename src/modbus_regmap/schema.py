"""Schema loader: parse the JSON register catalog into a validated Schema; packaged profiles."""

import json
import logging
import math
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

from .errors import SchemaFormatError, SchemaIOError, UnsupportedTypeError
from .types import (
    MAX_ADDRESS,
    BooleanEntry,
    EnumEntry,
    FloatEntry,
    RegisterCategory,
    RegisterEntry,
    Schema,
    SignedEntry,
    UnsignedEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "therma_v"

_PROFILE_RESOURCE: dict[str, str] = {
    "therma_v": "modbus_regmap.data.therma_v",
}

# Type tags accepted per word category
_HOLDING_TYPES = {"enum": EnumEntry, "float": FloatEntry, "i8": SignedEntry}
_INPUT_TYPES = {**_HOLDING_TYPES, "u16": UnsignedEntry}
_WORD_TYPES: dict[RegisterCategory, dict[str, type]] = {
    RegisterCategory.HOLDING: _HOLDING_TYPES,
    RegisterCategory.INPUT: _INPUT_TYPES,
}


class _EntryContext:
    """Position of the entry being parsed, for error messages."""

    def __init__(self, category: RegisterCategory, index: int, raw: Any) -> None:
        self.category = category
        self.index = index
        self.description = raw.get("description") if isinstance(raw, dict) else None
        if not isinstance(self.description, str):
            self.description = None

    def error(self, message: str) -> SchemaFormatError:
        return SchemaFormatError(
            message,
            category=self.category.value,
            index=self.index,
            description=self.description,
        )


def _parse_address(value: Any, ctx: _EntryContext, field: str = "reg") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ctx.error(f"{field!r} must be an integer, got {value!r}")
    if not 0 <= value <= MAX_ADDRESS:
        raise ctx.error(f"{field!r} out of range 0..{MAX_ADDRESS}: {value}")
    return value


def _parse_common(raw: Any, ctx: _EntryContext) -> tuple[str, int]:
    if not isinstance(raw, dict):
        raise ctx.error(f"entry must be an object, got {type(raw).__name__}")
    if "description" not in raw:
        raise ctx.error("missing field 'description'")
    if not isinstance(raw["description"], str):
        raise ctx.error(f"'description' must be a string, got {raw['description']!r}")
    if "reg" not in raw:
        raise ctx.error("missing field 'reg'")
    return raw["description"], _parse_address(raw["reg"], ctx)


def _parse_enum_values(value: Any, ctx: _EntryContext) -> tuple[tuple[str, int], ...] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ctx.error(f"'enum' must be an object of label -> code, got {value!r}")
    pairs: list[tuple[str, int]] = []
    for label, code in value.items():
        if not isinstance(label, str):
            raise ctx.error(f"enum label must be a string, got {label!r}")
        pairs.append((label, _parse_address(code, ctx, field=f"enum.{label}")))
    return tuple(pairs)


def _parse_gain(value: Any, ctx: _EntryContext) -> float:
    if value is None:
        return 1.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ctx.error(f"'gain' must be a number, got {value!r}")
    gain = float(value)
    if not math.isfinite(gain):
        raise ctx.error(f"'gain' must be finite, got {value!r}")
    return gain


def _parse_word_entry(raw: Any, ctx: _EntryContext) -> RegisterEntry:
    """Build a holding/input entry, dispatching on its 'type' tag."""
    description, reg = _parse_common(raw, ctx)
    if "type" not in raw:
        raise ctx.error("missing field 'type'")
    tag = raw["type"]
    entry_cls = _WORD_TYPES[ctx.category].get(tag) if isinstance(tag, str) else None
    if entry_cls is None:
        raise UnsupportedTypeError(
            tag,
            category=ctx.category.value,
            index=ctx.index,
            description=description,
        )
    if entry_cls is EnumEntry:
        return EnumEntry(description, reg, _parse_enum_values(raw.get("enum"), ctx))
    if entry_cls is FloatEntry:
        return FloatEntry(description, reg, _parse_gain(raw.get("gain"), ctx), tag)
    return entry_cls(description, reg, tag)


def _parse_boolean_entry(raw: Any, ctx: _EntryContext) -> BooleanEntry:
    """Build a coil/discrete entry; 'values' must carry both labels."""
    description, reg = _parse_common(raw, ctx)
    values = raw.get("values")
    if not isinstance(values, dict):
        raise ctx.error("missing object field 'values'")
    labels: dict[str, str] = {}
    for key in ("true", "false"):
        label = values.get(key)
        if not isinstance(label, str):
            raise ctx.error(f"'values.{key}' must be a string, got {label!r}")
        labels[key] = label
    return BooleanEntry(description, reg, labels["true"], labels["false"])


def parse_schema(source: str | bytes | Mapping[str, Any]) -> Schema:
    """
    Parse a schema document (JSON text, bytes, or decoded mapping) into a Schema.

    The document must hold the four collections holding, coil, discrete and input.
    Any malformed entry or unsupported type tag fails the whole load.
    """
    if isinstance(source, (str, bytes, bytearray)):
        try:
            data = json.loads(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SchemaFormatError(f"Invalid JSON: {e}") from e
    else:
        data = source

    if not isinstance(data, Mapping):
        raise SchemaFormatError(f"Schema root must be an object, got {type(data).__name__}")

    parsed: dict[str, tuple] = {}
    for category in RegisterCategory:
        if category.value not in data:
            raise SchemaFormatError(f"Missing register collection {category.value!r}")
        raw_entries = data[category.value]
        if not isinstance(raw_entries, list):
            raise SchemaFormatError(f"{category.value!r} must be a list, got {type(raw_entries).__name__}")
        parse = _parse_boolean_entry if category.is_bit else _parse_word_entry
        parsed[category.value] = tuple(
            parse(raw, _EntryContext(category, i, raw)) for i, raw in enumerate(raw_entries)
        )

    schema = Schema(**parsed)
    logger.debug(
        "Schema parsed: %d holding, %d coil, %d discrete, %d input",
        len(schema.holding),
        len(schema.coil),
        len(schema.discrete),
        len(schema.input),
    )
    return schema


def load_schema(path: str | Path) -> Schema:
    """Read and parse a schema file; an unreadable file raises SchemaIOError."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SchemaIOError(str(path), f"Cannot read schema {path}: {e.strerror or e}") from e
    logger.debug("Loading schema from %s", path)
    return parse_schema(data)


def get_default_schema(profile: str = DEFAULT_PROFILE) -> Schema:
    """Load a packaged schema by profile name (default therma_v)."""
    resource_name = _PROFILE_RESOURCE.get(profile.lower())
    if not resource_name:
        raise SchemaIOError(profile, f"Unknown profile: {profile!r} (available: {', '.join(available_profiles())})")

    # modbus_regmap.data.therma_v -> modbus_regmap.data / therma_v.json
    pkg, name = resource_name.rsplit(".", 1)
    json_name = f"{name}.json"
    try:
        data = resources.files(pkg).joinpath(json_name).read_bytes()
    except FileNotFoundError:
        raise SchemaIOError(json_name, f"Schema resource not found: {pkg}/{json_name}") from None
    logger.debug("Loading packaged schema %s/%s", pkg, json_name)
    return parse_schema(data)


def available_profiles() -> list[str]:
    return sorted(_PROFILE_RESOURCE)
