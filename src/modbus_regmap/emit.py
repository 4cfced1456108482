"""Emitter: render compiled descriptors as an importable Python package, one module per category."""

import logging
from pathlib import Path

from .descriptors import (
    BooleanDescriptor,
    CompiledSchema,
    Descriptor,
    EnumDescriptor,
    FloatDescriptor,
    SignedDescriptor,
    UnsignedDescriptor,
)
from .types import RegisterCategory

logger = logging.getLogger(__name__)

_BASE_NAMES: dict[type, str] = {
    EnumDescriptor: "EnumRegister",
    FloatDescriptor: "FloatRegister",
    SignedDescriptor: "SignedRegister",
    UnsignedDescriptor: "UnsignedRegister",
    BooleanDescriptor: "BooleanRegister",
}

_MODULE_DOCS: dict[RegisterCategory, str] = {
    RegisterCategory.HOLDING: "Holding registers.",
    RegisterCategory.COIL: "Coils.",
    RegisterCategory.DISCRETE: "Discrete inputs.",
    RegisterCategory.INPUT: "Input registers.",
}


def _header(source_name: str) -> str:
    return f"# Generated by modbus-regmap from {source_name}. Do not edit.\n"


def _render_enum(d: EnumDescriptor) -> list[str]:
    lines = [
        f"class {d.name}(_EnumRegister):",
        f"    category = _nonmember(_RegisterCategory.{d.category.name})",
        f"    address = _nonmember({d.address!r})",
        f"    topic = _nonmember({d.topic!r})",
        f"    description = _nonmember({d.description!r})",
        "",
    ]
    for variant in d.variants:
        lines.append(f"    {variant.name} = {variant.code!r}")
    return lines


def _render_plain(d: Descriptor) -> list[str]:
    lines = [
        f"class {d.name}(_{_BASE_NAMES[type(d)]}):",
        "    __slots__ = ()",
        "",
        f"    category = _RegisterCategory.{d.category.name}",
        f"    address = {d.address!r}",
        f"    topic = {d.topic!r}",
        f"    description = {d.description!r}",
    ]
    if isinstance(d, FloatDescriptor):
        lines.append(f"    gain = {d.gain!r}")
    elif isinstance(d, BooleanDescriptor):
        lines.append(f"    true_label = {d.true_label!r}")
        lines.append(f"    false_label = {d.false_label!r}")
    return lines


def render_module(compiled: CompiledSchema, category: RegisterCategory, source_name: str = "schema") -> str:
    """Source of one category module; identical descriptors give identical text."""
    category = RegisterCategory(category)
    descriptors = compiled.descriptors(category)
    base_names = sorted({_BASE_NAMES[type(d)] for d in descriptors})
    has_enum = any(isinstance(d, EnumDescriptor) for d in descriptors)

    out = [_header(source_name) + f'"""{_MODULE_DOCS[category]}"""', ""]
    # Imports carry a leading underscore, which no register identifier can take.
    if has_enum:
        out += ["from enum import nonmember as _nonmember", ""]
    if base_names:
        imports = ", ".join(f"{name} as _{name}" for name in base_names)
        out.append(f"from modbus_regmap.registers import {imports}")
    out.append("from modbus_regmap.types import RegisterCategory as _RegisterCategory")

    for d in descriptors:
        out += ["", ""]
        out += _render_enum(d) if isinstance(d, EnumDescriptor) else _render_plain(d)

    names = ", ".join(repr(d.name) for d in descriptors)
    out += ["", "", f"__all__ = [{names}]" if names else "__all__ = []", ""]
    return "\n".join(out)


def render_package(compiled: CompiledSchema, source_name: str = "schema") -> dict[str, str]:
    """File name -> source for the whole package, __init__.py included."""
    files = {
        f"{category.value}.py": render_module(compiled, category, source_name)
        for category in RegisterCategory
    }
    modules = ", ".join(category.value for category in RegisterCategory)
    files["__init__.py"] = "\n".join(
        [
            _header(source_name) + '"""Register types compiled from the register schema."""',
            "",
            f"from . import {modules}",
            "",
            f"__all__ = [{', '.join(repr(category.value) for category in RegisterCategory)}]",
            "",
        ]
    )
    return files


def write_package(compiled: CompiledSchema, out_dir: str | Path, source_name: str = "schema") -> list[Path]:
    """Write the rendered package into out_dir (created if missing); returns written paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for filename, text in sorted(render_package(compiled, source_name).items()):
        path = out_dir / filename
        path.write_text(text, encoding="utf-8")
        written.append(path)
    logger.debug("Wrote %d modules to %s", len(written), out_dir)
    return written
