"""Synthesize type identifiers from free-text register descriptions; derive topic names."""

import keyword
import re

_UPPER = re.compile(r"(?<!^)(?=[A-Z])")


def synthesize_identifier(description: str) -> str:
    """
    Convert a register description or enum label into a CamelCase identifier.

    - Split on whitespace.
    - In each word, replace non-alphanumeric characters with "_".
    - Uppercase the first character of every resulting fragment, keep the rest as is.
    - Concatenate and drop every "_".

    "Target Temp (°C)" -> "TargetTempC", "dhw heating status (on/off)" -> "DhwHeatingStatusOnOff".
    Adjacent tokens can merge ("1 / 2" -> "12"); no disambiguation is attempted.
    """
    parts: list[str] = []
    for word in description.split():
        sanitized = "".join(c if c.isalnum() else "_" for c in word)
        for fragment in sanitized.split("_"):
            parts.append(fragment[:1].upper() + fragment[1:])
    return "".join(parts)


def topic_name(identifier: str) -> str:
    """snake_case topic segment: "_" before every uppercase letter, then lowercase."""
    return _UPPER.sub("_", identifier).lower()


def is_valid_identifier(name: str) -> bool:
    """True for names usable as a Python class or enum member name."""
    return name.isidentifier() and not keyword.iskeyword(name) and not name.startswith("_")
