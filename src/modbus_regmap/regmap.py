"""RegisterMap: compile a schema once into register types; lookup by name or address."""

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from .builder import build_descriptors
from .descriptors import CompiledSchema, Descriptor
from .errors import UnknownRegisterError
from .registers import RegisterType, materialize
from .schema import DEFAULT_PROFILE, get_default_schema, load_schema, parse_schema
from .types import RegisterCategory

logger = logging.getLogger(__name__)


class RegisterMap:
    """
    Register types compiled from one schema, grouped by category in schema order.
    Loaded from a packaged profile (default therma_v), a schema file, or an
    in-memory schema document.
    """

    def __init__(
        self,
        profile: str = DEFAULT_PROFILE,
        schema_path: str | Path | None = None,
        schema_override: Mapping[str, Any] | str | bytes | None = None,
    ) -> None:
        if schema_override is not None:
            schema = parse_schema(schema_override)
            self._source = "override"
        elif schema_path is not None:
            schema = load_schema(schema_path)
            self._source = Path(schema_path).name
        else:
            schema = get_default_schema(profile)
            self._source = f"{profile.lower()}.json"
        self._profile = profile.lower()

        self._compiled = build_descriptors(schema)
        self._by_name: dict[RegisterCategory, dict[str, RegisterType]] = {}
        self._descriptors: dict[RegisterType, Descriptor] = {}
        for category in RegisterCategory:
            types_by_name: dict[str, RegisterType] = {}
            for descriptor in self._compiled.descriptors(category):
                register_type = materialize(descriptor)
                types_by_name[descriptor.name] = register_type
                self._descriptors[register_type] = descriptor
            self._by_name[category] = types_by_name

        logger.debug("RegisterMap loaded from %s: %d registers", self._source, len(self))

    def lookup(self, category: RegisterCategory | str, name: str) -> RegisterType:
        """Register type by category and identifier; raise UnknownRegisterError if absent."""
        category = RegisterCategory(category)
        try:
            return self._by_name[category][name]
        except KeyError:
            raise UnknownRegisterError(f"{category.value}.{name}") from None

    def by_address(self, category: RegisterCategory | str, address: int) -> RegisterType:
        """First register of the category declared at `address`."""
        category = RegisterCategory(category)
        for register_type in self._by_name[category].values():
            if register_type.address == address:
                return register_type
        raise UnknownRegisterError(f"{category.value}@{address}", f"No {category.value} register at address {address}")

    def find(self, name: str) -> RegisterType:
        """
        Resolve "category.Name" or a bare "Name". A bare name present in more than
        one category is ambiguous and raises UnknownRegisterError.
        """
        if "." in name:
            category, _, bare = name.partition(".")
            try:
                return self.lookup(category, bare)
            except ValueError:
                raise UnknownRegisterError(name, f"Unknown register category in {name!r}") from None
        matches = [types_by_name[name] for types_by_name in self._by_name.values() if name in types_by_name]
        if not matches:
            raise UnknownRegisterError(name)
        if len(matches) > 1:
            where = ", ".join(f"{m.category.value}.{name}" for m in matches)
            raise UnknownRegisterError(name, f"Ambiguous register {name!r}: {where}")
        return matches[0]

    def registers(self, category: RegisterCategory | str) -> list[RegisterType]:
        return list(self._by_name[RegisterCategory(category)].values())

    def descriptor(self, register_type: RegisterType) -> Descriptor:
        return self._descriptors[register_type]

    @property
    def compiled(self) -> CompiledSchema:
        return self._compiled

    @property
    def profile(self) -> str:
        return self._profile

    @property
    def source(self) -> str:
        return self._source

    def __iter__(self) -> Iterator[RegisterType]:
        for category in RegisterCategory:
            yield from self._by_name[category].values()

    def __len__(self) -> int:
        return sum(len(types_by_name) for types_by_name in self._by_name.values())

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self.find(name)
        except UnknownRegisterError:
            return False
        return True


def get_default_regmap(profile: str = DEFAULT_PROFILE) -> RegisterMap:
    """Load and return the RegisterMap for a packaged profile (default therma_v)."""
    return RegisterMap(profile=profile)
