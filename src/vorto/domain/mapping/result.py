"""Typed output tree produced by one mapping invocation."""

import copy
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any


class SectionValue:
    """Evaluated fields of one section."""

    def __init__(self, name: str, values: Mapping[str, Any]) -> None:
        self._name = name
        self._values = MappingProxyType(dict(values))

    @property
    def name(self) -> str:
        return self._name

    def get(self, field: str) -> Any | None:
        """Value of field, or None if the section does not carry it."""
        return copy.deepcopy(self._values.get(field))

    def __contains__(self, field: object) -> bool:
        return field in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self._values))

    def __repr__(self) -> str:
        return f"SectionValue({self._name!r}, {dict(self._values)!r})"


class MappingResult:
    """Sections present in the mapped payload, in specification order."""

    def __init__(self, specification: str, sections: list[SectionValue]) -> None:
        self._specification = specification
        self._sections = MappingProxyType({s.name: s for s in sections})

    @property
    def specification(self) -> str:
        return self._specification

    def get(self, section: str) -> SectionValue | None:
        return self._sections.get(section)

    def value(self, section: str, field: str) -> Any | None:
        found = self._sections.get(section)
        return found.get(field) if found else None

    @property
    def section_names(self) -> list[str]:
        return list(self._sections)

    def __contains__(self, section: object) -> bool:
        return section in self._sections

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: s.to_dict() for name, s in self._sections.items()}

    def __repr__(self) -> str:
        return f"MappingResult({self._specification!r}, {self.to_dict()!r})"
