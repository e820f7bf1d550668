"""Mapping domain model."""

from vorto.domain.mapping.path import MISSING, JsonPath
from vorto.domain.mapping.result import MappingResult, SectionValue
from vorto.domain.mapping.specification import (
    FieldKind,
    FieldMapping,
    FieldType,
    MappingSpecification,
    ScriptFunction,
    SectionMapping,
)

__all__ = [
    "MISSING",
    "FieldKind",
    "FieldMapping",
    "FieldType",
    "JsonPath",
    "MappingResult",
    "MappingSpecification",
    "ScriptFunction",
    "SectionMapping",
    "SectionValue",
]
