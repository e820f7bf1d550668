"""Mapping specification - how an input payload maps to a typed output tree."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from vorto.domain.exceptions import SpecificationError
from vorto.domain.mapping.path import JsonPath


class FieldKind(StrEnum):
    """Source of a field value."""

    STATIC = "static"
    PATH = "path"
    EXPRESSION = "expression"
    SCRIPT = "script"
    NESTED = "nested"


class FieldType(StrEnum):
    """Materialized type of a field value."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    OBJECT = "object"

    def default(self) -> Any:
        """Value emitted when the input does not provide the field."""
        if self is FieldType.STRING:
            return ""
        if self is FieldType.INTEGER:
            return 0
        if self is FieldType.FLOAT:
            return 0.0
        if self is FieldType.BOOLEAN:
            return False
        return {}


@dataclass(frozen=True)
class ScriptFunction:
    """Named script function; body is a restricted Python function body."""

    name: str
    params: tuple[str, ...]
    body: str


@dataclass(frozen=True)
class FieldMapping:
    """One output field and the rule computing its value."""

    name: str
    kind: FieldKind
    type: FieldType = FieldType.STRING
    value: Any = None
    path: str | None = None
    expression: str | None = None
    function: str | None = None
    reads: tuple[tuple[str, str], ...] = ()
    required: bool = False
    fields: tuple["FieldMapping", ...] = ()

    @classmethod
    def static(cls, name: str, value: Any, type: FieldType | None = None) -> "FieldMapping":
        return cls(name=name, kind=FieldKind.STATIC, type=type or _infer_type(value), value=value)

    @classmethod
    def from_path(
        cls, name: str, path: str, type: FieldType = FieldType.STRING, required: bool = False
    ) -> "FieldMapping":
        return cls(name=name, kind=FieldKind.PATH, type=type, path=path, required=required)

    @classmethod
    def from_expression(
        cls,
        name: str,
        expression: str,
        reads: Mapping[str, str],
        type: FieldType = FieldType.STRING,
        required: bool = False,
    ) -> "FieldMapping":
        return cls(
            name=name,
            kind=FieldKind.EXPRESSION,
            type=type,
            expression=expression,
            reads=tuple(reads.items()),
            required=required,
        )

    @classmethod
    def from_script(
        cls,
        name: str,
        function: str,
        reads: Mapping[str, str],
        type: FieldType = FieldType.STRING,
        required: bool = False,
    ) -> "FieldMapping":
        return cls(
            name=name,
            kind=FieldKind.SCRIPT,
            type=type,
            function=function,
            reads=tuple(reads.items()),
            required=required,
        )

    @classmethod
    def nested(cls, name: str, fields: list["FieldMapping"]) -> "FieldMapping":
        return cls(name=name, kind=FieldKind.NESTED, type=FieldType.OBJECT, fields=tuple(fields))

    @property
    def read_set(self) -> dict[str, str]:
        return dict(self.reads)

    def input_paths(self) -> list[str]:
        """All input paths this field (and its children) may read."""
        if self.kind is FieldKind.PATH and self.path:
            return [self.path]
        if self.kind in (FieldKind.EXPRESSION, FieldKind.SCRIPT):
            return [p for _, p in self.reads]
        paths: list[str] = []
        for child in self.fields:
            paths.extend(child.input_paths())
        return paths


@dataclass(frozen=True)
class SectionMapping:
    """Top-level structural section, e.g. the status of one function block."""

    name: str
    fields: tuple[FieldMapping, ...]

    def input_paths(self) -> list[str]:
        paths: list[str] = []
        for f in self.fields:
            paths.extend(f.input_paths())
        return paths


@dataclass(frozen=True)
class MappingSpecification:
    """Sections of fields plus the script functions they may call."""

    name: str
    sections: tuple[SectionMapping, ...]
    functions: tuple[ScriptFunction, ...] = ()

    def function(self, name: str) -> ScriptFunction | None:
        for fn in self.functions:
            if fn.name == name:
                return fn
        return None

    def section(self, name: str) -> SectionMapping | None:
        for s in self.sections:
            if s.name == name:
                return s
        return None

    def validate(self) -> None:
        """Check internal references are well-formed. Raises SpecificationError."""
        if not self.name:
            raise SpecificationError("Specification name is empty")
        _ensure_unique([fn.name for fn in self.functions], "function")
        for fn in self.functions:
            if not fn.name.isidentifier():
                raise SpecificationError(f"Function name [{fn.name}] is not an identifier")
            for param in fn.params:
                if not param.isidentifier():
                    raise SpecificationError(
                        f"Parameter [{param}] of function [{fn.name}] is not an identifier"
                    )
            _ensure_unique(list(fn.params), f"parameter of function [{fn.name}]")
        _ensure_unique([s.name for s in self.sections], "section")
        for section in self.sections:
            self._validate_fields(section.name, section.fields)

    def _validate_fields(self, owner: str, fields: tuple[FieldMapping, ...]) -> None:
        _ensure_unique([f.name for f in fields], f"field in [{owner}]")
        for f in fields:
            where = f"{owner}.{f.name}"
            if f.kind is FieldKind.STATIC:
                if f.type is not FieldType.OBJECT and isinstance(f.value, (dict, list)):
                    raise SpecificationError(f"Static value of [{where}] does not match {f.type}")
            elif f.kind is FieldKind.PATH:
                if not f.path:
                    raise SpecificationError(f"Field [{where}] declares no path")
                JsonPath.parse(f.path)
            elif f.kind is FieldKind.EXPRESSION:
                if not f.expression or not f.expression.strip():
                    raise SpecificationError(f"Field [{where}] declares an empty expression")
                self._validate_reads(where, f)
            elif f.kind is FieldKind.SCRIPT:
                fn = self.function(f.function or "")
                if fn is None:
                    raise SpecificationError(
                        f"Field [{where}] references unknown function [{f.function}]"
                    )
                self._validate_reads(where, f)
                if set(fn.params) != set(f.read_set):
                    raise SpecificationError(
                        f"Field [{where}] must bind exactly the parameters {list(fn.params)} "
                        f"of function [{fn.name}]"
                    )
            elif f.kind is FieldKind.NESTED:
                if f.type is not FieldType.OBJECT or not f.fields:
                    raise SpecificationError(f"Nested field [{where}] declares no fields")
                self._validate_fields(where, f.fields)

    @staticmethod
    def _validate_reads(where: str, f: FieldMapping) -> None:
        names = [name for name, _ in f.reads]
        _ensure_unique(names, f"read binding of [{where}]")
        for name, path in f.reads:
            if not name.isidentifier() or name.startswith("_"):
                raise SpecificationError(f"Binding [{name}] of [{where}] is not a valid name")
            JsonPath.parse(path)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MappingSpecification":
        """Build from a decoded JSON document."""
        try:
            functions = tuple(
                ScriptFunction(
                    name=fn["name"],
                    params=tuple(fn.get("params", ())),
                    body=fn["body"],
                )
                for fn in data.get("functions", ())
            )
            sections = tuple(
                SectionMapping(
                    name=s["name"],
                    fields=tuple(_field_from_dict(f) for f in s.get("fields", ())),
                )
                for s in data["sections"]
            )
            return cls(name=data["name"], sections=sections, functions=functions)
        except (KeyError, TypeError, ValueError) as e:
            raise SpecificationError(f"Malformed mapping specification: {e}") from e


def _field_from_dict(data: Mapping[str, Any]) -> FieldMapping:
    type_ = FieldType(data["type"]) if "type" in data else None
    reads = tuple(dict(data.get("reads", {})).items())
    required = bool(data.get("required", False))
    if "fields" in data:
        return FieldMapping.nested(data["name"], [_field_from_dict(f) for f in data["fields"]])
    if "value" in data:
        return FieldMapping.static(data["name"], data["value"], type_)
    if "path" in data:
        return FieldMapping(
            name=data["name"],
            kind=FieldKind.PATH,
            type=type_ or FieldType.STRING,
            path=data["path"],
            required=required,
        )
    if "expression" in data:
        return FieldMapping(
            name=data["name"],
            kind=FieldKind.EXPRESSION,
            type=type_ or FieldType.STRING,
            expression=data["expression"],
            reads=reads,
            required=required,
        )
    if "function" in data:
        return FieldMapping(
            name=data["name"],
            kind=FieldKind.SCRIPT,
            type=type_ or FieldType.STRING,
            function=data["function"],
            reads=reads,
            required=required,
        )
    raise ValueError(f"field [{data.get('name')}] has no value, path, expression or function")


def _infer_type(value: Any) -> FieldType:
    if isinstance(value, bool):
        return FieldType.BOOLEAN
    if isinstance(value, int):
        return FieldType.INTEGER
    if isinstance(value, float):
        return FieldType.FLOAT
    if isinstance(value, dict):
        return FieldType.OBJECT
    return FieldType.STRING


def _ensure_unique(names: list[str], what: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise SpecificationError(f"Duplicate {what} [{name}]")
        seen.add(name)
