"""Mapping engine - evaluates a mapping specification against an input payload."""

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from vorto.application.ports import ScriptEvalProvider
from vorto.domain.exceptions import MappingException, MissingRequiredField, SpecificationError
from vorto.domain.mapping import (
    MISSING,
    FieldKind,
    FieldMapping,
    FieldType,
    JsonPath,
    MappingResult,
    MappingSpecification,
    SectionValue,
)

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_TIMEOUT = 1.0


class MappingState(StrEnum):
    """Lifecycle of one mapping invocation."""

    IDLE = "idle"
    SPEC_RESOLVED = "spec_resolved"
    FIELDS_EVALUATING = "fields_evaluating"
    ASSEMBLED = "assembled"
    FAILED = "failed"


@dataclass(frozen=True)
class _CompiledField:
    mapping: FieldMapping
    path: JsonPath | None
    reads: tuple[tuple[str, JsonPath], ...]
    body: str | None
    children: tuple["_CompiledField", ...]


@dataclass(frozen=True)
class _CompiledSection:
    name: str
    fields: tuple[_CompiledField, ...]
    input_paths: tuple[JsonPath, ...]


class MappingEngineBuilder:
    """Fluent builder: specification, script provider, then build()."""

    def __init__(self) -> None:
        self._specification: MappingSpecification | None = None
        self._provider: ScriptEvalProvider | None = None
        self._script_timeout = DEFAULT_SCRIPT_TIMEOUT

    def with_specification(self, specification: MappingSpecification) -> "MappingEngineBuilder":
        self._specification = specification
        return self

    def register_script_eval_provider(
        self, provider: ScriptEvalProvider
    ) -> "MappingEngineBuilder":
        self._provider = provider
        return self

    def with_script_timeout(self, seconds: float) -> "MappingEngineBuilder":
        if seconds <= 0:
            raise SpecificationError("Script timeout must be positive")
        self._script_timeout = seconds
        return self

    def build(self) -> "MappingEngine":
        """Validate the specification structure and compile it. Input is not known yet."""
        if self._specification is None:
            raise SpecificationError("No mapping specification given")
        spec = self._specification
        spec.validate()

        sections = tuple(_compile_section(spec, s.name, s.fields) for s in spec.sections)
        needs_scripts = any(_uses_scripts(f) for s in sections for f in s.fields)
        if needs_scripts and self._provider is None:
            raise SpecificationError(
                f"Specification [{spec.name}] uses scripts but no script provider is registered"
            )
        return MappingEngine(spec.name, sections, self._provider, self._script_timeout)


class MappingEngine:
    """Maps raw input documents to typed results; safe to share between threads."""

    def __init__(
        self,
        specification_name: str,
        sections: tuple[_CompiledSection, ...],
        provider: ScriptEvalProvider | None,
        script_timeout: float,
    ) -> None:
        self._specification_name = specification_name
        self._sections = sections
        self._provider = provider
        self._script_timeout = script_timeout

    @staticmethod
    def new_builder() -> MappingEngineBuilder:
        return MappingEngineBuilder()

    @property
    def specification_name(self) -> str:
        return self._specification_name

    def map_source(self, source: Any) -> MappingResult:
        """Map a decoded input document. Fails atomically with MappingException."""
        return _MappingRun(self).execute(source)


class _MappingRun:
    """State of a single map_source invocation."""

    def __init__(self, engine: MappingEngine) -> None:
        self._engine = engine
        self.state = MappingState.IDLE

    def _transition(self, state: MappingState) -> None:
        logger.debug(
            "Mapping [%s]: %s -> %s", self._engine.specification_name, self.state, state
        )
        self.state = state

    def execute(self, source: Any) -> MappingResult:
        self._transition(MappingState.SPEC_RESOLVED)
        try:
            self._transition(MappingState.FIELDS_EVALUATING)
            sections = []
            for section in self._engine._sections:
                if section.input_paths and not any(
                    p.is_present(source) for p in section.input_paths
                ):
                    logger.debug("Section [%s] has no input, omitted", section.name)
                    continue
                values = {
                    f.mapping.name: self._evaluate(section.name, f, source)
                    for f in section.fields
                }
                sections.append(SectionValue(section.name, values))
            result = MappingResult(self._engine.specification_name, sections)
        except MappingException:
            self._transition(MappingState.FAILED)
            raise
        except Exception as e:
            self._transition(MappingState.FAILED)
            raise MappingException(f"Mapping failed: {e}") from e
        self._transition(MappingState.ASSEMBLED)
        return result

    def _evaluate(self, owner: str, field: _CompiledField, source: Any) -> Any:
        mapping = field.mapping
        where = f"{owner}.{mapping.name}"

        if mapping.kind is FieldKind.STATIC:
            return _coerce(copy.deepcopy(mapping.value), mapping.type, where)

        if mapping.kind is FieldKind.NESTED:
            return {c.mapping.name: self._evaluate(where, c, source) for c in field.children}

        if mapping.kind is FieldKind.PATH:
            value = field.path.resolve(source)
            if value is MISSING:
                return self._missing(owner, mapping)
            return _coerce(copy.deepcopy(value), mapping.type, where)

        bindings = {}
        for name, path in field.reads:
            value = path.resolve(source)
            if value is MISSING:
                return self._missing(owner, mapping)
            bindings[name] = copy.deepcopy(value)
        value = self._engine._provider.evaluate(
            field.body, bindings, self._engine._script_timeout
        )
        return _coerce(value, mapping.type, where)

    @staticmethod
    def _missing(owner: str, mapping: FieldMapping) -> Any:
        if mapping.required:
            raise MissingRequiredField(owner, mapping.name)
        return mapping.type.default()


def _compile_section(
    spec: MappingSpecification, name: str, fields: tuple[FieldMapping, ...]
) -> _CompiledSection:
    compiled = tuple(_compile_field(spec, f) for f in fields)
    paths: list[JsonPath] = []
    for f in fields:
        paths.extend(JsonPath.parse(p) for p in f.input_paths())
    return _CompiledSection(name=name, fields=compiled, input_paths=tuple(paths))


def _compile_field(spec: MappingSpecification, mapping: FieldMapping) -> _CompiledField:
    body = None
    if mapping.kind is FieldKind.STATIC:
        try:
            _coerce(mapping.value, mapping.type, mapping.name)
        except MappingException as e:
            raise SpecificationError(f"Static value is invalid: {e}") from e
    if mapping.kind is FieldKind.EXPRESSION:
        body = f"return (\n{mapping.expression}\n)"
    elif mapping.kind is FieldKind.SCRIPT:
        body = spec.function(mapping.function).body
    return _CompiledField(
        mapping=mapping,
        path=JsonPath.parse(mapping.path) if mapping.kind is FieldKind.PATH else None,
        reads=tuple((name, JsonPath.parse(p)) for name, p in mapping.reads),
        body=body,
        children=tuple(_compile_field(spec, c) for c in mapping.fields),
    )


def _uses_scripts(field: _CompiledField) -> bool:
    return field.body is not None or any(_uses_scripts(c) for c in field.children)


def _coerce(value: Any, type_: FieldType, where: str) -> Any:
    """Materialize value as the declared field type."""
    try:
        if type_ is FieldType.STRING:
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, (str, int, float)):
                return str(value)
        elif type_ is FieldType.INTEGER:
            if isinstance(value, bool):
                return int(value)
            if isinstance(value, int):
                return value
            if isinstance(value, float) and value.is_integer():
                return int(value)
            if isinstance(value, str):
                return int(value.strip())
        elif type_ is FieldType.FLOAT:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
            if isinstance(value, str):
                return float(value.strip())
        elif type_ is FieldType.BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.strip().lower() in ("true", "false"):
                return value.strip().lower() == "true"
            if isinstance(value, int) and value in (0, 1):
                return bool(value)
        elif type_ is FieldType.OBJECT:
            if isinstance(value, Mapping):
                return dict(value)
    except ValueError:
        pass
    raise MappingException(
        f"Value of type {type(value).__name__} cannot be mapped to {type_} field [{where}]"
    )
