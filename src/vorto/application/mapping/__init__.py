"""Payload mapping engine."""

from vorto.application.mapping.engine import (
    DEFAULT_SCRIPT_TIMEOUT,
    MappingEngine,
    MappingEngineBuilder,
    MappingState,
)

__all__ = [
    "DEFAULT_SCRIPT_TIMEOUT",
    "MappingEngine",
    "MappingEngineBuilder",
    "MappingState",
]
