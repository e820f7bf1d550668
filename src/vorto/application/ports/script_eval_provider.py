"""Script evaluation provider port - sandboxed script execution."""

from collections.abc import Mapping
from typing import Any, Protocol


class ScriptEvalProvider(Protocol):
    """Evaluates a function body with bound values inside a sandbox.

    ``timeout`` is the execution budget in seconds. Any violation, runtime
    error or timeout raises MappingException.
    """

    def evaluate(self, body: str, bindings: Mapping[str, Any], timeout: float) -> Any: ...
