"""JSON-pointer style paths into a decoded input payload."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from vorto.domain.exceptions import SpecificationError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class JsonPath:
    """Parsed path such as /status/battery/0/voltage."""

    expression: str
    segments: tuple[str, ...]

    @staticmethod
    def parse(expression: str) -> "JsonPath":
        return _parse(expression)

    def resolve(self, document: Any) -> Any:
        """Return the value at this path, or MISSING. JSON null counts as missing."""
        current = document
        for segment in self.segments:
            if isinstance(current, Mapping):
                if segment not in current:
                    return MISSING
                current = current[segment]
            elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
                if not segment.isdigit():
                    return MISSING
                index = int(segment)
                if index >= len(current):
                    return MISSING
                current = current[index]
            else:
                return MISSING
        if current is None:
            return MISSING
        return current

    def is_present(self, document: Any) -> bool:
        return self.resolve(document) is not MISSING

    def __str__(self) -> str:
        return self.expression


@lru_cache(maxsize=1024)
def _parse(expression: str) -> JsonPath:
    if not isinstance(expression, str) or not expression.startswith("/"):
        raise SpecificationError(f"Path [{expression}] must start with '/'")
    segments = []
    for raw in expression[1:].split("/"):
        if not raw:
            raise SpecificationError(f"Path [{expression}] contains an empty segment")
        segments.append(_unescape(raw, expression))
    return JsonPath(expression=expression, segments=tuple(segments))


def _unescape(raw: str, expression: str) -> str:
    out = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "~":
            nxt = raw[i + 1] if i + 1 < len(raw) else ""
            if nxt == "0":
                out.append("~")
            elif nxt == "1":
                out.append("/")
            else:
                raise SpecificationError(f"Path [{expression}] has an invalid '~' escape")
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)
