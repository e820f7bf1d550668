"""Pure helper functions and builtins visible to mapping scripts."""

import re
from typing import Any

_NUMERIC_PREFIX = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")


def to_float(value: Any) -> float:
    if isinstance(value, str):
        return float(value.strip())
    return float(value)


def to_int(value: Any) -> int:
    if isinstance(value, str):
        return int(float(value.strip()))
    return int(value)


def substring(value: str, start: int, end: int | None = None) -> str:
    return str(value)[start:end]


def length(value: Any) -> int:
    return len(value)


def numeric_prefix(value: str) -> str:
    """Leading number of a reading such as '2322mV' -> '2322'."""
    match = _NUMERIC_PREFIX.match(str(value))
    return match.group(0).strip() if match else ""


def unit_suffix(value: str) -> str:
    """Unit after the leading number, e.g. '2322mV' -> 'mV'."""
    text = str(value)
    match = _NUMERIC_PREFIX.match(text)
    return text[match.end():].strip() if match else text.strip()


def strip_prefix(value: str, prefix: str) -> str:
    return str(value).removeprefix(prefix)


def strip_suffix(value: str, suffix: str) -> str:
    return str(value).removesuffix(suffix)


def concat(*parts: Any) -> str:
    return "".join(str(p) for p in parts)


def contains(value: Any, part: Any) -> bool:
    return part in value


def coalesce(*values: Any) -> Any:
    for v in values:
        if v is not None:
            return v
    return None


HELPERS = {
    "to_float": to_float,
    "to_int": to_int,
    "substring": substring,
    "length": length,
    "numeric_prefix": numeric_prefix,
    "unit_suffix": unit_suffix,
    "strip_prefix": strip_prefix,
    "strip_suffix": strip_suffix,
    "concat": concat,
    "contains": contains,
    "coalesce": coalesce,
}

SAFE_BUILTINS = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "chr": chr,
    "dict": dict,
    "divmod": divmod,
    "enumerate": enumerate,
    "float": float,
    "int": int,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "ord": ord,
    "range": range,
    "reversed": reversed,
    "round": round,
    "set": set,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
    "True": True,
    "False": False,
    "None": None,
}

# str, list and dict methods without side effects outside the script
ALLOWED_METHODS = frozenset(
    {
        "append",
        "capitalize",
        "copy",
        "count",
        "endswith",
        "extend",
        "find",
        "get",
        "index",
        "insert",
        "isalnum",
        "isalpha",
        "isdigit",
        "isnumeric",
        "items",
        "join",
        "keys",
        "lower",
        "lstrip",
        "partition",
        "pop",
        "removeprefix",
        "removesuffix",
        "replace",
        "reverse",
        "rfind",
        "rpartition",
        "rsplit",
        "rstrip",
        "setdefault",
        "sort",
        "split",
        "startswith",
        "strip",
        "title",
        "update",
        "upper",
        "values",
        "zfill",
    }
)
