"""Namespace name value object."""

import re
from dataclasses import dataclass

from vorto.domain.exceptions import ValidationError

_NAMESPACE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


@dataclass(frozen=True)
class NamespaceName:
    """Validated namespace name, always lowercase."""

    value: str

    @classmethod
    def parse(cls, raw: str | None) -> "NamespaceName":
        """Trim, validate dotted notation and lowercase."""
        name = (raw or "").strip()
        if not name:
            raise ValidationError("Namespace name is empty - aborting namespace creation.")
        if not _NAMESPACE_PATTERN.match(name):
            raise ValidationError(
                f"[{name}] is not a valid namespace name - aborting namespace creation."
            )
        return cls(name.lower())

    def has_prefix(self, prefix: str) -> bool:
        return self.value.startswith(prefix.lower())

    def __str__(self) -> str:
        return self.value
