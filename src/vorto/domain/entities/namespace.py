"""Namespace entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Namespace:
    """Namespace - owned grouping of models, name persisted lowercase."""

    id: UUID
    name: str
    owner_id: UUID
    created_at: datetime

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.owner_id == user_id
