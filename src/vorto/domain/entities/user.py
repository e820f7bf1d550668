"""User entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class User:
    """User - identified externally by username and authentication provider."""

    id: UUID
    username: str
    auth_provider_id: str
    created_at: datetime
    technical_user: bool = False
    subject: str | None = None
    created_by: UUID | None = None
