from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from the session cookie."""

    user_id: UUID

    @property
    def principal_key(self) -> str:
        """Unique key for WS connection registry."""
        return str(self.user_id)
