from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


VALUE_FIELD = "value"
EXPIRE_FIELD = "expire"


@dataclass
class SessionState:
    initialized: bool = False
    valid_session: bool = False
    regenerated: bool = False


@dataclass
class SessionEntry:
    value: Any
    expire_at: Optional[int] = None

    def is_expired(self, now: int) -> bool:
        if self.expire_at is None:
            return False
        return self.expire_at < now

    def to_storage(self) -> dict:
        data = {VALUE_FIELD: self.value}
        if self.expire_at is not None:
            data[EXPIRE_FIELD] = self.expire_at
        return data

    @classmethod
    def from_storage(cls, data: Any) -> Optional["SessionEntry"]:
        """Rebuild an entry from native storage; None when the shape is wrong."""
        if not isinstance(data, Mapping) or VALUE_FIELD not in data:
            return None
        expire_at = data.get(EXPIRE_FIELD)
        if expire_at is not None:
            try:
                expire_at = int(expire_at)
            except (TypeError, ValueError):
                return None
        return cls(value=data[VALUE_FIELD], expire_at=expire_at)
