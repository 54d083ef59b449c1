"""
Subscriber record model for panel lookups
"""

from dataclasses import dataclass
from typing import Any, Optional


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class SubscriberRecord:
    """Normalized view of one line found in the panel"""
    id: Any
    username: str
    password: str
    expire_date: Optional[str]
    expire_timestamp: Optional[int]
    enabled: bool
    active_connections: int
    max_connections: int
    notes: Optional[str] = None
    owner: Optional[str] = None

    @property
    def connections(self) -> str:
        return f"{self.active_connections}/{self.max_connections}"

    @classmethod
    def from_row(cls, row: dict) -> "SubscriberRecord":
        """Build a record from one row of the panel's lines data table"""
        expire_timestamp = row.get("expire_date")
        return cls(
            id=row.get("id"),
            username=str(row.get("username", "")),
            password=str(row.get("password", "")),
            expire_date=row.get("exp_date"),
            expire_timestamp=_to_int(expire_timestamp) if expire_timestamp not in (None, "") else None,
            enabled=_to_int(row.get("enabled")) == 1,
            active_connections=_to_int(row.get("active_connections")),
            max_connections=_to_int(row.get("user_connection")),
            notes=row.get("reseller_notes"),
            owner=row.get("owner"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "expireDate": self.expire_date,
            "expireTimestamp": self.expire_timestamp,
            "enabled": self.enabled,
            "connections": self.connections,
            "activeConnections": self.active_connections,
            "maxConnections": self.max_connections,
            "notes": self.notes,
            "owner": self.owner,
        }
