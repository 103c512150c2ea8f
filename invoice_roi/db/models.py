"""
Data models for scenario store records.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, Dict, Any, Union

from pydantic import TypeAdapter

_TIMESTAMP = TypeAdapter(datetime)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO timestamp as returned by PostgREST (any fraction precision)."""
    if value is None or isinstance(value, datetime):
        return value
    return _TIMESTAMP.validate_python(value)


@dataclass
class ScenarioRecord:
    """A named snapshot of one input record and its results."""

    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    results: Dict[str, Any] = field(default_factory=dict)

    # Assigned by the store
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for database insertion."""
        data = asdict(self)
        return {
            k: v for k, v in data.items()
            if v is not None and k not in ["id", "created_at"]
        }

    def to_json(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible API payload."""
        return {
            "id": self.id,
            "name": self.name,
            "data": self.data,
            "results": self.results,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioRecord":
        """Create from database record."""
        record = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        record.created_at = parse_timestamp(record.created_at)
        return record


@dataclass
class EmailCaptureRecord:
    """An e-mail address captured when a report was requested."""

    email: str

    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for database insertion."""
        return {"email": self.email}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailCaptureRecord":
        """Create from database record."""
        record = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        record.created_at = parse_timestamp(record.created_at)
        return record
