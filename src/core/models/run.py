#!/usr/bin/env python3
"""
Run record data model.

Represents one observed execution of a named CI workflow, plus the identity
used to deduplicate records across imports and fetches.
"""

from datetime import datetime
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field

import pytz
from dateutil import parser as date_parser

from core.exceptions import RecordValidationError

REQUIRED_FIELDS = ('name', 'status', 'branch', 'timestamp')
KNOWN_FIELDS = ('id', 'name', 'status', 'branch', 'timestamp', 'duration', 'url')

SUCCESS_STATUS = 'success'


@dataclass(frozen=True)
class ById:
    """Identity backed by the remote run id."""
    id: int

    @property
    def key(self) -> str:
        return f"id:{self.id}"


@dataclass(frozen=True)
class ByComposite:
    """Fallback identity for records without an id (file imports)."""
    name: str
    branch: str
    timestamp: str

    @property
    def key(self) -> str:
        return f"run:{self.name}:{self.branch}:{self.timestamp}"


Identity = Union[ById, ByComposite]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given."""
    try:
        dt = date_parser.parse(value)
    except OverflowError as e:
        raise ValueError(f"timestamp out of range: {value!r}") from e
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt


def _coerce_duration(value: Any) -> Union[int, float]:
    if value is None or value == '':
        return 0
    if isinstance(value, str):
        value = float(value)
    return value if value > 0 else 0


@dataclass
class RunRecord:
    """
    A single workflow run.

    ``timestamp`` keeps the ISO string exactly as received so the composite
    identity and exported files stay byte-stable; ``created_at`` is the parsed
    value used for every ordering and time-window computation.
    """
    name: str
    status: str
    branch: str
    timestamp: str
    duration: Union[int, float] = 0
    id: Optional[int] = None
    url: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    identity: Identity = field(init=False, repr=False, compare=False)
    created_at: datetime = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Normalize fields and resolve identity once."""
        self.duration = _coerce_duration(self.duration)
        if self.id is not None:
            self.id = int(self.id)
            self.identity = ById(self.id)
        else:
            self.identity = ByComposite(self.name, self.branch, self.timestamp)
        self.created_at = parse_timestamp(self.timestamp)

    @property
    def key(self) -> str:
        """Identity key used for deduplication."""
        return self.identity.key

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON persistence and export."""
        data: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'status': self.status,
            'branch': self.branch,
            'timestamp': self.timestamp,
            'duration': self.duration,
            'url': self.url,
        }
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunRecord':
        """Create RunRecord from dictionary, keeping unknown keys in ``extra``."""
        missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, '')]
        if missing:
            raise RecordValidationError(missing, record=data)

        extra = {key: value for key, value in data.items() if key not in KNOWN_FIELDS}
        return cls(
            name=str(data['name']),
            status=str(data['status']),
            branch=str(data['branch']),
            timestamp=str(data['timestamp']),
            duration=data.get('duration') or 0,
            id=None if data.get('id') in (None, '') else data['id'],
            url=data.get('url') or None,
            extra=extra
        )

    def __repr__(self):
        return f"RunRecord(name='{self.name}', status='{self.status}', branch='{self.branch}', timestamp='{self.timestamp}')"
