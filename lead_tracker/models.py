"""Unified data models for leads, workspaces, and derived pipeline statistics."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


# --- Pipeline Enumerations ---

class LeadStatus(str, Enum):
    """Primary pipeline stage of a lead."""

    NEW = "NEW"
    CONTACTED = "CONTACTED"
    NOT_RESPONDED = "NOT_RESPONDED"
    RESPONDED = "RESPONDED"
    QUALIFIED = "QUALIFIED"
    LOST = "LOST"
    WON = "WON"


class SubStatus(str, Enum):
    """Secondary call outcome tag attached to a lead."""

    NONE = "NONE"
    GOOD = "GOOD"
    AVERAGE = "AVERAGE"
    BAD = "BAD"
    INTERESTED = "INTERESTED"
    NOT_INTERESTED = "NOT_INTERESTED"
    FOLLOW_UP = "FOLLOW_UP"


class ImportSource(str, Enum):
    """Where the leads of a workspace came from."""

    URL = "URL"
    CSV = "CSV"
    FILE = "FILE"


# Column names used to persist pipeline state inside the spreadsheet itself.
STATUS_COLUMN = "STATUS(LEAD)"
SUB_STATUS_COLUMN = "STATUS(CALL)"
NOTES_COLUMN = "Activity & Notes"
RESERVED_COLUMNS = (STATUS_COLUMN, SUB_STATUS_COLUMN, NOTES_COLUMN)
NOTES_SEPARATOR = " | "

# Statuses from which the call outcome may be edited.
SUB_STATUS_EDITABLE = frozenset(
    {
        LeadStatus.CONTACTED,
        LeadStatus.RESPONDED,
        LeadStatus.QUALIFIED,
        LeadStatus.LOST,
        LeadStatus.WON,
    }
)


def parse_status(value: Any) -> Optional[LeadStatus]:
    """Return the :class:`LeadStatus` named by ``value`` or ``None``."""

    if value is None:
        return None
    text = str(value).strip().upper()
    try:
        return LeadStatus(text)
    except ValueError:
        return None


def parse_sub_status(value: Any) -> Optional[SubStatus]:
    """Return the :class:`SubStatus` named by ``value`` or ``None``."""

    if value is None:
        return None
    text = str(value).strip().upper()
    try:
        return SubStatus(text)
    except ValueError:
        return None


def split_notes(value: Any) -> List[str]:
    if not value:
        return []
    return [note for note in str(value).split(NOTES_SEPARATOR) if note]


def join_notes(notes: Iterable[str]) -> str:
    return NOTES_SEPARATOR.join(notes)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_identifier() -> str:
    return uuid.uuid4().hex


# --- Core Lead Model ---

@dataclass(slots=True)
class Lead:
    """A single imported contact plus its pipeline state.

    ``fields`` holds the spreadsheet columns verbatim. Pipeline metadata lives
    on dedicated attributes so it never collides with an imported column.
    """

    fields: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=new_identifier)
    status: LeadStatus = LeadStatus.NEW
    sub_status: SubStatus = SubStatus.NONE
    notes: List[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=_utcnow)

    def get(self, column: str, default: Optional[str] = "") -> Optional[str]:
        """Return a raw column value, matching the name case-insensitively."""

        if column in self.fields:
            return self.fields[column]
        lowered = column.lower()
        for key, value in self.fields.items():
            if key.lower() == lowered:
                return value
        return default

    def display_fields(self) -> Dict[str, str]:
        """Raw columns minus the reserved pipeline columns."""

        return {key: value for key, value in self.fields.items() if key not in RESERVED_COLUMNS}

    def display_name(self) -> str:
        """Return a readable name for logs and listings."""

        name = self.get("Name") or self.get("Full Name")
        if name:
            return name
        parts = [self.get("First Name") or self.get("first_name"), self.get("Last Name") or self.get("last_name")]
        return " ".join(filter(None, parts)).strip() or "(Unnamed Lead)"

    @property
    def sub_status_editable(self) -> bool:
        return self.status in SUB_STATUS_EDITABLE

    def touch(self) -> None:
        self.last_updated = _utcnow()

    def pipeline_columns(self) -> Dict[str, str]:
        """Pipeline state expanded into the reserved spreadsheet columns."""

        return {
            STATUS_COLUMN: self.status.value,
            SUB_STATUS_COLUMN: self.sub_status.value,
            NOTES_COLUMN: join_notes(self.notes),
        }

    def as_flat_dict(self) -> Dict[str, Any]:
        """Flatten raw columns and underscore-prefixed metadata into one mapping."""

        flat: Dict[str, Any] = dict(self.fields)
        flat.update(
            {
                "id": self.id,
                "_status": self.status.value,
                "_sub_status": self.sub_status.value,
                "_notes": list(self.notes),
                "_last_updated": self.last_updated.isoformat(),
            }
        )
        return flat


# --- Workspace Models ---

@dataclass
class Workspace:
    """One imported batch of leads plus where it came from."""

    name: str
    leads: List[Lead] = field(default_factory=list)
    import_source: ImportSource = ImportSource.CSV
    id: str = field(default_factory=new_identifier)
    columns: List[str] = field(default_factory=list)
    url: Optional[str] = None
    sync_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.columns and self.leads:
            self.columns = list(self.leads[0].fields)

    def find_lead(self, lead_id: str) -> Optional[Lead]:
        for lead in self.leads:
            if lead.id == lead_id:
                return lead
        return None


@dataclass
class LibraryItem:
    """A saved workspace reference owned by a user."""

    user_id: str
    name: str
    url: Optional[str] = None
    sync_url: Optional[str] = None
    import_source: ImportSource = ImportSource.URL
    id: str = field(default_factory=new_identifier)
    created_at: str = field(default_factory=lambda: _utcnow().isoformat())

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "url": self.url,
            "sync_url": self.sync_url,
            "import_source": self.import_source.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LibraryItem":
        source = data.get("import_source") or ImportSource.URL.value
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            name=str(data.get("name") or ""),
            url=data.get("url"),
            sync_url=data.get("sync_url"),
            import_source=ImportSource(source),
            created_at=str(data.get("created_at") or _utcnow().isoformat()),
        )


# --- Derived Statistics ---

@dataclass(frozen=True)
class SheetStats:
    """Funnel counts and rates derived from a list of leads."""

    total: int = 0
    contacted: int = 0
    not_responded: int = 0
    responded: int = 0
    won: int = 0
    lost: int = 0
    contact_rate: float = 0.0
    response_rate: float = 0.0
    conversion_rate: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "contacted": self.contacted,
            "notResponded": self.not_responded,
            "responded": self.responded,
            "won": self.won,
            "lost": self.lost,
            "contactRate": self.contact_rate,
            "responseRate": self.response_rate,
            "conversionRate": self.conversion_rate,
        }


__all__ = [
    "LeadStatus",
    "SubStatus",
    "ImportSource",
    "STATUS_COLUMN",
    "SUB_STATUS_COLUMN",
    "NOTES_COLUMN",
    "RESERVED_COLUMNS",
    "NOTES_SEPARATOR",
    "SUB_STATUS_EDITABLE",
    "Lead",
    "Workspace",
    "LibraryItem",
    "SheetStats",
    "parse_status",
    "parse_sub_status",
    "split_notes",
    "join_notes",
    "new_identifier",
]
