"""Top-level package for the lead pipeline tracker."""

from . import models  # noqa: F401
from .errors import LeadTrackerError  # noqa: F401
from .ingestion import export_leads, load_leads, normalise_rows, parse_csv, tokenize  # noqa: F401
from .models import (
    ImportSource,
    Lead,
    LeadStatus,
    LibraryItem,
    SheetStats,
    SubStatus,
    Workspace,
    parse_status,
    parse_sub_status,
)
from .session import LeadSession  # noqa: F401
from .sheets import PushResult, extract_sheet_id, fetch_public_sheet, push_lead  # noqa: F401
from .stats import compute_stats  # noqa: F401

__all__ = [
    "ImportSource",
    "Lead",
    "LeadStatus",
    "LibraryItem",
    "SheetStats",
    "SubStatus",
    "Workspace",
    "LeadSession",
    "LeadTrackerError",
    "PushResult",
    "compute_stats",
    "export_leads",
    "extract_sheet_id",
    "fetch_public_sheet",
    "load_leads",
    "normalise_rows",
    "parse_csv",
    "parse_status",
    "parse_sub_status",
    "push_lead",
    "tokenize",
    "ingestion",
    "assistant",
    "filters",
    "library",
]
