"""Search, filter, and paginate helpers for lead listings."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, Sequence, TypeVar

from .models import Lead, LeadStatus, SubStatus

CITY_KEYS = ("City", "Town", "Location")
SUB_CATEGORY_KEYS = ("Sub Category", "Sub-category", "Subcategory")
DEFAULT_PAGE_SIZE = 25

T = TypeVar("T")


def lookup_value(lead: Lead, keys: Sequence[str]) -> str:
    """Return the first of ``keys`` present on the lead, matched case-insensitively."""

    for key in keys:
        value = lead.get(key, default=None)
        if value is not None:
            return value
    return ""


def distinct_values(leads: Iterable[Lead], keys: Sequence[str]) -> List[str]:
    return sorted({value for value in (lookup_value(lead, keys) for lead in leads) if value})


def _haystack(lead: Lead) -> str:
    parts = list(lead.fields.values())
    parts.extend([lead.id, lead.status.value, lead.sub_status.value])
    parts.extend(lead.notes)
    return " ".join(parts).lower()


@dataclass
class LeadFilter:
    """Criteria for narrowing a lead listing; ``None`` accepts everything."""

    search: str = ""
    status: Optional[LeadStatus] = None
    sub_status: Optional[SubStatus] = None
    sheet_sub_category: Optional[str] = None
    city: Optional[str] = None

    def matches(self, lead: Lead) -> bool:
        term = self.search.strip().lower()
        if term and term not in _haystack(lead):
            return False
        if self.status is not None and lead.status != self.status:
            return False
        if self.sub_status is not None and lead.sub_status != self.sub_status:
            return False
        if self.sheet_sub_category is not None and lookup_value(lead, SUB_CATEGORY_KEYS) != self.sheet_sub_category:
            return False
        if self.city is not None and lookup_value(lead, CITY_KEYS) != self.city:
            return False
        return True

    def apply(self, leads: Iterable[Lead]) -> List[Lead]:
        return [lead for lead in leads if self.matches(lead)]


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    per_page: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.per_page) if self.per_page else 0

    @property
    def start_index(self) -> int:
        """1-based position of the first item on this page, 0 when empty."""

        return (self.page - 1) * self.per_page + 1 if self.items else 0

    @property
    def end_index(self) -> int:
        return min(self.page * self.per_page, self.total_items) if self.items else 0


def paginate(items: Sequence[T], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """Slice ``items`` into a 1-based page, clamping ``page`` to the valid range."""

    if per_page <= 0:
        raise ValueError("per_page must be positive")
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, per_page=per_page, total_items=len(items))


__all__ = [
    "CITY_KEYS",
    "SUB_CATEGORY_KEYS",
    "DEFAULT_PAGE_SIZE",
    "LeadFilter",
    "Page",
    "distinct_values",
    "lookup_value",
    "paginate",
]
