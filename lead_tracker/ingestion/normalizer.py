"""Turn a tokenized grid into :class:`~lead_tracker.models.Lead` objects."""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, Optional, Sequence

from ..models import (
    NOTES_COLUMN,
    STATUS_COLUMN,
    SUB_STATUS_COLUMN,
    Lead,
    parse_status,
    parse_sub_status,
    split_notes,
)
from .tokenizer import drop_empty_rows, tokenize

LOGGER = logging.getLogger(__name__)


def clean_cell(value: Any) -> str:
    """Coerce a spreadsheet cell into a stripped string."""

    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def normalise_rows(rows: Iterable[Sequence[Any]]) -> List[Lead]:
    """Build leads from a header row followed by data rows.

    Fewer than two non-empty rows yields an empty list rather than an error.
    Blank header cells drop their column from every lead.
    """

    grid = [[clean_cell(cell) for cell in row] for row in rows]
    clean_rows = drop_empty_rows(grid)
    if len(clean_rows) < 2:
        return []

    header = [str(cell) for cell in clean_rows[0]]
    leads = [_row_to_lead(header, values) for values in clean_rows[1:]]
    LOGGER.debug("Normalised %s rows across %s columns", len(leads), len([h for h in header if h]))
    return leads


def parse_csv(text: str) -> List[Lead]:
    """Tokenize comma separated text and normalise it into leads."""

    return normalise_rows(tokenize(text))


def _row_to_lead(header: Sequence[str], values: Sequence[str]) -> Lead:
    lead = Lead()

    for index, column in enumerate(header):
        if not column:
            continue
        lead.fields[column] = values[index] if index < len(values) else ""

    _restore_pipeline_state(lead)
    return lead


def _restore_pipeline_state(lead: Lead) -> None:
    status = _recover(lead, STATUS_COLUMN, parse_status)
    if status is not None:
        lead.status = status

    sub_status = _recover(lead, SUB_STATUS_COLUMN, parse_sub_status)
    if sub_status is not None:
        lead.sub_status = sub_status

    notes = lead.fields.get(NOTES_COLUMN)
    if notes:
        lead.notes = split_notes(notes)


def _recover(lead: Lead, column: str, parser) -> Optional[Any]:
    raw = lead.fields.get(column)
    if not raw:
        return None
    value = parser(raw)
    if value is None:
        LOGGER.debug("Ignoring unknown %s value %r", column, raw)
    return value


__all__ = ["clean_cell", "normalise_rows", "parse_csv"]
