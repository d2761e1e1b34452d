"""Export utilities that write leads back out with their pipeline state."""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import Lead

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


def lead_to_export_row(lead: Lead) -> Dict[str, str]:
    """Return the raw columns with the reserved pipeline columns refreshed."""

    row: Dict[str, str] = dict(lead.fields)
    row.update(lead.pipeline_columns())
    return row


def leads_to_dataframe(leads: Sequence[Lead]) -> pd.DataFrame:
    """Convert leads into a :class:`pandas.DataFrame` ready for export."""

    records = [lead_to_export_row(lead) for lead in leads]
    columns: List[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return pd.DataFrame(records, columns=columns).fillna("")


def export_leads(
    leads: Sequence[Lead],
    path: PathLike,
    *,
    sheet_name: str = "Updated Leads",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write leads to a CSV, TSV, or Excel file and return the path."""

    dataframe = leads_to_dataframe(leads)
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    LOGGER.info("Exported %s leads to %s", len(leads), output_path)
    return output_path


def default_export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"leads_export_{today.isoformat()}.xlsx"


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["export_leads", "leads_to_dataframe", "lead_to_export_row", "default_export_filename"]
