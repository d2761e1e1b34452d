"""Utilities for loading lead data from spreadsheets and pasted text."""
from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Any, BinaryIO, List, MutableMapping, Optional, Union

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import NoLeadsFoundError, SpreadsheetParseError, UnsupportedFileTypeError
from ..models import Lead
from .normalizer import normalise_rows, parse_csv

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

_TEXT_SUFFIXES = {".csv", ".txt"}
_TSV_SUFFIXES = {".tsv"}
_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def load_leads(
    path: PathLike,
    *,
    encoding: str = "utf-8-sig",
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[Lead]:
    """Load leads from a CSV, TSV, or Excel file.

    Parameters
    ----------
    path:
        Path to the spreadsheet. Only the first sheet of a workbook is read and
        its first row is treated as the header.
    encoding:
        Text encoding used for delimited files. The default strips the BOM that
        Excel adds to CSV exports.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.
    """

    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(path_obj)

    suffix = path_obj.suffix.lower()
    if suffix in _TEXT_SUFFIXES:
        return parse_csv(path_obj.read_text(encoding=encoding))

    with path_obj.open("rb") as handle:
        return load_leads_from_upload(handle, path_obj.name, loader_kwargs=loader_kwargs)


def load_leads_from_upload(
    content: Union[bytes, BinaryIO],
    filename: str,
    *,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[Lead]:
    """Load leads from an uploaded file body, dispatching on ``filename``."""

    suffix = Path(filename).suffix.lower()
    buffer = io.BytesIO(content) if isinstance(content, bytes) else content

    if suffix in _TEXT_SUFFIXES:
        return parse_csv(buffer.read().decode("utf-8-sig"))

    if suffix not in _TSV_SUFFIXES | _EXCEL_SUFFIXES:
        raise UnsupportedFileTypeError(f"Unsupported file extension: {suffix or '(none)'}")

    try:
        dataframe = _read_dataframe(buffer, suffix, loader_kwargs=loader_kwargs)
    except (ValueError, zipfile.BadZipFile, InvalidFileException) as exc:
        raise SpreadsheetParseError(f"Could not read {filename}: {exc}") from exc
    rows = dataframe.values.tolist()
    LOGGER.debug("Read %s raw rows from %s", len(rows), filename)
    return normalise_rows(rows)


def load_leads_from_text(text: str) -> List[Lead]:
    """Parse pasted CSV text, raising when no leads were found."""

    leads = parse_csv(text)
    if not leads:
        raise NoLeadsFoundError("No leads found in the pasted CSV.")
    return leads


def _read_dataframe(
    buffer: BinaryIO,
    suffix: str,
    *,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    # Header detection stays with the normaliser so blank header cells are handled uniformly.
    loader_kwargs.setdefault("header", None)

    if suffix in _TSV_SUFFIXES:
        loader_kwargs.setdefault("sep", "\t")
        loader_kwargs.setdefault("dtype", str)
        loader_kwargs.setdefault("keep_default_na", False)
        return pd.read_csv(buffer, **loader_kwargs)

    loader_kwargs.setdefault("engine", "openpyxl")
    return pd.read_excel(buffer, sheet_name=0, **loader_kwargs)


__all__ = ["load_leads", "load_leads_from_upload", "load_leads_from_text"]
