"""Utilities for importing, normalising, and exporting lead spreadsheets."""
from __future__ import annotations

from .exporters import default_export_filename, export_leads, lead_to_export_row, leads_to_dataframe
from .loaders import load_leads, load_leads_from_text, load_leads_from_upload
from .normalizer import clean_cell, normalise_rows, parse_csv
from .tokenizer import drop_empty_rows, tokenize

__all__ = [
    "tokenize",
    "drop_empty_rows",
    "clean_cell",
    "normalise_rows",
    "parse_csv",
    "load_leads",
    "load_leads_from_text",
    "load_leads_from_upload",
    "export_leads",
    "leads_to_dataframe",
    "lead_to_export_row",
    "default_export_filename",
]
