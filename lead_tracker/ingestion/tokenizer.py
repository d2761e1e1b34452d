"""Tokenizer for comma separated text pasted or exported from spreadsheets."""
from __future__ import annotations

from typing import Iterable, List, Sequence

Row = List[str]


def tokenize(text: str) -> List[Row]:
    """Split delimited text into rows of trimmed cell strings.

    Quoted cells may contain commas, newlines, and doubled quotes (``""``),
    which are unescaped to a single ``"``. A quote outside a quoted cell opens
    quoted mode even in the middle of a cell. Input without a trailing newline
    still yields its final row.
    """

    rows: List[Row] = []
    current_row: Row = []
    current = ""
    in_quotes = False
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        next_char = text[index + 1] if index + 1 < length else ""

        if in_quotes:
            if char == '"':
                if next_char == '"':
                    current += '"'
                    index += 1
                else:
                    in_quotes = False
            else:
                current += char
        elif char == '"':
            in_quotes = True
        elif char == ",":
            current_row.append(current.strip())
            current = ""
        elif char in "\r\n":
            if char == "\r" and next_char == "\n":
                index += 1
            current_row.append(current.strip())
            rows.append(current_row)
            current_row = []
            current = ""
        else:
            current += char
        index += 1

    if current or current_row:
        current_row.append(current.strip())
        rows.append(current_row)

    return rows


def row_is_empty(row: Sequence[object]) -> bool:
    return all(cell is None or str(cell) == "" for cell in row)


def drop_empty_rows(rows: Iterable[Sequence[object]]) -> List[Sequence[object]]:
    """Discard rows with no cells or only empty cells."""

    return [row for row in rows if len(row) > 0 and not row_is_empty(row)]


__all__ = ["Row", "tokenize", "drop_empty_rows", "row_is_empty"]
