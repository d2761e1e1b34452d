"""Exception types shared by the ingestion, sync, and session layers."""
from __future__ import annotations


class LeadTrackerError(RuntimeError):
    """Base class for user-facing failures raised by the toolkit."""


class NoLeadsFoundError(LeadTrackerError):
    """Raised when an import produced no lead rows."""

    def __init__(self, message: str = "No data found in sheet.") -> None:
        super().__init__(message)


class UnsupportedFileTypeError(LeadTrackerError, ValueError):
    """Raised when an unsupported file format is passed to the loader."""


class SpreadsheetParseError(LeadTrackerError, ValueError):
    """Raised when a spreadsheet file cannot be read."""


class InvalidSheetUrlError(LeadTrackerError, ValueError):
    """Raised when a Google Sheets identifier cannot be extracted from a URL."""

    def __init__(self, message: str = "Invalid Google Sheet URL.") -> None:
        super().__init__(message)


class SheetFetchError(LeadTrackerError):
    """Raised when a spreadsheet export could not be downloaded."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PrivateSheetError(SheetFetchError):
    """Raised when the spreadsheet host answers with a sign-in page."""

    def __init__(
        self,
        message: str = "Sheet is private. Set sharing to 'Anyone with the link can view'.",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)


class OperationInProgressError(LeadTrackerError):
    """Raised when a network operation starts while another one is outstanding."""


class WorkspaceNotFoundError(LeadTrackerError):
    """Raised when a workspace identifier is not open in the session."""


class LeadNotFoundError(LeadTrackerError):
    """Raised when a lead identifier is not part of the active workspace."""


class SubStatusLockedError(LeadTrackerError):
    """Raised when the call status is edited before the lead has been contacted."""


__all__ = [
    "LeadTrackerError",
    "NoLeadsFoundError",
    "UnsupportedFileTypeError",
    "InvalidSheetUrlError",
    "SpreadsheetParseError",
    "SheetFetchError",
    "PrivateSheetError",
    "OperationInProgressError",
    "WorkspaceNotFoundError",
    "LeadNotFoundError",
    "SubStatusLockedError",
]
