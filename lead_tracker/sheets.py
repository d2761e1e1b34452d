"""Google Sheets integration: public CSV export download and row push-back.

Reading relies on the sheet being shared as "anyone with the link can view".
Writing goes through a user-deployed Apps Script web app which receives one
JSON document per lead and updates the matching row.
"""
from __future__ import annotations

import json
import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

import requests

from .errors import InvalidSheetUrlError, NoLeadsFoundError, PrivateSheetError, SheetFetchError
from .ingestion.normalizer import parse_csv
from .models import Lead

LOGGER = logging.getLogger(__name__)

SHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9_-]+)")

PRIMARY_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv"
FALLBACK_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"

_SIGN_IN_MARKERS = ("<!doctype html>", "google-signin")


def extract_sheet_id(url: str) -> Optional[str]:
    """Return the spreadsheet identifier embedded in a share URL, if any."""

    match = SHEET_ID_PATTERN.search(url or "")
    return match.group(1) if match else None


def looks_like_sign_in_page(body: str) -> bool:
    lowered = body.lower()
    return any(marker in lowered for marker in _SIGN_IN_MARKERS)


@contextmanager
def _session_scope(session: Optional[Any]) -> Iterator[Any]:
    if session is not None:
        yield session
        return
    with requests.Session() as owned:
        yield owned


def _get(session: Any, url: str, timeout: Optional[float]) -> Any:
    LOGGER.debug("GET %s", url)
    try:
        return session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise SheetFetchError(f"Could not reach Google Sheets: {exc}") from exc


def download_sheet_csv(
    sheet_id: str,
    *,
    session: Optional[Any] = None,
    timeout: Optional[float] = None,
    use_fallback: bool = True,
) -> str:
    """Download the CSV export of a public spreadsheet.

    When the primary endpoint answers with a sign-in page the export endpoint
    is tried once more. With ``use_fallback=False`` any non-success status is
    reported straight away.
    """

    with _session_scope(session) as http:
        response = _get(http, PRIMARY_EXPORT_URL.format(sheet_id=sheet_id), timeout)

        if not use_fallback and not response.ok:
            raise SheetFetchError(
                f"Failed to fetch sheet (HTTP {response.status_code}).",
                status_code=response.status_code,
            )

        body = response.text
        if not looks_like_sign_in_page(body):
            return body.lstrip("\ufeff")

        if not use_fallback:
            raise PrivateSheetError(status_code=response.status_code)

        LOGGER.warning("Primary export for sheet %s returned HTML; trying fallback endpoint", sheet_id)
        fallback = _get(http, FALLBACK_EXPORT_URL.format(sheet_id=sheet_id), timeout)
        if not fallback.ok or looks_like_sign_in_page(fallback.text):
            raise PrivateSheetError(status_code=fallback.status_code)
        return fallback.text.lstrip("\ufeff")


def fetch_public_sheet(
    sheet_id: str,
    *,
    session: Optional[Any] = None,
    timeout: Optional[float] = None,
    use_fallback: bool = True,
) -> List[Lead]:
    """Download a public spreadsheet and normalise it into leads."""

    body = download_sheet_csv(sheet_id, session=session, timeout=timeout, use_fallback=use_fallback)
    leads = parse_csv(body)
    if not leads:
        raise NoLeadsFoundError()
    LOGGER.info("Fetched %s leads from sheet %s", len(leads), sheet_id)
    return leads


def load_sheet_from_url(url: str, **kwargs: Any) -> List[Lead]:
    """Validate a share URL and fetch its leads; the URL is checked before any request."""

    sheet_id = extract_sheet_id(url)
    if not sheet_id:
        raise InvalidSheetUrlError()
    return fetch_public_sheet(sheet_id, **kwargs)


# --- Push-back ---

@dataclass(frozen=True)
class PushResult:
    """Outcome of a push-back request.

    ``dispatched`` only says the request left this process. Apps Script
    deployments are usually called without reading the answer, so unless
    delivery confirmation was requested ``confirmed`` stays ``None`` and a
    dispatched push counts as a success even if the remote write failed.
    """

    dispatched: bool
    confirmed: Optional[bool] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        if not self.dispatched:
            return False
        return self.confirmed is not False


def lead_to_sync_payload(lead: Lead, *, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """Serialise a lead the way the Apps Script endpoint expects it."""

    payload: Dict[str, Any] = {"id": lead.id}
    payload.update(lead.fields)
    payload.update(lead.pipeline_columns())
    payload["timestamp"] = (timestamp or datetime.now(timezone.utc)).isoformat()
    return payload


def push_lead(
    sync_url: str,
    lead: Lead,
    *,
    session: Optional[Any] = None,
    timeout: Optional[float] = None,
    confirm_delivery: bool = False,
) -> PushResult:
    """Send a lead's current state to the sheet's write-back endpoint.

    Never raises for transport problems; the failure is logged and reported
    through :class:`PushResult`.
    """

    payload = lead_to_sync_payload(lead)
    try:
        with _session_scope(session) as http:
            LOGGER.debug("POST %s for lead %s", sync_url, lead.id)
            response = http.post(
                sync_url,
                data=json.dumps(payload),
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
    except requests.RequestException as exc:
        LOGGER.exception("Sync failed for lead %s", lead.id)
        return PushResult(dispatched=False, error=str(exc))

    status_code = getattr(response, "status_code", None)
    if not confirm_delivery:
        return PushResult(dispatched=True, status_code=status_code)

    confirmed = bool(getattr(response, "ok", False))
    if not confirmed:
        LOGGER.warning("Sync endpoint answered HTTP %s for lead %s", status_code, lead.id)
    return PushResult(dispatched=True, confirmed=confirmed, status_code=status_code)


# --- Apps Script endpoint ---

# Deploy as a web app (Extensions > Apps Script > Deploy > Web app, access
# "Anyone") and use the deployment URL as ``sync_url``.
APPS_SCRIPT_TEMPLATE = """\
// Paste into Google Apps Script (Extensions > Apps Script), then deploy as a web app.
function doPost(e) {
  var sheet = SpreadsheetApp.getActiveSpreadsheet().getSheets()[0];
  var data = JSON.parse(e.postData.contents);
  var headers = sheet.getRange(1, 1, 1, sheet.getLastColumn()).getValues()[0];

  // Rows are matched on Email, then Name, then the first column.
  var idCol = headers.indexOf('Email') + 1 || headers.indexOf('Name') + 1 || 1;
  var idValue = data['Email'] || data['Name'] || data['id'];

  var rows = sheet.getDataRange().getValues();
  var rowIndex = -1;

  for (var i = 1; i < rows.length; i++) {
    if (rows[i][idCol - 1] == idValue) {
      rowIndex = i + 1;
      break;
    }
  }

  if (rowIndex > 0) {
    headers.forEach(function(header, idx) {
      if (data[header] !== undefined) {
        sheet.getRange(rowIndex, idx + 1).setValue(data[header]);
      }
    });
    return ContentService.createTextOutput("Success").setMimeType(ContentService.MimeType.TEXT);
  }
  return ContentService.createTextOutput("Not Found").setMimeType(ContentService.MimeType.TEXT);
}
"""


__all__ = [
    "SHEET_ID_PATTERN",
    "PRIMARY_EXPORT_URL",
    "FALLBACK_EXPORT_URL",
    "extract_sheet_id",
    "looks_like_sign_in_page",
    "download_sheet_csv",
    "fetch_public_sheet",
    "load_sheet_from_url",
    "PushResult",
    "lead_to_sync_payload",
    "push_lead",
    "APPS_SCRIPT_TEMPLATE",
]
