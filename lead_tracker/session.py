"""In-memory session state: open workspaces, the active one, and lead edits."""
from __future__ import annotations

import dataclasses
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from .errors import (
    LeadNotFoundError,
    LeadTrackerError,
    NoLeadsFoundError,
    OperationInProgressError,
    SubStatusLockedError,
    WorkspaceNotFoundError,
)
from .ingestion.loaders import load_leads, load_leads_from_text
from .ingestion.normalizer import parse_csv
from .library import LibraryRepository
from .models import ImportSource, Lead, LeadStatus, LibraryItem, SheetStats, SubStatus, Workspace
from .sheets import PushResult, load_sheet_from_url, push_lead
from .stats import compute_stats

LOGGER = logging.getLogger(__name__)

DEMO_CSV = """Name,Email,Company,Role,Industry,City
Alice Johnson,alice@technova.com,TechNova,CTO,Software,San Francisco
Bob Smith,bob.smith@construct.io,Construct IO,Project Manager,Construction,New York
Charlie Davis,charlie@finspark.net,FinSpark,VP Sales,Finance,London
Diana Prince,diana@themyscira.gov,Justice League,Head of Security,Government,Washington DC
Evan Wright,evan@writegood.com,WriteGood,Editor,Publishing,Chicago
Fiona Gallagher,fiona@chicago.net,Patsy's Pies,Owner,Food & Bev,Chicago
George Miller,george@maxfilms.com,Max Films,Director,Entertainment,Los Angeles
Hannah Lee,hannah@biocore.org,BioCore,Researcher,Biotech,Boston"""

SheetFetcher = Callable[..., List[Lead]]
LeadPusher = Callable[..., PushResult]


class LeadSession:
    """Holds the workspaces opened by one user and applies edits to their leads.

    Network work (fetching a sheet, pushing a lead) runs under a single
    in-flight marker, ``syncing_id``. Starting a second network operation while
    one is outstanding raises :class:`OperationInProgressError`. Every import
    fetches and parses before touching session state, so a failure leaves the
    open workspaces exactly as they were.
    """

    def __init__(
        self,
        *,
        user_id: Optional[str] = None,
        library: Optional[LibraryRepository] = None,
        fetcher: SheetFetcher = load_sheet_from_url,
        pusher: LeadPusher = push_lead,
        fetch_options: Optional[Dict[str, Any]] = None,
        push_options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.user_id = user_id
        self._library = library
        self._fetcher = fetcher
        self._pusher = pusher
        self._fetch_options = dict(fetch_options or {})
        self._push_options = dict(push_options or {})
        self._workspaces: List[Workspace] = []
        self.active_id: Optional[str] = None
        self.syncing_id: Optional[str] = None

    # ------------------------------------------------------------------
    @property
    def workspaces(self) -> List[Workspace]:
        return list(self._workspaces)

    @property
    def active(self) -> Optional[Workspace]:
        if self.active_id is None:
            return None
        return self._find_workspace(self.active_id)

    def stats(self) -> SheetStats:
        """Funnel statistics for the active workspace, recomputed on every call."""

        workspace = self.active
        if workspace is None:
            return SheetStats()
        return compute_stats(workspace.leads)

    def find_by_url(self, url: str) -> Optional[Workspace]:
        for workspace in self._workspaces:
            if workspace.url and workspace.url == url:
                return workspace
        return None

    def _find_workspace(self, workspace_id: str) -> Optional[Workspace]:
        for workspace in self._workspaces:
            if workspace.id == workspace_id:
                return workspace
        return None

    def _require_active(self) -> Workspace:
        workspace = self.active
        if workspace is None:
            raise WorkspaceNotFoundError("No workspace is active.")
        return workspace

    @contextmanager
    def _in_flight(self, key: str) -> Iterator[None]:
        if self.syncing_id is not None:
            raise OperationInProgressError(f"Another operation is still running for {self.syncing_id}.")
        self.syncing_id = key
        try:
            yield
        finally:
            self.syncing_id = None

    # ------------------------------------------------------------------
    def import_leads(
        self,
        leads: List[Lead],
        name: str,
        source: ImportSource,
        *,
        url: Optional[str] = None,
        sync_url: Optional[str] = None,
    ) -> Workspace:
        """Open a workspace for ``leads`` and make it active.

        A workspace already open for the same ``url`` is re-activated instead.
        """

        if url:
            existing = self.find_by_url(url)
            if existing is not None:
                LOGGER.info("Sheet %s is already open as %s", url, existing.name)
                self.active_id = existing.id
                return existing

        if not leads:
            raise NoLeadsFoundError()

        workspace = Workspace(
            name=name,
            leads=list(leads),
            import_source=source,
            url=url,
            sync_url=sync_url or None,
        )
        if source is ImportSource.URL and url:
            item = LibraryItem(user_id=self.user_id or "", name=name, url=url, sync_url=sync_url or None)
            saved = self._save_to_library(item)
            if saved is not None:
                workspace.id = saved.id

        self._workspaces.append(workspace)
        self.active_id = workspace.id
        LOGGER.info("Opened workspace %s with %s leads", workspace.name, len(workspace.leads))
        return workspace

    def import_from_url(self, url: str, name: str = "Imported Sheet", *, sync_url: Optional[str] = None) -> Workspace:
        existing = self.find_by_url(url)
        if existing is not None:
            self.active_id = existing.id
            return existing
        with self._in_flight(url):
            leads = self._fetcher(url, **self._fetch_options)
        return self.import_leads(leads, name.strip() or "Imported Sheet", ImportSource.URL, url=url, sync_url=sync_url)

    def import_from_text(self, text: str, name: str = "Pasted CSV") -> Workspace:
        leads = load_leads_from_text(text)
        return self.import_leads(leads, name.strip() or "Pasted CSV", ImportSource.CSV)

    def import_from_file(self, path: Union[str, Path], name: Optional[str] = None) -> Workspace:
        path_obj = Path(path)
        leads = load_leads(path_obj)
        if not leads:
            raise NoLeadsFoundError(f"No leads found in {path_obj.name}.")
        return self.import_leads(leads, name or path_obj.stem, ImportSource.FILE)

    def load_demo(self) -> Workspace:
        return self.import_leads(parse_csv(DEMO_CSV), "Demo Leads", ImportSource.CSV)

    # ------------------------------------------------------------------
    def activate(self, workspace_id: str) -> Workspace:
        workspace = self._find_workspace(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(f"Workspace {workspace_id} is not open.")
        self.active_id = workspace.id
        return workspace

    def close(self, workspace_id: str) -> None:
        """Close a workspace; the first remaining one becomes active if needed."""

        self._workspaces = [ws for ws in self._workspaces if ws.id != workspace_id]
        if self.active_id == workspace_id:
            self.active_id = self._workspaces[0].id if self._workspaces else None

    def refresh_active(self) -> Workspace:
        """Pull the latest rows for the active URL workspace, replacing its leads."""

        workspace = self._require_active()
        if workspace.import_source is not ImportSource.URL or not workspace.url:
            raise LeadTrackerError(f"Workspace {workspace.name} was not imported from a URL.")
        with self._in_flight(workspace.id):
            leads = self._fetcher(workspace.url, **self._fetch_options)
        workspace.leads = list(leads)
        workspace.columns = list(leads[0].fields) if leads else []
        LOGGER.info("Refreshed workspace %s (%s leads)", workspace.name, len(leads))
        return workspace

    # ------------------------------------------------------------------
    def list_library(self) -> List[LibraryItem]:
        if self._library is None or not self.user_id:
            return []
        return self._library.list(self.user_id)

    def open_from_library(self, item: LibraryItem) -> Optional[Workspace]:
        for workspace in self._workspaces:
            if workspace.id == item.id or (workspace.url and workspace.url == item.url):
                self.active_id = workspace.id
                return workspace
        if not item.url:
            LOGGER.warning("Library item %s has no URL to open", item.id)
            return None

        with self._in_flight(item.id):
            leads = self._fetcher(item.url, **self._fetch_options)
        workspace = Workspace(
            id=item.id,
            name=item.name,
            leads=list(leads),
            import_source=item.import_source,
            url=item.url,
            sync_url=item.sync_url,
        )
        self._workspaces.append(workspace)
        self.active_id = workspace.id
        return workspace

    def remove_from_library(self, item_id: str) -> None:
        if self._library is not None:
            self._library.delete(item_id)
        self._workspaces = [ws for ws in self._workspaces if ws.id != item_id]
        if self.active_id == item_id:
            self.active_id = None

    def _save_to_library(self, item: LibraryItem) -> Optional[LibraryItem]:
        if self._library is None or not self.user_id:
            return None
        try:
            return self._library.upsert(item)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not save %s to the library: %s", item.url, exc)
            return None

    # ------------------------------------------------------------------
    def find_lead(self, lead_id: str) -> Lead:
        lead = self._require_active().find_lead(lead_id)
        if lead is None:
            raise LeadNotFoundError(f"Lead {lead_id} is not in the active workspace.")
        return lead

    def update_lead(self, lead: Lead) -> Optional[PushResult]:
        """Replace a lead in the active workspace and push it when sync is configured.

        Returns the push result, or ``None`` when the workspace has no sync URL.
        """

        workspace = self._require_active()
        for index, current in enumerate(workspace.leads):
            if current.id == lead.id:
                break
        else:
            raise LeadNotFoundError(f"Lead {lead.id} is not in the active workspace.")

        lead.fields.update(lead.pipeline_columns())
        lead.touch()
        workspace.leads[index] = lead

        if not workspace.sync_url:
            return None
        with self._in_flight(lead.id):
            result = self._pusher(workspace.sync_url, lead, **self._push_options)
        if not result.ok:
            LOGGER.warning("Lead %s was saved locally but not synced: %s", lead.id, result.error or result.status_code)
        return result

    def set_status(self, lead_id: str, status: LeadStatus) -> Optional[PushResult]:
        lead = self.find_lead(lead_id)
        return self.update_lead(dataclasses.replace(lead, fields=dict(lead.fields), status=status))

    def set_sub_status(self, lead_id: str, sub_status: SubStatus) -> Optional[PushResult]:
        lead = self.find_lead(lead_id)
        if not lead.sub_status_editable:
            raise SubStatusLockedError(
                f"Mark lead as {LeadStatus.CONTACTED.value} or further to update call status."
            )
        return self.update_lead(dataclasses.replace(lead, fields=dict(lead.fields), sub_status=sub_status))

    def add_note(self, lead_id: str, note: str) -> Optional[PushResult]:
        """Prepend a note to the lead's activity log; blank notes are ignored."""

        if not note.strip():
            return None
        lead = self.find_lead(lead_id)
        return self.update_lead(dataclasses.replace(lead, fields=dict(lead.fields), notes=[note, *lead.notes]))


__all__ = ["LeadSession", "DEMO_CSV"]
