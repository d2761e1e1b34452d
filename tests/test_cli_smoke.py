"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json

import pytest
import requests

from lead_tracker import __main__
from lead_tracker.cli import main
from lead_tracker.config import CONFIG_ENV_VAR
from lead_tracker.ingestion.loaders import load_leads
from lead_tracker.models import LeadStatus


@pytest.fixture(autouse=True)
def _no_environment_config(monkeypatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture()
def input_path(tmp_path):
    path = tmp_path / "input.csv"
    path.write_text(
        "Name,Email,STATUS(LEAD)\n"
        "Jane Doe,jane@example.com,WON\n"
        "John Roe,john@example.com,NEW\n",
        encoding="utf-8",
    )
    return path


def test_stats_as_json(input_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["stats", str(input_path), "--json"])

    data = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert data["total"] == 2
    assert data["won"] == 1
    assert data["conversionRate"] == 50.0


def test_stats_as_text(input_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["stats", str(input_path)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "input (FILE)" in out
    assert "Contact rate:    50.0%" in out


def test_export_writes_pipeline_columns(input_path, tmp_path) -> None:
    output_path = tmp_path / "out" / "leads.xlsx"

    exit_code = main(["export", str(input_path), str(output_path)])

    assert exit_code == 0
    leads = load_leads(output_path)
    assert [lead.status for lead in leads] == [LeadStatus.WON, LeadStatus.NEW]
    assert leads[0].fields["Email"] == "jane@example.com"


def test_sync_pushes_every_lead(input_path, monkeypatch) -> None:
    posted = []

    class Response:
        ok = True
        status_code = 200

    def fake_post(self, url, data=None, headers=None, timeout=None):
        posted.append((url, json.loads(data)))
        return Response()

    monkeypatch.setattr(requests.Session, "post", fake_post)

    exit_code = main(["sync", str(input_path), "--sync-url", "https://script.example/exec", "--confirm"])

    assert exit_code == 0
    assert [payload["Name"] for _, payload in posted] == ["Jane Doe", "John Roe"]
    assert {url for url, _ in posted} == {"https://script.example/exec"}


def test_sync_requires_url(input_path) -> None:
    assert main(["sync", str(input_path)]) == 2


def test_missing_source_file_is_reported(tmp_path) -> None:
    assert main(["stats", str(tmp_path / "missing.csv")]) == 1


def test_invalid_configuration_exits_with_usage_error(input_path, tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("", encoding="utf-8")

    assert main(["--config", str(config_path), "stats", str(input_path)]) == 2


def test_library_commands_use_configured_store(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"user_id": "me", "library_path": str(tmp_path / "library.json")}),
        encoding="utf-8",
    )

    assert main(["--config", str(config_path), "library", "list"]) == 0
    assert "No saved sheets." in capsys.readouterr().out
    assert main(["--config", str(config_path), "library", "remove", "missing"]) == 0


def test_module_entry_point_delegates_to_cli(input_path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main(["stats", str(input_path), "--json"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)["total"] == 2


def test_module_entry_point_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main([])

    captured = capsys.readouterr()
    assert "python -m lead_tracker" in captured.out
    assert exit_code == 2


def test_assist_rejects_out_of_range_row(input_path) -> None:
    assert main(["assist", str(input_path), "--row", "5"]) == 2


def test_corrupt_workbook_is_reported(tmp_path) -> None:
    path = tmp_path / "leads.xlsx"
    path.write_bytes(b"not a workbook at all")

    assert main(["stats", str(path)]) == 1


def test_local_path_with_sheet_like_segment_is_read_as_file(tmp_path, monkeypatch, capsys) -> None:
    def fail_get(self, url, timeout=None):
        raise AssertionError(f"unexpected request to {url}")

    monkeypatch.setattr(requests.Session, "get", fail_get)
    path = tmp_path / "d" / "q4" / "leads.csv"
    path.parent.mkdir(parents=True)
    path.write_text("Name\nAda\nGrace\nAlan\n", encoding="utf-8")

    exit_code = main(["stats", "--json", str(path)])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)["total"] == 3


def test_sync_script_prints_apps_script_template(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["sync-script"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "function doPost(e)" in out


def test_corrupt_library_file_is_reported(tmp_path) -> None:
    library_path = tmp_path / "library.json"
    library_path.write_text("{not json", encoding="utf-8")
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"user_id": "me", "library_path": str(library_path)}), encoding="utf-8")

    assert main(["--config", str(config_path), "library", "list"]) == 1


def test_sync_reports_leads_the_endpoint_rejected(input_path, monkeypatch, caplog) -> None:
    class Response:
        ok = False
        status_code = 500

    monkeypatch.setattr(requests.Session, "post", lambda self, url, data=None, headers=None, timeout=None: Response())

    exit_code = main(["sync", str(input_path), "--sync-url", "https://script.example/exec", "--confirm"])

    assert exit_code == 1
    assert "Could not sync Jane Doe" in caplog.text
