"""CLI tests: subcommands against a temp SQLite store and a fake API."""
import json

import httpx
import pytest

import app
from remote.session import ApiSession
from scripts.init_db import init_database
from tests.remote.conftest import BASE_URL, FakeApi


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'store.db'}"
    db = init_database(url)
    carlos, miguel, _ = db.staff.list_all()
    haircut = db.services.list_all()[0]
    db.appointments.save({"occurred_at": "2024-03-04T10:00:00", "service_id": haircut.id,
                          "staff_id": carlos.id, "price": 100})
    db.appointments.save({"occurred_at": "2024-03-05T10:00:00", "service_id": haircut.id,
                          "staff_id": miguel.id})
    db.close()
    return url


@pytest.fixture
def fake_remote(monkeypatch):
    def open_session():
        return ApiSession(base_url=BASE_URL, token="tok-123",
                          transport=httpx.MockTransport(FakeApi()))
    monkeypatch.setattr(app, "open_session", open_session)


class TestSummary:

    def test_json(self, db_url, capsys):
        assert app.main(["summary", "--db", db_url, "--json"]) == app.EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert payload["totals"]["count"] == 2
        assert payload["totals"]["gross_revenue"] == "115.00"
        assert payload["filters"] == "All appointments"
        assert payload["overview"]["active_staff_count"] == 3

    def test_text_with_filters(self, db_url, capsys):
        code = app.main(["summary", "--db", db_url, "--staff-id", "1",
                         "--from", "2024-03-01", "--to", "2024-03-31"])
        assert code == app.EXIT_OK
        out = capsys.readouterr().out
        assert "Filters: Staff: Carlos, From: 2024-03-01, To: 2024-03-31" in out
        assert "$100.00" in out
        assert "House commission:    $45.00 (45%)" in out

    def test_bad_date_is_an_error(self, db_url):
        assert app.main(["summary", "--db", db_url, "--from", "March"]) == app.EXIT_ERROR


class TestExport:

    def test_export_all(self, db_url, tmp_path, capsys):
        out_dir = tmp_path / "exports"
        assert app.main(["export", "--db", db_url, "--out", str(out_dir)]) == app.EXIT_OK
        names = sorted(p.suffix for p in out_dir.iterdir())
        assert names == [".pdf", ".xlsx"]

    def test_export_pdf_only(self, db_url, tmp_path):
        out_dir = tmp_path / "exports"
        assert app.main(["export", "--db", db_url, "--format", "pdf",
                         "--out", str(out_dir)]) == app.EXIT_OK
        assert [p.suffix for p in out_dir.iterdir()] == [".pdf"]

    def test_nothing_to_export(self, db_url, tmp_path):
        code = app.main(["export", "--db", db_url, "--client-id", "42",
                         "--out", str(tmp_path / "exports")])
        assert code == app.EXIT_NOTHING_TO_EXPORT
        assert not (tmp_path / "exports").exists()


class TestRemote:

    def test_sync_replaces_local_store(self, db_url, fake_remote, capsys):
        assert app.main(["sync", "--db", db_url]) == app.EXIT_OK
        assert "appointments: 2" in capsys.readouterr().out
        app.main(["summary", "--db", db_url, "--json"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["totals"]["gross_revenue"] == "150.00"

    def test_summary_from_remote(self, fake_remote, capsys):
        assert app.main(["summary", "--source", "remote", "--json"]) == app.EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert payload["totals"]["count"] == 2

    def test_remote_failure_exit_code(self, monkeypatch):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        def open_session():
            return ApiSession(base_url=BASE_URL, transport=httpx.MockTransport(unreachable))

        monkeypatch.setattr(app, "open_session", open_session)
        assert app.main(["summary", "--source", "remote"]) == app.EXIT_ERROR
