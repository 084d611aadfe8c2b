import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import integrations.notion.client as notion_client  # type: ignore  # noqa: E402
import services.sync.service as sync  # type: ignore  # noqa: E402
from core.config import Config  # type: ignore  # noqa: E402
from services.sync import ImportOptions  # type: ignore  # noqa: E402
from services.sync.utils import ProgressReporter  # type: ignore  # noqa: E402

SCHEMA = {
    "Name": {"type": "title"},
    "Status": {"type": "select"},
    "GitHub URL": {"type": "url"},
}

SNAPSHOT = {
    "id": "PVT_1",
    "title": "Roadmap",
    "items": {
        "nodes": [
            {
                "id": "1",
                "createdAt": "2024-01-01T00:00:00Z",
                "content": {"__typename": "Issue", "number": 1, "title": "First", "url": "https://github.com/o/r/issues/1", "body": "hello"},
                "fieldValues": {"nodes": [{"__typename": "ProjectV2ItemFieldSingleSelectValue", "name": "Todo", "field": {"name": "Status"}}]},
            },
            {"id": "2", "isArchived": True, "content": {"__typename": "DraftIssue", "title": "Old"}},
            {"id": "3", "createdAt": "2024-01-03T00:00:00Z", "content": {"__typename": "DraftIssue", "title": "Second", "body": ""}},
            {"id": "4", "createdAt": "2024-01-04T00:00:00Z", "content": {"__typename": "PullRequest", "number": 9, "title": "Third"}},
        ]
    },
}


class DummyPages:
    def __init__(self, fail_titles=None):
        # title -> remaining failures
        self.fail_titles = dict(fail_titles or {})
        self.created = []
        self.archived = []

    def create(self, **payload):
        title = payload["properties"]["Name"]["title"][0]["text"]["content"]
        if self.fail_titles.get(title, 0) > 0:
            self.fail_titles[title] -= 1
            raise RuntimeError("validation_error")
        self.created.append(payload)
        return {"id": f"page-{len(self.created)}"}

    def update(self, page_id, archived):
        self.archived.append(page_id)


class DummyDatabases:
    def __init__(self, existing=()):
        self.existing = list(existing)

    def retrieve(self, database_id):
        return {"id": database_id, "properties": SCHEMA}

    def query(self, **kwargs):
        return {"results": self.existing, "has_more": False, "next_cursor": None}


@pytest.fixture()
def notion(monkeypatch):
    dummy = SimpleNamespace(pages=DummyPages(), databases=DummyDatabases())
    monkeypatch.setattr(notion_client, "Client", lambda auth: dummy)
    sleeps = []
    monkeypatch.setattr(sync.time, "sleep", sleeps.append)
    dummy.sleeps = sleeps
    return dummy


@pytest.fixture()
def snapshot_file(tmp_path):
    path = tmp_path / "project.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return str(path)


def _cfg():
    return Config(notion_token="secret")


def test_import_creates_one_page_per_live_item(notion, snapshot_file, tmp_path):
    failed_path = tmp_path / "failed-items.json"
    result = sync.run_import(_cfg(), snapshot_file, "db-1", ImportOptions(failed_items_path=str(failed_path)))

    assert result.total == 4
    assert result.created == 3
    assert result.failed == 0
    assert result.skipped_archived == 1
    assert not failed_path.exists()
    titles = [p["properties"]["Name"]["title"][0]["text"]["content"] for p in notion.pages.created]
    assert titles == ["First", "Second", "Third"]

    first = notion.pages.created[0]
    assert first["parent"] == {"database_id": "db-1"}
    assert first["properties"]["Status"] == {"select": {"name": "Todo"}}
    assert first["children"][0]["type"] == "paragraph"
    # empty draft body: no children at all
    assert "children" not in notion.pages.created[1]
    # page delay between items
    assert notion.sleeps.count(0.2) == 3


def test_exhausted_retries_are_recorded(notion, snapshot_file, tmp_path, capsys):
    notion.pages.fail_titles = {"Second": 3}
    failed_path = tmp_path / "out" / "failed.json"
    result = sync.run_import(_cfg(), snapshot_file, "db-1", ImportOptions(failed_items_path=str(failed_path)))

    assert result.created == 2
    assert result.failed == 1
    assert result.failed_items == [{"title": "Second", "createdAt": "2024-01-03T00:00:00Z"}]
    saved = json.loads(failed_path.read_text(encoding="utf-8"))
    assert saved == [{"title": "Second", "createdAt": "2024-01-03T00:00:00Z"}]
    assert [s for s in notion.sleeps if s != 0.2] == [1.0, 2.0]
    assert "failed: 1 items" in capsys.readouterr().out


def test_transient_failures_recover(notion, snapshot_file, tmp_path):
    notion.pages.fail_titles = {"First": 2}
    failed_path = tmp_path / "failed.json"
    result = sync.run_import(_cfg(), snapshot_file, "db-1", ImportOptions(failed_items_path=str(failed_path)))
    assert result.created == 3
    assert result.failed == 0
    assert not failed_path.exists()


def test_clear_archives_existing_pages_first(notion, snapshot_file, tmp_path):
    notion.databases.existing = [{"id": "old-1"}, {"id": "old-2"}]
    options = ImportOptions(clear=True, failed_items_path=str(tmp_path / "f.json"))
    result = sync.run_import(_cfg(), snapshot_file, "db-1", options)
    assert result.cleared == 2
    assert notion.pages.archived == ["old-1", "old-2"]


def test_options_from_config_ignores_unset_overrides():
    cfg = Config(notion_token="secret", notion_max_retries=5, notion_page_delay=0.0)
    opts = sync.options_from_config(cfg, max_retries=None, clear=True)
    assert opts.max_retries == 5
    assert opts.page_delay == 0.0
    assert opts.clear is True


def test_missing_snapshot_aborts_before_any_call(monkeypatch, tmp_path):
    def boom(*args, **kwargs):
        raise AssertionError("notion must not be contacted")

    monkeypatch.setattr(sync, "NotionWrapper", boom)
    with pytest.raises(FileNotFoundError):
        sync.run_import(_cfg(), str(tmp_path / "missing.json"), "db-1")


def test_progress_line_every_ten_items(capsys):
    progress = ProgressReporter(12)
    for i in range(12):
        progress.record(i != 4)
    out = capsys.readouterr().out
    assert out.count("[import] progress") == 1
    assert "idx=10/12 ok=9 failed=1" in out
    assert (progress.ok, progress.failed, progress.processed) == (11, 1, 12)
