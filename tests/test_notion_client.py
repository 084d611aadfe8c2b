import sys
from pathlib import Path
from types import SimpleNamespace

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import integrations.notion.client as notion_client  # type: ignore  # noqa: E402


class APIError(Exception):
    def __init__(self, message, body=None):
        super().__init__(message)
        self.body = body


class DummyPages:
    def __init__(self, failures=0, broken_ids=()):
        self.failures = failures
        self.broken_ids = set(broken_ids)
        self.created = []
        self.archived = []

    def create(self, **payload):
        if self.failures > 0:
            self.failures -= 1
            raise APIError("rate limited", body={"code": "rate_limited"})
        self.created.append(payload)
        return {"id": f"page-{len(self.created)}"}

    def update(self, page_id, archived):
        if page_id in self.broken_ids:
            raise APIError("conflict")
        self.archived.append(page_id)


class DummyDatabases:
    def __init__(self, pages):
        self.pages = pages
        self.query_calls = []

    def query(self, **kwargs):
        self.query_calls.append(kwargs)
        start = int(kwargs.get("start_cursor") or 0)
        size = kwargs["page_size"]
        chunk = self.pages[start:start + size]
        more = start + size < len(self.pages)
        return {"results": chunk, "has_more": more, "next_cursor": str(start + size) if more else None}


def _wrapper(monkeypatch, pages=None, db_pages=(), **kwargs):
    sleeps = []
    dummy = SimpleNamespace(pages=pages or DummyPages(), databases=DummyDatabases(list(db_pages)))
    monkeypatch.setattr(notion_client, "Client", lambda auth: dummy)
    wrapper = notion_client.NotionWrapper("secret", "db-1", sleep=sleeps.append, **kwargs)
    return wrapper, dummy, sleeps


def test_retry_uses_linear_backoff(monkeypatch, capsys):
    wrapper, dummy, sleeps = _wrapper(monkeypatch, pages=DummyPages(failures=2))
    page = wrapper.create_page_with_retry({"parent": {"database_id": "db-1"}}, "Task")

    assert page == {"id": "page-1"}
    assert sleeps == [1.0, 2.0]
    out = capsys.readouterr().out
    assert "attempt 1 failed" in out
    assert "created page: Task" in out


def test_retry_gives_up_after_max_attempts(monkeypatch, capsys):
    wrapper, dummy, sleeps = _wrapper(monkeypatch, pages=DummyPages(failures=5), retry_delay=0.5)
    assert wrapper.create_page_with_retry({}, "Task") is None
    assert sleeps == [0.5, 1.0]
    assert dummy.pages.created == []
    out = capsys.readouterr().out
    assert "after 3 attempts" in out
    assert "rate_limited" in out


def test_clear_database_paginates_and_skips_failures(monkeypatch, capsys):
    db_pages = [{"id": f"p{i}"} for i in range(150)]
    pages = DummyPages(broken_ids={"p3"})
    wrapper, dummy, _ = _wrapper(monkeypatch, pages=pages, db_pages=db_pages)

    assert wrapper.clear_database() == 149
    assert len(dummy.databases.query_calls) == 2
    assert "p3" not in pages.archived
    assert "failed to archive page p3" in capsys.readouterr().out


def test_error_details_prefers_body():
    assert notion_client.error_details(APIError("x", body={"message": "bad"})) == '{\n  "message": "bad"\n}'
    assert notion_client.error_details(ValueError("plain")) is None
