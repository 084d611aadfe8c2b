import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from integrations.github import client as gh_client  # type: ignore  # noqa: E402
from integrations.github.project_url import ProjectRef  # type: ignore  # noqa: E402
from integrations.github.queries import QueryCaps, items_page_query, project_query  # type: ignore  # noqa: E402


class _Resp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        return self._payload


def _item(n):
    return {"id": f"item-{n}", "type": "ISSUE", "isArchived": False, "content": {"__typename": "Issue", "number": n}}


def _page(owner_key, nodes, has_next, cursor, **extra):
    project = {
        "items": {
            "nodes": nodes,
            "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
        }
    }
    project.update(extra)
    return {"data": {owner_key: {"projectV2": project}}}


@pytest.fixture()
def recorder(monkeypatch):
    calls = []
    responses = []

    def fake_post(url, json=None, headers=None, timeout=None):  # noqa: A002
        calls.append({"url": url, "json": json, "headers": headers})
        return responses.pop(0)

    monkeypatch.setattr(gh_client.requests, "post", fake_post)
    return calls, responses


def test_queries_carry_caps_and_cursor() -> None:
    caps = QueryCaps(comments=100, labels=20)
    root = project_query(True, caps)
    page = items_page_query(False, caps)
    assert "organization(login: $owner)" in root
    assert "comments(first: 100)" in root
    assert "labels(first: 20)" in root
    assert "__typename" in root
    assert "after: $cursor" not in root
    assert "repository(owner: $owner, name: $repo)" in page
    assert "items(first: 100, after: $cursor)" in page
    assert "$cursor: String!" in page
    assert "{{" not in root and "}}" not in page


def test_fetch_project_appends_pages_in_order(recorder) -> None:
    calls, responses = recorder
    responses.extend([
        _Resp(_page("organization", [_item(1), _item(2)], True, "c1", title="Board", fields={"nodes": []})),
        _Resp(_page("organization", [_item(3)], True, "c2")),
        _Resp(_page("organization", [_item(4), _item(5)], False, "c3")),
    ])
    client = gh_client.GitHubClient("tok")
    project = client.fetch_project(ProjectRef(owner="acme", number=1))

    ids = [n["id"] for n in project["items"]["nodes"]]
    assert ids == ["item-1", "item-2", "item-3", "item-4", "item-5"]
    assert project["items"]["totalCount"] == 5
    assert project["items"]["pageInfo"] == {"hasNextPage": False, "endCursor": "c3"}
    assert project["title"] == "Board"
    assert [c["json"]["variables"].get("cursor") for c in calls] == [None, "c1", "c2"]
    assert calls[0]["headers"]["Authorization"] == "bearer tok"
    assert "repo" not in calls[0]["json"]["variables"]


def test_repo_project_sends_repo_variable(recorder) -> None:
    calls, responses = recorder
    responses.append(_Resp(_page("repository", [], False, None)))
    client = gh_client.GitHubClient("tok")
    client.fetch_project(ProjectRef(owner="octo", number=3, repo="widgets"))
    assert calls[0]["json"]["variables"] == {"owner": "octo", "number": 3, "repo": "widgets"}
    assert "repository(owner: $owner, name: $repo)" in calls[0]["json"]["query"]


def test_missing_project_raises(recorder) -> None:
    _, responses = recorder
    responses.append(_Resp({"data": {"organization": {"projectV2": None}}}))
    with pytest.raises(gh_client.ProjectNotFound):
        gh_client.GitHubClient("tok").fetch_project(ProjectRef(owner="acme", number=9))


def test_graphql_errors_abort_without_retry(recorder) -> None:
    calls, responses = recorder
    responses.append(_Resp({"errors": [{"message": "Bad credentials"}]}))
    with pytest.raises(gh_client.GitHubError) as exc:
        gh_client.GitHubClient("tok").fetch_project(ProjectRef(owner="acme", number=1))
    assert "Bad credentials" in str(exc.value)
    assert exc.value.errors == [{"message": "Bad credentials"}]
    assert len(calls) == 1


def test_http_error_raises(recorder) -> None:
    _, responses = recorder
    responses.append(_Resp({"message": "nope"}, status_code=401))
    with pytest.raises(gh_client.GitHubError):
        gh_client.GitHubClient("tok").graphql("query { viewer { login } }", {})
