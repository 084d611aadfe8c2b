from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import IO, Any, Dict, Optional

from core.config import Config
from integrations.github import GitHubClient, QueryCaps, parse_project_url
from integrations.github.models import DRAFT_ISSUE, ISSUE, PULL_REQUEST, content_kind
from state import store


@dataclass
class ExportSummary:
    title: str
    total: int
    drafts: int
    issues: int
    pull_requests: int
    comments: int
    status_options: Optional[int]


def _nodes(value: Any) -> list:
    if isinstance(value, dict):
        value = value.get("nodes")
    return value if isinstance(value, list) else []


def summarize_snapshot(project: Dict[str, Any]) -> ExportSummary:
    """Count drafts/issues/PRs/comments; items without content count as drafts."""
    drafts = issues = prs = comments = 0
    items = _nodes(project.get("items"))
    for item in items:
        content = item.get("content") if isinstance(item, dict) else None
        if not content:
            drafts += 1
            continue
        try:
            kind = content_kind(content)
        except ValueError:
            continue
        if kind == DRAFT_ISSUE:
            drafts += 1
            continue
        if kind == ISSUE:
            issues += 1
        elif kind == PULL_REQUEST:
            prs += 1
        comments += len(_nodes(content.get("comments")))
    status_options: Optional[int] = None
    for fld in _nodes(project.get("fields")):
        if isinstance(fld, dict) and fld.get("name") == "Status":
            status_options = len(fld.get("options") or [])
            break
    return ExportSummary(
        title=str(project.get("title") or ""),
        total=len(items),
        drafts=drafts,
        issues=issues,
        pull_requests=prs,
        comments=comments,
        status_options=status_options,
    )


def _log(msg: str) -> None:
    # stdout carries the snapshot; diagnostics go to stderr
    print(f"[export] {msg}", file=sys.stderr)


def run_export(
    cfg: Config,
    project_url: str,
    *,
    out: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> Dict[str, Any]:
    """Dump a GitHub project to a JSON snapshot.

    The URL is classified before any request is made; a GraphQL error or a
    missing project raises and nothing is written.
    """
    ref = parse_project_url(project_url)
    kind = "organization" if ref.is_org else f"repository {ref.owner}/{ref.repo}"
    _log(f"start | {kind} | owner={ref.owner} | number={ref.number}")
    caps = QueryCaps(
        items=cfg.github_items_page_size,
        comments=cfg.github_comments_cap,
        labels=cfg.github_labels_cap,
        assignees=cfg.github_assignees_cap,
        field_values=cfg.github_field_values_cap,
        views=cfg.github_views_cap,
        fields=cfg.github_fields_cap,
    )
    github = GitHubClient(
        cfg.github_token or "",
        api_url=cfg.github_graphql_url,
        timeout=cfg.github_timeout,
        caps=caps,
    )
    project = github.fetch_project(ref)

    summary = summarize_snapshot(project)
    _log(f"found project: {summary.title}")
    _log(f"total items: {summary.total}")
    _log(
        f"drafts={summary.drafts} issues={summary.issues} "
        f"pull_requests={summary.pull_requests} comments={summary.comments}"
    )
    if summary.status_options is not None:
        _log(f"found Status field with {summary.status_options} options")

    if out:
        path = store.save_json(out, project)
        _log(f"wrote {summary.total} items to {path}")
    else:
        target = stream or sys.stdout
        target.write(json.dumps(project, ensure_ascii=False, indent=2) + "\n")
    return project
