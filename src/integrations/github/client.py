from __future__ import annotations
from typing import Any, Dict, List, Optional

import requests

from .project_url import ProjectRef
from .queries import QueryCaps, items_page_query, owner_key, project_query


class GitHubError(RuntimeError):
    """HTTP failure or GraphQL ``errors`` payload from the GitHub API."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ProjectNotFound(GitHubError):
    pass


class GitHubClient:
    """Minimal GitHub GraphQL client for reading Projects (v2).

    Every request is sent once; a failed call raises and the export stops.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = "https://api.github.com/graphql",
        timeout: float = 30.0,
        caps: Optional[QueryCaps] = None,
    ) -> None:
        self.token = token
        self.api_url = api_url
        self.timeout = timeout
        self.caps = caps or QueryCaps()

    # --- HTTP helpers -----------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"bearer {self.token}",
            "User-Agent": "github-project-to-notion/0.1",
        }

    def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        try:
            r = requests.post(
                self.api_url,
                json={"query": query, "variables": variables},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GitHubError(f"request failed: {e}") from e
        if r.status_code >= 400:
            raise GitHubError(f"HTTP {r.status_code}: {r.text[:500]}")
        try:
            payload = r.json()
        except ValueError as e:
            raise GitHubError(f"invalid JSON response: {e}") from e
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            first = errors[0] if isinstance(errors, list) and errors else {}
            msg = first.get("message") if isinstance(first, dict) else str(first)
            raise GitHubError(f"GraphQL error: {msg}", errors=errors if isinstance(errors, list) else [])
        data = payload.get("data") if isinstance(payload, dict) else None
        return data or {}

    # --- Resources ---------------------------------------------------------
    def _variables(self, ref: ProjectRef) -> Dict[str, Any]:
        variables: Dict[str, Any] = {"owner": ref.owner, "number": ref.number}
        if not ref.is_org:
            variables["repo"] = ref.repo
        return variables

    def _project_from(self, data: Dict[str, Any], ref: ProjectRef) -> Dict[str, Any]:
        owner = data.get(owner_key(ref.is_org))
        project = owner.get("projectV2") if isinstance(owner, dict) else None
        if not isinstance(project, dict):
            raise ProjectNotFound("Project not found")
        return project

    def fetch_project(self, ref: ProjectRef) -> Dict[str, Any]:
        """Return the whole project with every items page appended in order."""
        variables = self._variables(ref)
        project = self._project_from(self.graphql(project_query(ref.is_org, self.caps), variables), ref)
        items = project.get("items") or {}
        nodes: List[Dict[str, Any]] = list(items.get("nodes") or [])
        page_info = items.get("pageInfo") or {}
        cursor = page_info.get("endCursor")
        page_query = items_page_query(ref.is_org, self.caps)
        while page_info.get("hasNextPage"):
            page = self._project_from(self.graphql(page_query, {**variables, "cursor": cursor}), ref)
            page_items = page.get("items") or {}
            nodes.extend(page_items.get("nodes") or [])
            page_info = page_items.get("pageInfo") or {}
            cursor = page_info.get("endCursor") or cursor
        project["items"] = {
            "totalCount": len(nodes),
            "nodes": nodes,
            "pageInfo": {"hasNextPage": False, "endCursor": cursor},
        }
        return project
