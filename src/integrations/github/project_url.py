from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


class InvalidProjectUrl(ValueError):
    """The URL is not shaped like a GitHub Projects (v2) URL."""


@dataclass(frozen=True)
class ProjectRef:
    owner: str
    number: int
    repo: Optional[str] = None

    @property
    def is_org(self) -> bool:
        return self.repo is None


def parse_project_url(url: str) -> ProjectRef:
    """Classify a project URL by its fixed path segments.

    - ``https://github.com/orgs/<org>/projects/<n>`` -> organization project
    - ``https://github.com/<owner>/<repo>/projects/<n>`` -> repository project

    Segments are matched by position; the URL is not otherwise parsed.
    """
    parts = (url or "").strip().split("/")
    if len(parts) < 7 or parts[5] != "projects":
        raise InvalidProjectUrl(f"Not a GitHub project URL: {url}")
    try:
        number = int(parts[6])
    except ValueError:
        raise InvalidProjectUrl(f"Project number is not an integer: {parts[6]!r}") from None
    is_org = parts[2] == "github.com" and parts[3] == "orgs"
    owner = parts[4] if is_org else parts[3]
    repo = None if is_org else parts[4]
    if not owner or (not is_org and not repo):
        raise InvalidProjectUrl(f"Missing owner or repository in: {url}")
    return ProjectRef(owner=owner, number=number, repo=repo)
