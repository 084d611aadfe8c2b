"""Read-only access to GitHub Projects (v2)."""

from .client import GitHubClient, GitHubError, ProjectNotFound  # noqa: F401
from .project_url import InvalidProjectUrl, ProjectRef, parse_project_url  # noqa: F401
from .queries import QueryCaps  # noqa: F401
