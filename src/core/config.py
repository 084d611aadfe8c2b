from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

from dotenv import load_dotenv


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Config:
    # Credentials, one bearer token per service
    github_token: Optional[str] = None
    notion_token: Optional[str] = None

    # GitHub GraphQL endpoint and page caps
    github_graphql_url: str = "https://api.github.com/graphql"
    github_timeout: float = 30.0
    github_items_page_size: int = 100
    # No secondary pagination below these caps
    github_comments_cap: int = 100
    github_labels_cap: int = 20
    github_assignees_cap: int = 10
    github_field_values_cap: int = 20
    github_views_cap: int = 20
    github_fields_cap: int = 20

    # Notion write behaviour
    notion_max_retries: int = 3
    notion_retry_delay: float = 1.0
    notion_page_delay: float = 0.2
    notion_block_limit: int = 100
    notion_title_limit: int = 2000

    failed_items_path: str = "failed-items.json"


GITHUB_KEYS = ["GITHUB_TOKEN"]
NOTION_KEYS = ["NOTION_TOKEN"]


def load_config() -> Config:
    load_dotenv()
    return Config(
        github_token=os.getenv("GITHUB_TOKEN"),
        notion_token=os.getenv("NOTION_TOKEN"),
        github_graphql_url=os.getenv("GITHUB_GRAPHQL_URL", "https://api.github.com/graphql"),
        github_timeout=_env_float("GITHUB_TIMEOUT", 30.0),
        github_items_page_size=_env_int("GITHUB_ITEMS_PAGE_SIZE", 100),
        github_comments_cap=_env_int("GITHUB_COMMENTS_CAP", 100),
        github_labels_cap=_env_int("GITHUB_LABELS_CAP", 20),
        github_assignees_cap=_env_int("GITHUB_ASSIGNEES_CAP", 10),
        github_field_values_cap=_env_int("GITHUB_FIELD_VALUES_CAP", 20),
        github_views_cap=_env_int("GITHUB_VIEWS_CAP", 20),
        github_fields_cap=_env_int("GITHUB_FIELDS_CAP", 20),
        notion_max_retries=_env_int("NOTION_MAX_RETRIES", 3),
        notion_retry_delay=_env_float("NOTION_RETRY_DELAY", 1.0),
        notion_page_delay=_env_float("NOTION_PAGE_DELAY", 0.2),
        notion_block_limit=_env_int("NOTION_BLOCK_LIMIT", 100),
        notion_title_limit=_env_int("NOTION_TITLE_LIMIT", 2000),
        failed_items_path=os.getenv("FAILED_ITEMS_PATH", "failed-items.json"),
    )


def validate_config(cfg: Config, required: Iterable[str]) -> List[str]:
    """Return the required keys that have no value on ``cfg``."""
    missing: List[str] = []
    for key in required:
        if not getattr(cfg, key.lower(), None):
            missing.append(key)
    return missing
