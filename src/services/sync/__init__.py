"""Replaying project snapshots into Notion."""

from .results import ImportOptions, ImportResult  # noqa: F401
from .service import build_page_payload, options_from_config, run_clear, run_import  # noqa: F401
