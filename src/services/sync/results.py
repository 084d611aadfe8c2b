"""Structured options and results for import routines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from integrations.notion.mapper import FieldMapping

__all__ = ["ImportOptions", "ImportResult"]


@dataclass
class ImportOptions:
    mapping: FieldMapping = field(default_factory=FieldMapping)
    clear: bool = False
    max_retries: int = 3
    retry_delay: float = 1.0
    page_delay: float = 0.2
    block_limit: int = 100
    title_limit: Optional[int] = 2000
    failed_items_path: str = "failed-items.json"


@dataclass
class ImportResult:
    total: int
    created: int
    failed: int
    skipped_archived: int
    cleared: int
    duration: float
    failed_items: List[Dict[str, Any]] = field(default_factory=list)
    failed_items_file: Optional[str] = None
