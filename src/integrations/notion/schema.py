"""Property declarations pushed to the destination database.

Each set names only the properties it owns; Notion leaves every other
property of the database untouched on update.
"""

from __future__ import annotations
from typing import Any, Dict, List, Tuple


def _select(options: List[Tuple[str, str]]) -> Dict[str, Any]:
    return {"type": "select", "select": {"options": [{"name": n, "color": c} for n, c in options]}}


def _empty(kind: str) -> Dict[str, Any]:
    return {"type": kind, kind: {}}


STATUS_OPTIONS = [
    ("Pendding", "gray"),
    ("✍️ 仕様作成中", "yellow"),
    ("👀 仕様レビュー中", "orange"),
    ("🎨 In Design - デザイン中", "pink"),
    ("🔖 Ready to Dev", "purple"),
    ("🚧 Dev WIP - 開発進行中", "blue"),
    ("👀 Dev Reviewing - コードレビュー中", "brown"),
    ("🧪 QA - リリース待ち", "red"),
    ("✅ Done - 本番リリース済み", "green"),
]

PRIORITY_OPTIONS = [
    ("🌋 Urgent", "red"),
    ("🏔 High", "orange"),
    ("🏕 Medium", "yellow"),
    ("🏝 Low", "green"),
]

SIZE_OPTIONS = [
    ("XS [- 1h]", "gray"),
    ("S [1h - 2h]", "blue"),
    ("M [2h - 5h]", "purple"),
    ("L [5h - 8h]", "pink"),
    ("XL [8h -]", "red"),
]

PROJECT_PROPERTIES: Dict[str, Dict[str, Any]] = {
    "Status": _select(STATUS_OPTIONS),
    "Priority": _select(PRIORITY_OPTIONS),
    "Size": _select(SIZE_OPTIONS),
    "Assignees": _empty("people"),
    "リリース期日": _empty("date"),
    "デザイン期日": _empty("date"),
    "Labels": {"type": "multi_select", "multi_select": {"options": []}},
    "GitHub URL": _empty("url"),
    "作成日時": _empty("created_time"),
    "更新日時": _empty("last_edited_time"),
}

TIMESTAMP_PROPERTIES: Dict[str, Dict[str, Any]] = {
    "GitHub作成日": _empty("date"),
    "GitHub更新日": _empty("date"),
}

PROPERTY_SETS: Dict[str, Dict[str, Dict[str, Any]]] = {
    "create": PROJECT_PROPERTIES,
    "update": TIMESTAMP_PROPERTIES,
}


def describe(properties: Dict[str, Dict[str, Any]]) -> List[str]:
    return [f"{name} ({meta.get('type')})" for name, meta in properties.items()]
