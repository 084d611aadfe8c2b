from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

PathLike = Union[str, Path]


def load_json(path: PathLike) -> Any:
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def save_json(path: PathLike, data: Any) -> Path:
    target = Path(path)
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(target.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write("\n")
    tmp.replace(target)
    return target


def load_snapshot(path: PathLike) -> Dict[str, Any]:
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot {path} is not a JSON object")
    return data


def write_failed_items(path: PathLike, items: Iterable[Dict[str, Any]]) -> Path:
    """Persist ``[{title, createdAt}, ...]`` for a later manual retry pass."""
    rows: List[Dict[str, Any]] = [
        {"title": it.get("title"), "createdAt": it.get("createdAt")} for it in items
    ]
    return save_json(path, rows)
