from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from integrations.github.models import DraftIssue, FieldValue, Issue, ProjectItem

DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})")
UNTITLED = "Untitled"


class UnsupportedPropertyType(ValueError):
    """The destination property cannot hold select-style values."""


@dataclass
class FieldMapping:
    """Which GitHub project field feeds which Notion property.

    Every property is written only when it exists in the destination schema.
    """

    # GitHub single-select field name -> Notion select/multi_select property
    select_fields: Dict[str, str] = field(
        default_factory=lambda: {"Status": "Status", "Priority": "Priority", "Size": "Size"}
    )
    # GitHub iteration/date field name -> Notion date property
    date_fields: Dict[str, str] = field(
        default_factory=lambda: {"リリース期日": "リリース期日", "デザイン期日": "デザイン期日"}
    )
    label_property: Optional[str] = "Labels"
    url_property: Optional[str] = "GitHub URL"
    created_property: Optional[str] = "GitHub作成日"
    updated_property: Optional[str] = "GitHub更新日"
    assignees_property: Optional[str] = None
    imported_property: Optional[str] = None


def extract_date(text: Any) -> Optional[str]:
    """First YYYY-MM-DD token of ``text``, e.g. an iteration title."""
    if not text:
        return None
    m = DATE_RE.search(str(text))
    return m.group(1) if m else None


def select_or_multiselect(schema: Dict[str, Any], name: str, values: Sequence[str]) -> Dict[str, Any]:
    prop_type = (schema.get(name) or {}).get("type")
    if prop_type == "select":
        return {"select": {"name": str(values[0])[:100]}}
    if prop_type == "multi_select":
        return {"multi_select": [{"name": str(v)[:100]} for v in values]}
    raise UnsupportedPropertyType(f"Unsupported type {prop_type} for property {name}")


def title_property(schema: Dict[str, Any]) -> Optional[str]:
    for name, meta in schema.items():
        if isinstance(meta, dict) and meta.get("type") == "title":
            return name
    return None


def item_title(item: ProjectItem, limit: Optional[int] = None) -> str:
    content = item.content
    title = ""
    if content is not None:
        title = content.title or ""
        if not title and isinstance(content, Issue) and content.number is not None:
            title = f"{content.kind} #{content.number}"
    title = title or UNTITLED
    return title[:limit] if limit else title


def _date_only(ts: Optional[str]) -> Optional[str]:
    if not ts:
        return None
    return str(ts).split("T")[0] or None


def _date_from_field(fv: Optional[FieldValue]) -> Optional[str]:
    if fv is None:
        return None
    if fv.kind == "date":
        return _date_only(fv.value)
    if fv.kind in ("iteration", "text", "single_select"):
        return extract_date(fv.value)
    return None


def _try_select(props: Dict[str, Any], schema: Dict[str, Any], name: str, values: List[str], title: str) -> None:
    try:
        props[name] = select_or_multiselect(schema, name, values)
    except UnsupportedPropertyType as e:
        print(f"[import] could not set {name} for \"{title}\": {e}")


def map_item_to_notion_properties(
    item: ProjectItem,
    schema: Dict[str, Any],
    mapping: Optional[FieldMapping] = None,
    *,
    title_limit: Optional[int] = 2000,
) -> Dict[str, Any]:
    """Map one project item to a Notion properties payload.

    Properties absent from ``schema`` are skipped; a field value missing on
    the item leaves the property out.
    """
    mapping = mapping or FieldMapping()
    props: Dict[str, Any] = {}
    title = item_title(item, title_limit)
    tprop = title_property(schema)
    if tprop:
        props[tprop] = {"title": [{"text": {"content": title}}]}

    for field_name, prop in mapping.select_fields.items():
        fv = item.value_of(field_name)
        if fv is None or fv.value in (None, "") or prop not in schema:
            continue
        _try_select(props, schema, prop, [str(fv.value)], title)

    for field_name, prop in mapping.date_fields.items():
        if prop not in schema:
            continue
        day = _date_from_field(item.value_of(field_name))
        if day:
            props[prop] = {"date": {"start": day}}

    content = item.content
    if isinstance(content, Issue):
        if content.url and mapping.url_property and mapping.url_property in schema:
            props[mapping.url_property] = {"url": content.url}
        if content.labels and mapping.label_property and mapping.label_property in schema:
            _try_select(props, schema, mapping.label_property, [lb.name for lb in content.labels], title)
        if content.assignees and mapping.assignees_property and mapping.assignees_property in schema:
            _try_select(props, schema, mapping.assignees_property, list(content.assignees), title)
    elif content is not None and not isinstance(content, DraftIssue):
        raise TypeError(f"Unhandled content type: {type(content).__name__}")

    created = _date_only(item.created_at)
    if created and mapping.created_property and mapping.created_property in schema:
        props[mapping.created_property] = {"date": {"start": created}}
    updated = _date_only(item.updated_at)
    if updated and mapping.updated_property and mapping.updated_property in schema:
        props[mapping.updated_property] = {"date": {"start": updated}}

    if mapping.imported_property and mapping.imported_property in schema:
        props[mapping.imported_property] = {"checkbox": True}
    return props
