from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DRAFT_ISSUE = "DraftIssue"
ISSUE = "Issue"
PULL_REQUEST = "PullRequest"

_FIELD_VALUE_KINDS = {
    "ProjectV2ItemFieldTextValue": "text",
    "ProjectV2ItemFieldNumberValue": "number",
    "ProjectV2ItemFieldDateValue": "date",
    "ProjectV2ItemFieldSingleSelectValue": "single_select",
    "ProjectV2ItemFieldIterationValue": "iteration",
}

# Fallback when a snapshot carries no __typename on field values
_SCALAR_KINDS = (
    ("name", "single_select"),
    ("title", "iteration"),
    ("date", "date"),
    ("number", "number"),
    ("text", "text"),
)


def _nodes(value: Any) -> List[Dict[str, Any]]:
    """Accept both GraphQL connections ({nodes: [...]}) and plain lists."""
    if isinstance(value, dict):
        value = value.get("nodes")
    if isinstance(value, list):
        return [v for v in value if isinstance(v, dict)]
    return []


def _login(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        login = value.get("login")
        return str(login) if login else None
    return None


@dataclass
class Comment:
    id: Optional[str]
    body: str
    created_at: Optional[str]
    author: Optional[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=data.get("id"),
            body=data.get("body") or "",
            created_at=data.get("createdAt"),
            author=_login(data.get("author")),
        )


@dataclass
class Label:
    name: str
    color: Optional[str] = None


@dataclass
class DraftIssue:
    title: Optional[str]
    body: str = ""

    kind = DRAFT_ISSUE


@dataclass
class Issue:
    id: Optional[str]
    number: Optional[int]
    title: Optional[str]
    body: str = ""
    state: Optional[str] = None
    url: Optional[str] = None
    author: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)
    assignees: List[str] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)

    kind = ISSUE


@dataclass
class PullRequest(Issue):
    kind = PULL_REQUEST


Content = Union[DraftIssue, Issue, PullRequest]


def content_kind(data: Dict[str, Any]) -> str:
    """Return the content type tag, inferring it for untagged snapshots."""
    typename = data.get("__typename")
    if typename in (DRAFT_ISSUE, ISSUE, PULL_REQUEST):
        return typename
    if typename:
        raise ValueError(f"Unknown project item content type: {typename}")
    if data.get("number") is None:
        return DRAFT_ISSUE
    if "/pull/" in str(data.get("url") or ""):
        return PULL_REQUEST
    return ISSUE


def parse_content(data: Optional[Dict[str, Any]]) -> Optional[Content]:
    if not isinstance(data, dict) or not data:
        return None
    kind = content_kind(data)
    if kind == DRAFT_ISSUE:
        return DraftIssue(title=data.get("title"), body=data.get("body") or "")
    cls = PullRequest if kind == PULL_REQUEST else Issue
    return cls(
        id=data.get("id"),
        number=data.get("number"),
        title=data.get("title"),
        body=data.get("body") or "",
        state=data.get("state"),
        url=data.get("url"),
        author=_login(data.get("author")),
        comments=[Comment.from_dict(c) for c in _nodes(data.get("comments"))],
        assignees=[a for a in (_login(n) for n in _nodes(data.get("assignees"))) if a],
        labels=[Label(name=str(n.get("name")), color=n.get("color")) for n in _nodes(data.get("labels")) if n.get("name")],
    )


@dataclass
class FieldValue:
    field_name: str
    kind: str
    value: Any

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["FieldValue"]:
        fld = data.get("field")
        name = fld.get("name") if isinstance(fld, dict) else None
        if not name:
            return None
        kind = _FIELD_VALUE_KINDS.get(str(data.get("__typename") or ""))
        if kind is None:
            for key, guessed in _SCALAR_KINDS:
                if key in data:
                    kind = guessed
                    break
        if kind is None:
            return None
        scalar = {
            "text": "text",
            "number": "number",
            "date": "date",
            "single_select": "name",
            "iteration": "title",
        }[kind]
        return cls(field_name=str(name), kind=kind, value=data.get(scalar))


@dataclass
class ProjectItem:
    id: Optional[str]
    type: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]
    is_archived: bool
    content: Optional[Content]
    field_values: List[FieldValue] = field(default_factory=list)
    field_map: Dict[str, FieldValue] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        # First value wins when two fields share a name
        for fv in self.field_values:
            self.field_map.setdefault(fv.field_name, fv)

    def value_of(self, name: str) -> Optional[FieldValue]:
        return self.field_map.get(name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectItem":
        values = [FieldValue.from_dict(n) for n in _nodes(data.get("fieldValues"))]
        return cls(
            id=data.get("id"),
            type=data.get("type"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            is_archived=bool(data.get("isArchived")),
            content=parse_content(data.get("content")),
            field_values=[v for v in values if v is not None],
        )


@dataclass
class ProjectSnapshot:
    id: Optional[str]
    title: Optional[str]
    number: Optional[int]
    url: Optional[str]
    items: List[ProjectItem] = field(default_factory=list)
    fields: List[Dict[str, Any]] = field(default_factory=list)
    views: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def archived_count(self) -> int:
        return sum(1 for it in self.items if it.is_archived)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectSnapshot":
        return cls(
            id=data.get("id"),
            title=data.get("title"),
            number=data.get("number"),
            url=data.get("url"),
            items=[ProjectItem.from_dict(n) for n in _nodes(data.get("items"))],
            fields=_nodes(data.get("fields")),
            views=_nodes(data.get("views")),
        )
