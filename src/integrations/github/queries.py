"""GraphQL documents for reading a GitHub Project (v2).

Connection sizes are parameters so the per-item caps (comments, labels,
assignees, field values) stay visible and configurable. None of these nested
connections is paginated further.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class QueryCaps:
    items: int = 100
    comments: int = 100
    labels: int = 20
    assignees: int = 10
    field_values: int = 20
    views: int = 20
    fields: int = 20


_CONTENT_FIELDS = """
          id
          number
          title
          body
          state
          url
          comments(first: {comments}) {{
            totalCount
            nodes {{
              id
              body
              createdAt
              author {{
                login
              }}
            }}
          }}
          author {{
            login
          }}
          assignees(first: {assignees}) {{
            nodes {{
              login
            }}
          }}
          labels(first: {labels}) {{
            nodes {{
              name
              color
            }}
          }}
"""

_FIELD_VALUE_KINDS = (
    ("ProjectV2ItemFieldTextValue", "text"),
    ("ProjectV2ItemFieldNumberValue", "number"),
    ("ProjectV2ItemFieldDateValue", "date"),
    ("ProjectV2ItemFieldSingleSelectValue", "name"),
    ("ProjectV2ItemFieldIterationValue", "title"),
)


def _field_values_fragment() -> str:
    parts = []
    for typename, scalar in _FIELD_VALUE_KINDS:
        parts.append(
            f"""
          ... on {typename} {{{{
            __typename
            {scalar}
            field {{{{
              ... on ProjectV2FieldCommon {{{{
                name
              }}}}
            }}}}
          }}}}"""
        )
    return "".join(parts)


_ITEMS_CONNECTION = """
      items(first: {items}{after}) {{
        totalCount
        nodes {{
          id
          type
          createdAt
          updatedAt
          isArchived
          content {{
            __typename
            ... on DraftIssue {{
              title
              body
            }}
            ... on Issue {{
""" + _CONTENT_FIELDS + """
            }}
            ... on PullRequest {{
""" + _CONTENT_FIELDS + """
            }}
          }}
          fieldValues(first: {field_values}) {{
            nodes {{
""" + _field_values_fragment() + """
            }}
          }}
        }}
        pageInfo {{
          hasNextPage
          endCursor
        }}
      }}
"""

_PROJECT_METADATA = """
      id
      title
      shortDescription
      readme
      number
      public
      closed
      url
      views(first: {views}) {{
        nodes {{
          id
          name
          layout
        }}
      }}
      fields(first: {fields}) {{
        nodes {{
          ... on ProjectV2Field {{
            id
            name
            dataType
          }}
          ... on ProjectV2SingleSelectField {{
            id
            name
            dataType
            options {{
              id
              name
              color
            }}
          }}
          ... on ProjectV2IterationField {{
            id
            name
            dataType
            configuration {{
              iterations {{
                id
                title
                startDate
                duration
              }}
            }}
          }}
        }}
      }}
"""

_REPO_WRAPPER = """
query($owner: String!, $repo: String!, $number: Int!{cursor_var}) {{{{
  repository(owner: $owner, name: $repo) {{{{
    projectV2(number: $number) {{{{
{{body}}
    }}}}
  }}}}
}}}}
"""

_ORG_WRAPPER = """
query($owner: String!, $number: Int!{cursor_var}) {{{{
  organization(login: $owner) {{{{
    projectV2(number: $number) {{{{
{{body}}
    }}}}
  }}}}
}}}}
"""


def _items(caps: QueryCaps, *, paged: bool) -> str:
    return _ITEMS_CONNECTION.format(
        items=caps.items,
        after=", after: $cursor" if paged else "",
        comments=caps.comments,
        labels=caps.labels,
        assignees=caps.assignees,
        field_values=caps.field_values,
    )


def _wrap(is_org: bool, body: str, *, paged: bool) -> str:
    wrapper = _ORG_WRAPPER if is_org else _REPO_WRAPPER
    outer = wrapper.format(cursor_var=", $cursor: String!" if paged else "")
    return outer.format(body=body)


def project_query(is_org: bool, caps: QueryCaps) -> str:
    """Root query: project metadata, fields, views and the first items page."""
    body = _PROJECT_METADATA.format(views=caps.views, fields=caps.fields) + _items(caps, paged=False)
    return _wrap(is_org, body, paged=False)


def items_page_query(is_org: bool, caps: QueryCaps) -> str:
    """Follow-up query returning one more items page after ``$cursor``."""
    return _wrap(is_org, _items(caps, paged=True), paged=True)


def owner_key(is_org: bool) -> str:
    return "organization" if is_org else "repository"
