"""Utilities for interacting with Notion."""

from .client import NotionWrapper  # noqa: F401
from .content import build_item_markdown, build_page_blocks, markdown_to_blocks  # noqa: F401
from .mapper import (
    FieldMapping,
    UnsupportedPropertyType,
    extract_date,
    item_title,
    map_item_to_notion_properties,
    select_or_multiselect,
)  # noqa: F401
from .schema import PROPERTY_SETS  # noqa: F401
