from __future__ import annotations

from typing import Any, Dict, Optional

from core.config import Config
from integrations.notion import NotionWrapper
from integrations.notion.client import error_details
from integrations.notion.schema import PROPERTY_SETS, describe


def run_provision(
    cfg: Config,
    database_id: str,
    preset: str = "create",
    *,
    properties: Optional[Dict[str, Any]] = None,
) -> bool:
    """Declare a fixed property set on the database in one update call.

    Returns False when the update fails; there is no retry.
    """
    if properties is None:
        if preset not in PROPERTY_SETS:
            raise ValueError(f"Unknown property set: {preset}")
        properties = PROPERTY_SETS[preset]
    notion = NotionWrapper(cfg.notion_token or "", database_id)
    try:
        notion.update_properties(properties)
    except Exception as e:
        print(f"[schema] error updating database properties: {e}")
        details = error_details(e)
        if details:
            print(f"[schema] error details: {details}")
        return False
    print("[schema] database properties updated successfully")
    for line in describe(properties):
        print(f"  - {line}")
    return True
