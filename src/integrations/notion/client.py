from __future__ import annotations
import json
import time
from typing import Any, Callable, Dict, Iterable, Optional

from notion_client import Client


def error_details(exc: Exception) -> Optional[str]:
    body = getattr(exc, "body", None)
    if not body:
        return None
    if isinstance(body, str):
        return body
    try:
        return json.dumps(body, ensure_ascii=False, indent=2)
    except (TypeError, ValueError):
        return str(body)


class NotionWrapper:
    """Wrapper over the Notion SDK scoped to one destination database."""

    def __init__(
        self,
        token: str,
        database_id: str,
        *,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.token = token
        self.database_id = database_id
        self.max_retries = max(1, int(max_retries))
        self.retry_delay = retry_delay
        self._sleep = sleep or time.sleep
        self.client = Client(auth=token)

    # --- Schema -----------------------------------------------------------
    def retrieve_schema(self) -> Dict[str, Any]:
        """Return the database property map (name -> {type, ...})."""
        db = self.client.databases.retrieve(database_id=self.database_id)
        return db.get("properties", {}) or {}

    def update_properties(self, properties: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.databases.update(database_id=self.database_id, properties=properties)

    # --- Utilities over Database -----------------------------------------
    def iter_database_pages(self, page_size: int = 100) -> Iterable[Dict[str, Any]]:
        """Yield pages in the target database (paginated)."""
        start_cursor: Optional[str] = None
        while True:
            kwargs: Dict[str, Any] = {
                "database_id": self.database_id,
                "page_size": page_size,
            }
            if start_cursor:
                kwargs["start_cursor"] = start_cursor
            res = self.client.databases.query(**kwargs)
            for pg in res.get("results", []):
                yield pg
            if not res.get("has_more"):
                break
            start_cursor = res.get("next_cursor")
            if not start_cursor:
                break

    def clear_database(self) -> int:
        """Archive all pages in the database. Returns number of pages archived.

        A page that fails to archive is logged and skipped.
        """
        n = 0
        for pg in self.iter_database_pages():
            pid = pg.get("id")
            if not pid:
                continue
            try:
                self.client.pages.update(page_id=pid, archived=True)
            except Exception as e:
                print(f"[clear] failed to archive page {pid}: {e}")
                continue
            n += 1
            if n % 10 == 0:
                print(f"[clear] cleared {n} pages...")
        return n

    # --- Pages ------------------------------------------------------------
    def create_page(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.pages.create(**payload)

    def create_page_with_retry(self, payload: Dict[str, Any], title: str) -> Optional[Dict[str, Any]]:
        """Create a page, retrying with linear backoff (attempt x retry_delay).

        Returns None once every attempt has failed.
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                page = self.create_page(payload)
                print(f"[import] created page: {title}")
                return page
            except Exception as e:
                if attempt >= self.max_retries:
                    print(f"[import] failed to create page \"{title}\" after {self.max_retries} attempts: {e}")
                    details = error_details(e)
                    if details:
                        print(f"[import] error details: {details}")
                    return None
                print(f"[import] attempt {attempt} failed for \"{title}\", retrying...")
                self._sleep(self.retry_delay * attempt)
        return None
