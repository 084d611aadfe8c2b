from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from core.config import Config
from integrations.github.models import ProjectItem, ProjectSnapshot
from integrations.notion import (
    NotionWrapper,
    build_page_blocks,
    item_title,
    map_item_to_notion_properties,
)
from services.sync.results import ImportOptions, ImportResult
from services.sync.utils import ProgressReporter
from state import store


def options_from_config(cfg: Config, **overrides: Any) -> ImportOptions:
    opts = ImportOptions(
        max_retries=cfg.notion_max_retries,
        retry_delay=cfg.notion_retry_delay,
        page_delay=cfg.notion_page_delay,
        block_limit=cfg.notion_block_limit,
        title_limit=cfg.notion_title_limit,
        failed_items_path=cfg.failed_items_path,
    )
    for key, value in overrides.items():
        if value is not None:
            setattr(opts, key, value)
    return opts


def build_page_payload(
    item: ProjectItem,
    database_id: str,
    schema: Dict[str, Any],
    options: ImportOptions,
) -> Dict[str, Any]:
    """Parent reference, mapped properties and (optional) content blocks."""
    properties = map_item_to_notion_properties(
        item, schema, options.mapping, title_limit=options.title_limit
    )
    payload: Dict[str, Any] = {
        "parent": {"database_id": database_id},
        "properties": properties,
    }
    blocks = build_page_blocks(item.content, title=item_title(item), block_limit=options.block_limit)
    if blocks:
        payload["children"] = blocks
    return payload


def run_clear(cfg: Config, database_id: str, *, notion: Optional[NotionWrapper] = None) -> int:
    notion = notion or NotionWrapper(cfg.notion_token or "", database_id)
    print("[clear] clearing existing pages...")
    try:
        cleared = notion.clear_database()
    except Exception as e:
        # listing failed mid-way; archived pages stay archived
        print(f"[clear] listing pages failed: {e}")
        return 0
    print(f"[clear] cleared {cleared} existing pages")
    return cleared


def run_import(
    cfg: Config,
    project_file: str,
    database_id: str,
    options: Optional[ImportOptions] = None,
) -> ImportResult:
    """Replay a project snapshot into a Notion database, one page per item.

    Archived items are skipped. A page that still fails after the retry
    ceiling is recorded in the failed-items file and the run continues.
    """
    start_ts = time.perf_counter()
    options = options or options_from_config(cfg)
    snapshot = ProjectSnapshot.from_dict(store.load_snapshot(project_file))
    notion = NotionWrapper(
        cfg.notion_token or "",
        database_id,
        max_retries=options.max_retries,
        retry_delay=options.retry_delay,
    )
    schema = notion.retrieve_schema()
    print(
        f"[import] start | project={snapshot.title} | items={len(snapshot.items)} | "
        f"clear={options.clear} | max_retries={options.max_retries}"
    )

    cleared = run_clear(cfg, database_id, notion=notion) if options.clear else 0

    total = len(snapshot.items)
    print(f"[import] processing {total} items...")
    progress = ProgressReporter(total)
    failed_items: List[Dict[str, Any]] = []
    skipped = 0
    for item in snapshot.items:
        if item.is_archived:
            print("[import] skipping archived item")
            skipped += 1
            continue
        title = item_title(item)
        page = None
        try:
            payload = build_page_payload(item, database_id, schema, options)
        except Exception as e:
            print(f"[import] could not build page for \"{title}\": {e}")
        else:
            page = notion.create_page_with_retry(payload, title)
        if page is None:
            failed_items.append({"title": title, "createdAt": item.created_at})
        progress.record(page is not None)
        if options.page_delay:
            time.sleep(options.page_delay)

    duration = time.perf_counter() - start_ts
    print("[import] completed")
    print(f"[import] successfully processed: {progress.ok} items")
    print(f"[import] failed: {progress.failed} items")
    failed_file: Optional[str] = None
    if failed_items:
        print("[import] failed items:")
        for row in failed_items:
            print(f"  - {row['title']} (created: {row['createdAt']})")
        failed_file = str(store.write_failed_items(options.failed_items_path, failed_items))
        print(f"[import] failed items saved to {failed_file}")

    return ImportResult(
        total=total,
        created=progress.ok,
        failed=progress.failed,
        skipped_archived=skipped,
        cleared=cleared,
        duration=duration,
        failed_items=failed_items,
        failed_items_file=failed_file,
    )
