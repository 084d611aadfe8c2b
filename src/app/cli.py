from __future__ import annotations
import argparse
import sys
from typing import List, NoReturn, Optional

from core.config import GITHUB_KEYS, NOTION_KEYS, load_config, validate_config
from integrations.github import GitHubError, InvalidProjectUrl


class CliParser(argparse.ArgumentParser):
    """Usage errors exit with status 1, like every other precondition failure."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = CliParser(description="GitHub Projects (v2) → Notion migration CLI")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_dump = sub.add_parser("dump-github-project", help="Dump a GitHub project to a JSON snapshot")
    p_dump.add_argument("project_url", help="https://github.com/orgs/<org>/projects/<n> or https://github.com/<owner>/<repo>/projects/<n>")
    p_dump.add_argument("--out", default=None, help="Write the snapshot to this file instead of stdout")

    p_imp = sub.add_parser("import-to-notion", help="Create one Notion page per non-archived snapshot item")
    p_imp.add_argument("project_file", help="Snapshot written by dump-github-project")
    p_imp.add_argument("database_id", help="Destination Notion database id")
    p_imp.add_argument("status_field", nargs="?", default=None, help="Notion property receiving the Status field (default: Status)")
    p_imp.add_argument("label_field", nargs="?", default=None, help="Notion property receiving labels (default: Labels)")
    p_imp.add_argument("imported_field", nargs="?", default=None, help="Checkbox property set on every imported page")
    p_imp.add_argument("--clear", action="store_true", help="Archive every existing page in the database first")
    p_imp.add_argument("--max-retries", type=int, default=None, help="Page creation attempts per item (default: 3)")
    p_imp.add_argument("--assignees-field", default=None, help="Select/multi-select property receiving assignee logins")
    p_imp.add_argument("--failed-out", default=None, help="Where to write failed items (default: failed-items.json)")

    p_create = sub.add_parser("create-notion-properties", help="Declare the project property set on a database")
    p_create.add_argument("database_id")

    p_update = sub.add_parser("update-notion-properties", help="Declare the GitHub timestamp properties on a database")
    p_update.add_argument("database_id")

    p_clear = sub.add_parser("clear-notion", help="Archive every page in a database and exit")
    p_clear.add_argument("database_id")
    return parser


def _missing(cfg, keys) -> bool:
    missing = validate_config(cfg, keys)
    if missing:
        print(f"[cli] missing {', '.join(missing)} in environment", file=sys.stderr)
        return True
    return False


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()

    if args.cmd == "dump-github-project":
        if _missing(cfg, GITHUB_KEYS):
            return 1
        from services.export import run_export
        try:
            run_export(cfg, args.project_url, out=args.out)
        except InvalidProjectUrl as e:
            print(f"[export] {e}", file=sys.stderr)
            return 1
        except GitHubError as e:
            print(f"[export] error fetching project: {e}", file=sys.stderr)
            for err in e.errors:
                print(f"[export] GraphQL error: {err}", file=sys.stderr)
            return 1
        return 0

    if _missing(cfg, NOTION_KEYS):
        return 1

    if args.cmd == "import-to-notion":
        from services.sync import options_from_config, run_import
        options = options_from_config(
            cfg,
            clear=args.clear,
            max_retries=args.max_retries,
            failed_items_path=args.failed_out,
        )
        mapping = options.mapping
        if args.status_field:
            mapping.select_fields["Status"] = args.status_field
        if args.label_field:
            mapping.label_property = args.label_field
        mapping.imported_property = args.imported_field
        mapping.assignees_property = args.assignees_field
        try:
            run_import(cfg, args.project_file, args.database_id, options)
        except Exception as e:
            # snapshot unreadable or schema unavailable; nothing was imported
            print(f"[import] aborted: {e}", file=sys.stderr)
            return 1
        return 0

    if args.cmd in ("create-notion-properties", "update-notion-properties"):
        from services.schema import run_provision
        preset = "create" if args.cmd == "create-notion-properties" else "update"
        return 0 if run_provision(cfg, args.database_id, preset) else 1

    if args.cmd == "clear-notion":
        from services.sync import run_clear
        run_clear(cfg, args.database_id)
        return 0
    return 1


def _run(cmd: str) -> None:
    sys.exit(main([cmd, *sys.argv[1:]]))


def dump_github_project() -> None:
    _run("dump-github-project")


def import_to_notion() -> None:
    _run("import-to-notion")


def create_notion_properties() -> None:
    _run("create-notion-properties")


def update_notion_properties() -> None:
    _run("update-notion-properties")


if __name__ == "__main__":
    sys.exit(main())
