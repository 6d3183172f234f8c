#!/usr/bin/env python3
"""Command line front-end for a spec workspace.

Usage:
    specbook tree
    specbook add "Login" --parent <id> --content "Users sign in with email"
    specbook move <id> --parent <new-parent-id>
    specbook delete <id>
    specbook scan
    specbook mapping
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .errors import SpecbookError
from .mapping.service import MappingService
from .store.models import ObjectDetail, new_object_id
from .store.object_store import ObjectStore

logger = logging.getLogger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _read_content(args: argparse.Namespace) -> str | None:
    if getattr(args, "content_file", None):
        return Path(args.content_file).read_text(encoding="utf-8")
    return getattr(args, "content", None)


def cmd_tree(args: argparse.Namespace) -> int:
    store = ObjectStore(args.workspace)
    _print_json([node.to_dict() for node in store.load_tree()])
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    detail = ObjectStore(args.workspace).read_detail(args.id)
    if detail is None:
        print(f"Error: Object {args.id} not found.", file=sys.stderr)
        return 1
    _print_json(detail.to_dict())
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    detail = ObjectDetail(
        id=args.id or new_object_id(),
        parent_id=args.parent,
        title=args.title,
        completed=args.completed,
        is_state=args.state,
        content=_read_content(args) or "",
    )
    ObjectStore(args.workspace).add_node(detail)
    print(detail.id)
    return 0


def cmd_update(args: argparse.Namespace) -> int:
    changes: dict[str, Any] = {}
    if args.title is not None:
        changes["title"] = args.title
    if args.completed is not None:
        changes["completed"] = args.completed
    if args.state is not None:
        changes["is_state"] = args.state
    content = _read_content(args)
    if content is not None:
        changes["content"] = content

    detail = ObjectStore(args.workspace).patch_node(args.id, **changes)
    _print_json(detail.to_dict())
    return 0


def cmd_move(args: argparse.Namespace) -> int:
    ObjectStore(args.workspace).move_node(args.id, args.parent)
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    removed = ObjectStore(args.workspace).delete_node(args.id)
    _print_json({"removed": removed})
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    snapshot = MappingService(args.workspace).run_scan()
    _print_json({
        "scannedAt": snapshot.scanned_at,
        "entries": len(snapshot.entries),
        "tokenUsage": snapshot.token_usage.to_dict(),
        "changes": [change.to_dict() for change in snapshot.changes()],
    })
    return 0


def cmd_mapping(args: argparse.Namespace) -> int:
    snapshot = MappingService(args.workspace).load_mapping()
    _print_json(snapshot.to_dict() if snapshot else None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="specbook",
        description="Manage a spec object tree and its implementation mapping.",
    )
    parser.add_argument("--workspace", "-w", type=Path, default=Path.cwd(), help="Workspace root (default: cwd)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("tree", help="Print the object tree").set_defaults(func=cmd_tree)

    p = sub.add_parser("show", help="Print one object's detail")
    p.add_argument("id")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("add", help="Add an object")
    p.add_argument("title")
    p.add_argument("--id", help="Object id (default: generated)")
    p.add_argument("--parent", help="Parent object id")
    p.add_argument("--content", help="Body text")
    p.add_argument("--content-file", help="Read body text from file")
    p.add_argument("--completed", action="store_true")
    p.add_argument("--state", action="store_true", help="Mark as a state object")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("update", help="Change fields of an object")
    p.add_argument("id")
    p.add_argument("--title")
    p.add_argument("--content")
    p.add_argument("--content-file")
    p.add_argument("--completed", action=argparse.BooleanOptionalAction, default=None)
    p.add_argument("--state", action=argparse.BooleanOptionalAction, default=None)
    p.set_defaults(func=cmd_update)

    p = sub.add_parser("move", help="Re-parent an object")
    p.add_argument("id")
    p.add_argument("--parent", help="New parent id (omit for root level)")
    p.set_defaults(func=cmd_move)

    p = sub.add_parser("delete", help="Delete an object and its descendants")
    p.add_argument("id")
    p.set_defaults(func=cmd_delete)

    sub.add_parser("scan", help="Run an AI analysis and update the mapping").set_defaults(func=cmd_scan)
    sub.add_parser("mapping", help="Print the last mapping snapshot").set_defaults(func=cmd_mapping)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (SpecbookError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
