"""gamefinder モジュールのエントリーポイント"""
import argparse
import asyncio
import json
import logging
import sys

from gamefinder.config import settings
from gamefinder.database import get_db
from gamefinder.executor import SearchExecutor
from gamefinder.models.game import ALLOWED_TAGS
from gamefinder.models.search import FilterSet


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m gamefinder")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="ゲームを検索")
    search.add_argument("--search", "-q")
    search.add_argument("--user")
    search.add_argument("--tag")
    search.add_argument("--library")
    search.add_argument("--owned-by-group")
    search.add_argument("--public-only", action="store_true")
    search.add_argument("--page", default=1)
    search.add_argument("--page-size", default=0)

    unrated = sub.add_parser("unrated", help="未評価ゲーム一覧")
    unrated.add_argument("user")
    unrated.add_argument("--search", "-q")

    sub.add_parser("tags", help="許可タグ一覧")
    return parser


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "tags":
        print(json.dumps({"success": True, "data": list(ALLOWED_TAGS)}, ensure_ascii=False, indent=2))
        return 0

    db = await get_db()
    try:
        executor = SearchExecutor(db)
        if args.command == "search":
            filters = FilterSet(
                search=args.search,
                user_id=args.user,
                tag=args.tag,
                library_id=args.library,
                owned_by_group=args.owned_by_group,
                public_only=args.public_only,
                page=args.page,
                page_size=args.page_size,
            )
            response = await executor.search(filters)
        else:
            response = await executor.unrated(args.user, args.search)
    finally:
        await db.close()

    print(json.dumps(response.to_dict(), ensure_ascii=False, indent=2))
    return 0 if response.success else 1


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    sys.exit(asyncio.run(main()))
