"""
Command-line citation lookup.

Usage:
    python query_citations.py cited_by 5 --search alpha --limit 20
    python query_citations.py references_mentioning_article 5 --count-only
"""

import argparse
import asyncio
import json
import sys

from pydantic import ValidationError

from core.citations import CitationQueryService
from core.config import get_settings
from core.exceptions import CitationEngineException
from core.logger import get_logger
from core.relations import RELATIONS
from database.graph_store import GraphStore
from database.search_index import SearchIndex
from models.schema import CitationFilter

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Query citations around an article")
    parser.add_argument(
        "relation",
        choices=sorted(RELATIONS),
        help="Citation relation to query",
    )
    parser.add_argument("article_id", help="Citation number of the article")
    parser.add_argument(
        "--search",
        default=None,
        help="Case-insensitive keyword filter",
    )
    parser.add_argument("--skip", type=int, default=0, help="Results to skip")
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.DEFAULT_PAGE_LIMIT,
        help="Maximum results in the page",
    )
    parser.add_argument(
        "--count-only",
        action="store_true",
        help="Print only the unfiltered total",
    )
    return parser.parse_args(argv)


async def main(args: argparse.Namespace) -> int:
    async with GraphStore() as graph_store, SearchIndex() as search_index:
        service = CitationQueryService(graph_store, search_index)

        try:
            if args.count_only:
                total = await service.count(args.relation, args.article_id)
                print(json.dumps({"total": total}))
                return 0

            citation_filter = CitationFilter(
                subject_id=args.article_id,
                search_term=args.search,
                skip=args.skip,
                limit=args.limit,
            )
            page = await service.query(args.relation, citation_filter)
            print(page.model_dump_json(indent=2))
            return 0

        except ValidationError as e:
            print(f"\n❌ Invalid arguments: {e}\n", file=sys.stderr)
            return 2

        except CitationEngineException as e:
            logger.error("Citation lookup failed", error=e.message, details=e.details)
            print(f"\n❌ Error: {e.message}\n", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main(parse_args())))
