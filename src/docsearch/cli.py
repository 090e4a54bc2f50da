"""Command-line interface: index, search, and inspect the document store.

Unlike ``POST /api/index``, ``docsearch index`` runs in the foreground and
exits with the number of documents indexed printed.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from docsearch.config import settings
from docsearch.errors import DocSearchError
from docsearch.service import DocumentService, build_default_service

logger = logging.getLogger(__name__)


async def _index(service: DocumentService, args: argparse.Namespace) -> int:
    root = Path(args.root)
    if not root.is_dir():
        logger.error("Input directory does not exist: %s", root)
        return 1
    if args.reindex:
        await service.store.delete_all()
    count = await service.indexer.index_directory(root)
    print(f"Indexed {count} document(s) from {root}")
    return 0


async def _search(service: DocumentService, args: argparse.Namespace) -> int:
    response = await service.search(args.query, args.limit)
    if not response.results:
        print("No relevant documents found.")
    for hit in response.results:
        labels = ", ".join(x for x in (hit.category, hit.team, hit.project) if x)
        print(f"{hit.similarity:.3f}  {hit.filename}" + (f"  [{labels}]" if labels else ""))
    return 0


async def _stats(service: DocumentService, args: argparse.Namespace) -> int:
    stats = await service.stats()
    print(json.dumps(stats.model_dump(by_alias=True), indent=2))
    return 0


async def _clear(service: DocumentService, args: argparse.Namespace) -> int:
    result = await service.delete_all()
    print(result.message)
    return 0 if result.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docsearch", description="Semantic document index.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_index = sub.add_parser("index", help="Index a directory tree")
    p_index.add_argument("root", nargs="?", default=settings.documents_path, help="Directory to index")
    p_index.add_argument("--reindex", action="store_true", help="Clear the store first")
    p_index.set_defaults(handler=_index)

    p_search = sub.add_parser("search", help="Semantic search")
    p_search.add_argument("query")
    p_search.add_argument("--limit", type=int, default=settings.search_limit)
    p_search.set_defaults(handler=_search)

    p_stats = sub.add_parser("stats", help="Show corpus facets")
    p_stats.set_defaults(handler=_stats)

    p_clear = sub.add_parser("clear", help="Delete every indexed document")
    p_clear.set_defaults(handler=_clear)

    return parser


def main(
    argv: Sequence[str] | None = None,
    service_factory: Callable[[], DocumentService] = build_default_service,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    service = service_factory()
    try:
        return asyncio.run(args.handler(service, args))
    except (DocSearchError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
