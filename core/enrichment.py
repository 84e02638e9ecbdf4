"""Search index enrichment and merging of citation results."""

from typing import Any, Sequence

import structlog

from core.fetcher import gather_all


async def enrich_rows(
    search_index: Any,
    index: str,
    rows: Sequence[dict[str, Any]],
    log: structlog.BoundLogger,
    key: str = "number",
) -> list[list[dict[str, Any]]]:
    """
    Look up the search index documents of every graph row.

    One lookup per row, keyed by the row's ``key`` value and run
    concurrently. A row without a key value gets no documents. Any failed
    lookup fails the whole enrichment.

    Args:
        search_index: Object exposing ``async search(index, field, value)``.
        index: Search index collection name.
        rows: Normalized graph rows.
        log: Logger bound to the calling operation.
        key: Row field used as the natural key.

    Returns:
        list[list[dict]]: Matching documents per row, in row order.
    """
    if not rows:
        return []

    async def lookup(row: dict[str, Any]) -> list[dict[str, Any]]:
        value = row.get(key)
        if value is None:
            return []
        return await search_index.search(index, key, value)

    per_row = await gather_all(*(lookup(row) for row in rows))

    log.debug(
        "Enrichment completed",
        index=index,
        rows=len(rows),
        documents=sum(len(documents) for documents in per_row),
    )
    return per_row


def merge_documents(
    per_row: Sequence[Sequence[dict[str, Any]]],
    name_key: str,
) -> list[dict[str, Any]]:
    """
    Flatten per-row documents and move named documents to the front.

    The sort is stable: documents with the same name presence keep their
    order.
    """
    flattened = [document for documents in per_row for document in documents]
    return sorted(flattened, key=lambda document: not document.get(name_key))
