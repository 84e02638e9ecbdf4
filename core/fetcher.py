"""Concurrent graph fetching and record normalization."""

import asyncio
from typing import Any, Awaitable, Mapping, Sequence

import structlog

from core.query_builder import COUNT_COLUMN, ENTITY_COLUMN, ID_COLUMN, QueryPlan
from core.relations import RelationDescriptor


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """
    Run awaitables concurrently and return their results in order.

    The first failure cancels the remaining tasks and is re-raised as is.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Let cancelled siblings finish unwinding before propagating
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def extract_count(records: Sequence[Mapping[str, Any]], key: str = COUNT_COLUMN) -> int:
    """
    Read a scalar count from the first record.

    No rows, a missing column or a null value all count as zero.
    """
    if not records:
        return 0
    value = records[0].get(key)
    if value is None:
        return 0
    return int(value)


def normalize_record(
    record: Mapping[str, Any],
    descriptor: RelationDescriptor,
) -> dict[str, Any]:
    """
    Turn a page query record into a plain dict.

    Named relations get the entity's properties plus its element id under
    ``id`` and its display name (possibly None) under the relation's name
    key. Unnamed relations return the raw property map.
    """
    entity = record.get(ENTITY_COLUMN)
    properties = dict(entity.items()) if entity is not None else {}

    if not descriptor.named:
        return properties

    return {
        **properties,
        "id": record.get(ID_COLUMN),
        descriptor.name_key: record.get(descriptor.name_key),
    }


async def fetch_count_and_page(
    graph_store: Any,
    count_plan: QueryPlan,
    page_plan: QueryPlan,
    log: structlog.BoundLogger,
) -> tuple[int, list[Any]]:
    """
    Execute the count and page plans concurrently.

    Args:
        graph_store: Object exposing ``async run_query(query, parameters)``.
        count_plan: Plan returning a single ``totalCount`` row.
        page_plan: Plan returning the page rows.
        log: Logger bound to the calling operation.

    Returns:
        tuple[int, list]: Total count and the page records.
    """
    count_records, page_records = await gather_all(
        graph_store.run_query(count_plan.query, count_plan.parameters),
        graph_store.run_query(page_plan.query, page_plan.parameters),
    )

    total = extract_count(count_records)
    log.debug(
        "Graph fetch completed",
        total=total,
        page_rows=len(page_records),
    )
    return total, list(page_records)
