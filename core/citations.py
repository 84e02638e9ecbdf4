"""
Citation relation query service.

Answers the four citation queries around an article:

    cited_by                       Articles citing the article
    citing                         Articles the article cites
    cases_citing_article           Cases referring to the article
    references_mentioning_article  Free-text references mentioning it

Each paginated query runs its count and page Cypher concurrently, enriches
the page from the search index (except references) and returns the merged
documents with the graph-side total. Every query also has a count-only
variant for badges and summaries.
"""

from typing import Any, Union

from core.enrichment import enrich_rows, merge_documents
from core.fetcher import extract_count, fetch_count_and_page, normalize_record
from core.logger import LoggerMixin, log_async_operation
from core.query_builder import COUNT_ONLY_COLUMN, build_count_only_plan, build_query_plans
from core.relations import (
    CASES_CITING_ARTICLE,
    CITED_BY,
    CITING,
    REFERENCES_MENTIONING_ARTICLE,
    RelationDescriptor,
    get_relation,
)
from models.schema import CitationFilter, CitationPage

RelationRef = Union[str, RelationDescriptor]


class CitationQueryService(LoggerMixin):
    """
    Read-only facade over the citation graph and the search index.

    Args:
        graph_store: Exposes ``async run_query(query, parameters)``.
        search_index: Exposes ``async search(index, match_field, match_value)``.
    """

    def __init__(self, graph_store: Any, search_index: Any) -> None:
        self._graph_store = graph_store
        self._search_index = search_index

    @staticmethod
    def _resolve(relation: RelationRef) -> RelationDescriptor:
        if isinstance(relation, RelationDescriptor):
            return relation
        return get_relation(relation)

    # =========================================================================
    # Generic operations
    # =========================================================================

    async def query(
        self,
        relation: RelationRef,
        citation_filter: CitationFilter,
    ) -> CitationPage:
        """
        Fetch one page of a relation.

        Args:
            relation: Descriptor or registered relation name.
            citation_filter: Subject id, optional search term, skip and limit.

        Returns:
            CitationPage: Merged documents and the distinct graph total.
        """
        descriptor = self._resolve(relation)
        log = log_async_operation(
            descriptor.name,
            subject_id=citation_filter.subject_id,
            search_term=citation_filter.search_term,
            skip=citation_filter.skip,
            limit=citation_filter.limit,
        )
        log.info("Fetching citations")

        count_plan, page_plan = build_query_plans(descriptor, citation_filter)

        try:
            total, records = await fetch_count_and_page(
                self._graph_store, count_plan, page_plan, log
            )
            rows = [normalize_record(record, descriptor) for record in records]

            if descriptor.enriched:
                per_row = await enrich_rows(
                    self._search_index, descriptor.index, rows, log
                )
                items = merge_documents(per_row, descriptor.name_key)
            else:
                items = rows

        except Exception as e:
            log.error(
                "Citation query failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        log.info("Citations fetched", total=total, items=len(items))
        return CitationPage(items=items, total=total)

    async def count(self, relation: RelationRef, subject_id: str) -> int:
        """Count all entities of a relation, ignoring search and pagination."""
        descriptor = self._resolve(relation)
        log = log_async_operation(f"{descriptor.name}_count", subject_id=subject_id)
        log.info("Counting citations")

        plan = build_count_only_plan(descriptor, subject_id)
        try:
            records = await self._graph_store.run_query(plan.query, plan.parameters)
        except Exception as e:
            log.error(
                "Citation count failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        total = extract_count(records, COUNT_ONLY_COLUMN)
        log.info("Citations counted", total=total)
        return total

    # =========================================================================
    # Named relations
    # =========================================================================

    async def get_cited_by_articles(self, citation_filter: CitationFilter) -> CitationPage:
        """Articles citing the filter's article."""
        return await self.query(CITED_BY, citation_filter)

    async def get_cited_by_articles_count(self, article_id: str) -> int:
        return await self.count(CITED_BY, article_id)

    async def get_articles_cited_by(self, citation_filter: CitationFilter) -> CitationPage:
        """Articles the filter's article cites."""
        return await self.query(CITING, citation_filter)

    async def get_articles_cited_by_count(self, article_id: str) -> int:
        return await self.count(CITING, article_id)

    async def get_cases_citing_article(self, citation_filter: CitationFilter) -> CitationPage:
        """Cases referring to the filter's article, named cases first."""
        return await self.query(CASES_CITING_ARTICLE, citation_filter)

    async def get_cases_citing_article_count(self, article_id: str) -> int:
        return await self.count(CASES_CITING_ARTICLE, article_id)

    async def get_references_mentioning_article(
        self,
        citation_filter: CitationFilter,
    ) -> CitationPage:
        """Raw Reference nodes mentioning the filter's article."""
        return await self.query(REFERENCES_MENTIONING_ARTICLE, citation_filter)

    async def get_references_mentioning_article_count(self, article_id: str) -> int:
        return await self.count(REFERENCES_MENTIONING_ARTICLE, article_id)
