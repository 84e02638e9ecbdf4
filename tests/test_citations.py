import asyncio

import pytest
from pydantic import ValidationError

from core.citations import CitationQueryService
from core.exceptions import UnknownRelationError
from core.relations import CITED_BY
from models.schema import CitationFilter, CitationPage
from tests.fakes import FakeGraphStore, FakeSearchIndex, article_row


def _run(coro):
    return asyncio.run(coro)


def test_cited_by_puts_named_article_first(alpha_stores) -> None:
    graph, index = alpha_stores
    service = CitationQueryService(graph, index)

    page = _run(service.get_cited_by_articles(CitationFilter(subject_id="5", skip=0, limit=10)))

    assert isinstance(page, CitationPage)
    assert page.total == 2
    assert page.items == [
        {"number": "1", "name": "Alpha", "text": "Article 1"},
        {"number": "2", "text": "Article 2"},
    ]
    assert sorted(index.calls) == [("articles", "number", "1"), ("articles", "number", "2")]


def test_cited_by_search_matching_nothing(alpha_stores) -> None:
    _, index = alpha_stores
    graph = FakeGraphStore(count_rows=[{"totalCount": 0}], page_rows=[])
    service = CitationQueryService(graph, index)

    page = _run(service.get_cited_by_articles(CitationFilter(subject_id="5", search_term="zzz")))

    assert page.total == 0
    assert page.items == []
    assert index.calls == []
    for query, parameters in graph.calls:
        assert "WHERE" in query
        assert parameters["searchTerm"] == "zzz"


def test_count_query_without_rows_gives_zero_total() -> None:
    service = CitationQueryService(FakeGraphStore(count_rows=[], page_rows=[]), FakeSearchIndex())

    page = _run(service.get_articles_cited_by(CitationFilter(subject_id="5")))

    assert page == CitationPage(items=[], total=0)


def test_total_is_not_reconciled_with_index_matches(alpha_stores) -> None:
    graph, _ = alpha_stores
    index = FakeSearchIndex(documents={("articles", "1"): [{"number": "1", "name": "Alpha"}]})
    service = CitationQueryService(graph, index)

    page = _run(service.get_cited_by_articles(CitationFilter(subject_id="5")))

    assert page.total == 2
    assert page.items == [{"number": "1", "name": "Alpha"}]


def test_citing_uses_reverse_direction(alpha_stores) -> None:
    graph, index = alpha_stores
    service = CitationQueryService(graph, index)

    _run(service.get_articles_cited_by(CitationFilter(subject_id="5")))

    for query, parameters in graph.calls:
        assert "(a:Article {number: $subjectId})-[:CITES]->(s:Article)" in query
        assert parameters["subjectId"] == "5"


def test_cases_sorted_on_case_name() -> None:
    graph = FakeGraphStore(
        count_rows=[{"totalCount": 2}],
        page_rows=[
            {"entity": {"number": "C-2"}, "caseName": None, "elementId": "4:case:2"},
            {"entity": {"number": "C-1"}, "caseName": "Doe v. Roe", "elementId": "4:case:1"},
        ],
    )
    index = FakeSearchIndex(
        documents={
            ("cases", "C-1"): [{"number": "C-1", "caseName": "Doe v. Roe"}],
            ("cases", "C-2"): [{"number": "C-2", "name": "ignored for cases"}],
        }
    )
    service = CitationQueryService(graph, index)

    page = _run(service.get_cases_citing_article(CitationFilter(subject_id="5")))

    assert [doc["number"] for doc in page.items] == ["C-1", "C-2"]
    assert {call[0] for call in index.calls} == {"cases"}


def test_references_are_returned_without_enrichment() -> None:
    references = [
        {"entity": {"context": "as held in Art. 5", "text": "Art. 5"}},
        {"entity": {"context": "see also Article 5", "text": "Article 5"}},
    ]
    graph = FakeGraphStore(count_rows=[{"totalCount": 2}], page_rows=references)
    index = FakeSearchIndex()
    service = CitationQueryService(graph, index)

    page = _run(service.get_references_mentioning_article(CitationFilter(subject_id="5")))

    assert page.total == 2
    assert page.items == [ref["entity"] for ref in references]
    assert len(page.items) == len(references)
    assert index.calls == []


def test_graph_failure_propagates_unchanged() -> None:
    error = ConnectionError("bolt connection refused")
    index = FakeSearchIndex()
    service = CitationQueryService(FakeGraphStore(error=error), index)

    with pytest.raises(ConnectionError) as exc_info:
        _run(service.get_cited_by_articles(CitationFilter(subject_id="5")))

    assert exc_info.value is error
    assert index.calls == []


def test_index_failure_fails_the_whole_query(alpha_stores) -> None:
    graph, _ = alpha_stores
    error = RuntimeError("qdrant unavailable")
    service = CitationQueryService(graph, FakeSearchIndex(error=error))

    with pytest.raises(RuntimeError) as exc_info:
        _run(service.get_cited_by_articles(CitationFilter(subject_id="5")))

    assert exc_info.value is error


@pytest.mark.parametrize(
    "method, relationship",
    [
        ("get_cited_by_articles_count", "CITES"),
        ("get_articles_cited_by_count", "CITES"),
        ("get_cases_citing_article_count", "REFERS_TO"),
        ("get_references_mentioning_article_count", "MENTIONS"),
    ],
)
def test_count_only_operations(method, relationship) -> None:
    graph = FakeGraphStore(count_rows=[{"count": 12}])
    service = CitationQueryService(graph, FakeSearchIndex())

    total = _run(getattr(service, method)("5"))

    assert total == 12
    (query, parameters), = graph.calls
    assert f"[:{relationship}]" in query
    assert "WHERE" not in query
    assert "SKIP" not in query
    assert parameters == {"subjectId": "5"}


def test_count_only_defaults_to_zero() -> None:
    service = CitationQueryService(FakeGraphStore(count_rows=[]), FakeSearchIndex())

    assert _run(service.get_references_mentioning_article_count("5")) == 0


def test_query_accepts_relation_names(alpha_stores) -> None:
    graph, index = alpha_stores
    service = CitationQueryService(graph, index)

    by_name = _run(service.query("cited_by", CitationFilter(subject_id="5")))
    by_descriptor = _run(service.query(CITED_BY, CitationFilter(subject_id="5")))

    assert by_name == by_descriptor


def test_unknown_relation_is_rejected() -> None:
    service = CitationQueryService(FakeGraphStore(), FakeSearchIndex())

    with pytest.raises(UnknownRelationError):
        _run(service.count("overruled_by", "5"))


def test_named_rows_flow_into_enrichment_lookups() -> None:
    graph = FakeGraphStore(
        count_rows=[{"totalCount": 1}],
        page_rows=[article_row("7", name=None)],
    )
    index = FakeSearchIndex(documents={("articles", "7"): [{"number": "7"}]})
    service = CitationQueryService(graph, index)

    page = _run(service.get_cited_by_articles(CitationFilter(subject_id="5")))

    assert page.items == [{"number": "7"}]
    assert index.calls == [("articles", "number", "7")]


@pytest.mark.parametrize("term", ["", "   ", None])
def test_blank_search_term_is_no_search(term) -> None:
    assert CitationFilter(subject_id="5", search_term=term).search_term is None


def test_search_term_is_trimmed() -> None:
    assert CitationFilter(subject_id="5", search_term="  Alpha ").search_term == "Alpha"


@pytest.mark.parametrize("field", ["skip", "limit"])
def test_negative_pagination_is_rejected(field) -> None:
    with pytest.raises(ValidationError):
        CitationFilter(subject_id="5", **{field: -1})
