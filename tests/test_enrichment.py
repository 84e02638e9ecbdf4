import asyncio

import pytest

from core.enrichment import enrich_rows, merge_documents
from tests.fakes import FakeSearchIndex


def test_merge_puts_named_documents_first_and_is_stable() -> None:
    b1 = {"number": "b1"}
    a1 = {"number": "a1", "name": "First"}
    b2 = {"number": "b2", "name": None}
    a2 = {"number": "a2", "name": "Second"}

    merged = merge_documents([[b1, a1], [], [b2], [a2]], "name")

    assert merged == [a1, a2, b1, b2]


def test_merge_treats_empty_name_as_missing() -> None:
    unnamed = {"number": "1", "caseName": ""}
    named = {"number": "2", "caseName": "Doe v. Roe"}

    assert merge_documents([[unnamed], [named]], "caseName") == [named, unnamed]


def test_merge_only_looks_at_its_name_key() -> None:
    docs = [{"number": "1", "name": "Alpha"}, {"number": "2", "caseName": "Doe"}]

    assert merge_documents([docs], "caseName") == [docs[1], docs[0]]


def test_enrich_rows_looks_up_each_row_by_number(log) -> None:
    index = FakeSearchIndex(
        documents={
            ("cases", "C-1"): [{"number": "C-1"}, {"number": "C-1", "caseName": "dup"}],
        }
    )
    rows = [{"number": "C-1"}, {"number": "C-2"}, {"text": "no number"}]

    per_row = asyncio.run(enrich_rows(index, "cases", rows, log))

    assert per_row == [[{"number": "C-1"}, {"number": "C-1", "caseName": "dup"}], [], []]
    assert sorted(index.calls) == [("cases", "number", "C-1"), ("cases", "number", "C-2")]


def test_enrich_rows_with_no_rows_skips_the_index(log) -> None:
    index = FakeSearchIndex()

    assert asyncio.run(enrich_rows(index, "articles", [], log)) == []
    assert index.calls == []


def test_enrich_rows_propagates_lookup_failure(log) -> None:
    error = TimeoutError("index timeout")
    index = FakeSearchIndex(error=error)

    with pytest.raises(TimeoutError) as exc_info:
        asyncio.run(enrich_rows(index, "articles", [{"number": "1"}], log))

    assert exc_info.value is error


class _RendezvousSearchIndex:
    """Only answers once every expected lookup is in flight."""

    def __init__(self, expected: int) -> None:
        self.expected = expected
        self.in_flight = 0
        self.all_started = None

    async def search(self, index, match_field, match_value):
        if self.all_started is None:
            self.all_started = asyncio.Event()
        self.in_flight += 1
        if self.in_flight == self.expected:
            self.all_started.set()
        await asyncio.wait_for(self.all_started.wait(), timeout=1)
        return [{"number": match_value, "index": index}]


def test_enrich_rows_runs_lookups_concurrently_and_keeps_row_order(log) -> None:
    rows = [{"number": "3"}, {"number": "1"}, {"number": "2"}]

    per_row = asyncio.run(enrich_rows(_RendezvousSearchIndex(expected=3), "articles", rows, log))

    assert per_row == [
        [{"number": "3", "index": "articles"}],
        [{"number": "1", "index": "articles"}],
        [{"number": "2", "index": "articles"}],
    ]
