import pytest

from core.logger import get_logger
from tests.fakes import FakeGraphStore, FakeSearchIndex, article_row


@pytest.fixture
def log():
    return get_logger("tests")


@pytest.fixture
def alpha_stores() -> tuple[FakeGraphStore, FakeSearchIndex]:
    """Article 5 is cited by article 1 (named Alpha) and article 2 (unnamed)."""
    graph = FakeGraphStore(
        count_rows=[{"totalCount": 2}],
        page_rows=[article_row("2", citing_cases=9), article_row("1", name="Alpha", citing_cases=3)],
    )
    index = FakeSearchIndex(
        documents={
            ("articles", "1"): [{"number": "1", "name": "Alpha", "text": "Article 1"}],
            ("articles", "2"): [{"number": "2", "text": "Article 2"}],
        }
    )
    return graph, index
