"""
shared fixtures: an in-memory provider standing in for a bibliographic API.
"""

from collections import Counter
from typing import Dict, List, Optional, Set

import pytest

from citegraph.core.models import PaperRecord, CitingPaper
from citegraph.providers.base import MetadataProvider


class StubProvider(MetadataProvider):
    """
    serves canned records and citation lists, counts every call.
    ids in `failing` raise, ids missing from `papers` return None.
    """

    def __init__(
        self,
        papers: Optional[Dict[str, PaperRecord]] = None,
        citations: Optional[Dict[str, List[CitingPaper]]] = None,
        failing: Optional[Set[str]] = None,
        fail_everything: bool = False
    ):
        self.papers = papers or {}
        self.citations = citations or {}
        self.failing = failing or set()
        self.fail_everything = fail_everything
        self.paper_calls = Counter()
        self.citation_calls = Counter()
        self.builds_started = 0

    @property
    def name(self) -> str:
        return "stub"

    def start_build(self):
        self.builds_started += 1

    def get_paper(self, paper_id: str) -> Optional[PaperRecord]:
        self.paper_calls[paper_id] += 1
        if self.fail_everything or paper_id in self.failing:
            raise ConnectionError(f"stub failure for {paper_id}")
        return self.papers.get(paper_id)

    def get_citations(self, paper_id: str, limit: int = 100) -> List[CitingPaper]:
        self.citation_calls[paper_id] += 1
        if self.fail_everything:
            raise ConnectionError(f"stub failure for citations of {paper_id}")
        return list(self.citations.get(paper_id, []))[:limit]


def make_record(paper_id: str, year: Optional[int] = 2015, citations: int = 0,
                authors: Optional[List[str]] = None) -> PaperRecord:
    return PaperRecord(
        id=paper_id,
        title=f"Paper {paper_id}",
        authors=authors if authors is not None else [f"Author {paper_id}"],
        year=year,
        venue="Test Venue",
        citation_count=citations
    )


@pytest.fixture
def star_provider():
    """P0 cited by P1 and P2."""
    return StubProvider(
        papers={
            "P0": make_record("P0", citations=10),
            "P1": make_record("P1", year=2018),
            "P2": make_record("P2", year=2019),
        },
        citations={
            "P0": [CitingPaper("P1", 2018), CitingPaper("P2", 2019)],
        }
    )


@pytest.fixture
def cyclic_provider():
    """
    two seeds sharing neighbors, with a citation cycle:
    A <- B, A <- C, B <- C, C <- A, D <- C
    """
    return StubProvider(
        papers={pid: make_record(pid) for pid in ("A", "B", "C", "D")},
        citations={
            "A": [CitingPaper("B", 2016), CitingPaper("C", 2017)],
            "B": [CitingPaper("C", 2017)],
            "C": [CitingPaper("A", 2015)],
            "D": [CitingPaper("C", 2017)],
        }
    )
