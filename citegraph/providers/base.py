"""
base provider interface for bibliographic metadata sources.
all providers must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Any

from ..core.models import PaperRecord, CitingPaper


class MetadataProvider(ABC):
    """
    abstract base class for paper metadata providers.
    providers fetch data from external APIs (Semantic Scholar, OpenAlex).

    providers may raise on transport or payload errors; the
    MetadataClient turns those into empty results.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """provider name for logging."""
        pass

    @abstractmethod
    def get_paper(self, paper_id: str) -> Optional[PaperRecord]:
        """
        get paper by id.
        paper_id can be a DOI or a provider-native id.
        returns None when the provider has no such paper.
        """
        pass

    @abstractmethod
    def get_citations(self, paper_id: str, limit: int = 100) -> List[CitingPaper]:
        """get papers that cite this paper (forward cites)."""
        pass

    def start_build(self):
        """
        called by GraphBuilder before every build.
        providers drop state an earlier build left behind, such as a
        suspension after transport failures.
        """
        pass

    def close(self):
        """release network resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def is_doi(paper_id: str) -> bool:
    """true for bare or url-prefixed DOIs."""
    return paper_id.startswith("10.") or paper_id.startswith("https://doi.org/")


def strip_doi_prefix(paper_id: str) -> str:
    """normalize a DOI to its bare 10.x/... form."""
    for prefix in ("https://doi.org/", "http://doi.org/", "doi:", "DOI:"):
        if paper_id.startswith(prefix):
            return paper_id[len(prefix):]
    return paper_id


def parse_year(value: Any) -> Optional[int]:
    """coerce a provider year field, None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def parse_count(value: Any) -> int:
    """coerce a provider count field to a non-negative int."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (ValueError, TypeError):
        return 0
