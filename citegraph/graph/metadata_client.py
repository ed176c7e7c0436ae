"""
metadata client - build-scoped, memoizing front for a provider.

degrade, don't abort: every provider failure becomes None / [] plus a
warning, so one bad paper never stops a build.
"""

import logging
from typing import Dict, List, Optional

from ..core.models import PaperRecord, CitingPaper
from ..providers.base import MetadataProvider

logger = logging.getLogger("citegraph.client")


class MetadataClient:
    """
    fetches paper records and inbound citations through a provider.

    the cache lives as long as this object; GraphBuilder makes a new
    client per build. failures are cached too, so an id that failed
    once is not re-requested within the same build.
    """

    def __init__(self, provider: MetadataProvider, max_citations: int = 100):
        self.provider = provider
        self.max_citations = max_citations

        self._papers: Dict[str, Optional[PaperRecord]] = {}
        self._citations: Dict[str, List[CitingPaper]] = {}

        # stats
        self.api_call_count = 0      # provider round-trips, failed ones included
        self.successful_calls = 0
        self.cache_hits = 0

    def fetch_paper(self, paper_id: str) -> Optional[PaperRecord]:
        """get a paper record, None on any failure."""
        if not paper_id or not paper_id.strip():
            return None

        if paper_id in self._papers:
            self.cache_hits += 1
            logger.debug(f"[client] cache hit for paper {paper_id}")
            return self._papers[paper_id]

        self.api_call_count += 1
        try:
            record = self.provider.get_paper(paper_id)
        except Exception as e:
            logger.warning(f"[client] failed to fetch paper {paper_id}: {e}")
            record = None
        else:
            if record is None:
                logger.warning(f"[client] paper not found: {paper_id}")
            elif not isinstance(record, PaperRecord):
                logger.warning(f"[client] malformed record for {paper_id}: {type(record).__name__}")
                record = None
            else:
                self.successful_calls += 1

        self._papers[paper_id] = record
        return record

    def fetch_citing_papers(self, paper_id: str) -> List[CitingPaper]:
        """get papers citing paper_id, [] on any failure."""
        if not paper_id or not paper_id.strip():
            return []

        if paper_id in self._citations:
            self.cache_hits += 1
            logger.debug(f"[client] cache hit for citations of {paper_id}")
            return list(self._citations[paper_id])

        self.api_call_count += 1
        try:
            citing = self.provider.get_citations(paper_id, limit=self.max_citations)
        except Exception as e:
            logger.warning(f"[client] failed to fetch citations for {paper_id}: {e}")
            citing = []
        else:
            self.successful_calls += 1

        citing = [c for c in (citing or []) if isinstance(c, CitingPaper) and c.citing_id]
        citing = citing[:self.max_citations]

        self._citations[paper_id] = citing
        return list(citing)

    def clear(self):
        """drop the cache and reset counters."""
        self._papers.clear()
        self._citations.clear()
        self.api_call_count = 0
        self.successful_calls = 0
        self.cache_hits = 0

    def stats(self) -> dict:
        return {
            "provider": self.provider.name,
            "api_call_count": self.api_call_count,
            "successful_calls": self.successful_calls,
            "cache_hits": self.cache_hits,
            "cached_papers": len(self._papers),
            "cached_citation_lists": len(self._citations)
        }
