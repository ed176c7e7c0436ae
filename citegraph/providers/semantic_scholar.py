"""
semantic scholar provider.
https://api.semanticscholar.org/
"""

import httpx
import time
import logging
from typing import List, Optional, Dict, Any
from urllib.parse import quote

from .base import MetadataProvider, is_doi, strip_doi_prefix, parse_year, parse_count
from ..core.config import ProviderConfig
from ..core.models import PaperRecord, CitingPaper
from ..core.resilience import RequestGuard, RequestPolicy, MalformedPayloadError

logger = logging.getLogger("citegraph.s2")

PAPER_FIELDS = "paperId,externalIds,title,authors,year,venue,citationCount,abstract,url"
CITATION_FIELDS = "paperId,externalIds,year"

# the citations endpoint pages at most 1000 rows
MAX_PAGE_SIZE = 1000


class SemanticScholarProvider(MetadataProvider):
    """
    semantic scholar API client.
    looks up paper records and their inbound citations.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[ProviderConfig] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.config = config or ProviderConfig.from_env()
        self.base_url = self.config.s2_base_url.rstrip("/")
        self.api_key = api_key or self.config.s2_api_key
        self._transport = transport
        self._session = None  # lazy init
        self._last_request = 0.0
        # with key: 100 req/sec, without: 100 req/5 min
        if self.api_key:
            rps = self.config.s2_rps
        else:
            rps = self.config.s2_rps_no_key
        self._min_delay = 1.0 / rps if rps > 0 else 0.0

        self._guard = RequestGuard(
            "semantic_scholar",
            RequestPolicy.for_provider(
                self.config,
                base_delay=0.5 if self.api_key else 2.0,
                extra_transient=(httpx.TransportError,)
            )
        )

    @property
    def session(self) -> httpx.Client:
        """lazy session initialization."""
        if self._session is None or self._session.is_closed:
            headers = {"Accept": "application/json"}
            if self.api_key:
                headers["x-api-key"] = self.api_key
            self._session = httpx.Client(
                timeout=self.config.timeout,
                headers=headers,
                transport=self._transport
            )
        return self._session

    def start_build(self):
        """a new build starts with the provider available again."""
        self._guard.reset()

    def close(self):
        """close the http session."""
        if self._session and not self._session.is_closed:
            self._session.close()
            self._session = None

    @property
    def name(self) -> str:
        return "semantic_scholar"

    def _request(self, endpoint: str, params: Optional[Dict] = None) -> Optional[Dict]:
        """
        rate-limited GET with retry and suspension.
        returns None on 404, raises on anything unrecoverable.
        """
        url = f"{self.base_url}/{endpoint}"

        def do_request():
            elapsed = time.time() - self._last_request
            if elapsed < self._min_delay:
                time.sleep(self._min_delay - elapsed)

            resp = self.session.get(url, params=params)
            self._last_request = time.time()

            if resp.status_code == 200:
                try:
                    data = resp.json()
                except ValueError as e:
                    raise MalformedPayloadError(f"invalid json from {endpoint}: {e}")
                if not isinstance(data, dict):
                    raise MalformedPayloadError(f"expected object from {endpoint}")
                return data
            elif resp.status_code == 429:
                logger.warning(f"[s2] rate limited on {endpoint}")
                raise ConnectionError("rate limited")
            elif resp.status_code >= 500:
                logger.warning(f"[s2] server error {resp.status_code} on {endpoint}")
                raise ConnectionError(f"server error {resp.status_code}")
            elif resp.status_code == 404:
                logger.debug(f"[s2] 404 for {endpoint}")
                return None
            else:
                logger.warning(f"[s2] {resp.status_code} for {endpoint}")
                return None

        return self._guard.call(do_request, f"GET {endpoint}")

    @staticmethod
    def _path_id(paper_id: str) -> str:
        """s2 wants DOIs as DOI:10.x/..., other ids pass through."""
        if is_doi(paper_id) or paper_id.lower().startswith("doi:"):
            paper_id = f"DOI:{strip_doi_prefix(paper_id)}"
        return quote(paper_id, safe=":/")

    def get_paper(self, paper_id: str) -> Optional[PaperRecord]:
        """get paper by DOI or S2 id."""
        data = self._request(
            f"paper/{self._path_id(paper_id)}",
            {"fields": PAPER_FIELDS}
        )
        if data is None:
            return None
        return self._parse_paper(data, paper_id)

    def get_citations(self, paper_id: str, limit: int = 100) -> List[CitingPaper]:
        """get papers that cite this paper."""
        if limit <= 0:
            return []

        data = self._request(
            f"paper/{self._path_id(paper_id)}/citations",
            {"fields": CITATION_FIELDS, "limit": min(limit, MAX_PAGE_SIZE)}
        )
        if data is None:
            return []

        rows = data.get("data")
        if not isinstance(rows, list):
            raise MalformedPayloadError(f"citations payload for {paper_id} has no data list")

        citing = []
        for row in rows:
            parsed = self._parse_citing(row)
            if parsed:
                citing.append(parsed)

        return citing[:limit]

    # helpers

    def _parse_paper(self, data: Dict[str, Any], requested_id: str) -> PaperRecord:
        """parse S2 paper to PaperRecord."""
        authors = []
        for author in data.get("authors") or []:
            name = author.get("name") if isinstance(author, dict) else None
            if name:
                authors.append(name)

        return PaperRecord(
            id=requested_id,
            title=data.get("title") or "Unknown",
            authors=authors,
            year=parse_year(data.get("year")),
            venue=data.get("venue") or None,
            citation_count=parse_count(data.get("citationCount")),
            abstract=data.get("abstract"),
            url=data.get("url")
        )

    def _parse_citing(self, row: Any) -> Optional[CitingPaper]:
        """
        parse one citations row.
        the citing id is the DOI when S2 knows it, else the S2 paperId.
        """
        if not isinstance(row, dict):
            return None
        paper = row.get("citingPaper")
        if not isinstance(paper, dict):
            return None

        external = paper.get("externalIds") or {}
        citing_id = external.get("DOI") or paper.get("paperId")
        if not citing_id:
            return None

        return CitingPaper(citing_id=citing_id, year=parse_year(paper.get("year")))

    def stats(self) -> Dict:
        """get provider statistics including resilience metrics."""
        return {
            "provider": self.name,
            **self._guard.stats()
        }
