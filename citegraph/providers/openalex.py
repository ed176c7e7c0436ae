"""
openalex provider - alternate source for paper records and citations.
https://docs.openalex.org/
"""

import httpx
import time
import logging
import threading
from typing import List, Optional, Dict, Any

from .base import MetadataProvider, strip_doi_prefix, parse_year, parse_count
from ..core.config import ProviderConfig
from ..core.models import PaperRecord, CitingPaper
from ..core.resilience import RequestGuard, RequestPolicy, MalformedPayloadError

logger = logging.getLogger("citegraph.openalex")

OPENALEX_PREFIX = "https://openalex.org/"


class OpenAlexProvider(MetadataProvider):
    """
    openalex.org API client.
    citing papers are identified by DOI when they have one,
    otherwise by their W-prefixed OpenAlex id.
    """

    def __init__(
        self,
        email: Optional[str] = None,
        config: Optional[ProviderConfig] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.config = config or ProviderConfig.from_env()
        self.base_url = self.config.openalex_base_url.rstrip("/")
        self.email = email or self.config.openalex_email
        self._transport = transport
        self._session = None  # lazy init
        self._last_request = 0.0
        rps = self.config.openalex_rps
        self._min_delay = 1.0 / rps if rps > 0 else 0.0
        self._rate_lock = threading.Lock()

        # requested id -> W id, cleared per build
        self._openalex_ids: Dict[str, str] = {}

        self._guard = RequestGuard(
            "openalex",
            RequestPolicy.for_provider(
                self.config,
                base_delay=1.0,
                extra_transient=(httpx.TransportError,)
            )
        )

    @property
    def session(self) -> httpx.Client:
        """lazy session initialization with proper cleanup."""
        if self._session is None or self._session.is_closed:
            self._session = httpx.Client(
                timeout=self.config.timeout,
                transport=self._transport
            )
        return self._session

    def start_build(self):
        """lift any suspension and forget W ids resolved by earlier builds."""
        self._guard.reset()
        self._openalex_ids.clear()

    def close(self):
        """close the http session and drop resolved ids."""
        self._openalex_ids.clear()
        if self._session and not self._session.is_closed:
            self._session.close()
            self._session = None

    @property
    def name(self) -> str:
        return "openalex"

    def _request(self, endpoint: str, params: Optional[Dict] = None) -> Optional[Dict]:
        """make rate-limited request with retry and suspension."""
        params = dict(params or {})
        params["mailto"] = self.email
        url = f"{self.base_url}/{endpoint}"

        def do_request():
            with self._rate_lock:
                elapsed = time.time() - self._last_request
                if elapsed < self._min_delay:
                    time.sleep(self._min_delay - elapsed)
                self._last_request = time.time()

            resp = self.session.get(url, params=params)

            if resp.status_code == 200:
                try:
                    data = resp.json()
                except ValueError as e:
                    raise MalformedPayloadError(f"invalid json from {endpoint}: {e}")
                if not isinstance(data, dict):
                    raise MalformedPayloadError(f"expected object from {endpoint}")
                return data
            elif resp.status_code == 429:
                logger.warning(f"[openalex] rate limited on {endpoint}")
                raise ConnectionError("rate limited")
            elif resp.status_code >= 500:
                logger.warning(f"[openalex] server error {resp.status_code} on {endpoint}")
                raise ConnectionError(f"server error {resp.status_code}")
            elif resp.status_code == 404:
                logger.debug(f"[openalex] 404 for {endpoint}")
                return None
            else:
                logger.warning(f"[openalex] {resp.status_code} for {endpoint}")
                return None

        return self._guard.call(do_request, f"GET {endpoint}")

    @staticmethod
    def _work_endpoint(paper_id: str) -> str:
        """map a DOI or OpenAlex id to the works endpoint."""
        if paper_id.startswith(OPENALEX_PREFIX):
            return f"works/{paper_id[len(OPENALEX_PREFIX):]}"
        if paper_id.startswith("W"):
            return f"works/{paper_id}"
        return f"works/doi:{strip_doi_prefix(paper_id)}"

    def get_paper(self, paper_id: str) -> Optional[PaperRecord]:
        """get paper by id (DOI or OpenAlex ID)."""
        data = self._request(self._work_endpoint(paper_id))
        if data is None:
            return None

        oa_id = _short_id(data.get("id"))
        if oa_id:
            self._openalex_ids[paper_id] = oa_id

        return self._parse_work(data, paper_id)

    def get_citations(self, paper_id: str, limit: int = 100) -> List[CitingPaper]:
        """get papers that cite this paper."""
        if limit <= 0:
            return []

        # the cites filter needs a W id, not a DOI
        oa_id = self._resolve_openalex_id(paper_id)
        if not oa_id:
            return []

        data = self._request("works", {
            "filter": f"cites:{oa_id}",
            "per_page": min(limit, 200),
            "select": "id,doi,publication_year"
        })
        if data is None:
            return []

        results = data.get("results")
        if not isinstance(results, list):
            raise MalformedPayloadError(f"cites payload for {paper_id} has no results list")

        citing = []
        for work in results:
            if not isinstance(work, dict):
                continue
            doi = work.get("doi")
            citing_id = strip_doi_prefix(doi) if doi else _short_id(work.get("id"))
            if citing_id:
                citing.append(CitingPaper(
                    citing_id=citing_id,
                    year=parse_year(work.get("publication_year"))
                ))

        return citing[:limit]

    # helpers

    def _resolve_openalex_id(self, paper_id: str) -> Optional[str]:
        short = _short_id(paper_id)
        if short and short.startswith("W"):
            return short
        if paper_id in self._openalex_ids:
            return self._openalex_ids[paper_id]

        data = self._request(self._work_endpoint(paper_id), {"select": "id"})
        if not data:
            return None
        oa_id = _short_id(data.get("id"))
        if oa_id:
            self._openalex_ids[paper_id] = oa_id
        return oa_id

    def _parse_work(self, work: Dict[str, Any], requested_id: str) -> PaperRecord:
        """parse OpenAlex work to PaperRecord."""
        authors = []
        for authorship in work.get("authorships") or []:
            author = authorship.get("author") or {}
            name = author.get("display_name")
            if name:
                authors.append(name)

        venue = None
        primary_location = work.get("primary_location") or {}
        source = primary_location.get("source") or {}
        if source:
            venue = source.get("display_name") or None

        url = work.get("doi") or work.get("id")

        return PaperRecord(
            id=requested_id,
            title=work.get("title") or work.get("display_name") or "Unknown",
            authors=authors,
            year=parse_year(work.get("publication_year")),
            venue=venue,
            citation_count=parse_count(work.get("cited_by_count")),
            abstract=_rebuild_abstract(work.get("abstract_inverted_index")),
            url=url
        )

    def stats(self) -> Dict:
        """get provider statistics including resilience metrics."""
        return {
            "provider": self.name,
            **self._guard.stats()
        }


def _short_id(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    if raw.startswith(OPENALEX_PREFIX):
        return raw[len(OPENALEX_PREFIX):]
    return raw


def _rebuild_abstract(inverted: Optional[Dict[str, List[int]]]) -> Optional[str]:
    """openalex ships abstracts as word -> positions."""
    if not inverted or not isinstance(inverted, dict):
        return None
    positions = []
    for word, idxs in inverted.items():
        for i in idxs or []:
            positions.append((i, word))
    if not positions:
        return None
    positions.sort()
    return " ".join(word for _, word in positions)
