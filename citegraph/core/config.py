"""
configuration for citegraph.
all settings in one place, easily tunable.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class CentralityAlgorithm(Enum):
    """how per-node centrality is computed."""
    PAGERANK = "pagerank"
    DEGREE = "degree"
    BETWEENNESS = "betweenness"  # approximated by pagerank


class ProviderName(Enum):
    """which bibliographic service to query."""
    SEMANTIC_SCHOLAR = "semantic_scholar"
    OPENALEX = "openalex"


@dataclass
class ProviderConfig:
    """provider-specific settings."""
    provider: ProviderName = ProviderName.SEMANTIC_SCHOLAR

    # semantic scholar
    s2_api_key: Optional[str] = None
    s2_base_url: str = "https://api.semanticscholar.org/graph/v1"

    # openalex
    openalex_email: str = "user@example.com"
    openalex_base_url: str = "https://api.openalex.org"

    # http
    timeout: float = 30.0

    # rate limits (requests per second)
    s2_rps: float = 100.0  # with key
    s2_rps_no_key: float = 0.3
    openalex_rps: float = 10.0

    # retry / suspension after repeated transport failures
    max_attempts: int = 3
    failure_threshold: int = 5
    cooldown_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> 'ProviderConfig':
        """read api key and contact email from the environment."""
        config = cls()
        config.s2_api_key = os.environ.get("SEMANTIC_SCHOLAR_API_KEY")
        config.openalex_email = os.environ.get("OPENALEX_EMAIL", config.openalex_email)
        return config

    def min_delay(self) -> float:
        """seconds between requests for the selected provider."""
        if self.provider == ProviderName.OPENALEX:
            rps = self.openalex_rps
        elif self.s2_api_key:
            rps = self.s2_rps
        else:
            rps = self.s2_rps_no_key
        return 1.0 / rps if rps > 0 else 0.0


@dataclass
class BuildOptions:
    """per-build traversal settings."""
    max_depth: int = 2
    min_citations: int = 1  # advisory, recorded but not applied
    algorithm: CentralityAlgorithm = CentralityAlgorithm.PAGERANK

    # per-node fetch limit
    max_citations_per_paper: int = 100

    # overall wall-clock budget; None = unbounded
    deadline_seconds: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.algorithm, str):
            try:
                self.algorithm = CentralityAlgorithm(self.algorithm.lower())
            except ValueError:
                # unknown names use the influence-based default
                self.algorithm = CentralityAlgorithm.PAGERANK
        self.validate()

    def validate(self):
        """raise ValueError on settings no build can honor."""
        if not isinstance(self.max_depth, int) or isinstance(self.max_depth, bool):
            raise ValueError(f"max_depth must be an int, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        cap = self.max_citations_per_paper
        if not isinstance(cap, int) or isinstance(cap, bool) or cap < 0:
            raise ValueError(f"max_citations_per_paper must be an int >= 0, got {cap!r}")
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise ValueError("deadline_seconds must be positive")


@dataclass
class AnalysisConfig:
    """analysis pass settings."""
    # pagerank
    damping_factor: float = 0.85
    pagerank_iterations: int = 100

    # label propagation
    label_iterations: int = 10

    # community summary caps
    community_top_papers: int = 5
    community_top_authors: int = 5

    # key papers
    key_paper_count: int = 10
    very_influential_threshold: float = 0.01
    highly_cited_threshold: int = 100
    central_hub_threshold: float = 0.5
    recent_years: int = 5
    recent_citation_threshold: int = 50


@dataclass
class CitegraphConfig:
    """master configuration for citegraph."""
    providers: ProviderConfig = field(default_factory=ProviderConfig)
    build: BuildOptions = field(default_factory=BuildOptions)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    @classmethod
    def default(cls) -> 'CitegraphConfig':
        """return default configuration."""
        return cls()

    @classmethod
    def minimal(cls) -> 'CitegraphConfig':
        """minimal config for quick testing."""
        config = cls()
        config.build.max_depth = 1
        config.build.max_citations_per_paper = 20
        config.analysis.pagerank_iterations = 30
        return config

    @classmethod
    def full(cls) -> 'CitegraphConfig':
        """deeper traversal with more citations per paper."""
        config = cls()
        config.build.max_depth = 3
        config.build.max_citations_per_paper = 500
        return config
