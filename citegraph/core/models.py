"""
core data models for citegraph.
papers, citation edges, the built graph and its derived views.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple, Set


@dataclass
class PaperRecord:
    """bibliographic record as returned by a metadata provider."""
    id: str
    title: str = "Unknown"
    authors: List[str] = field(default_factory=list)
    year: Optional[int] = None
    venue: Optional[str] = None
    citation_count: int = 0
    abstract: Optional[str] = None
    url: Optional[str] = None


@dataclass
class CitingPaper:
    """one inbound citation: the citing work's id and year."""
    citing_id: str
    year: Optional[int] = None


@dataclass(frozen=True)
class PaperNode:
    """
    one discovered publication in the citation graph.

    influence_score, community_id and centrality start at zero and are
    filled in once by the analysis passes.
    """
    id: str
    title: str = "Unknown"
    authors: Tuple[str, ...] = ()
    year: Optional[int] = None
    venue: Optional[str] = None
    citation_count: int = 0

    # derived annotations
    influence_score: float = 0.0
    community_id: int = 0
    centrality: float = 0.0

    abstract: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_record(cls, record: PaperRecord, node_id: Optional[str] = None) -> 'PaperNode':
        """create a node with default derived fields from a provider record."""
        return cls(
            id=node_id or record.id,
            title=record.title or "Unknown",
            authors=tuple(record.authors or ()),
            year=record.year,
            venue=record.venue,
            citation_count=max(int(record.citation_count or 0), 0),
            abstract=record.abstract,
            url=record.url
        )

    def to_dict(self) -> Dict[str, Any]:
        """serialize for export."""
        return {
            "id": self.id,
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "venue": self.venue,
            "citation_count": self.citation_count,
            "influence_score": self.influence_score,
            "community_id": self.community_id,
            "centrality": self.centrality,
            "abstract": self.abstract,
            "url": self.url
        }


@dataclass(frozen=True)
class CitationEdge:
    """directed edge: source cites target."""
    source: str
    target: str
    weight: int = 1
    year: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
            "year": self.year
        }


@dataclass(frozen=True)
class Graph:
    """
    immutable snapshot of a built citation graph.

    edges may reference ids that never became nodes (failed fetches);
    use resolved_edges() when only in-graph edges are wanted.
    """
    nodes: Tuple[PaperNode, ...] = ()
    edges: Tuple[CitationEdge, ...] = ()

    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[PaperNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def resolved_edges(self) -> List[CitationEdge]:
        """edges whose endpoints are both nodes."""
        ids = self.node_ids()
        return [e for e in self.edges if e.source in ids and e.target in ids]

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges]
        }


@dataclass
class GraphMetrics:
    """graph-level statistics."""
    total_nodes: int = 0
    total_edges: int = 0
    density: float = 0.0
    avg_degree: float = 0.0
    max_degree: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "density": self.density,
            "avg_degree": self.avg_degree,
            "max_degree": self.max_degree
        }


@dataclass
class Community:
    """aggregate view of one detected community."""
    id: int
    size: int = 0
    top_papers: List[str] = field(default_factory=list)   # ids, influence desc
    top_authors: List[str] = field(default_factory=list)  # by frequency

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "size": self.size,
            "top_papers": list(self.top_papers),
            "top_authors": list(self.top_authors)
        }


@dataclass
class KeyPaper:
    """a highly ranked paper with a short justification."""
    id: str
    title: str
    influence_score: float
    citation_count: int
    centrality: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "influence_score": self.influence_score,
            "citation_count": self.citation_count,
            "centrality": self.centrality,
            "reason": self.reason
        }


@dataclass
class TimelineBucket:
    """per-year statistics."""
    year: int
    paper_count: int = 0
    citation_sum: int = 0
    avg_influence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "paper_count": self.paper_count,
            "citation_sum": self.citation_sum,
            "avg_influence": self.avg_influence
        }


@dataclass
class BuildInfo:
    """observability data for one build."""
    build_time_ms: float = 0.0
    seed_count: int = 0
    api_call_count: int = 0
    max_depth_reached: int = 0
    cache_hits: int = 0
    failed_fetches: List[str] = field(default_factory=list)
    deadline_hit: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "build_time_ms": self.build_time_ms,
            "seed_count": self.seed_count,
            "api_call_count": self.api_call_count,
            "max_depth_reached": self.max_depth_reached,
            "cache_hits": self.cache_hits,
            "failed_fetches": list(self.failed_fetches),
            "deadline_hit": self.deadline_hit
        }
