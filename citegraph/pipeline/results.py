"""
pipeline results - the bundle handed to exporters.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..core.models import Graph, GraphMetrics, Community, KeyPaper, TimelineBucket, BuildInfo


@dataclass
class CitationGraphResult:
    """
    finished graph plus everything derived from it.

    to_dict() gives plain nested records that serialize to JSON as is.
    """
    graph: Graph
    metrics: GraphMetrics
    communities: List[Community] = field(default_factory=list)
    key_papers: List[KeyPaper] = field(default_factory=list)
    timeline: List[TimelineBucket] = field(default_factory=list)
    build_info: BuildInfo = field(default_factory=BuildInfo)

    @property
    def paper_count(self) -> int:
        return len(self.graph.nodes)

    @property
    def is_degenerate(self) -> bool:
        """true when there is nothing to analyze beyond a single paper."""
        return len(self.graph.nodes) <= 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "graph": self.graph.to_dict(),
            "metrics": self.metrics.to_dict(),
            "communities": [c.to_dict() for c in self.communities],
            "key_papers": [k.to_dict() for k in self.key_papers],
            "timeline": [t.to_dict() for t in self.timeline],
            "build_info": self.build_info.to_dict()
        }

    def summary(self) -> str:
        """short human-readable overview."""
        m = self.metrics
        lines = [
            f"citation graph: {m.total_nodes} papers, {m.total_edges} citations",
            f"  density: {m.density:.4f}  avg degree: {m.avg_degree:.2f}  max degree: {m.max_degree}",
            f"  communities: {len(self.communities)}",
            f"  built in {self.build_info.build_time_ms:.0f}ms "
            f"with {self.build_info.api_call_count} api calls",
        ]
        if self.key_papers:
            lines.append("  key papers:")
            for kp in self.key_papers[:5]:
                lines.append(f"    {kp.title[:60]} ({kp.influence_score:.4f}) - {kp.reason}")
        if self.timeline:
            lines.append(f"  years: {self.timeline[0].year}-{self.timeline[-1].year}")
        return "\n".join(lines)
