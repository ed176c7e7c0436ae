"""
graph-level statistics. pure, never fails, 0 for undefined ratios.
"""

from collections import defaultdict
from typing import Dict, Sequence

from ..core.models import PaperNode, CitationEdge, GraphMetrics


class MetricsAggregator:
    """density and degree statistics of a directed citation graph."""

    def aggregate(
        self,
        nodes: Sequence[PaperNode],
        edges: Sequence[CitationEdge]
    ) -> GraphMetrics:
        n = len(nodes)
        e = len(edges)

        max_possible = n * (n - 1)
        density = e / max_possible if max_possible > 0 else 0.0
        # speculative edges can outnumber node pairs
        density = min(max(density, 0.0), 1.0)

        avg_degree = (2 * e) / n if n > 0 else 0.0

        ids = {node.id for node in nodes}
        degree: Dict[str, int] = defaultdict(int)
        for edge in edges:
            if edge.source in ids:
                degree[edge.source] += 1
            if edge.target in ids:
                degree[edge.target] += 1
        max_degree = max(degree.values()) if degree else 0

        return GraphMetrics(
            total_nodes=n,
            total_edges=e,
            density=density,
            avg_degree=avg_degree,
            max_degree=max_degree
        )
