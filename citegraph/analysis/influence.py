"""
influence ranking - pagerank over the citation graph.

fixed iteration count rather than a convergence threshold, so the same
graph always gives the same scores. nodes with no outgoing edges pass
nothing on (their mass is dropped, not spread over the graph), so totals
can fall below 1 when such nodes exist.
"""

import logging
from typing import Dict, Optional, Sequence

from ..core.models import PaperNode, CitationEdge
from .graph_view import citation_digraph

logger = logging.getLogger("citegraph.analysis")


class InfluenceRanker:
    """pagerank with synchronous updates."""

    def __init__(self, damping_factor: float = 0.85, iterations: int = 100):
        if not 0.0 <= damping_factor <= 1.0:
            raise ValueError(f"damping_factor must be in [0, 1], got {damping_factor}")
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")
        self.damping_factor = damping_factor
        self.iterations = iterations

    def rank(
        self,
        nodes: Sequence[PaperNode],
        edges: Sequence[CitationEdge],
        damping_factor: Optional[float] = None,
        iterations: Optional[int] = None
    ) -> Dict[str, float]:
        """return id -> score. dangling edges are ignored."""
        d = self.damping_factor if damping_factor is None else damping_factor
        n_iter = self.iterations if iterations is None else iterations

        ids = [node.id for node in nodes]
        n = len(ids)
        if n == 0:
            return {}

        G = citation_digraph(nodes, edges)
        out_degree = dict(G.out_degree())

        base = (1.0 - d) / n
        scores = {node_id: 1.0 / n for node_id in ids}

        for _ in range(n_iter):
            previous = scores
            scores = {}
            for node_id in ids:
                rank = base
                # parallel edges count once each
                for source, keyed in G.pred[node_id].items():
                    rank += d * previous[source] * len(keyed) / out_degree[source]
                scores[node_id] = rank

        logger.debug(f"[pagerank] ranked {n} nodes in {n_iter} iterations")
        return scores
