"""
centrality - per-node structural importance normalized to [0, 1].
"""

import logging
from typing import Dict, Mapping, Optional, Sequence, Union

from ..core.config import CentralityAlgorithm
from ..core.models import PaperNode, CitationEdge
from .graph_view import citation_digraph
from .influence import InfluenceRanker

logger = logging.getLogger("citegraph.analysis")


class CentralityScorer:
    """
    degree or influence based centrality.

    "betweenness" is accepted but scored like pagerank: the value is the
    node's influence divided by the largest influence in the graph.
    """

    def __init__(self, ranker: Optional[InfluenceRanker] = None):
        self.ranker = ranker or InfluenceRanker()

    def score(
        self,
        nodes: Sequence[PaperNode],
        edges: Sequence[CitationEdge],
        algorithm: Union[CentralityAlgorithm, str] = CentralityAlgorithm.PAGERANK,
        influence: Optional[Mapping[str, float]] = None
    ) -> Dict[str, float]:
        """return id -> centrality in [0, 1]."""
        if _algorithm_name(algorithm) == CentralityAlgorithm.DEGREE.value:
            return self._degree(nodes, edges)

        if _algorithm_name(algorithm) == CentralityAlgorithm.BETWEENNESS.value:
            logger.debug("[centrality] betweenness approximated by normalized pagerank")

        if influence is None:
            influence = self.ranker.rank(nodes, edges)
        values = {node.id: influence.get(node.id, 0.0) for node in nodes}
        return _normalize(values)

    def _degree(
        self,
        nodes: Sequence[PaperNode],
        edges: Sequence[CitationEdge]
    ) -> Dict[str, float]:
        """undirected degree (in + out) over edges between known nodes."""
        G = citation_digraph(nodes, edges)
        return _normalize({node_id: float(deg) for node_id, deg in G.degree()})


def _algorithm_name(algorithm: Union[CentralityAlgorithm, str]) -> str:
    if isinstance(algorithm, CentralityAlgorithm):
        return algorithm.value
    return str(algorithm).lower()


def _normalize(values: Dict[str, float]) -> Dict[str, float]:
    """divide by the max; all zeros when the max is not positive."""
    if not values:
        return {}
    top = max(values.values())
    if top <= 0:
        return {node_id: 0.0 for node_id in values}
    return {node_id: min(max(v / top, 0.0), 1.0) for node_id, v in values.items()}
