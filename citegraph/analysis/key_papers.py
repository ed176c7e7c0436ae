"""
key paper selection - top papers by influence with a short reason.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from ..core.config import AnalysisConfig
from ..core.models import PaperNode, KeyPaper

FALLBACK_REASON = "Key research paper"


class KeyPaperSelector:
    """
    picks the most influential papers.

    reasons are checked in a fixed order and joined with ", ":
    very influential, highly cited, central hub, recent impact.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        current_year: Optional[int] = None
    ):
        self.config = config or AnalysisConfig()
        self.current_year = current_year

    def select(self, nodes: Sequence[PaperNode]) -> List[KeyPaper]:
        # sorted() is stable, so equal scores keep node order
        ranked = sorted(nodes, key=lambda n: n.influence_score, reverse=True)
        return [
            KeyPaper(
                id=node.id,
                title=node.title,
                influence_score=node.influence_score,
                citation_count=node.citation_count,
                centrality=node.centrality,
                reason=self.reason(node)
            )
            for node in ranked[:self.config.key_paper_count]
        ]

    def reason(self, node: PaperNode) -> str:
        """deterministic justification built from the node's scores."""
        cfg = self.config
        year_now = self.current_year or datetime.now().year
        reasons = []

        if node.influence_score > cfg.very_influential_threshold:
            reasons.append("Very influential")
        if node.citation_count > cfg.highly_cited_threshold:
            reasons.append("Highly cited")
        if node.centrality > cfg.central_hub_threshold:
            reasons.append("Central hub")
        if (node.year is not None
                and node.year >= year_now - cfg.recent_years
                and node.citation_count > cfg.recent_citation_threshold):
            reasons.append("Recent impact")

        return ", ".join(reasons) if reasons else FALLBACK_REASON
