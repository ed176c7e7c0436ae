"""
timeline - per-year paper counts, citation sums and mean influence.
"""

from typing import Dict, List, Sequence

from ..core.models import PaperNode, TimelineBucket


class TimelineAnalyzer:
    """buckets nodes by publication year. undated nodes are left out."""

    def analyze(self, nodes: Sequence[PaperNode]) -> List[TimelineBucket]:
        by_year: Dict[int, Dict[str, PaperNode]] = {}
        for node in nodes:
            if node.year is None:
                continue
            by_year.setdefault(node.year, {})[node.id] = node

        timeline = []
        for year in sorted(by_year):
            members = list(by_year[year].values())
            timeline.append(TimelineBucket(
                year=year,
                paper_count=len(members),
                citation_sum=sum(n.citation_count for n in members),
                avg_influence=sum(n.influence_score for n in members) / len(members)
            ))

        return timeline
