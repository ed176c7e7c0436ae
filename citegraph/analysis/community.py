"""
community detection - label propagation over the undirected citation graph.

citation direction is ignored here: papers that cite each other or share
neighbors end up together. this is an exploratory heuristic for display,
not a guaranteed partition. ties between equally common neighbor labels go
to the label seen first, which depends on neighbor order.
"""

import logging
from collections import Counter
from typing import Dict, List, Mapping, Sequence

from ..core.models import PaperNode, CitationEdge, Community
from .graph_view import undirected_view

logger = logging.getLogger("citegraph.analysis")


class CommunityDetector:
    """label propagation with a fixed iteration budget."""

    def __init__(self, iterations: int = 10):
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")
        self.iterations = iterations

    def detect(
        self,
        nodes: Sequence[PaperNode],
        edges: Sequence[CitationEdge]
    ) -> Dict[str, int]:
        """return id -> community id, ids dense in 0..k-1."""
        ids = [node.id for node in nodes]
        labels = {node_id: index for index, node_id in enumerate(ids)}

        G = undirected_view(nodes, edges)

        for _ in range(self.iterations):
            changed = 0
            for node_id in ids:
                neighbors = G.adj[node_id]
                if not neighbors:
                    continue

                counts = Counter(labels[n] for n in neighbors)
                # max() keeps the first label reaching the top count
                best, _ = max(counts.items(), key=lambda item: item[1])
                if best != labels[node_id]:
                    labels[node_id] = best
                    changed += 1
            if changed == 0:
                break

        assignment = _renumber(ids, labels)
        logger.debug(
            f"[communities] {len(set(assignment.values()))} communities "
            f"over {len(ids)} nodes"
        )
        return assignment


def _renumber(ids: List[str], labels: Mapping[str, int]) -> Dict[str, int]:
    """map surviving labels to 0..k-1 by first appearance."""
    remap: Dict[int, int] = {}
    for node_id in ids:
        label = labels[node_id]
        if label not in remap:
            remap[label] = len(remap)
    return {node_id: remap[labels[node_id]] for node_id in ids}


def summarize_communities(
    nodes: Sequence[PaperNode],
    assignment: Mapping[str, int],
    top_papers: int = 5,
    top_authors: int = 5
) -> List[Community]:
    """aggregate view per community, ordered by community id."""
    groups: Dict[int, List[PaperNode]] = {}
    for node in nodes:
        groups.setdefault(assignment.get(node.id, 0), []).append(node)

    communities = []
    for community_id in sorted(groups):
        members = groups[community_id]
        ranked = sorted(members, key=lambda n: n.influence_score, reverse=True)

        author_counts = Counter()
        for node in members:
            author_counts.update(node.authors)

        communities.append(Community(
            id=community_id,
            size=len(members),
            top_papers=[n.id for n in ranked[:top_papers]],
            top_authors=[name for name, _ in author_counts.most_common(top_authors)]
        ))

    return communities
