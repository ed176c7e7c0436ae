"""
networkx views of a citation graph for the analysis passes.

only resolved edges are added, so edges to papers that failed to load
never create phantom nodes. nodes and edges are inserted in input order
and networkx keeps adjacency in insertion order.
"""

from typing import Sequence

import networkx as nx

from ..core.models import PaperNode, CitationEdge


def citation_digraph(
    nodes: Sequence[PaperNode],
    edges: Sequence[CitationEdge]
) -> nx.MultiDiGraph:
    """directed view, source cites target. repeated citations stay parallel edges."""
    G = nx.MultiDiGraph()
    for node in nodes:
        G.add_node(node.id, year=node.year, citation_count=node.citation_count)

    for edge in edges:
        if edge.source in G and edge.target in G:
            G.add_edge(edge.source, edge.target, weight=edge.weight, year=edge.year)

    return G


def undirected_view(
    nodes: Sequence[PaperNode],
    edges: Sequence[CitationEdge]
) -> nx.Graph:
    """simple undirected view; neighbors iterate in first-seen order."""
    G = nx.Graph()
    G.add_nodes_from(node.id for node in nodes)

    for edge in edges:
        if edge.source in G and edge.target in G:
            G.add_edge(edge.source, edge.target)

    return G
