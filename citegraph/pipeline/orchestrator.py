"""
pipeline orchestrator - build the graph, annotate it, derive the views.

usage:
    from citegraph import CitationGraphPipeline, SemanticScholarProvider

    with SemanticScholarProvider() as provider:
        pipeline = CitationGraphPipeline(provider)
        result = pipeline.run([{"id": "10.1038/nature14539"}])

    print(result.summary())
    for paper in result.key_papers:
        print(f"  {paper.title}: {paper.reason}")

flow:
1. GraphBuilder traverses citations (the only network activity)
2. InfluenceRanker, CommunityDetector, CentralityScorer run once each
3. metrics, key papers, timeline and community summaries are derived
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..core.config import BuildOptions, CitegraphConfig
from ..core.models import Graph
from ..providers.base import MetadataProvider
from ..graph.builder import GraphBuilder, Seed
from ..analysis import (
    InfluenceRanker, CommunityDetector, CentralityScorer,
    MetricsAggregator, KeyPaperSelector, TimelineAnalyzer,
    summarize_communities
)
from .results import CitationGraphResult

logger = logging.getLogger("citegraph.pipeline")


class CitationGraphPipeline:
    """
    end-to-end citation graph construction and analysis.
    one run() is one build; nothing is shared between runs.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        config: Optional[CitegraphConfig] = None,
        current_year: Optional[int] = None
    ):
        self.provider = provider
        self.config = config or CitegraphConfig()
        analysis = self.config.analysis

        self.builder = GraphBuilder(provider)
        self.ranker = InfluenceRanker(
            damping_factor=analysis.damping_factor,
            iterations=analysis.pagerank_iterations
        )
        self.community_detector = CommunityDetector(iterations=analysis.label_iterations)
        self.centrality_scorer = CentralityScorer(self.ranker)
        self.metrics_aggregator = MetricsAggregator()
        self.key_paper_selector = KeyPaperSelector(analysis, current_year=current_year)
        self.timeline_analyzer = TimelineAnalyzer()

    def run(
        self,
        seeds: Sequence[Seed],
        options: Optional[BuildOptions] = None
    ) -> CitationGraphResult:
        """build and analyze the citation neighborhood of seeds."""
        options = options or self.config.build
        built = self.builder.build(seeds, options)
        raw = built.graph

        logger.info(f"[pipeline] ranking {len(raw.nodes)} nodes")
        influence = self.ranker.rank(raw.nodes, raw.edges)

        logger.info("[pipeline] detecting communities")
        assignment = self.community_detector.detect(raw.nodes, raw.edges)

        centrality = self.centrality_scorer.score(
            raw.nodes, raw.edges, options.algorithm, influence=influence
        )

        graph = self.annotate(raw, influence, assignment, centrality)

        analysis = self.config.analysis
        result = CitationGraphResult(
            graph=graph,
            metrics=self.metrics_aggregator.aggregate(graph.nodes, graph.edges),
            communities=summarize_communities(
                graph.nodes, assignment,
                top_papers=analysis.community_top_papers,
                top_authors=analysis.community_top_authors
            ),
            key_papers=self.key_paper_selector.select(graph.nodes),
            timeline=self.timeline_analyzer.analyze(graph.nodes),
            build_info=built.build_info
        )

        if result.is_degenerate:
            logger.warning(f"[pipeline] degenerate graph: {result.paper_count} papers")
        logger.info(f"[pipeline] done: {len(result.communities)} communities, "
                    f"{len(result.key_papers)} key papers")
        return result

    @staticmethod
    def annotate(raw: Graph, influence, assignment, centrality) -> Graph:
        """new snapshot with derived fields filled in; raw is left untouched."""
        nodes = tuple(
            replace(
                node,
                influence_score=influence.get(node.id, 0.0),
                community_id=assignment.get(node.id, 0),
                centrality=centrality.get(node.id, 0.0)
            )
            for node in raw.nodes
        )
        return Graph(nodes=nodes, edges=raw.edges)
