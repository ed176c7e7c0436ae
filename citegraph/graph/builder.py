"""
graph builder - bounded depth-first traversal of inbound citations.

from each seed, fetch the paper, then the papers citing it, then the
papers citing those, down to max_depth. a visited set shared across all
seeds makes a cyclic citation graph finite and means no id is fetched
twice in one build.

traversal uses an explicit stack of frames instead of recursion, so long
citation chains cannot exhaust the interpreter stack. frames are visited
in the same order the recursive version would visit them.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Union

from ..core.config import BuildOptions
from ..core.models import BuildInfo, CitationEdge, CitingPaper, Graph, PaperNode
from ..providers.base import MetadataProvider
from .metadata_client import MetadataClient

logger = logging.getLogger("citegraph.builder")

Seed = Union[str, Mapping[str, str]]


@dataclass
class TraversalFrame:
    """a fetched node whose citing papers are still being walked."""
    paper_id: str
    depth: int
    citing: Iterator[CitingPaper]


@dataclass
class BuildContext:
    """
    mutable state owned by one build() call.
    nothing here outlives the call that created it.
    """
    client: MetadataClient
    options: BuildOptions
    visited: Set[str] = field(default_factory=set)
    nodes: Dict[str, PaperNode] = field(default_factory=dict)  # insertion ordered
    edges: List[CitationEdge] = field(default_factory=list)
    stack: List[TraversalFrame] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    max_depth_reached: int = 0
    deadline: Optional[float] = None
    deadline_hit: bool = False


@dataclass
class BuildResult:
    """raw graph plus build observability."""
    graph: Graph
    build_info: BuildInfo
    options: BuildOptions


class GraphBuilder:
    """
    builds the raw citation graph for a set of seeds.

    usage:
        builder = GraphBuilder(SemanticScholarProvider())
        result = builder.build([{"id": "10.1038/nature14539"}], BuildOptions(max_depth=1))
    """

    def __init__(
        self,
        provider: MetadataProvider,
        clock: Callable[[], float] = time.monotonic
    ):
        self.provider = provider
        self._clock = clock

    def build(
        self,
        seeds: Sequence[Seed],
        options: Optional[BuildOptions] = None
    ) -> BuildResult:
        """traverse from seeds and return an immutable graph snapshot."""
        options = options or BuildOptions()
        options.validate()
        self.provider.start_build()

        start = self._clock()
        seed_ids = [sid for sid in (_seed_id(s) for s in seeds) if sid]
        skipped = len(seeds) - len(seed_ids)

        logger.info(
            f"[builder] building citation graph: {len(seed_ids)} seeds, "
            f"max_depth={options.max_depth}, min_citations={options.min_citations}"
        )
        if skipped:
            logger.warning(f"[builder] skipped {skipped} seeds without an identifier")

        ctx = BuildContext(
            client=MetadataClient(self.provider, max_citations=options.max_citations_per_paper),
            options=options
        )
        if options.deadline_seconds is not None:
            ctx.deadline = start + options.deadline_seconds

        for seed_id in seed_ids:
            if ctx.deadline_hit:
                break
            self._visit(ctx, seed_id, 0)
            self._drain(ctx)

        graph = Graph(nodes=tuple(ctx.nodes.values()), edges=tuple(ctx.edges))
        info = BuildInfo(
            build_time_ms=(self._clock() - start) * 1000,
            seed_count=len(seeds),
            api_call_count=ctx.client.api_call_count,
            max_depth_reached=ctx.max_depth_reached,
            cache_hits=ctx.client.cache_hits,
            failed_fetches=list(ctx.failed),
            deadline_hit=ctx.deadline_hit
        )

        logger.info(
            f"[builder] built graph with {len(graph.nodes)} nodes, {len(graph.edges)} edges "
            f"in {info.build_time_ms:.1f}ms ({info.api_call_count} api calls)"
        )
        if ctx.failed:
            logger.warning(f"[builder] {len(ctx.failed)} papers could not be fetched")

        return BuildResult(graph=graph, build_info=info, options=options)

    def _drain(self, ctx: BuildContext):
        """walk citing papers depth first until the stack is empty."""
        while ctx.stack:
            if self._past_deadline(ctx):
                ctx.stack.clear()
                break

            frame = ctx.stack[-1]
            citing = next(frame.citing, None)
            if citing is None:
                ctx.stack.pop()
                continue

            # recorded before the citing paper is visited, so it may dangle
            ctx.edges.append(CitationEdge(
                source=citing.citing_id,
                target=frame.paper_id,
                year=citing.year
            ))
            self._visit(ctx, citing.citing_id, frame.depth + 1)

    def _visit(self, ctx: BuildContext, paper_id: str, depth: int):
        """fetch one paper; push a frame if it should be expanded."""
        if paper_id in ctx.visited or depth > ctx.options.max_depth:
            return
        if self._past_deadline(ctx):
            return

        # marked before fetching: a failed id is never retried
        ctx.visited.add(paper_id)

        record = ctx.client.fetch_paper(paper_id)
        if record is None:
            ctx.failed.append(paper_id)
            return

        ctx.nodes[paper_id] = PaperNode.from_record(record, node_id=paper_id)
        ctx.max_depth_reached = max(ctx.max_depth_reached, depth)

        if depth < ctx.options.max_depth:
            citing = ctx.client.fetch_citing_papers(paper_id)
            logger.debug(f"[builder] {paper_id} (depth {depth}): {len(citing)} citing papers")
            ctx.stack.append(TraversalFrame(
                paper_id=paper_id,
                depth=depth,
                citing=iter(citing)
            ))

    def _past_deadline(self, ctx: BuildContext) -> bool:
        if ctx.deadline is None or ctx.deadline_hit:
            return ctx.deadline_hit
        if self._clock() >= ctx.deadline:
            logger.warning("[builder] deadline reached, returning partial graph")
            ctx.deadline_hit = True
        return ctx.deadline_hit


def _seed_id(seed: Seed) -> Optional[str]:
    """accept "10.x/..", {"id": ..} or {"doi": ..}."""
    if isinstance(seed, str):
        value = seed
    elif isinstance(seed, Mapping):
        value = seed.get("id") or seed.get("doi")
    else:
        value = None

    if not value or not str(value).strip():
        return None
    return str(value).strip()
