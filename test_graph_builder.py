"""
test the metadata client and the bounded citation traversal.

run with: pytest test_graph_builder.py -v
"""

import pytest

from citegraph.core.config import BuildOptions
from citegraph.core.models import CitingPaper, PaperRecord
from citegraph.graph import GraphBuilder, MetadataClient

from conftest import StubProvider, make_record


# =============================================================================
# MetadataClient
# =============================================================================

class TestMetadataClient:
    """test caching and degrade-don't-abort behavior."""

    def test_fetch_paper_caches(self, star_provider):
        """a repeated fetch is served from the cache."""
        client = MetadataClient(star_provider)

        first = client.fetch_paper("P0")
        second = client.fetch_paper("P0")

        assert first is second
        assert star_provider.paper_calls["P0"] == 1
        assert client.api_call_count == 1
        assert client.cache_hits == 1

    def test_fetch_citing_papers_caches(self, star_provider):
        """citation lists are cached separately from papers."""
        client = MetadataClient(star_provider)

        citing = client.fetch_citing_papers("P0")
        client.fetch_citing_papers("P0")

        assert [c.citing_id for c in citing] == ["P1", "P2"]
        assert star_provider.citation_calls["P0"] == 1

    def test_provider_error_degrades_to_none(self):
        """exceptions become None and are still counted."""
        provider = StubProvider(fail_everything=True)
        client = MetadataClient(provider)

        assert client.fetch_paper("X") is None
        assert client.fetch_citing_papers("X") == []
        assert client.api_call_count == 2
        assert client.successful_calls == 0

    def test_failure_is_cached(self):
        """a failed id is not re-requested in the same build."""
        provider = StubProvider(failing={"X"})
        client = MetadataClient(provider)

        client.fetch_paper("X")
        client.fetch_paper("X")

        assert provider.paper_calls["X"] == 1

    def test_blank_id_skips_network(self, star_provider):
        """empty ids never reach the provider."""
        client = MetadataClient(star_provider)

        assert client.fetch_paper("") is None
        assert client.fetch_paper("   ") is None
        assert client.fetch_citing_papers("") == []
        assert client.api_call_count == 0

    def test_malformed_record_rejected(self):
        """a provider returning the wrong type is treated as a failure."""
        class WrongTypeProvider(StubProvider):
            def get_paper(self, paper_id):
                return {"title": "not a record"}

        client = MetadataClient(WrongTypeProvider())
        assert client.fetch_paper("X") is None

    def test_max_citations_caps_list(self):
        """citation lists are truncated to max_citations."""
        provider = StubProvider(citations={
            "P": [CitingPaper(f"C{i}", 2020) for i in range(10)]
        })
        client = MetadataClient(provider, max_citations=3)

        assert len(client.fetch_citing_papers("P")) == 3

    def test_clear_resets_cache(self, star_provider):
        """clear() drops cached entries and counters."""
        client = MetadataClient(star_provider)
        client.fetch_paper("P0")
        client.clear()

        assert client.api_call_count == 0
        client.fetch_paper("P0")
        assert star_provider.paper_calls["P0"] == 2


# =============================================================================
# GraphBuilder scenarios
# =============================================================================

class TestGraphBuilderScenarios:
    """the reference scenarios for a build."""

    def test_depth_zero_single_seed(self):
        """max_depth=0 fetches the seed only."""
        provider = StubProvider(
            papers={"P0": make_record("P0", citations=10)},
            citations={"P0": [CitingPaper("P1", 2020)]}
        )
        result = GraphBuilder(provider).build([{"id": "P0"}], BuildOptions(max_depth=0))

        assert [n.id for n in result.graph.nodes] == ["P0"]
        assert result.graph.edges == ()
        assert result.graph.nodes[0].citation_count == 10
        assert provider.citation_calls["P0"] == 0

    def test_depth_one_star(self, star_provider):
        """seed with two citing papers gives 3 nodes and 2 edges."""
        result = GraphBuilder(star_provider).build([{"id": "P0"}], BuildOptions(max_depth=1))

        assert {n.id for n in result.graph.nodes} == {"P0", "P1", "P2"}
        assert [(e.source, e.target) for e in result.graph.edges] == [("P1", "P0"), ("P2", "P0")]
        assert all(e.weight == 1 for e in result.graph.edges)
        assert result.graph.edges[0].year == 2018

    def test_provider_always_fails(self):
        """an unreachable provider still yields a well-formed empty graph."""
        provider = StubProvider(fail_everything=True)
        result = GraphBuilder(provider).build(["P0", "P1"], BuildOptions(max_depth=2))

        assert result.graph.nodes == ()
        assert result.graph.edges == ()
        assert result.build_info.api_call_count >= 1
        assert result.build_info.failed_fetches == ["P0", "P1"]


class TestGraphBuilderTraversal:
    """test visited-once, dangling edges and ordering."""

    def test_each_id_fetched_at_most_once(self, cyclic_provider):
        """cycles and shared neighbors never cause a second fetch."""
        result = GraphBuilder(cyclic_provider).build(["A", "D", "A"], BuildOptions(max_depth=3))

        assert max(cyclic_provider.paper_calls.values()) == 1
        assert max(cyclic_provider.citation_calls.values()) == 1
        assert {n.id for n in result.graph.nodes} == {"A", "B", "C", "D"}

    def test_node_ids_unique(self, cyclic_provider):
        """no id appears twice in the node set."""
        result = GraphBuilder(cyclic_provider).build(["A", "D"], BuildOptions(max_depth=3))
        ids = [n.id for n in result.graph.nodes]
        assert len(ids) == len(set(ids))

    def test_depth_first_edge_order(self, cyclic_provider):
        """edges follow recursive depth-first order."""
        result = GraphBuilder(cyclic_provider).build(["A"], BuildOptions(max_depth=3))

        assert [(e.source, e.target) for e in result.graph.edges] == [
            ("B", "A"),   # A's first citing paper
            ("C", "B"),   # walked into B before A's second citing paper
            ("A", "C"),   # cycle back to A, already visited
            ("C", "A"),   # A's second citing paper, already visited
        ]

    def test_failed_fetch_leaves_dangling_edge(self):
        """edges to papers that failed to load are kept but have no node."""
        provider = StubProvider(
            papers={"P0": make_record("P0")},
            citations={"P0": [CitingPaper("GONE", 2020)]},
            failing={"GONE"}
        )
        result = GraphBuilder(provider).build(["P0"], BuildOptions(max_depth=2))

        assert [n.id for n in result.graph.nodes] == ["P0"]
        assert [(e.source, e.target) for e in result.graph.edges] == [("GONE", "P0")]
        assert result.graph.resolved_edges() == []
        assert result.build_info.failed_fetches == ["GONE"]

    def test_not_found_paper_marked_visited(self):
        """a paper the provider does not know is tried once only."""
        provider = StubProvider(
            papers={"A": make_record("A"), "B": make_record("B")},
            citations={
                "A": [CitingPaper("MISSING", None)],
                "B": [CitingPaper("MISSING", None)],
            }
        )
        GraphBuilder(provider).build(["A", "B"], BuildOptions(max_depth=1))

        assert provider.paper_calls["MISSING"] == 1

    def test_depth_bound(self):
        """a long chain stops at max_depth."""
        chain = {f"N{i}": [CitingPaper(f"N{i + 1}", 2000 + i)] for i in range(50)}
        papers = {f"N{i}": make_record(f"N{i}") for i in range(51)}
        provider = StubProvider(papers=papers, citations=chain)

        result = GraphBuilder(provider).build(["N0"], BuildOptions(max_depth=3))

        assert [n.id for n in result.graph.nodes] == ["N0", "N1", "N2", "N3"]
        assert result.build_info.max_depth_reached == 3
        assert provider.citation_calls["N3"] == 0

    def test_deep_chain_does_not_recurse(self):
        """thousands of levels run without hitting the recursion limit."""
        depth = 3000
        chain = {f"N{i}": [CitingPaper(f"N{i + 1}", None)] for i in range(depth)}
        papers = {f"N{i}": make_record(f"N{i}") for i in range(depth + 1)}
        provider = StubProvider(papers=papers, citations=chain)

        result = GraphBuilder(provider).build(["N0"], BuildOptions(max_depth=depth))

        assert len(result.graph.nodes) == depth + 1


class TestGraphBuilderOptions:
    """test seeds, options and build info."""

    def test_negative_depth_rejected(self, star_provider):
        """max_depth < 0 is refused before any fetch."""
        with pytest.raises(ValueError):
            GraphBuilder(star_provider).build(["P0"], BuildOptions(max_depth=-1))
        assert sum(star_provider.paper_calls.values()) == 0

    def test_seed_forms(self, star_provider):
        """seeds may be strings, {"id"} or {"doi"}; empty ones are skipped."""
        result = GraphBuilder(star_provider).build(
            [{"doi": "P0"}, {"id": "P1"}, "P2", {"title": "no id"}, ""],
            BuildOptions(max_depth=0)
        )

        assert [n.id for n in result.graph.nodes] == ["P0", "P1", "P2"]
        assert result.build_info.seed_count == 5

    def test_cache_is_build_scoped(self, star_provider):
        """a second build fetches again instead of reusing the first cache."""
        builder = GraphBuilder(star_provider)
        builder.build(["P0"], BuildOptions(max_depth=0))
        builder.build(["P0"], BuildOptions(max_depth=0))

        assert star_provider.paper_calls["P0"] == 2
        assert star_provider.builds_started == 2

    def test_build_info(self, star_provider):
        """build info reports calls, seeds and depth."""
        result = GraphBuilder(star_provider).build(["P0"], BuildOptions(max_depth=1))
        info = result.build_info

        assert info.seed_count == 1
        assert info.api_call_count == 4  # 3 papers + citations of P0
        assert info.max_depth_reached == 1
        assert info.build_time_ms >= 0
        assert not info.deadline_hit

    def test_deadline_returns_partial_graph(self, star_provider):
        """once the deadline passes no further fetches are made."""
        ticks = iter([0.0, 0.0, 0.5, 5.0, 5.0, 5.0, 5.0, 5.0])
        builder = GraphBuilder(star_provider, clock=lambda: next(ticks, 5.0))

        result = builder.build(["P0"], BuildOptions(max_depth=1, deadline_seconds=1.0))

        assert result.build_info.deadline_hit
        assert [n.id for n in result.graph.nodes] == ["P0"]
        assert star_provider.paper_calls["P1"] == 0

    def test_graph_is_immutable(self, star_provider):
        """the returned snapshot cannot be modified."""
        result = GraphBuilder(star_provider).build(["P0"], BuildOptions(max_depth=1))

        with pytest.raises(AttributeError):
            result.graph.nodes[0].influence_score = 1.0
        with pytest.raises(AttributeError):
            result.graph.nodes = ()

    def test_missing_fields_use_placeholders(self):
        """missing title and authors fall back to defaults."""
        provider = StubProvider(papers={
            "X": PaperRecord(id="X", title="", authors=None, citation_count=None)
        })
        node = GraphBuilder(provider).build(["X"], BuildOptions(max_depth=0)).graph.nodes[0]

        assert node.title == "Unknown"
        assert node.authors == ()
        assert node.citation_count == 0
        assert node.influence_score == 0.0
        assert node.community_id == 0
