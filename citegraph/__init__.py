"""
citegraph - citation graph construction and analysis.
"""

from .core.config import CitegraphConfig, BuildOptions, AnalysisConfig, ProviderConfig
from .core.models import PaperNode, CitationEdge, Graph, Community, KeyPaper, TimelineBucket
from .graph.metadata_client import MetadataClient
from .graph.builder import GraphBuilder
from .providers.semantic_scholar import SemanticScholarProvider
from .providers.openalex import OpenAlexProvider
from .pipeline.orchestrator import CitationGraphPipeline
from .pipeline.results import CitationGraphResult

__version__ = "0.1.0"

__all__ = [
    "CitegraphConfig",
    "BuildOptions",
    "AnalysisConfig",
    "ProviderConfig",
    "PaperNode",
    "CitationEdge",
    "Graph",
    "Community",
    "KeyPaper",
    "TimelineBucket",
    "MetadataClient",
    "GraphBuilder",
    "SemanticScholarProvider",
    "OpenAlexProvider",
    "CitationGraphPipeline",
    "CitationGraphResult"
]
