from .influence import InfluenceRanker
from .community import CommunityDetector, summarize_communities
from .centrality import CentralityScorer
from .metrics import MetricsAggregator
from .key_papers import KeyPaperSelector
from .timeline import TimelineAnalyzer
