from .models import (
    PaperRecord, CitingPaper, PaperNode, CitationEdge, Graph,
    GraphMetrics, Community, KeyPaper, TimelineBucket, BuildInfo
)
from .config import (
    CitegraphConfig, ProviderConfig, BuildOptions, AnalysisConfig,
    CentralityAlgorithm, ProviderName
)
from .resilience import (
    RequestPolicy, ProviderHealth, RequestGuard,
    MalformedPayloadError, ProviderUnavailableError, setup_logging
)
