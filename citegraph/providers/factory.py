"""
provider construction from configuration.
"""

from typing import Optional

from .base import MetadataProvider
from ..core.config import ProviderConfig, ProviderName


def create_provider(config: Optional[ProviderConfig] = None) -> MetadataProvider:
    """
    create the provider named in config.
    semantic scholar unless configured otherwise.
    """
    from .openalex import OpenAlexProvider
    from .semantic_scholar import SemanticScholarProvider

    config = config or ProviderConfig.from_env()

    if config.provider == ProviderName.OPENALEX:
        return OpenAlexProvider(config=config)
    return SemanticScholarProvider(config=config)
