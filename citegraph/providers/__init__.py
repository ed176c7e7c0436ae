from .base import MetadataProvider
from .semantic_scholar import SemanticScholarProvider
from .openalex import OpenAlexProvider
from .factory import create_provider
