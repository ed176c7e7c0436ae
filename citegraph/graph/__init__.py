from .metadata_client import MetadataClient
from .builder import GraphBuilder, BuildContext, BuildResult
