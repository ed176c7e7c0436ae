# pipeline - build, annotate and summarize a citation graph
from .orchestrator import CitationGraphPipeline
from .results import CitationGraphResult
