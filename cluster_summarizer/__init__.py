"""
cluster_summarizer - 클러스터 기반 map-reduce 문서 요약
"""

from .config.config import Config, PipelineConfig
from .exceptions import (
    SummaryPipelineError,
    ConfigError,
    LoadError,
    EmptyDocumentError,
    EmbeddingError,
    ClusterInvariantError,
    SummarizationError,
    ContextOverflowError,
    PipelineCancelledError,
)
from .models.data_models import (
    SourceDocument,
    Chunk,
    EmbeddingVector,
    Cluster,
    PartialSummary,
    FinalSummary,
)
from .core.pipeline import ClusterSummaryPipeline
from .summarizer import DocumentSummarizer

__version__ = "0.1.0"

__all__ = [
    'Config',
    'PipelineConfig',
    'SummaryPipelineError',
    'ConfigError',
    'LoadError',
    'EmptyDocumentError',
    'EmbeddingError',
    'ClusterInvariantError',
    'SummarizationError',
    'ContextOverflowError',
    'PipelineCancelledError',
    'SourceDocument',
    'Chunk',
    'EmbeddingVector',
    'Cluster',
    'PartialSummary',
    'FinalSummary',
    'ClusterSummaryPipeline',
    'DocumentSummarizer',
]
