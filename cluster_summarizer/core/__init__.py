"""
Core 패키지 - 핵심 파이프라인 클래스
"""

from .chunker import WindowTextSplitter, DocumentChunker, chunk
from .embedder import EmbedderAdapter
from .cluster_engine import KMeansClusterEngine
from .representative_selector import RepresentativeSelector
from .completion import (
    CompletionCapability,
    ChatModelCompletion,
    MapSummarizerCapability,
    ReduceSummarizerCapability,
)
from .map_summarizer import MapSummarizer
from .reduce_combiner import ReduceCombiner
from .pipeline import ClusterSummaryPipeline, RetryingCompletion
from .document_loader import WebDocumentLoader

__all__ = [
    'WindowTextSplitter',
    'DocumentChunker',
    'chunk',
    'EmbedderAdapter',
    'KMeansClusterEngine',
    'RepresentativeSelector',
    'CompletionCapability',
    'ChatModelCompletion',
    'MapSummarizerCapability',
    'ReduceSummarizerCapability',
    'MapSummarizer',
    'ReduceCombiner',
    'ClusterSummaryPipeline',
    'RetryingCompletion',
    'WebDocumentLoader',
]
