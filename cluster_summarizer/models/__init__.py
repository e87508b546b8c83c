"""
Models 패키지 - 데이터 모델
"""

from .data_models import (
    SourceDocument,
    Chunk,
    EmbeddingVector,
    Cluster,
    PartialSummary,
    FinalSummary,
)

__all__ = [
    'SourceDocument',
    'Chunk',
    'EmbeddingVector',
    'Cluster',
    'PartialSummary',
    'FinalSummary',
]
