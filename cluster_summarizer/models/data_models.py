"""
데이터 모델 정의
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class SourceDocument:
    """
    요약 대상 원문

    Attributes:
        text: 원문 텍스트
        source: URL 또는 'raw_text'
    """
    text: str
    source: str = "raw_text"


@dataclass(frozen=True)
class Chunk:
    """
    원문 청크

    Attributes:
        index: 청크 인덱스 (0부터, 원문 순서)
        text: 청크 텍스트
        approx_token_count: 추정 토큰 수 (진단용)
        start: 원문 내 시작 위치 (포함)
        end: 원문 내 끝 위치 (미포함)
    """
    index: int
    text: str
    approx_token_count: int
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class EmbeddingVector:
    """
    청크 임베딩 벡터

    Attributes:
        chunk_index: 대응 청크 인덱스
        components: 벡터 성분
    """
    chunk_index: int
    components: Tuple[float, ...]

    @property
    def dimension(self) -> int:
        return len(self.components)


@dataclass(frozen=True)
class Cluster:
    """
    클러스터 (최종 중심 및 멤버 스냅샷)

    Attributes:
        cluster_id: 클러스터 번호 (0부터)
        centroid: 멤버 벡터의 평균
        member_chunk_indices: 멤버 청크 인덱스 집합
    """
    cluster_id: int
    centroid: Tuple[float, ...]
    member_chunk_indices: FrozenSet[int]


@dataclass(frozen=True)
class PartialSummary:
    """
    대표 청크 하나의 map 요약

    Attributes:
        source_chunk_index: 원본 청크 인덱스
        text: 요약 텍스트
    """
    source_chunk_index: int
    text: str


@dataclass(frozen=True)
class FinalSummary:
    """
    최종 요약 결과

    Attributes:
        text: 최종 요약 텍스트
        num_source_chunks: 원문 청크 수
        num_summarized_chunks: 요약된 대표 청크 수
        selected_chunk_indices: 선택된 대표 청크 인덱스 (오름차순)
        partial_summaries: map 단계 요약 (원문 순서)
    """
    text: str
    num_source_chunks: int
    num_summarized_chunks: int
    selected_chunk_indices: Tuple[int, ...] = field(default_factory=tuple)
    partial_summaries: Tuple[PartialSummary, ...] = field(default_factory=tuple)

    @property
    def coverage_ratio(self) -> float:
        """요약에 사용된 청크 비율"""
        if self.num_source_chunks == 0:
            return 0.0
        return self.num_summarized_chunks / self.num_source_chunks
