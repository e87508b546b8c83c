"""
예외 정의 - 파이프라인 단계별 오류 분류
"""

import concurrent.futures
from typing import Optional

import openai


class SummaryPipelineError(Exception):
    """
    요약 파이프라인 오류의 기본 클래스

    Attributes:
        stage: 오류가 발생한 단계 ('config', 'load', 'chunk', 'embed',
            'cluster', 'select', 'map', 'reduce')
    """

    stage: str = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ConfigError(SummaryPipelineError):
    """잘못된 설정 (chunk_overlap >= chunk_size, cluster_count < 1 등)"""

    stage = "config"


class LoadError(SummaryPipelineError):
    """
    문서 로드 실패

    Attributes:
        url: 로드하려던 URL
    """

    stage = "load"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class EmptyDocumentError(SummaryPipelineError):
    """요약할 본문이 없음"""

    stage = "chunk"


class EmbeddingError(SummaryPipelineError):
    """
    임베딩 실패 또는 결과 불일치 (개수/차원)

    Attributes:
        timed_out: 외부 호출 타임아웃 여부
    """

    stage = "embed"

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out


class ClusterInvariantError(SummaryPipelineError):
    """클러스터 분할 불변식 위반 (항상 내부 버그)"""

    stage = "select"


class SummarizationError(SummaryPipelineError):
    """
    요약 호출 실패

    Attributes:
        stage: 'map' 또는 'reduce'
        chunk_index: map 단계에서 실패한 청크 인덱스
        timed_out: 외부 호출 타임아웃 여부
    """

    def __init__(
        self,
        message: str,
        stage: str,
        chunk_index: Optional[int] = None,
        timed_out: bool = False
    ):
        super().__init__(message, stage=stage)
        self.chunk_index = chunk_index
        self.timed_out = timed_out

    def __str__(self) -> str:
        base = super().__str__()
        if self.chunk_index is not None:
            return f"[{self.stage}] chunk {self.chunk_index}: {base}"
        return f"[{self.stage}] {base}"


class ContextOverflowError(SummaryPipelineError):
    """
    결합된 요약문이 컨텍스트 한도를 초과

    Attributes:
        token_count: 추정 토큰 수
        ceiling: 설정된 한도
    """

    stage = "reduce"

    def __init__(self, token_count: int, ceiling: int):
        super().__init__(
            f"결합 텍스트 {token_count} 토큰이 컨텍스트 한도 {ceiling} 토큰을 초과합니다"
        )
        self.token_count = token_count
        self.ceiling = ceiling


class PipelineCancelledError(SummaryPipelineError):
    """호출자가 요청을 취소함"""

    stage = "cancel"


_TIMEOUT_TYPES = (TimeoutError, concurrent.futures.TimeoutError, openai.APITimeoutError)


def is_timeout_error(exc: BaseException) -> bool:
    """
    외부 호출 타임아웃 여부 (원인 체인 포함)

    Args:
        exc: 검사할 예외

    Returns:
        bool: 타임아웃이면 True
    """
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, _TIMEOUT_TYPES):
            return True
        if getattr(current, 'timed_out', False):
            return True
        current = current.__cause__
    return False
