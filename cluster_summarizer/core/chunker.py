"""
청커 - 원문 → 중첩 청크 분할
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from langchain_text_splitters import TextSplitter

from ..config.config import Config
from ..exceptions import ConfigError
from ..models.data_models import Chunk
from ..utils.logging_config import get_logger
from ..utils.token_counter import TiktokenEstimator, TokenEstimator

logger = get_logger(__name__)


def _validate_chunk_params(chunk_size: int, chunk_overlap: int) -> None:
    if chunk_size < 1:
        raise ConfigError(f"chunk_size는 1 이상이어야 합니다: {chunk_size}")
    if chunk_overlap < 0:
        raise ConfigError(f"chunk_overlap은 0 이상이어야 합니다: {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ConfigError(
            f"chunk_overlap({chunk_overlap})은 chunk_size({chunk_size})보다 작아야 합니다"
        )


class WindowTextSplitter(TextSplitter):
    """
    고정 윈도우 탐욕 분할기

    윈도우(chunk_size) 안에서 가장 우선순위가 높은 분리자의 마지막 위치 바로
    뒤에서 자르고, 찾지 못하면 chunk_size 위치에서 강제로 자릅니다.
    다음 청크는 직전 청크의 마지막 chunk_overlap 문자부터 시작합니다.

    Attributes:
        separators: 분리자 (선호 순서, 빈 문자열은 강제 분할 표시)
    """

    def __init__(
        self,
        chunk_size: int = Config.CHUNK_SIZE,
        chunk_overlap: int = Config.CHUNK_OVERLAP,
        separators: Optional[Sequence[str]] = None,
        **kwargs
    ):
        """
        Args:
            chunk_size: 청크 최대 문자 수
            chunk_overlap: 다음 청크 앞에 반복되는 문자 수
            separators: 분리자 (선호 순서)
            **kwargs: TextSplitter 추가 인자 (add_start_index 등)

        Raises:
            ConfigError: chunk_overlap >= chunk_size 등 잘못된 설정
        """
        _validate_chunk_params(chunk_size, chunk_overlap)
        # 청크 텍스트를 원문 그대로 유지해야 위치 계산이 맞다
        kwargs.setdefault('strip_whitespace', False)
        super().__init__(chunk_size=chunk_size, chunk_overlap=chunk_overlap, **kwargs)
        self.separators = tuple(separators) if separators is not None else Config.CHUNK_SEPARATORS

    def split_spans(self, text: str) -> List[Tuple[int, int]]:
        """
        청크 구간 계산

        Args:
            text: 원문

        Returns:
            List[Tuple[int, int]]: (시작, 끝) 구간 리스트 (원문 순서)
        """
        spans: List[Tuple[int, int]] = []
        length = len(text)
        start = 0

        while start < length:
            window_end = min(start + self._chunk_size, length)
            if window_end == length:
                spans.append((start, length))
                break

            cut = self._find_cut(text, start, window_end)
            spans.append((start, cut))
            start = cut - self._chunk_overlap

        return spans

    def _find_cut(self, text: str, start: int, window_end: int) -> int:
        """
        윈도우 안의 절단 위치 결정

        절단 위치는 항상 start + chunk_overlap 보다 커야 다음 윈도우가 전진합니다.
        """
        min_cut = start + self._chunk_overlap

        for separator in self.separators:
            if not separator:
                break

            pos = text.rfind(separator, start, window_end)
            if pos == -1:
                continue

            cut = pos + len(separator)
            if cut > min_cut:
                return cut

        return window_end

    def split_text(self, text: str) -> List[str]:
        return [text[start:end] for start, end in self.split_spans(text)]


class DocumentChunker:
    """
    원문 → Chunk 리스트 변환

    Attributes:
        text_splitter: WindowTextSplitter 인스턴스
        token_estimator: 토큰 수 추정 함수 (분할에는 영향 없음)
    """

    def __init__(
        self,
        chunk_size: int = Config.CHUNK_SIZE,
        chunk_overlap: int = Config.CHUNK_OVERLAP,
        separators: Optional[Sequence[str]] = None,
        token_estimator: Optional[TokenEstimator] = None
    ):
        """
        Args:
            chunk_size: 청크 최대 문자 수
            chunk_overlap: 청크 간 중첩 문자 수
            separators: 분리자 (선호 순서)
            token_estimator: 토큰 수 추정 함수 (기본값: tiktoken)
        """
        self.text_splitter = WindowTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=separators,
        )
        self.token_estimator = token_estimator or TiktokenEstimator(Config.OPENAI_MODEL)

    def chunk(self, text: str) -> List[Chunk]:
        """
        원문 청킹

        Args:
            text: 원문

        Returns:
            List[Chunk]: 인덱스 0..N-1 청크 리스트
        """
        spans = self.text_splitter.split_spans(text)

        chunks = []
        for index, (start, end) in enumerate(spans):
            chunk_text = text[start:end]
            num_tokens = self.token_estimator(chunk_text)
            logger.debug(f"청크 {index}: {start}~{end} ({end - start}자, 약 {num_tokens} 토큰)")
            chunks.append(Chunk(
                index=index,
                text=chunk_text,
                approx_token_count=num_tokens,
                start=start,
                end=end,
            ))

        logger.debug(f"총 {len(chunks)}개 청크 생성 (원문 {len(text)}자)")
        return chunks


def chunk(
    text: str,
    chunk_size: int = Config.CHUNK_SIZE,
    chunk_overlap: int = Config.CHUNK_OVERLAP,
    separators: Optional[Iterable[str]] = None,
    token_estimator: Optional[TokenEstimator] = None
) -> List[Chunk]:
    """
    원문을 중첩 청크로 분할

    Args:
        text: 원문
        chunk_size: 청크 최대 문자 수
        chunk_overlap: 청크 간 중첩 문자 수
        separators: 분리자 (선호 순서)
        token_estimator: 토큰 수 추정 함수

    Returns:
        List[Chunk]: 청크 리스트
    """
    chunker = DocumentChunker(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=list(separators) if separators is not None else None,
        token_estimator=token_estimator,
    )
    return chunker.chunk(text)
