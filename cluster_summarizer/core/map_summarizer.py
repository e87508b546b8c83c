"""
Map 요약 - 대표 청크별 독립 요약 (동시 호출 제한)
"""

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional, Sequence

from tqdm import tqdm
from langchain_core.prompts import PromptTemplate

from ..config.config import Config
from ..exceptions import (
    PipelineCancelledError,
    SummarizationError,
    SummaryPipelineError,
    is_timeout_error,
)
from ..models.data_models import Chunk, PartialSummary
from ..utils.logging_config import get_logger
from .completion import CompletionCapability

logger = get_logger(__name__)

MAP_PROMPT_TEMPLATE = """
Write a concise summary of the following text delimited by triple =.
Return your response in a well-formatted, multi-paragraph string.
==={text}===
SUMMARY:
"""

# 취소 여부를 확인하는 주기 (초)
CANCEL_POLL_INTERVAL = 0.1


class MapSummarizer:
    """
    대표 청크 map 요약 (fan-out / fan-in)

    Attributes:
        capability: map 요약 호출 인터페이스
        max_concurrency: 동시 호출 수
        prompt: map 프롬프트 템플릿
        progress_callback: 요약 진행 상황 콜백 함수
    """

    def __init__(
        self,
        capability: CompletionCapability,
        max_concurrency: int = Config.MAX_CONCURRENCY,
        prompt_template: str = MAP_PROMPT_TEMPLATE,
        progress_callback: Optional[Callable[[Dict[str, Any]], None]] = None
    ):
        """
        Args:
            capability: map 요약 호출 인터페이스
            max_concurrency: 동시 호출 수 (1이면 순차)
            prompt_template: {text} 변수를 포함한 프롬프트
            progress_callback: 요약 진행 상황 콜백 함수
                호출 시 전달되는 딕셔너리:
                {
                    'current_chunk': int,
                    'total_chunks': int,
                    'chunk_index': int,
                    'original_length': int,
                    'summary_length': int,
                    'compression_ratio': float,
                    'status': str,  # 'processing', 'completed', 'failed'
                    'error': str
                }
        """
        self.capability = capability
        self.max_concurrency = max(1, max_concurrency)
        self.prompt = PromptTemplate.from_template(prompt_template)
        self.progress_callback = progress_callback

    def summarize_chunk(self, chunk: Chunk) -> PartialSummary:
        """
        단일 청크 요약

        Args:
            chunk: 대표 청크

        Returns:
            PartialSummary: 청크 요약

        Raises:
            SummarizationError: 요약 호출 실패 (stage='map')
        """
        prompt = self.prompt.format(text=chunk.text)

        try:
            summary = self.capability.complete(prompt)
        except SummaryPipelineError:
            raise
        except Exception as e:
            raise SummarizationError(
                f"map 요약 실패: {e}",
                stage="map",
                chunk_index=chunk.index,
                timed_out=is_timeout_error(e),
            ) from e

        if not summary or not summary.strip():
            raise SummarizationError("map 요약 응답이 비어 있습니다", stage="map", chunk_index=chunk.index)

        return PartialSummary(source_chunk_index=chunk.index, text=summary.strip())

    def summarize_chunks(
        self,
        chunks: Sequence[Chunk],
        cancel_event: Optional[threading.Event] = None
    ) -> List[PartialSummary]:
        """
        대표 청크 일괄 요약 (완료 순서와 무관하게 청크 인덱스 순 반환)

        Args:
            chunks: 대표 청크 리스트
            cancel_event: 설정되면 남은 호출을 취소

        Returns:
            List[PartialSummary]: 청크 인덱스 오름차순 요약

        Raises:
            SummarizationError: 하나라도 실패하면 전체 실패 (부분 결과 없음)
            PipelineCancelledError: 호출자 취소
        """
        ordered = sorted(chunks, key=lambda c: c.index)
        total_chunks = len(ordered)
        if total_chunks == 0:
            return []

        logger.debug(f"{total_chunks}개 대표 청크 요약 중 (동시 {self.max_concurrency})")

        results: Dict[int, PartialSummary] = {}
        executor = ThreadPoolExecutor(
            max_workers=min(self.max_concurrency, total_chunks),
            thread_name_prefix="map-summary",
        )
        futures: Dict[Future, Chunk] = {}

        try:
            for chunk in ordered:
                self._raise_if_cancelled(cancel_event)
                futures[executor.submit(self.summarize_chunk, chunk)] = chunk

            with tqdm(total=total_chunks, desc="청크 요약", unit="chunk") as pbar:
                pending = set(futures)
                while pending:
                    self._raise_if_cancelled(cancel_event)
                    done, pending = wait(pending, timeout=CANCEL_POLL_INTERVAL, return_when=FIRST_COMPLETED)

                    for future in sorted(done, key=lambda f: futures[f].index):
                        chunk = futures[future]
                        progress_info = self._progress_info(len(results) + 1, total_chunks, chunk)
                        try:
                            partial = future.result()
                        except SummaryPipelineError as e:
                            progress_info.update({'status': 'failed', 'error': str(e)})
                            pbar.set_postfix_str(f"failed: {str(e)[:30]}")
                            self._notify(progress_info)
                            raise

                        results[chunk.index] = partial
                        summary_length = len(partial.text)
                        original_length = len(chunk.text)
                        compression_ratio = summary_length / original_length if original_length > 0 else 0.0
                        progress_info.update({
                            'summary_length': summary_length,
                            'compression_ratio': compression_ratio,
                            'status': 'completed',
                        })

                        pbar.set_postfix_str(
                            f"청크 {chunk.index} | {original_length}→{summary_length}자 ({compression_ratio:.1%})"
                        )
                        pbar.update(1)
                        self._notify(progress_info)
        finally:
            # 실패/취소 시 대기 중인 호출은 버리고 실행 중인 호출은 기다리지 않음
            for future in futures:
                future.cancel()
            executor.shutdown(wait=False, cancel_futures=True)

        logger.debug(f"요약 완료: {len(results)}개 청크")
        return [results[chunk.index] for chunk in ordered]

    @staticmethod
    def _raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError("map 요약 중 요청이 취소되었습니다", stage="map")

    @staticmethod
    def _progress_info(current_chunk: int, total_chunks: int, chunk: Chunk) -> Dict[str, Any]:
        return {
            'current_chunk': current_chunk,
            'total_chunks': total_chunks,
            'chunk_index': chunk.index,
            'original_length': len(chunk.text),
            'summary_length': 0,
            'compression_ratio': 0.0,
            'status': 'processing',
            'error': '',
        }

    def _notify(self, progress_info: Dict[str, Any]) -> None:
        if self.progress_callback:
            self.progress_callback(progress_info)
