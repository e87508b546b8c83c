"""
요약 파이프라인 - 청킹 → 임베딩 → 클러스터링 → 대표 선택 → map → reduce
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from langchain_core.embeddings import Embeddings
from tenacity import (
    Retrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ..config.config import PipelineConfig
from ..exceptions import (
    ClusterInvariantError,
    EmbeddingError,
    EmptyDocumentError,
    PipelineCancelledError,
    SummarizationError,
    SummaryPipelineError,
    is_timeout_error,
)
from ..models.data_models import Chunk, Cluster, EmbeddingVector, FinalSummary, PartialSummary
from ..utils.logging_config import get_logger
from ..utils.token_counter import TiktokenEstimator, TokenEstimator
from .chunker import DocumentChunker
from .cluster_engine import KMeansClusterEngine
from .completion import CompletionCapability
from .embedder import EmbedderAdapter
from .map_summarizer import MapSummarizer
from .reduce_combiner import ReduceCombiner
from .representative_selector import RepresentativeSelector

logger = get_logger(__name__)


def build_retrying(config: PipelineConfig, stage: str) -> Retrying:
    """
    외부 호출 재시도 정책 생성

    파이프라인 자체 오류(SummaryPipelineError)는 재시도하지 않습니다.

    Args:
        config: 파이프라인 설정
        stage: 로그용 단계 이름

    Returns:
        Retrying: tenacity 재시도 객체
    """
    def log_retry(retry_state) -> None:
        logger.warning(
            f"[{stage}] 재시도 {retry_state.attempt_number}/{config.max_retries}: "
            f"{retry_state.outcome.exception()}"
        )

    return Retrying(
        stop=stop_after_attempt(config.max_retries + 1),
        wait=wait_exponential_jitter(
            initial=config.retry_initial_wait,
            max=config.retry_max_wait,
            jitter=config.retry_initial_wait,
        ),
        retry=retry_if_not_exception_type(SummaryPipelineError),
        before_sleep=log_retry,
        reraise=True,
    )


class RetryingCompletion(CompletionCapability):
    """
    재시도 정책을 적용한 호출 인터페이스 (오케스트레이터 전용)

    Attributes:
        capability: 원래 호출 인터페이스
        config: 재시도 설정을 담은 파이프라인 설정
    """

    def __init__(self, capability: CompletionCapability, config: PipelineConfig):
        self.capability = capability
        self.config = config
        self.stage = capability.stage

    def complete(self, prompt: str) -> str:
        # Retrying은 호출별 상태를 가지므로 스레드마다 새로 만든다
        retrying = build_retrying(self.config, self.stage)
        return retrying(self.capability.complete, prompt)


class ClusterSummaryPipeline:
    """
    클러스터 기반 map-reduce 요약 파이프라인

    단계 간 오류를 재분류하는 유일한 지점이며, 외부 호출 재시도도 여기서만
    적용합니다. 실패 시 중간 결과는 모두 버립니다.

    Attributes:
        embedder: EmbedderAdapter 인스턴스
        map_capability: map 요약 호출 인터페이스
        reduce_capability: reduce 요약 호출 인터페이스
        config: 기본 파이프라인 설정
        token_estimator: 토큰 수 추정 함수
        progress_callback: map 단계 진행 상황 콜백 함수
    """

    def __init__(
        self,
        embeddings: Embeddings,
        map_capability: CompletionCapability,
        reduce_capability: CompletionCapability,
        config: Optional[PipelineConfig] = None,
        token_estimator: Optional[TokenEstimator] = None,
        progress_callback: Optional[Callable[[Dict[str, Any]], None]] = None
    ):
        """
        Args:
            embeddings: LangChain Embeddings 또는 EmbedderAdapter
            map_capability: map 요약 호출 인터페이스
            reduce_capability: reduce 요약 호출 인터페이스
            config: 기본 파이프라인 설정
            token_estimator: 토큰 수 추정 함수 (기본값: tiktoken)
            progress_callback: map 단계 진행 상황 콜백 함수
        """
        if isinstance(embeddings, EmbedderAdapter):
            self.embedder = embeddings
        else:
            self.embedder = EmbedderAdapter(embeddings)
        self.map_capability = map_capability
        self.reduce_capability = reduce_capability
        self.config = (config or PipelineConfig()).validate()
        self.token_estimator = token_estimator or TiktokenEstimator()
        self.progress_callback = progress_callback
        self.selector = RepresentativeSelector()

    def run(
        self,
        source_text: str,
        config: Optional[PipelineConfig] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> FinalSummary:
        """
        원문 → 최종 요약

        Args:
            source_text: 원문 텍스트
            config: 요청 단위 설정 (None이면 기본 설정)
            cancel_event: 설정되면 이후 단계를 실행하지 않음

        Returns:
            FinalSummary: 최종 요약

        Raises:
            SummaryPipelineError: 단계별 오류 (하위 클래스)
        """
        config = (config or self.config).validate()
        started = time.perf_counter()

        if not source_text or not source_text.strip():
            raise EmptyDocumentError("요약할 본문이 비어 있습니다")

        try:
            chunks = self._run_stage("chunk", self._chunk, source_text, config)
            self._check_cancelled(cancel_event, "embed")

            vectors = self._run_stage("embed", self._embed, chunks, config)
            self._check_cancelled(cancel_event, "cluster")

            clusters = self._run_stage("cluster", self._cluster, vectors, config)
            selected = self._run_stage("select", self.selector.select, clusters, vectors)
            self._check_cancelled(cancel_event, "map")

            partials = self._run_stage("map", self._map, chunks, selected, config, cancel_event)
            self._check_cancelled(cancel_event, "reduce")

            final_summary = self._run_stage("reduce", self._reduce, partials, len(chunks), config)
        except SummaryPipelineError as e:
            logger.error(f"요약 파이프라인 실패 [{e.stage}]: {e}")
            raise

        logger.info(
            f"요약 완료: 청크 {final_summary.num_source_chunks}개 중 "
            f"{final_summary.num_summarized_chunks}개 요약, "
            f"{len(final_summary.text)}자 ({time.perf_counter() - started:.1f}초)"
        )
        return final_summary

    def _run_stage(self, stage: str, func: Callable, *args):
        """단계 실행 및 알 수 없는 예외 재분류"""
        started = time.perf_counter()
        logger.debug(f"[{stage}] 시작")
        try:
            result = func(*args)
        except SummaryPipelineError:
            raise
        except Exception as e:
            raise self._retag(stage, e) from e

        logger.debug(f"[{stage}] 완료 ({time.perf_counter() - started:.2f}초)")
        return result

    @staticmethod
    def _retag(stage: str, error: Exception) -> SummaryPipelineError:
        timed_out = is_timeout_error(error)
        message = f"{type(error).__name__}: {error}"

        if stage == "embed":
            return EmbeddingError(f"임베딩 호출 실패 - {message}", timed_out=timed_out)
        if stage in ("cluster", "select"):
            return ClusterInvariantError(f"클러스터링 실패 - {message}", stage=stage)
        if stage in ("map", "reduce"):
            return SummarizationError(f"요약 실패 - {message}", stage=stage, timed_out=timed_out)
        # chunk 단계의 설정 오류는 청커가 직접 ConfigError로 던진다
        return SummaryPipelineError(f"단계 실행 실패 - {message}", stage=stage)

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event], next_stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError(f"요청이 취소되어 '{next_stage}' 단계를 실행하지 않습니다")

    def _chunk(self, source_text: str, config: PipelineConfig) -> List[Chunk]:
        chunker = DocumentChunker(
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
            separators=config.separators,
            token_estimator=self.token_estimator,
        )
        return chunker.chunk(source_text)

    def _embed(self, chunks: Sequence[Chunk], config: PipelineConfig) -> List[EmbeddingVector]:
        retrying = build_retrying(config, "embed")
        return retrying(self.embedder.embed, [chunk.text for chunk in chunks])

    @staticmethod
    def _cluster(vectors: Sequence[EmbeddingVector], config: PipelineConfig) -> List[Cluster]:
        engine = KMeansClusterEngine(
            max_iterations=config.max_cluster_iterations,
            random_seed=config.random_seed,
        )
        return engine.cluster(vectors, config.cluster_count)

    def _map(
        self,
        chunks: Sequence[Chunk],
        selected: Sequence[int],
        config: PipelineConfig,
        cancel_event: Optional[threading.Event]
    ) -> List[PartialSummary]:
        summarizer = MapSummarizer(
            RetryingCompletion(self.map_capability, config),
            max_concurrency=config.max_concurrency,
            progress_callback=self.progress_callback,
        )
        return summarizer.summarize_chunks([chunks[index] for index in selected], cancel_event)

    def _reduce(
        self,
        partials: Sequence[PartialSummary],
        num_source_chunks: int,
        config: PipelineConfig
    ) -> FinalSummary:
        combiner = ReduceCombiner(
            RetryingCompletion(self.reduce_capability, config),
            context_size_ceiling=config.context_size_ceiling,
            token_estimator=self.token_estimator,
        )
        return combiner.combine(partials, num_source_chunks=num_source_chunks)
