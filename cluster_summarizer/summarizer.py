"""
DocumentSummarizer - URL/원문 요약 통합 인터페이스
"""

import threading
from typing import Any, Callable, Dict, Optional

from langchain_core.embeddings import Embeddings
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from .config.config import Config, PipelineConfig
from .core.completion import MapSummarizerCapability, ReduceSummarizerCapability
from .core.document_loader import WebDocumentLoader
from .core.pipeline import ClusterSummaryPipeline
from .exceptions import ConfigError
from .models.data_models import FinalSummary
from .utils.logging_config import get_logger
from .utils.token_counter import TokenEstimator, llm_token_estimator

logger = get_logger(__name__)


class DocumentSummarizer:
    """
    DocumentSummarizer - 클러스터 기반 문서 요약 인터페이스

    Features:
    - 웹 페이지 로드 (WebBaseLoader)
    - 중첩 청킹 → 임베딩 → k-means 대표 청크 선택
    - 대표 청크 map 요약 (동시 호출, 진행 상황 콜백)
    - 결합(stuff) 요약

    Attributes:
        pipeline: ClusterSummaryPipeline 인스턴스
        loader: WebDocumentLoader 인스턴스
        config: 기본 파이프라인 설정
    """

    def __init__(
        self,
        llm,
        embeddings: Embeddings,
        reduce_llm=None,
        config: Optional[PipelineConfig] = None,
        loader: Optional[WebDocumentLoader] = None,
        token_estimator: Optional[TokenEstimator] = None,
        summary_progress_callback: Optional[Callable[[Dict[str, Any]], None]] = None
    ):
        """
        Args:
            llm: map 단계 LangChain LLM 인스턴스
            embeddings: LangChain Embeddings 인스턴스
            reduce_llm: reduce 단계 LLM (None이면 llm 사용)
            config: 기본 파이프라인 설정
            loader: 웹 문서 로더
            token_estimator: 토큰 수 추정 함수 (None이면 reduce 모델 기준)
            summary_progress_callback: map 요약 진행 콜백
        """
        self.config = (config or PipelineConfig()).validate()
        self.loader = loader or WebDocumentLoader()

        reduce_llm = reduce_llm or llm
        if token_estimator is None:
            token_estimator = llm_token_estimator(reduce_llm)

        self.pipeline = ClusterSummaryPipeline(
            embeddings=embeddings,
            map_capability=MapSummarizerCapability(llm),
            reduce_capability=ReduceSummarizerCapability(reduce_llm),
            config=self.config,
            token_estimator=token_estimator,
            progress_callback=summary_progress_callback,
        )

    @classmethod
    def from_api_key(
        cls,
        api_key: str,
        model: str = Config.OPENAI_MODEL,
        reduce_model: str = Config.OPENAI_REDUCE_MODEL,
        embedding_model: str = Config.OPENAI_EMBEDDING_MODEL,
        temperature: float = Config.OPENAI_TEMPERATURE,
        timeout: float = Config.OPENAI_REQUEST_TIMEOUT,
        **kwargs
    ) -> "DocumentSummarizer":
        """
        OpenAI 모델로 DocumentSummarizer 생성 (환경 변수를 읽지 않음)

        Args:
            api_key: OpenAI API 키
            model: map 단계 모델
            reduce_model: reduce 단계 모델
            embedding_model: 임베딩 모델
            temperature: 생성 온도
            timeout: 외부 호출 타임아웃 (초)
            **kwargs: DocumentSummarizer 추가 인자

        Returns:
            DocumentSummarizer: 생성된 인스턴스
        """
        if not api_key:
            raise ConfigError("OpenAI API 키가 필요합니다")

        # 재시도는 파이프라인에서만 수행
        llm = ChatOpenAI(
            model=model, temperature=temperature, api_key=api_key, timeout=timeout, max_retries=0
        )
        reduce_llm = llm if reduce_model == model else ChatOpenAI(
            model=reduce_model, temperature=temperature, api_key=api_key, timeout=timeout, max_retries=0
        )
        embeddings = OpenAIEmbeddings(
            model=embedding_model,
            api_key=api_key,
            chunk_size=Config.EMBEDDING_BATCH_SIZE,
            timeout=timeout,
            max_retries=0,
        )
        logger.debug(f"OpenAI 모델 초기화: map={model}, reduce={reduce_model}, embedding={embedding_model}")
        return cls(llm=llm, embeddings=embeddings, reduce_llm=reduce_llm, **kwargs)

    def summarize(
        self,
        url: Optional[str] = None,
        text: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
        **overrides: Any
    ) -> FinalSummary:
        """
        URL 또는 원문 요약

        Args:
            url: 웹 페이지 URL
            text: 원문 텍스트
            cancel_event: 취소 이벤트
            **overrides: 설정 덮어쓰기 (chunk_size, cluster_count 등)

        Returns:
            FinalSummary: 최종 요약

        Raises:
            ConfigError: url/text 둘 다 없거나 둘 다 있음, 잘못된 설정
            SummaryPipelineError: 로드/요약 단계 오류
        """
        if (url is None) == (text is None):
            raise ConfigError("url과 text 중 정확히 하나를 지정해야 합니다")

        config = self.config.with_overrides(**overrides)

        if url is not None:
            document = self.loader.load(url)
            source_text = document.text
            logger.info(f"요약 시작: {url} ({len(source_text)}자)")
        else:
            source_text = text
            logger.info(f"요약 시작: 원문 {len(source_text)}자")

        return self.pipeline.run(source_text, config=config, cancel_event=cancel_event)

    def summarize_url(self, url: str, **overrides: Any) -> FinalSummary:
        """
        웹 페이지 요약

        Args:
            url: 웹 페이지 URL
            **overrides: 설정 덮어쓰기

        Returns:
            FinalSummary: 최종 요약
        """
        return self.summarize(url=url, **overrides)

    def summarize_text(self, text: str, **overrides: Any) -> FinalSummary:
        """
        원문 요약

        Args:
            text: 원문 텍스트
            **overrides: 설정 덮어쓰기

        Returns:
            FinalSummary: 최종 요약
        """
        return self.summarize(text=text, **overrides)
