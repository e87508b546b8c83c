"""
Reduce 결합 - map 요약들을 하나의 최종 요약으로 (stuff 방식)
"""

from typing import Optional, Sequence

from langchain_core.prompts import PromptTemplate

from ..config.config import Config
from ..exceptions import (
    ContextOverflowError,
    SummarizationError,
    SummaryPipelineError,
    is_timeout_error,
)
from ..models.data_models import FinalSummary, PartialSummary
from ..utils.logging_config import get_logger
from ..utils.token_counter import TiktokenEstimator, TokenEstimator
from .completion import CompletionCapability

logger = get_logger(__name__)

PARAGRAPH_DELIMITER = "\n\n"

COMBINE_PROMPT_TEMPLATE = """
You will be given a series of summaries taken from one document.
The summaries are delimited by triple = and appear in the order of the document.
Write a verbose, coherent summary of the whole document.
Return your response in a well-formatted, multi-paragraph string.
==={text}===
VERBOSE SUMMARY:
"""


class ReduceCombiner:
    """
    map 요약 결합기

    Attributes:
        capability: reduce 요약 호출 인터페이스
        context_size_ceiling: 결합 텍스트 토큰 한도
        token_estimator: 토큰 수 추정 함수
        prompt: 결합 프롬프트 템플릿
    """

    def __init__(
        self,
        capability: CompletionCapability,
        context_size_ceiling: int = Config.CONTEXT_SIZE_CEILING,
        token_estimator: Optional[TokenEstimator] = None,
        prompt_template: str = COMBINE_PROMPT_TEMPLATE
    ):
        """
        Args:
            capability: reduce 요약 호출 인터페이스
            context_size_ceiling: 결합 텍스트 토큰 한도
            token_estimator: 토큰 수 추정 함수 (기본값: tiktoken)
            prompt_template: {text} 변수를 포함한 프롬프트
        """
        self.capability = capability
        self.context_size_ceiling = context_size_ceiling
        self.token_estimator = token_estimator or TiktokenEstimator(Config.OPENAI_REDUCE_MODEL)
        self.prompt = PromptTemplate.from_template(prompt_template)

    def combine_text(self, partials: Sequence[PartialSummary]) -> str:
        """
        map 요약을 원문 순서로 연결

        Args:
            partials: map 요약 리스트

        Returns:
            str: 문단 구분자로 연결된 텍스트
        """
        ordered = sorted(partials, key=lambda p: p.source_chunk_index)
        return PARAGRAPH_DELIMITER.join(partial.text for partial in ordered)

    def combine(
        self,
        partials: Sequence[PartialSummary],
        num_source_chunks: Optional[int] = None
    ) -> FinalSummary:
        """
        최종 요약 생성

        Args:
            partials: map 요약 리스트
            num_source_chunks: 원문 청크 수 (None이면 map 요약 수)

        Returns:
            FinalSummary: 최종 요약

        Raises:
            ContextOverflowError: 결합 텍스트가 토큰 한도 초과
            SummarizationError: 결합할 요약이 없거나 호출 실패 (stage='reduce')
        """
        if not partials:
            raise SummarizationError("결합할 map 요약이 없습니다", stage="reduce")

        ordered = sorted(partials, key=lambda p: p.source_chunk_index)
        combined_text = self.combine_text(ordered)

        token_count = self.token_estimator(combined_text)
        logger.debug(
            f"결합 텍스트: {len(ordered)}개 요약, {len(combined_text)}자, "
            f"약 {token_count}/{self.context_size_ceiling} 토큰"
        )
        if token_count > self.context_size_ceiling:
            raise ContextOverflowError(token_count, self.context_size_ceiling)

        prompt = self.prompt.format(text=combined_text)
        try:
            summary = self.capability.complete(prompt)
        except SummaryPipelineError:
            raise
        except Exception as e:
            raise SummarizationError(
                f"reduce 요약 실패: {e}",
                stage="reduce",
                timed_out=is_timeout_error(e),
            ) from e

        if not summary or not summary.strip():
            raise SummarizationError("reduce 요약 응답이 비어 있습니다", stage="reduce")

        return FinalSummary(
            text=summary.strip(),
            num_source_chunks=num_source_chunks if num_source_chunks is not None else len(ordered),
            num_summarized_chunks=len(ordered),
            selected_chunk_indices=tuple(p.source_chunk_index for p in ordered),
            partial_summaries=tuple(ordered),
        )
