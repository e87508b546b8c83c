"""
요약 호출 인터페이스 - map / reduce 단계 LLM 호출
"""

from abc import ABC, abstractmethod

from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class CompletionCapability(ABC):
    """
    프롬프트 → 텍스트 호출 인터페이스

    Attributes:
        stage: 사용 단계 이름 ('map' 또는 'reduce')
    """

    stage: str = "completion"

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """
        프롬프트 완성

        Args:
            prompt: 완성할 프롬프트

        Returns:
            str: 모델 응답 텍스트
        """
        raise NotImplementedError


class ChatModelCompletion(CompletionCapability):
    """
    LangChain 채팅 모델 래퍼

    Attributes:
        llm: LangChain LLM 인스턴스 (예: ChatOpenAI)
    """

    def __init__(self, llm):
        """
        Args:
            llm: LangChain LLM 인스턴스
        """
        self.llm = llm

    def complete(self, prompt: str) -> str:
        response = self.llm.invoke(prompt)
        # 채팅 모델은 메시지를, 완성 모델은 문자열을 반환
        content = getattr(response, 'content', response)
        if not isinstance(content, str):
            content = str(content)
        return content.strip()


class MapSummarizerCapability(ChatModelCompletion):
    """청크 단위 map 요약 호출"""

    stage = "map"


class ReduceSummarizerCapability(ChatModelCompletion):
    """결합 요약(stuff) 호출 - 더 큰 컨텍스트 모델 사용 가능"""

    stage = "reduce"
