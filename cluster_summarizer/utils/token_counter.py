"""
토큰 수 추정 유틸리티
"""

from typing import Callable, Optional

import tiktoken

from .logging_config import get_logger

logger = get_logger(__name__)

TokenEstimator = Callable[[str], int]

DEFAULT_ENCODING = "cl100k_base"


class TiktokenEstimator:
    """
    tiktoken 기반 토큰 수 추정기

    인코딩은 첫 호출 시 로드됩니다.

    Attributes:
        model_name: 인코딩을 결정할 모델 이름
    """

    def __init__(self, model_name: Optional[str] = None):
        """
        Args:
            model_name: 모델 이름 (None이면 cl100k_base 사용)
        """
        self.model_name = model_name
        self._encoding = None

    def _get_encoding(self):
        if self._encoding is None:
            if self.model_name:
                try:
                    self._encoding = tiktoken.encoding_for_model(self.model_name)
                except KeyError:
                    logger.debug(f"'{self.model_name}' 인코딩 미등록, {DEFAULT_ENCODING} 사용")
                    self._encoding = tiktoken.get_encoding(DEFAULT_ENCODING)
            else:
                self._encoding = tiktoken.get_encoding(DEFAULT_ENCODING)
        return self._encoding

    def __call__(self, text: str) -> int:
        """
        Args:
            text: 대상 텍스트

        Returns:
            int: 토큰 수
        """
        if not text:
            return 0
        return len(self._get_encoding().encode(text, disallowed_special=()))


def llm_token_estimator(llm) -> TokenEstimator:
    """
    LangChain 모델의 get_num_tokens를 추정기로 감싸기

    Args:
        llm: LangChain 언어 모델

    Returns:
        TokenEstimator: 토큰 수 추정 함수
    """
    def estimate(text: str) -> int:
        return llm.get_num_tokens(text) if text else 0

    return estimate
