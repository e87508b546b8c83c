"""
문서 로더 - URL → 원문 텍스트
"""

import re
from typing import Dict, Optional

from langchain_community.document_loaders import WebBaseLoader

from ..exceptions import LoadError
from ..models.data_models import SourceDocument
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    'User-Agent': 'cluster-summarizer/0.1 (+https://github.com/)',
}


def clean_text(text: str) -> str:
    """
    추출 텍스트 전처리

    Args:
        text: 원본 텍스트

    Returns:
        str: 전처리된 텍스트
    """
    # 연속 공백 → 단일 공백
    text = re.sub(r'[ \t]+', ' ', text)

    # 각 줄 앞뒤 공백 제거
    lines = [line.strip() for line in text.split('\n')]
    text = '\n'.join(lines)

    # 연속 개행(3개 이상) → 2개
    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()


class WebDocumentLoader:
    """
    웹 페이지 본문 로더 (WebBaseLoader 래퍼)

    Attributes:
        header_template: HTTP 요청 헤더
        requests_kwargs: requests 추가 인자 (timeout 등)
    """

    def __init__(
        self,
        header_template: Optional[Dict[str, str]] = None,
        timeout: float = 30.0
    ):
        """
        Args:
            header_template: HTTP 요청 헤더
            timeout: 요청 타임아웃 (초)
        """
        self.header_template = header_template or dict(DEFAULT_HEADERS)
        self.requests_kwargs = {'timeout': timeout}

    def load(self, url: str) -> SourceDocument:
        """
        URL 본문 로드

        Args:
            url: 웹 페이지 URL

        Returns:
            SourceDocument: 정리된 본문

        Raises:
            LoadError: 요청 실패 또는 빈 본문
        """
        if not url or not url.strip():
            raise LoadError("URL이 비어 있습니다", url=url)

        logger.debug(f"웹 문서 로드 중: {url}")
        loader = WebBaseLoader(
            web_path=url,
            header_template=self.header_template,
            requests_kwargs=self.requests_kwargs,
            raise_for_status=True,
            # 블록 요소 경계를 줄바꿈으로 유지
            bs_get_text_kwargs={'separator': '\n'},
        )

        try:
            documents = loader.load()
        except Exception as e:
            raise LoadError(f"문서 로드 실패: {e}", url=url) from e

        text = clean_text("\n\n".join(doc.page_content for doc in documents))
        if not text:
            raise LoadError("문서 본문이 비어 있습니다", url=url)

        logger.debug(f"로드 완료: {url} ({len(text)}자)")
        return SourceDocument(text=text, source=url)
