"""
공용 테스트 픽스처 - 외부 호출 없는 임베딩/요약 대역
"""

import hashlib
import re
import threading
import time
from typing import Callable, List, Optional

import pytest
from langchain_core.embeddings import Embeddings

from cluster_summarizer.config.config import PipelineConfig
from cluster_summarizer.core.completion import CompletionCapability

_DELIMITED = re.compile(r"===(.*)===", re.DOTALL)


class FakeEmbeddings(Embeddings):
    """텍스트 md5 기반 결정론적 임베딩"""

    def __init__(self, dimension: int = 4, vector_fn: Optional[Callable[[str], List[float]]] = None):
        self.dimension = dimension
        self.vector_fn = vector_fn
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> List[float]:
        if self.vector_fn is not None:
            return self.vector_fn(text)
        digest = hashlib.md5(text.encode("utf-8")).digest()
        return [digest[i] / 255.0 for i in range(self.dimension)]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> List[float]:
        return self._vector(text)


class RecordingCompletion(CompletionCapability):
    """
    호출 기록용 요약 대역

    응답은 '=== ===' 구분자 안 텍스트 앞부분에 prefix를 붙인 문자열입니다.
    """

    def __init__(
        self,
        stage: str = "map",
        prefix: str = "S",
        fail_when: Optional[Callable[[str], bool]] = None,
        error: Optional[Exception] = None,
        delay: Optional[Callable[[str], float]] = None,
        fail_times: int = 0
    ):
        self.stage = stage
        self.prefix = prefix
        self.fail_when = fail_when
        self.error = error or RuntimeError("completion failed")
        self.delay = delay
        self.fail_times = fail_times
        self.prompts: List[str] = []
        self._lock = threading.Lock()

    @staticmethod
    def body(prompt: str) -> str:
        match = _DELIMITED.search(prompt)
        return match.group(1) if match else prompt

    def complete(self, prompt: str) -> str:
        with self._lock:
            self.prompts.append(prompt)
            attempt = len(self.prompts)
        if self.delay is not None:
            time.sleep(self.delay(prompt))
        if attempt <= self.fail_times:
            raise self.error
        if self.fail_when is not None and self.fail_when(prompt):
            raise self.error
        return f"{self.prefix}:{self.body(prompt)[:40]}"


def word_count(text: str) -> int:
    return len(text.split())


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def embeddings_factory():
    return FakeEmbeddings


@pytest.fixture
def completion_factory():
    return RecordingCompletion


@pytest.fixture
def token_estimator():
    return word_count


@pytest.fixture
def fast_config():
    """재시도 대기 없는 작은 설정"""
    return PipelineConfig(
        chunk_size=100,
        chunk_overlap=0,
        separators=("\n\n", "\n", " "),
        cluster_count=5,
        max_cluster_iterations=100,
        context_size_ceiling=10000,
        random_seed=7,
        max_concurrency=3,
        max_retries=0,
        retry_initial_wait=0.0,
        retry_max_wait=0.0,
    )


def make_paragraph_document(count: int, body_length: int = 60) -> str:
    """청크 하나에 문단 하나가 들어가는 문서 (chunk_size=100, overlap=0 기준)"""
    paragraphs = [f"Paragraph {i:02d} " + chr(ord('a') + i % 26) * body_length for i in range(count)]
    return "\n\n".join(paragraphs)


@pytest.fixture
def paragraph_document():
    return make_paragraph_document
