"""
임베딩 어댑터 - 청크 텍스트 → 고정 차원 벡터
"""

from typing import List, Sequence

from langchain_core.embeddings import Embeddings

from ..exceptions import EmbeddingError
from ..models.data_models import EmbeddingVector
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class EmbedderAdapter:
    """
    LangChain Embeddings 래퍼 (개수/차원 검증)

    Attributes:
        embeddings: LangChain Embeddings 인스턴스 (예: OpenAIEmbeddings)
    """

    def __init__(self, embeddings: Embeddings):
        """
        Args:
            embeddings: LangChain Embeddings 인스턴스
        """
        self.embeddings = embeddings

    def embed(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        """
        청크 텍스트 일괄 임베딩 (단일 배치 호출)

        Args:
            texts: 청크 텍스트 (청크 인덱스 순서)

        Returns:
            List[EmbeddingVector]: 입력과 같은 순서/개수의 벡터

        Raises:
            EmbeddingError: 반환 개수 또는 차원 불일치
        """
        if not texts:
            return []

        logger.debug(f"{len(texts)}개 청크 임베딩 요청")
        raw_vectors = self.embeddings.embed_documents(list(texts))

        if raw_vectors is None or len(raw_vectors) != len(texts):
            returned = 0 if raw_vectors is None else len(raw_vectors)
            raise EmbeddingError(
                f"임베딩 개수 불일치: 청크 {len(texts)}개, 벡터 {returned}개"
            )

        dimension = len(raw_vectors[0])
        if dimension == 0:
            raise EmbeddingError("임베딩 벡터 차원이 0입니다")

        vectors = []
        for chunk_index, components in enumerate(raw_vectors):
            if len(components) != dimension:
                raise EmbeddingError(
                    f"임베딩 차원 불일치: 청크 {chunk_index}는 {len(components)}차원, "
                    f"기대값 {dimension}차원"
                )
            vectors.append(EmbeddingVector(
                chunk_index=chunk_index,
                components=tuple(float(value) for value in components),
            ))

        logger.debug(f"임베딩 완료: {len(vectors)}개 x {dimension}차원")
        return vectors
