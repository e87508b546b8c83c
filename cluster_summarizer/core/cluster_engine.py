"""
클러스터 엔진 - 임베딩 벡터 k-means 분할
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config.config import Config
from ..exceptions import ConfigError
from ..models.data_models import Cluster, EmbeddingVector
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class KMeansClusterEngine:
    """
    시드 고정 k-means (L2 거리)

    - 초기 중심: 시드 난수로 서로 다른 벡터 k개 선택 (원문 순서로 정렬)
    - 할당: 가장 가까운 중심 (동률이면 낮은 클러스터 번호)
    - 빈 클러스터: 자기 중심에서 가장 먼 벡터로 재시드
    - 종료: 할당 변화 없음 또는 max_iterations 도달

    Attributes:
        max_iterations: 최대 반복 횟수
        random_seed: 초기 중심 선택 시드
        last_iterations: 직전 실행의 반복 횟수
        last_converged: 직전 실행의 수렴 여부
    """

    def __init__(
        self,
        max_iterations: int = Config.MAX_CLUSTER_ITERATIONS,
        random_seed: int = Config.RANDOM_SEED
    ):
        """
        Args:
            max_iterations: 최대 반복 횟수
            random_seed: 초기 중심 선택 시드
        """
        if max_iterations < 1:
            raise ConfigError(f"max_iterations는 1 이상이어야 합니다: {max_iterations}")
        self.max_iterations = max_iterations
        self.random_seed = random_seed
        self.last_iterations = 0
        self.last_converged = False

    def cluster(self, vectors: Sequence[EmbeddingVector], k: int) -> List[Cluster]:
        """
        벡터 클러스터링

        Args:
            vectors: 임베딩 벡터 (청크 인덱스 순서)
            k: 요청 클러스터 수 (벡터 수보다 크면 벡터 수로 축소)

        Returns:
            List[Cluster]: 클러스터 번호 순 리스트 (모두 비어있지 않음)

        Raises:
            ConfigError: k < 1
        """
        if k < 1:
            raise ConfigError(f"cluster_count는 1 이상이어야 합니다: {k}")
        if not vectors:
            return []

        num_vectors = len(vectors)
        if num_vectors < k:
            logger.debug(f"청크 수({num_vectors}) < 요청 클러스터 수({k}), k={num_vectors}로 축소")
            k = num_vectors

        chunk_indices = [vector.chunk_index for vector in vectors]
        matrix = np.asarray([vector.components for vector in vectors], dtype=np.float64)

        labels, centroids = self._fit(matrix, k)

        clusters = []
        for cluster_id in range(k):
            members = frozenset(
                chunk_indices[row] for row in np.flatnonzero(labels == cluster_id)
            )
            clusters.append(Cluster(
                cluster_id=cluster_id,
                centroid=tuple(float(value) for value in centroids[cluster_id]),
                member_chunk_indices=members,
            ))

        logger.debug(
            f"클러스터링 완료: k={k}, 반복 {self.last_iterations}회, "
            f"수렴={self.last_converged}, 크기={[len(c.member_chunk_indices) for c in clusters]}"
        )
        return clusters

    def _fit(self, matrix: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        k-means 반복

        Returns:
            (labels, centroids)
        """
        centroids = self._initial_centroids(matrix, k)
        labels: Optional[np.ndarray] = None
        self.last_converged = False
        self.last_iterations = 0

        for iteration in range(1, self.max_iterations + 1):
            distances = self._pairwise_distances(matrix, centroids)
            # argmin은 동률일 때 첫 번째(가장 낮은 번호)를 반환
            new_labels = np.argmin(distances, axis=1)
            new_labels = self._reseed_empty_clusters(new_labels, distances, k)

            changed = labels is None or bool(np.any(new_labels != labels))
            labels = new_labels
            centroids = self._recompute_centroids(matrix, labels, k)
            self.last_iterations = iteration

            if not changed:
                self.last_converged = True
                break

        if not self.last_converged:
            logger.warning(f"k-means가 {self.max_iterations}회 내에 수렴하지 않음")

        return labels, centroids

    def _initial_centroids(self, matrix: np.ndarray, k: int) -> np.ndarray:
        rng = np.random.default_rng(self.random_seed)
        seeds = np.sort(rng.choice(len(matrix), size=k, replace=False))
        logger.debug(f"초기 중심 벡터 인덱스: {seeds.tolist()}")
        return matrix[seeds].copy()

    @staticmethod
    def _pairwise_distances(matrix: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """
        (N, k) L2 거리 행렬

        ||x||² - 2x·c + ||c||² 전개로 계산해 (N, k, D) 임시 배열을 만들지 않습니다.
        """
        squared = (
            np.einsum('ij,ij->i', matrix, matrix)[:, np.newaxis]
            - 2.0 * (matrix @ centroids.T)
            + np.einsum('ij,ij->i', centroids, centroids)[np.newaxis, :]
        )
        # 부동소수점 오차로 생기는 음수 제거
        np.maximum(squared, 0.0, out=squared)
        return np.sqrt(squared)

    @staticmethod
    def _reseed_empty_clusters(
        labels: np.ndarray,
        distances: np.ndarray,
        k: int
    ) -> np.ndarray:
        """
        빈 클러스터 재시드

        멤버가 2개 이상인 클러스터의 벡터 중 자기 중심에서 가장 먼 벡터를
        빈 클러스터로 옮깁니다 (동률이면 낮은 행 번호).
        """
        counts = np.bincount(labels, minlength=k)
        if np.all(counts > 0):
            return labels

        labels = labels.copy()
        own_distance = distances[np.arange(len(labels)), labels].copy()
        moved = np.zeros(len(labels), dtype=bool)

        for cluster_id in np.flatnonzero(counts == 0):
            candidates = (counts[labels] > 1) & ~moved
            if not np.any(candidates):
                break
            scores = np.where(candidates, own_distance, -np.inf)
            row = int(np.argmax(scores))

            logger.debug(f"빈 클러스터 {cluster_id} 재시드: 벡터 {row} (거리 {own_distance[row]:.4f})")
            counts[labels[row]] -= 1
            counts[cluster_id] += 1
            labels[row] = cluster_id
            moved[row] = True

        return labels

    @staticmethod
    def _recompute_centroids(matrix: np.ndarray, labels: np.ndarray, k: int) -> np.ndarray:
        centroids = np.zeros((k, matrix.shape[1]), dtype=np.float64)
        for cluster_id in range(k):
            members = matrix[labels == cluster_id]
            if len(members):
                centroids[cluster_id] = members.mean(axis=0)
        return centroids
