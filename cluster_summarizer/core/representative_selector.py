"""
대표 청크 선택 - 클러스터별 중심에 가장 가까운 청크
"""

from typing import Dict, List, Sequence

import numpy as np

from ..exceptions import ClusterInvariantError
from ..models.data_models import Cluster, EmbeddingVector
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class RepresentativeSelector:
    """
    클러스터 대표 청크 선택기

    선택 순서는 클러스터 번호 순, 반환 순서는 원문(청크 인덱스) 순입니다.
    """

    def select(
        self,
        clusters: Sequence[Cluster],
        vectors: Sequence[EmbeddingVector]
    ) -> List[int]:
        """
        클러스터별 대표 청크 인덱스 선택

        Args:
            clusters: 클러스터 리스트
            vectors: 임베딩 벡터 리스트

        Returns:
            List[int]: 오름차순 대표 청크 인덱스 (클러스터 수와 같은 길이)

        Raises:
            ClusterInvariantError: 분할 불변식 위반 (중복/누락/빈 클러스터)
        """
        vector_by_index: Dict[int, EmbeddingVector] = {v.chunk_index: v for v in vectors}
        self._check_partition(clusters, vector_by_index)

        selected = []
        for cluster in clusters:
            members = sorted(cluster.member_chunk_indices)
            centroid = np.asarray(cluster.centroid, dtype=np.float64)
            member_matrix = np.asarray(
                [vector_by_index[index].components for index in members],
                dtype=np.float64
            )
            distances = np.linalg.norm(member_matrix - centroid, axis=1)
            # 멤버를 정렬했으므로 동률이면 낮은 청크 인덱스
            representative = members[int(np.argmin(distances))]

            logger.debug(
                f"클러스터 {cluster.cluster_id}: 멤버 {len(members)}개 → 대표 청크 {representative} "
                f"(거리 {float(distances.min()):.4f})"
            )
            selected.append(representative)

        if len(set(selected)) != len(selected):
            raise ClusterInvariantError(f"대표 청크가 중복 선택됨: {selected}")

        return sorted(selected)

    @staticmethod
    def _check_partition(
        clusters: Sequence[Cluster],
        vector_by_index: Dict[int, EmbeddingVector]
    ) -> None:
        """모든 청크가 정확히 하나의 클러스터에 속하는지 검증"""
        known = set(vector_by_index)
        seen = set()
        for cluster in clusters:
            if not cluster.member_chunk_indices:
                raise ClusterInvariantError(f"클러스터 {cluster.cluster_id}에 멤버가 없습니다")

            overlap = seen & cluster.member_chunk_indices
            if overlap:
                raise ClusterInvariantError(
                    f"청크 {sorted(overlap)}가 여러 클러스터에 할당됨"
                )

            unknown = cluster.member_chunk_indices - known
            if unknown:
                raise ClusterInvariantError(
                    f"클러스터 {cluster.cluster_id}에 벡터 없는 청크 {sorted(unknown)}"
                )
            seen |= cluster.member_chunk_indices

        missing = known - seen
        if missing:
            raise ClusterInvariantError(f"어느 클러스터에도 없는 청크: {sorted(missing)}")
