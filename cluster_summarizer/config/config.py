"""
설정 모듈 - 기본값 중앙화 및 요청 단위 파이프라인 설정
"""

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional, Tuple

from ..exceptions import ConfigError


class Config:
    """
    애플리케이션 기본 설정 클래스

    파이프라인 구성 요소는 이 클래스를 직접 읽지 않고, 여기서 만든
    PipelineConfig 객체를 생성 시점에 전달받습니다.
    """

    # OpenAI 설정
    OPENAI_API_KEY: Optional[str] = None  # 진입점(app, examples)에서만 로드
    OPENAI_MODEL: str = "gpt-4o-mini"  # map 단계 모델
    OPENAI_REDUCE_MODEL: str = "gpt-4o-mini"  # reduce 단계 모델 (더 큰 컨텍스트 모델 가능)
    OPENAI_TEMPERATURE: float = 0.0  # 생성 온도 (0.0은 결정론적 응답)
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"
    OPENAI_REQUEST_TIMEOUT: float = 60.0  # 외부 호출 타임아웃 (초)

    # 청킹(Chunking) 설정
    CHUNK_SIZE: int = 10000  # 청크 최대 문자 수
    CHUNK_OVERLAP: int = 3000  # 다음 청크 앞에 반복되는 문자 수
    CHUNK_SEPARATORS: Tuple[str, ...] = ("\n\n", "\n", "\t", ". ", " ")  # 우선순위 순 분리자

    # 클러스터링 설정
    CLUSTER_COUNT: int = 10  # 요청 클러스터 수 (청크 수보다 크면 청크 수로 축소)
    MAX_CLUSTER_ITERATIONS: int = 100  # k-means 최대 반복 횟수
    RANDOM_SEED: int = 42  # 초기 중심 선택 시드

    # 요약 설정
    CONTEXT_SIZE_CEILING: int = 12000  # reduce 입력 토큰 한도
    MAX_CONCURRENCY: int = 4  # map 단계 동시 호출 수

    # 재시도 설정 (오케스트레이터 전용)
    MAX_RETRIES: int = 2  # 최초 호출 이후 추가 시도 횟수
    RETRY_INITIAL_WAIT: float = 1.0  # 첫 재시도 대기 (초)
    RETRY_MAX_WAIT: float = 10.0  # 최대 재시도 대기 (초)

    # 임베딩 설정
    EMBEDDING_BATCH_SIZE: int = 100  # OpenAIEmbeddings 내부 배치 크기

    @classmethod
    def load_openai_api_key(cls, is_colab: bool = False) -> Optional[str]:
        """
        OpenAI API 키 로드 (환경 변수 또는 Colab userdata)

        Args:
            is_colab (bool): Colab 환경 여부 (True일 경우 Colab에서 키를 로드)

        Returns:
            Optional[str]: API 키 (없으면 None)
        """
        api_key = None
        if is_colab:
            try:
                from google.colab import userdata
                api_key = userdata.get('OPENAI_API_KEY')
            except ImportError:
                return None
        else:
            from dotenv import load_dotenv
            load_dotenv()  # .env 파일에서 환경 변수 로드
            api_key = os.getenv("OPENAI_API_KEY")

        if api_key:
            cls.OPENAI_API_KEY = api_key.strip()  # 키 공백 제거
            return cls.OPENAI_API_KEY

        return None

    @classmethod
    def pipeline_config(cls, **overrides: Any) -> "PipelineConfig":
        """
        기본값으로 PipelineConfig 생성

        Args:
            **overrides: 덮어쓸 설정 값

        Returns:
            PipelineConfig: 검증된 설정
        """
        return PipelineConfig().with_overrides(**overrides)


@dataclass(frozen=True)
class PipelineConfig:
    """
    요청 단위 파이프라인 설정

    Attributes:
        chunk_size: 청크 최대 문자 수
        chunk_overlap: 청크 간 중첩 문자 수 (chunk_size 미만)
        separators: 분리자 (선호 순서)
        cluster_count: 요청 클러스터 수
        max_cluster_iterations: k-means 최대 반복 횟수
        context_size_ceiling: reduce 입력 토큰 한도
        random_seed: 초기 중심 선택 시드
        max_concurrency: map 단계 동시 호출 수
        max_retries: 외부 호출 추가 시도 횟수
        retry_initial_wait: 첫 재시도 대기 (초)
        retry_max_wait: 최대 재시도 대기 (초)
    """
    chunk_size: int = Config.CHUNK_SIZE
    chunk_overlap: int = Config.CHUNK_OVERLAP
    separators: Tuple[str, ...] = field(default=Config.CHUNK_SEPARATORS)
    cluster_count: int = Config.CLUSTER_COUNT
    max_cluster_iterations: int = Config.MAX_CLUSTER_ITERATIONS
    context_size_ceiling: int = Config.CONTEXT_SIZE_CEILING
    random_seed: int = Config.RANDOM_SEED
    max_concurrency: int = Config.MAX_CONCURRENCY
    max_retries: int = Config.MAX_RETRIES
    retry_initial_wait: float = Config.RETRY_INITIAL_WAIT
    retry_max_wait: float = Config.RETRY_MAX_WAIT

    def __post_init__(self):
        # 리스트로 전달되어도 해시 가능한 튜플로 고정
        if not isinstance(self.separators, tuple):
            object.__setattr__(self, 'separators', tuple(self.separators))

    def validate(self) -> "PipelineConfig":
        """
        설정 값 검증

        Returns:
            PipelineConfig: 자기 자신 (체이닝용)

        Raises:
            ConfigError: 잘못된 설정
        """
        if self.chunk_size < 1:
            raise ConfigError(f"chunk_size는 1 이상이어야 합니다: {self.chunk_size}")
        if self.chunk_overlap < 0:
            raise ConfigError(f"chunk_overlap은 0 이상이어야 합니다: {self.chunk_overlap}")
        if self.chunk_overlap >= self.chunk_size:
            raise ConfigError(
                f"chunk_overlap({self.chunk_overlap})은 chunk_size({self.chunk_size})보다 작아야 합니다"
            )
        if self.cluster_count < 1:
            raise ConfigError(f"cluster_count는 1 이상이어야 합니다: {self.cluster_count}")
        if self.max_cluster_iterations < 1:
            raise ConfigError(
                f"max_cluster_iterations는 1 이상이어야 합니다: {self.max_cluster_iterations}"
            )
        if self.context_size_ceiling < 1:
            raise ConfigError(
                f"context_size_ceiling은 1 이상이어야 합니다: {self.context_size_ceiling}"
            )
        if self.max_concurrency < 1:
            raise ConfigError(f"max_concurrency는 1 이상이어야 합니다: {self.max_concurrency}")
        if self.max_retries < 0:
            raise ConfigError(f"max_retries는 0 이상이어야 합니다: {self.max_retries}")
        if self.retry_initial_wait < 0 or self.retry_max_wait < 0:
            raise ConfigError("재시도 대기 시간은 0 이상이어야 합니다")
        if any(not isinstance(sep, str) for sep in self.separators):
            raise ConfigError(f"separators는 문자열이어야 합니다: {self.separators!r}")
        return self

    def with_overrides(self, **overrides: Any) -> "PipelineConfig":
        """
        일부 값을 덮어쓴 새 설정 반환 (None 값은 무시)

        Args:
            **overrides: 덮어쓸 설정 값

        Returns:
            PipelineConfig: 검증된 새 설정

        Raises:
            ConfigError: 알 수 없는 키 또는 잘못된 값
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"알 수 없는 설정 키: {', '.join(unknown)}")

        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values).validate()
