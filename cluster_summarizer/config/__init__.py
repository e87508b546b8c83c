"""
Config 패키지 - 기본값 및 파이프라인 설정
"""

from .config import Config, PipelineConfig

__all__ = [
    'Config',
    'PipelineConfig',
]
