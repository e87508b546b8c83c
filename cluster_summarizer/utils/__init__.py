"""
Utils 패키지 - 유틸리티 함수
"""

from .logging_config import setup_logger, get_logger, set_log_level
from .token_counter import TokenEstimator, TiktokenEstimator, llm_token_estimator

__all__ = [
    'setup_logger',
    'get_logger',
    'set_log_level',
    'TokenEstimator',
    'TiktokenEstimator',
    'llm_token_estimator',
]
