"""
로깅 설정 모듈
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
PACKAGE_LOGGER_NAME = 'cluster_summarizer'


def setup_logger(
    name: str = PACKAGE_LOGGER_NAME,
    level: Union[int, str] = logging.DEBUG,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    로거 설정 및 반환

    Args:
        name: 로거 이름
        level: 로깅 레벨 (정수 또는 'INFO' 같은 문자열)
        format_string: 로그 포맷 문자열

    Returns:
        logging.Logger: 설정된 로거
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 기존 핸들러 제거 (중복 방지)
    if logger.handlers:
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    logger.addHandler(console_handler)

    # 패키지 로거에 핸들러가 있으면 하위 로거는 전파만 한다
    logger.propagate = name != PACKAGE_LOGGER_NAME

    return logger


def get_logger(name: str = PACKAGE_LOGGER_NAME) -> logging.Logger:
    """
    기존 로거 반환 (패키지 로거가 설정되지 않았으면 기본 설정으로 생성)

    Args:
        name: 로거 이름 (보통 __name__)

    Returns:
        logging.Logger: 로거 인스턴스
    """
    root = logging.getLogger(PACKAGE_LOGGER_NAME)
    if not root.handlers:
        setup_logger(PACKAGE_LOGGER_NAME, level=logging.INFO)

    return logging.getLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    """
    패키지 전체 로깅 레벨 변경

    Args:
        level: 로깅 레벨
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = get_logger(PACKAGE_LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
