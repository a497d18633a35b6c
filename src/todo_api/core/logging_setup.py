"""日志初始化。"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """初始化日志输出格式与级别。"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
