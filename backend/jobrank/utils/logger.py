"""日志配置：所有模块通过 get_logger 获取统一格式的 logger"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    获取配置好的 logger

    只在 logger 尚无 handler 时挂载 stdout handler，避免重复输出。
    默认级别可以通过环境变量 JOBRANK_LOG_LEVEL 覆盖（如 DEBUG）。

    Args:
        name: logger 名称，通常传入 __name__
        level: 显式日志级别（可选）

    Returns:
        logging.Logger 实例
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        env_level = os.environ.get("JOBRANK_LOG_LEVEL")
        if level is None and env_level:
            level = logging.getLevelName(env_level.upper())
            if not isinstance(level, int):
                level = None
        if level is None:
            level = logging.INFO
    if level is not None:
        logger.setLevel(level)
    return logger
