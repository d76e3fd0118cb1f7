"""
日誌設定
"""

import logging
import sys
from typing import Optional

from core.config import settings


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    建立並回傳設定好的 logger

    Args:
        name: logger 名稱（通常為 __name__）
        level: 日誌層級 (DEBUG, INFO, WARNING, ERROR)，預設取自設定

    Returns:
        logging.Logger: 設定完成的 logger
    """
    level_value = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level_value)

    # 只加入一次 handler
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level_value)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(handler)

    return logger
