"""
設定管理，從環境變數載入
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """應用程式設定"""

    # 服務位址
    host: str = os.getenv("SLOWLOG_HOST", "0.0.0.0")
    port: int = int(os.getenv("SLOWLOG_PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # 一次最多上傳的檔案數
    max_upload_files: int = int(os.getenv("MAX_UPLOAD_FILES", "20"))

    # 摘要表預設排序
    default_sort_key: str = os.getenv("DEFAULT_SORT_KEY", "total_time")
    default_sort_direction: str = os.getenv("DEFAULT_SORT_DIRECTION", "desc").lower()


settings = Settings()
