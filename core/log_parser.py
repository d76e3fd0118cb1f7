"""
MySQL 慢查詢 LOG 解析器
"""

import re
from typing import Any, Dict, List, Optional

from core.logger import setup_logger
from models.schemas import QueryEntry

logger = setup_logger(__name__)

# 啟動時輸出的標頭行
HEADER_LINE = "Time                 Id Command    Argument"
HEADER_PREFIXES = ("Tcp port:", "/rdsdbbin")

TIME_PATTERN = re.compile(r"# Time: (.+)")
USER_HOST_PATTERN = re.compile(r"# User@Host: (.+?)\[(.+?)\] @ \[(.+?)\]\s+Id: (\d+)", re.ASCII)
QUERY_TIME_PATTERN = re.compile(
    r"# Query_time: ([\d.]+)\s+Lock_time: ([\d.]+)\s+Rows_sent: (\d+)\s+Rows_examined: (\d+)",
    re.ASCII
)
USE_DATABASE_PATTERN = re.compile(r"use (.+?);")
NUMBER_PREFIX_PATTERN = re.compile(r"\d+(?:\.\d*)?|\.\d+", re.ASCII)


def _to_float(text: str) -> Optional[float]:
    """取開頭的數字部分轉為浮點數，例如 "1.5.0" -> 1.5"""
    match = NUMBER_PREFIX_PATTERN.match(text)
    if not match:
        return None
    return float(match.group(0))


def _flush(current: Dict[str, Any], query_lines: List[str],
           database: Optional[str], entries: List[QueryEntry]) -> None:
    """有時間且有 SQL 內容的記錄才輸出"""
    if not current.get("time") or not query_lines:
        return
    entries.append(QueryEntry(
        query=" ".join(query_lines).strip(),
        database=database,
        **current
    ))


def parse_slow_log(content: str) -> List[QueryEntry]:
    """
    解析慢查詢 LOG 內容

    逐行掃描，以 "# Time:" 作為每筆記錄的開頭。格式不符的中繼資料行
    不會中斷解析，對應欄位保持 None。

    Args:
        content: LOG 檔案內容

    Returns:
        List[QueryEntry]: 解析後的查詢記錄列表，無法解析時為空列表
    """
    entries: List[QueryEntry] = []
    current: Dict[str, Any] = {}
    query_lines: List[str] = []
    # 最後一次 "use <db>;" 的資料庫，跨記錄沿用
    database: Optional[str] = None

    # Windows 匯出的 LOG 可能帶有 BOM
    if content.startswith("\ufeff"):
        content = content[1:]

    for raw_line in content.split("\n"):
        line = raw_line.strip()

        # 略過空行與標頭
        if not line or line == HEADER_LINE or line.startswith(HEADER_PREFIXES):
            continue

        if line.startswith("# Time:"):
            _flush(current, query_lines, database, entries)
            current = {}
            query_lines = []

            if m := TIME_PATTERN.match(line):
                current["time"] = m.group(1)

        elif line.startswith("# User@Host:"):
            if m := USER_HOST_PATTERN.search(line):
                current["user"] = m.group(2)
                current["host"] = m.group(3)
                current["connection_id"] = m.group(4)

        elif line.startswith("# Query_time:"):
            if m := QUERY_TIME_PATTERN.search(line):
                current["query_time"] = _to_float(m.group(1))
                current["lock_time"] = _to_float(m.group(2))
                current["rows_sent"] = int(m.group(3))
                current["rows_examined"] = int(m.group(4))

        elif line.startswith("use ") and line.endswith(";"):
            if m := USE_DATABASE_PATTERN.match(line):
                database = m.group(1)

        elif line.startswith("SET timestamp="):
            continue

        elif not line.startswith("#"):
            query_lines.append(line)

    # 最後一筆
    _flush(current, query_lines, database, entries)

    logger.debug("解析完成: %d 筆慢查詢記錄", len(entries))
    return entries
