"""
SQL 查詢分析器
"""

import math
import re
import statistics
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from models.schemas import ParameterAnalysis, QueryAnalysis, QueryEntry, QuerySummary

SORT_KEYS = ("count", "total_time", "avg_time", "max_time", "min_time")
SORT_DIRECTIONS = ("asc", "desc")

WHITESPACE_PATTERN = re.compile(r"\s+")
DIGITS_PATTERN = re.compile(r"[0-9]+")
SINGLE_QUOTED_PATTERN = re.compile(r"'[^']*'")
DOUBLE_QUOTED_PATTERN = re.compile(r'"[^"]*"')

# extract_parameter_pattern 使用
QUOTED_CONTENT_PATTERN = re.compile(r"'([^']*)'|\"([^\"]*)\"")
DATE_PATTERN = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
CLOCK_PATTERN = re.compile(r"\b\d{2}:\d{2}:\d{2}\b")
NUMBER_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\b")

# parse_log_time 使用
FRACTION_PATTERN = re.compile(r"(?<=:\d\d)\.(\d+)", re.ASCII)


def normalize_query(query: str) -> str:
    """
    SQL 樣板轉換函式

    數字先於字串常值替換，引號內的數字會先變成 "?" 再被整段字串覆蓋。

    Args:
        query: 原始 SQL 語句

    Returns:
        str: 正規化後的 SQL 樣板
    """
    sql = WHITESPACE_PATTERN.sub(" ", query)
    sql = DIGITS_PATTERN.sub("?", sql)
    sql = SINGLE_QUOTED_PATTERN.sub("'?'", sql)
    sql = DOUBLE_QUOTED_PATTERN.sub('"?"', sql)
    return sql.strip()


def normalize_literal_query(query: str) -> str:
    """只整理空白，保留實際參數值"""
    return WHITESPACE_PATTERN.sub(" ", query).strip()


def _bucket_string(content: str) -> str:
    if DATE_PATTERN.fullmatch(content):
        return "DATE"
    if CLOCK_PATTERN.fullmatch(content):
        return "TIME"
    if DATE_PATTERN.search(content) and CLOCK_PATTERN.search(content):
        return "DATETIME"
    if len(content) <= 10:
        return "STRING_SHORT"
    if len(content) <= 50:
        return "STRING_MEDIUM"
    return "STRING_LONG"


def _bucket_number(number: str) -> str:
    digits = len(number.replace(".", ""))
    if digits <= 3:
        return "NUMBER_SMALL"
    if digits <= 6:
        return "NUMBER_MEDIUM"
    return "NUMBER_LARGE"


def extract_parameter_pattern(query: str) -> str:
    """
    將參數值依長度粗略分類

    字串依內容長度分為 SHORT / MEDIUM / LONG，數字依位數分為
    SMALL / MEDIUM / LARGE，另外辨識日期 (YYYY-MM-DD) 與時間 (HH:MM:SS)。

    Args:
        query: 原始 SQL 語句

    Returns:
        str: 參數分類後的樣板
    """
    def replace_quoted(m: re.Match) -> str:
        quote = "'" if m.group(1) is not None else '"'
        content = m.group(1) if m.group(1) is not None else m.group(2)
        return f"{quote}{{{_bucket_string(content)}}}{quote}"

    sql = WHITESPACE_PATTERN.sub(" ", query)
    sql = QUOTED_CONTENT_PATTERN.sub(replace_quoted, sql)
    sql = DATE_PATTERN.sub("{DATE}", sql)
    sql = CLOCK_PATTERN.sub("{TIME}", sql)
    sql = NUMBER_PATTERN.sub(lambda m: f"{{{_bucket_number(m.group(0))}}}", sql)
    return sql.strip()


def group_by_query(entries: List[QueryEntry]) -> Dict[str, List[QueryEntry]]:
    """
    依正規化樣板分組

    Args:
        entries: 查詢記錄列表

    Returns:
        Dict[str, List[QueryEntry]]: 樣板對應記錄，保留首次出現順序
    """
    grouped: Dict[str, List[QueryEntry]] = {}
    for entry in entries:
        key = normalize_query(entry.query or "")
        grouped.setdefault(key, []).append(entry)
    return grouped


def calculate_time_stats(entries: List[QueryEntry]) -> Dict[str, Any]:
    """
    計算查詢時間統計

    缺少 query_time 的記錄以 0 計算。

    Args:
        entries: 查詢記錄列表

    Returns:
        Dict[str, Any]: count / total_time / avg_time / max_time / min_time
    """
    times = [entry.query_time or 0.0 for entry in entries]
    count = len(times)
    total_time = sum(times)
    return {
        "count": count,
        "total_time": total_time,
        "avg_time": total_time / count if count else 0.0,
        "max_time": max(times) if times else 0.0,
        "min_time": min(times) if times else 0.0,
    }


def create_summary_data(entries: List[QueryEntry]) -> List[QuerySummary]:
    """
    建立統計摘要資料

    Args:
        entries: 查詢記錄列表

    Returns:
        List[QuerySummary]: 各樣板的統計摘要
    """
    return [
        QuerySummary(normalized_query=normalized_query, **calculate_time_stats(group))
        for normalized_query, group in group_by_query(entries).items()
    ]


def sort_summaries(summaries: List[QuerySummary], sort_key: str = "total_time",
                   direction: str = "desc") -> List[QuerySummary]:
    """
    排序統計摘要（穩定排序）

    Args:
        summaries: 統計摘要列表
        sort_key: 排序欄位
        direction: asc 或 desc

    Returns:
        List[QuerySummary]: 排序後的新列表
    """
    if sort_key not in SORT_KEYS:
        raise ValueError(f"無效的排序欄位: {sort_key}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"無效的排序方向: {direction}")

    return sorted(summaries, key=lambda s: getattr(s, sort_key), reverse=direction == "desc")


def analyze_query_parameters(normalized_query: str, entries: List[QueryEntry]) -> QueryAnalysis:
    """
    分析同一樣板下的實際參數值

    以實際 SQL（僅整理空白）分組，依執行次數、總時間由大到小排序。

    Args:
        normalized_query: 正規化樣板
        entries: 屬於該樣板的查詢記錄

    Returns:
        QueryAnalysis: 參數分析結果
    """
    groups: Dict[str, List[QueryEntry]] = {}
    for entry in entries:
        groups.setdefault(normalize_literal_query(entry.query or ""), []).append(entry)

    analyses = [
        ParameterAnalysis(parameter_pattern=pattern, entries=group, **calculate_time_stats(group))
        for pattern, group in groups.items()
    ]
    analyses.sort(key=lambda a: (a.count, a.total_time), reverse=True)

    return QueryAnalysis(
        normalized_query=normalized_query,
        parameter_analyses=analyses,
        total_executions=len(entries),
    )


def parse_log_time(value: Optional[str]) -> Optional[datetime]:
    """
    解析 LOG 時間字串，無時區者視為 UTC

    支援 ISO-8601 (2024-01-01T10:00:00.000000Z) 與舊格式 (240101 10:00:00)。
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # 秒的小數補齊為 6 位，舊版 fromisoformat 只接受 3 或 6 位
    text = FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
    parsed = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.strptime(" ".join(text.split()), "%y%m%d %H:%M:%S")
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_time_series(entries: List[QueryEntry]) -> List[Dict[str, Any]]:
    """
    建立依時間排序的查詢時間序列

    Args:
        entries: 查詢記錄列表

    Returns:
        List[Dict[str, Any]]: 時間序列資料點，無法解析時間的記錄不列入
    """
    points = []
    for entry in entries:
        timestamp = parse_log_time(entry.time)
        if timestamp is None:
            continue
        points.append((timestamp, {
            "time": entry.time,
            "query_time": entry.query_time or 0.0,
            "user": entry.user or "",
            "rows_examined": entry.rows_examined or 0,
            "rows_sent": entry.rows_sent or 0,
        }))
    points.sort(key=lambda p: p[0])
    return [point for _, point in points]


def calculate_performance_stats(entries: List[QueryEntry]) -> Dict[str, Any]:
    """
    計算整體效能統計資料

    Args:
        entries: 查詢記錄列表

    Returns:
        Dict[str, Any]: 完整的效能統計資料
    """
    if not entries:
        return {"error": "無查詢時間資料"}

    stats = calculate_time_stats(entries)
    query_times = [entry.query_time or 0.0 for entry in entries]
    total_rows_examined = sum(entry.rows_examined or 0 for entry in entries)

    slowest = next(entry for entry in entries if (entry.query_time or 0.0) == stats["max_time"])

    # 解析期間
    timestamps = [t for t in (parse_log_time(entry.time) for entry in entries) if t is not None]
    time_range = None
    if len(timestamps) > 1:
        start, end = min(timestamps), max(timestamps)
        time_range = {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "days": math.ceil((end - start).total_seconds() / 86400),
        }

    # 時間分布統計
    time_ranges = {
        "0-1s": 0,
        "1-5s": 0,
        "5-10s": 0,
        "10-30s": 0,
        "30s+": 0
    }
    for qt in query_times:
        if qt < 1:
            time_ranges["0-1s"] += 1
        elif qt < 5:
            time_ranges["1-5s"] += 1
        elif qt < 10:
            time_ranges["5-10s"] += 1
        elif qt < 30:
            time_ranges["10-30s"] += 1
        else:
            time_ranges["30s+"] += 1

    user_stats = Counter(entry.user for entry in entries if entry.user)
    database_stats = Counter(entry.database for entry in entries if entry.database)

    return {
        "basic_stats": {
            "total_queries": stats["count"],
            "total_time": round(stats["total_time"], 4),
            "avg_query_time": round(stats["avg_time"], 4),
            "median_query_time": round(statistics.median(query_times), 4),
            "max_query_time": round(stats["max_time"], 4),
            "min_query_time": round(stats["min_time"], 4),
            "avg_rows_examined": round(total_rows_examined / stats["count"], 2),
        },
        "slowest_query": {
            "query": slowest.query,
            "query_time": slowest.query_time or 0.0,
            "time": slowest.time or "",
            "user": slowest.user or "",
            "rows_examined": slowest.rows_examined or 0,
        },
        "time_range": time_range,
        "time_ranges": time_ranges,
        "user_stats": dict(user_stats.most_common(10)),
        "database_stats": dict(database_stats.most_common(20)),
    }
