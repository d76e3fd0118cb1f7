"""
資料結構定義
"""

from typing import List, Optional
from dataclasses import dataclass, field


@dataclass(frozen=True)
class QueryEntry:
    """單個慢查詢記錄"""
    time: Optional[str] = None
    user: Optional[str] = None
    host: Optional[str] = None
    connection_id: Optional[str] = None
    query_time: Optional[float] = None
    lock_time: Optional[float] = None
    rows_sent: Optional[int] = None
    rows_examined: Optional[int] = None
    query: Optional[str] = None
    database: Optional[str] = None


@dataclass(frozen=True)
class QuerySummary:
    """正規化查詢的統計摘要"""
    normalized_query: str
    count: int
    total_time: float
    avg_time: float
    max_time: float
    min_time: float


@dataclass(frozen=True)
class ParameterAnalysis:
    """同一實際參數值的執行統計"""
    parameter_pattern: str
    count: int
    total_time: float
    avg_time: float
    max_time: float
    min_time: float
    entries: List[QueryEntry] = field(default_factory=list)


@dataclass(frozen=True)
class QueryAnalysis:
    """單一正規化查詢的參數分析結果"""
    normalized_query: str
    parameter_analyses: List[ParameterAnalysis] = field(default_factory=list)
    total_executions: int = 0


@dataclass
class UploadedFile:
    """已載入的 LOG 檔案"""
    name: str
    size: int
    entries: List[QueryEntry] = field(default_factory=list)
