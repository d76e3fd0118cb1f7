"""
分析資料管理器

保存目前已載入的 LOG 檔案與排序偏好，所有統計皆由全部記錄重新計算。
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.config import settings
from core.log_parser import parse_slow_log
from core.logger import setup_logger
from core import sql_analyzer
from models.schemas import ParameterAnalysis, QueryAnalysis, QueryEntry, QuerySummary, UploadedFile

logger = setup_logger(__name__)


class DataManager:
    """分析資料管理器"""

    def __init__(self, sort_key: Optional[str] = None, sort_direction: Optional[str] = None):
        self.uploaded_files: List[UploadedFile] = []
        self.sort_key = sort_key or settings.default_sort_key
        self.sort_direction = sort_direction or settings.default_sort_direction

    @property
    def all_entries(self) -> List[QueryEntry]:
        """合併所有檔案的查詢記錄"""
        return [entry for uploaded in self.uploaded_files for entry in uploaded.entries]

    def add_files(self, files: Iterable[Tuple[str, str]],
                  failed_reads: Iterable[str] = ()) -> Dict[str, Any]:
        """
        解析並加入多個 LOG 檔案

        Args:
            files: (檔案名稱, 檔案內容) 列表
            failed_reads: 讀取失敗的檔案名稱

        Returns:
            Dict[str, Any]: 處理結果，status 為 success / partial / failed / empty
        """
        failed_files = [f"{name} (檔案讀取錯誤)" for name in failed_reads]
        new_files: List[UploadedFile] = []
        total_files = len(failed_files)

        for name, content in files:
            total_files += 1
            entries = parse_slow_log(content)

            if not entries:
                failed_files.append(f"{name} (找不到慢查詢記錄)")
                continue

            new_files.append(UploadedFile(
                name=name,
                size=len(content.encode("utf-8")),
                entries=entries
            ))

        if failed_files:
            logger.warning("檔案處理失敗: %s", ", ".join(failed_files))

        self.uploaded_files.extend(new_files)
        total_entries = sum(len(f.entries) for f in new_files)
        if new_files:
            logger.info("已載入 %d 個檔案，共 %d 筆慢查詢", len(new_files), total_entries)

        if total_files == 0:
            status, title = "empty", "請至少選擇一個檔案"
        elif not failed_files:
            status, title = "success", "檔案載入完成"
        elif len(failed_files) == total_files:
            status, title = "failed", "所有檔案處理失敗"
        else:
            status, title = "partial", "部分檔案處理失敗"

        if new_files:
            message = f"從 {len(new_files)} 個檔案載入 {total_entries} 筆慢查詢"
        else:
            message = "\n".join(failed_files)

        return {
            "success": bool(new_files),
            "status": status,
            "title": title,
            "message": message,
            "loaded_files": [f.name for f in new_files],
            "failed_files": failed_files,
            "total_entries": total_entries,
            "total_files": len(self.uploaded_files),
        }

    def remove_file(self, index: int) -> Dict[str, Any]:
        """
        移除指定的檔案

        Args:
            index: 檔案索引

        Returns:
            Dict[str, Any]: 移除結果資訊
        """
        if not 0 <= index < len(self.uploaded_files):
            raise IndexError(f"檔案索引無效: {index}")

        removed = self.uploaded_files.pop(index)
        logger.info("已移除檔案: %s", removed.name)
        return {
            "success": True,
            "message": f"檔案 '{removed.name}' 已移除",
            "total_files": len(self.uploaded_files),
            "total_entries": len(self.all_entries),
        }

    def clear_files(self) -> None:
        """移除所有檔案"""
        self.uploaded_files = []

    def get_files_info(self) -> List[Dict[str, Any]]:
        """取得已載入檔案列表"""
        return [
            {
                "index": index,
                "name": uploaded.name,
                "size": uploaded.size,
                "total_entries": len(uploaded.entries),
            }
            for index, uploaded in enumerate(self.uploaded_files)
        ]

    def get_summaries(self, sort_key: Optional[str] = None,
                      direction: Optional[str] = None) -> List[QuerySummary]:
        """
        取得排序後的樣板統計摘要

        指定的排序欄位與方向會記錄為目前的排序偏好。

        Args:
            sort_key: 排序欄位
            direction: asc 或 desc

        Returns:
            List[QuerySummary]: 統計摘要列表
        """
        key = sort_key or self.sort_key
        order = direction or self.sort_direction
        summaries = sql_analyzer.sort_summaries(
            sql_analyzer.create_summary_data(self.all_entries), key, order
        )
        self.sort_key, self.sort_direction = key, order
        return summaries

    def toggle_sort(self, sort_key: str) -> List[QuerySummary]:
        """點選同一欄位時切換方向，換欄位時改為降冪"""
        if sort_key == self.sort_key and self.sort_direction == "desc":
            direction = "asc"
        else:
            direction = "desc"
        return self.get_summaries(sort_key, direction)

    def analyze_query(self, normalized_query: str) -> QueryAnalysis:
        """取得指定樣板的參數分析"""
        grouped = sql_analyzer.group_by_query(self.all_entries)
        return sql_analyzer.analyze_query_parameters(
            normalized_query, grouped.get(normalized_query, [])
        )

    def get_raw_queries(self, page: int = 1, size: int = 50, search: str = "",
                        min_time: float = 0, user_filter: str = "",
                        database_filter: str = "") -> Dict[str, Any]:
        """
        取得原始查詢列表，支援分頁和篩選

        Returns:
            Dict[str, Any]: 分頁後的查詢資料
        """
        filtered_data = []
        for entry in self.all_entries:
            # 查詢時間篩選
            if (entry.query_time or 0) < min_time:
                continue

            # 用戶篩選
            if user_filter and user_filter.lower() not in (entry.user or "").lower():
                continue

            # 資料庫篩選
            if database_filter and database_filter.lower() not in (entry.database or "").lower():
                continue

            # 搜尋關鍵字篩選
            if search and search.lower() not in (entry.query or "").lower():
                continue

            filtered_data.append(entry)

        # 排序（依查詢時間降序）
        filtered_data.sort(key=lambda x: x.query_time or 0, reverse=True)

        # 分頁
        total = len(filtered_data)
        start = (page - 1) * size
        page_data = filtered_data[start:start + size]

        return {
            "data": [self.entry_to_dict(entry) for entry in page_data],
            "total": total,
            "page": page,
            "size": size,
            "total_pages": (total + size - 1) // size
        }

    @staticmethod
    def entry_to_dict(entry: QueryEntry) -> Dict[str, Any]:
        """將 QueryEntry 轉換為字典"""
        return {
            "time": entry.time,
            "user": entry.user,
            "host": entry.host,
            "connection_id": entry.connection_id,
            "query_time": entry.query_time,
            "lock_time": entry.lock_time,
            "rows_sent": entry.rows_sent,
            "rows_examined": entry.rows_examined,
            "query": entry.query,
            "database": entry.database
        }

    @staticmethod
    def summary_to_dict(summary: QuerySummary) -> Dict[str, Any]:
        """將 QuerySummary 轉換為字典"""
        return {
            "normalized_query": summary.normalized_query,
            "count": summary.count,
            "total_time": summary.total_time,
            "avg_time": summary.avg_time,
            "max_time": summary.max_time,
            "min_time": summary.min_time
        }

    @classmethod
    def parameter_analysis_to_dict(cls, analysis: ParameterAnalysis) -> Dict[str, Any]:
        """將 ParameterAnalysis 轉換為字典"""
        return {
            "parameter_pattern": analysis.parameter_pattern,
            "count": analysis.count,
            "total_time": analysis.total_time,
            "avg_time": analysis.avg_time,
            "max_time": analysis.max_time,
            "min_time": analysis.min_time,
            "entries": [cls.entry_to_dict(entry) for entry in analysis.entries]
        }

    @classmethod
    def query_analysis_to_dict(cls, analysis: QueryAnalysis) -> Dict[str, Any]:
        """將 QueryAnalysis 轉換為字典"""
        return {
            "normalized_query": analysis.normalized_query,
            "parameter_analyses": [
                cls.parameter_analysis_to_dict(item) for item in analysis.parameter_analyses
            ],
            "total_executions": analysis.total_executions
        }
