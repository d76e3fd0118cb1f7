"""
查詢相關 API 路由
"""

from fastapi import APIRouter, Query, HTTPException
from typing import Optional
from core.data_manager import DataManager
from core import sql_analyzer


def create_query_routes(data_manager: DataManager):
    """創建查詢相關路由"""

    # 在函數內創建 router，確保每次都是新的實例
    router = APIRouter(prefix="/api", tags=["queries"])

    def _summaries_response(summaries):
        return {
            "summaries": [data_manager.summary_to_dict(s) for s in summaries],
            "sort_key": data_manager.sort_key,
            "sort_direction": data_manager.sort_direction
        }

    @router.get("/summaries")
    async def get_summaries(
        sort_key: Optional[str] = Query(None, description="排序欄位"),
        direction: Optional[str] = Query(None, description="asc 或 desc")
    ):
        """取得樣板統計摘要"""
        try:
            return _summaries_response(data_manager.get_summaries(sort_key, direction))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @router.post("/summaries/sort/{sort_key}")
    async def toggle_sort(sort_key: str):
        """切換排序欄位或方向"""
        try:
            return _summaries_response(data_manager.toggle_sort(sort_key))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @router.get("/raw_queries")
    async def get_raw_queries(
        page: int = Query(1, ge=1),
        size: int = Query(50, ge=1, le=1000),
        search: str = Query("", description="搜尋關鍵字"),
        min_time: float = Query(0, ge=0, description="最小查詢時間"),
        user_filter: str = Query("", description="用戶篩選"),
        database_filter: str = Query("", description="資料庫篩選")
    ):
        """取得原始查詢列表，支援分頁和篩選"""
        return data_manager.get_raw_queries(
            page=page,
            size=size,
            search=search,
            min_time=min_time,
            user_filter=user_filter,
            database_filter=database_filter
        )

    @router.get("/performance_stats")
    async def get_performance_stats():
        """取得效能分析統計資料"""
        return sql_analyzer.calculate_performance_stats(data_manager.all_entries)

    @router.get("/time_series")
    async def get_time_series():
        """取得查詢時間的時間序列"""
        return {"points": sql_analyzer.build_time_series(data_manager.all_entries)}

    return router
