"""
參數分析相關 API 路由
"""

from fastapi import APIRouter, HTTPException, Request
from core.data_manager import DataManager


def create_analysis_routes(data_manager: DataManager):
    """創建參數分析相關路由"""

    router = APIRouter(prefix="/api", tags=["analysis"])

    @router.post("/analyze_query")
    async def analyze_query(request: Request):
        """分析指定樣板的實際參數值"""
        try:
            body = await request.json()
            normalized_query = body.get("normalized_query") if isinstance(body, dict) else None

            if normalized_query is None:
                raise HTTPException(status_code=400, detail="請提供正規化查詢")

            analysis = data_manager.analyze_query(normalized_query)
            return data_manager.query_analysis_to_dict(analysis)

        except HTTPException:
            raise
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"無效的請求內容: {str(e)}")
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"分析查詢時發生錯誤: {str(e)}")

    return router
