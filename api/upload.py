"""
檔案上傳相關 API 路由
"""

from fastapi import APIRouter, UploadFile, File, HTTPException
from typing import List
from core.config import settings
from core.data_manager import DataManager
from core.logger import setup_logger

logger = setup_logger(__name__)


def create_upload_routes(data_manager: DataManager):
    """創建上傳相關路由"""

    router = APIRouter(prefix="/api", tags=["upload"])

    @router.post("/upload_logs")
    async def upload_logs(files: List[UploadFile] = File(...)):
        """上傳多個 LOG 檔案並合併分析"""

        if not files:
            raise HTTPException(status_code=400, detail="請至少選擇一個檔案")

        if len(files) > settings.max_upload_files:
            raise HTTPException(
                status_code=400,
                detail=f"一次最多上傳 {settings.max_upload_files} 個檔案"
            )

        try:
            contents = []
            failed_reads = []

            for file in files:
                filename = file.filename or "unknown_file"
                try:
                    content = await file.read()
                except OSError as e:
                    logger.warning("無法讀取檔案 %s: %s", filename, e)
                    failed_reads.append(filename)
                    continue
                contents.append((filename, content.decode("utf-8-sig", errors="ignore")))

            return data_manager.add_files(contents, failed_reads)

        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"處理檔案時發生錯誤: {str(e)}")

    @router.get("/files")
    async def get_files():
        """取得已載入的檔案列表"""
        return {"files": data_manager.get_files_info()}

    @router.delete("/files/{index}")
    async def remove_file(index: int):
        """移除指定的檔案"""
        try:
            return data_manager.remove_file(index)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @router.delete("/files")
    async def clear_files():
        """移除所有檔案"""
        data_manager.clear_files()
        return {"success": True, "message": "已移除所有檔案"}

    return router
