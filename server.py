from typing import Optional

from fastapi import FastAPI

from api.analysis import create_analysis_routes
from api.queries import create_query_routes
from api.upload import create_upload_routes
from core.config import settings
from core.data_manager import DataManager
from core.logger import setup_logger

logger = setup_logger(__name__)


def create_app(data_manager: Optional[DataManager] = None) -> FastAPI:
    """建立 FastAPI 應用程式"""
    app = FastAPI(title="MySQL 慢查詢分析")

    data_manager = data_manager or DataManager()
    app.state.data_manager = data_manager

    app.include_router(create_upload_routes(data_manager))
    app.include_router(create_query_routes(data_manager))
    app.include_router(create_analysis_routes(data_manager))

    @app.get("/api/health")
    async def health():
        return {
            "status": "ok",
            "total_files": len(data_manager.uploaded_files),
            "total_entries": len(data_manager.all_entries)
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logger.info("啟動 SQL 慢查詢分析服務: http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
