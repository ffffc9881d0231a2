# Last reviewed: 2026-10-18 12:22:45 UTC (User: Teeksss)
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from .api.v1 import page_versions
from .core.error_handler import register_exception_handlers
from .db.init_db import init_db
from .utils.logger import get_logger

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Uygulama başlarken tabloları oluşturur"""
    init_db()
    logger.info("Page versions API started")
    yield
    logger.info("Page versions API stopped")

def create_app(run_init_db: bool = True) -> FastAPI:
    app = FastAPI(
        title="Page Versions",
        description="Page versioning and snapshot restore API",
        version="1.0.0",
        lifespan=lifespan if run_init_db else None
    )

    # Hata işleyicileri
    register_exception_handlers(app)

    # API Routes
    app.include_router(page_versions.router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    def health_check():
        return {"status": "ok"}

    return app

app = create_app()

if __name__ == "__main__":
    """API sunucusunu çalıştırır"""
    uvicorn.run(
        "pageversions.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "false").lower() == "true"
    )
