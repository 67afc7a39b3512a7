# backend/sizhu/main.py
"""FastAPI 應用程式入口"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sizhu import __version__
from sizhu.api.v1 import bazi, solar_term
from sizhu.config import settings
from sizhu.services.cache import get_chart_cache
from sizhu.services.term_source import get_solar_term_source

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="以節氣交節時刻推算八字四柱的 API",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    """應用程式啟動時載入節氣表"""
    get_solar_term_source()


@app.get("/health")
async def health_check():
    """健康檢查端點"""
    source = get_solar_term_source()
    return {
        "status": "ok",
        "version": __version__,
        "cache_size": get_chart_cache().size,
        "table_years": source.precomputed.years,
        "approximation_enabled": source.approximation is not None,
    }


# 註冊 API 路由
app.include_router(
    bazi.router,
    prefix="/api/v1/bazi",
    tags=["bazi"]
)
app.include_router(
    solar_term.router,
    prefix="/api/v1/solar-term",
    tags=["solar-term"]
)
