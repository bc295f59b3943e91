"""
WidgetLens FastAPI Application.

Static analysis service for class-based declarative UI sources:
  POST /analyze        → full analysis of one source text
  POST /analyze/batch  → concurrent analysis of many files
  GET  /health         → {"status": "ok"}
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from widgetlens.api.routes.analyze import router as analyze_router
from widgetlens.api.routes.health import router as health_router
from widgetlens.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("widgetlens")

app = FastAPI(
    title="WidgetLens",
    description="Static analysis for declarative widget sources",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(analyze_router)

logger.info(f"WidgetLens ready (strict_imports={settings.strict_imports})")
