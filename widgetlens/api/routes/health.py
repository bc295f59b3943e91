"""
Health Route — GET /health

Reports liveness plus the analysis settings a caller needs to interpret results.
"""

from __future__ import annotations

from fastapi import APIRouter

from widgetlens.config import settings
from widgetlens.core.ssr_analyzer import PATTERN_REGISTRY

router = APIRouter()


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "version": "1.0.0",
        "strict_imports": settings.strict_imports,
        "ssr_patterns": len(PATTERN_REGISTRY),
        "diagnostics_enabled": bool(settings.diagnostics_path),
    }
