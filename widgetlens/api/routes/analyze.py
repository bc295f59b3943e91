"""
Analyze Routes — POST /analyze and POST /analyze/batch.

/analyze runs the pipeline over one source text and returns the full
AnalysisResult. /analyze/batch runs many files through the worker; per-file
stage failures are reported in the batch instead of failing the request.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from widgetlens.api.dependencies import get_pipeline, get_worker
from widgetlens.config import settings
from widgetlens.engine.pipeline import AnalysisPipeline, AnalysisStageError
from widgetlens.models.analysis_models import AnalysisResult, BatchReport, FileInput
from widgetlens.workers.analysis_worker import AnalysisWorker

logger = logging.getLogger("widgetlens.api")
router = APIRouter()


class AnalyzeRequest(BaseModel):
    source: str = Field(..., description="Program text to analyze")
    file_path: str = Field(default="<source>", description="Name used in the report")


class BatchRequest(BaseModel):
    files: list[FileInput] = Field(default_factory=list)


def _check_size(path: str, source: str) -> None:
    size = len(source.encode("utf-8"))
    if size > settings.max_source_bytes:
        raise HTTPException(
            status_code=400,
            detail=(
                f"'{path}' is {size} bytes; the maximum is "
                f"{settings.max_source_bytes} bytes"
            ),
        )


@router.post("/analyze", response_model=AnalysisResult)
async def analyze(
    req: AnalyzeRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """Analyze a single source text."""
    _check_size(req.file_path, req.source)
    try:
        return await asyncio.to_thread(pipeline.analyze_source, req.source, req.file_path)
    except AnalysisStageError as e:
        logger.warning(f"Analysis of '{req.file_path}' failed in stage '{e.stage}'")
        raise HTTPException(
            status_code=422,
            detail={"stage": e.stage, "file_path": e.file_path, "message": str(e)},
        )


@router.post("/analyze/batch", response_model=BatchReport)
async def analyze_batch(
    req: BatchRequest,
    worker: AnalysisWorker = Depends(get_worker),
):
    """Analyze many files concurrently."""
    for f in req.files:
        _check_size(f.path, f.source)
    return await worker.run_batch(req.files)
