"""
Analysis Worker — Async batch runner over the analysis pipeline.

Each file runs in a worker thread (`asyncio.to_thread`) with at most
`max_concurrent` files in flight. A fatal stage failure is recorded as a
FileFailure and the remaining files continue. `cancel()` stops files that have
not started yet; started files run to completion.
"""

from __future__ import annotations

import asyncio
import logging
import time

from widgetlens.config import settings
from widgetlens.engine.pipeline import AnalysisPipeline, AnalysisStageError
from widgetlens.models.analysis_models import (
    AnalysisResult,
    BatchReport,
    FileFailure,
    FileInput,
)

logger = logging.getLogger("widgetlens.worker")


class AnalysisWorker:
    """Concurrent multi-file orchestrator."""

    def __init__(
        self,
        pipeline: AnalysisPipeline | None = None,
        max_concurrent: int | None = None,
    ) -> None:
        self.pipeline = pipeline or AnalysisPipeline()
        self.max_concurrent = max(1, max_concurrent or settings.max_concurrent_files)
        self._cancelled = False

    def cancel(self) -> None:
        """Skip every file that has not started yet."""
        logger.info("Batch cancellation requested")
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def run_batch(self, files: list[FileInput]) -> BatchReport:
        """
        Analyze all files concurrently.

        Args:
            files: Sources to analyze; order is preserved in the report.

        Returns:
            BatchReport with results, failures and skipped paths.
        """
        self._cancelled = False
        start = time.monotonic()
        semaphore = asyncio.Semaphore(self.max_concurrent)
        logger.info(f"Batch starting: {len(files)} files, {self.max_concurrent} at a time")

        async def run_one(f: FileInput) -> AnalysisResult | FileFailure | None:
            async with semaphore:
                if self._cancelled:
                    logger.debug(f"Skipped (cancelled): {f.path}")
                    return None
                try:
                    return await asyncio.to_thread(
                        self.pipeline.analyze_source, f.source, f.path
                    )
                except AnalysisStageError as e:
                    logger.warning(f"[{f.path}] Failed in stage '{e.stage}'")
                    return FileFailure(file_path=f.path, stage=e.stage, message=str(e))

        outcomes = await asyncio.gather(*(run_one(f) for f in files))

        results: list[AnalysisResult] = []
        failures: list[FileFailure] = []
        skipped: list[str] = []
        for f, outcome in zip(files, outcomes):
            if outcome is None:
                skipped.append(f.path)
            elif isinstance(outcome, FileFailure):
                failures.append(outcome)
            else:
                results.append(outcome)

        elapsed = round((time.monotonic() - start) * 1000, 2)
        logger.info(
            f"Batch complete: {len(results)} analyzed, {len(failures)} failed, "
            f"{len(skipped)} skipped in {elapsed:.1f}ms"
        )
        return BatchReport(
            results=results,
            failures=failures,
            skipped=skipped,
            duration_ms=elapsed,
        )
