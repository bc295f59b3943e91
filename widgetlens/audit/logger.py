"""
Diagnostic Sink — Structured JSON-lines trail of analysis diagnostics.

Records lexer warnings, parse errors and stage failures as
{timestamp, file, stage, level, message}. Writers share one lock so records
from concurrent batch files never interleave.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path

logger = logging.getLogger("widgetlens.audit")


class DiagnosticSink:
    """Appends diagnostic records to a JSON-lines file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def record(self, file: str, stage: str, level: str, message: str) -> None:
        """Append one record. Write failures are logged, never raised."""
        entry = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "file": file,
            "stage": stage,
            "level": level,
            "message": message,
        }

        with self._lock:
            try:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(json.dumps(entry) + "\n")
            except OSError as e:
                logger.error(f"Failed to write diagnostics: {e}")

    def read_recent(self, count: int = 50) -> list[dict]:
        """Read the most recent N records."""
        if not self.path.exists():
            return []

        entries: list[dict] = []
        try:
            with open(self.path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(json.loads(line))
                    except json.JSONDecodeError:
                        continue
        except OSError:
            return []

        return entries[-count:]
