"""
Core type definitions for aab2apk.

Value models passed between the pipeline stages and returned to the entry point.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class StageStatus(str, Enum):
    """Status of a pipeline stage."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StageResult(BaseModel):
    """Result of a single pipeline stage."""

    stage_name: str = Field(description="Name of the pipeline stage")
    status: StageStatus = Field(default=StageStatus.RUNNING, description="Execution status")
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = Field(default=None)
    duration_seconds: float = Field(default=0.0)
    error_message: str | None = Field(default=None)

    def mark_completed(self) -> None:
        """Mark stage as successfully completed."""
        self.status = StageStatus.COMPLETED
        self._finish()

    def mark_failed(self, error: str) -> None:
        """Mark stage as failed."""
        self.status = StageStatus.FAILED
        self.error_message = error
        self._finish()

    def _finish(self) -> None:
        self.completed_at = datetime.now()
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()


class ExportResult(BaseModel):
    """Outcome of a universal APK export run."""

    apk_path: Path = Field(description="Path of the renamed universal APK")
    aab_path: Path = Field(description="Input Android App Bundle")
    bundletool_version: str = Field(description="bundletool release used, or 'local'")
    signed: bool = Field(default=False, description="Whether a keystore was used")
    stages: list[StageResult] = Field(default_factory=list)
    duration_seconds: float = Field(default=0.0)
