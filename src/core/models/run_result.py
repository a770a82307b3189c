"""
RunResult model: the operational run log of one batch run.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from src.core.errors import PipelineError, QualityViolation

from .validation_report import ValidationReport


class RunResult(BaseModel):
    """
    Accumulates row counts and stage timings for a single pipeline run.

    Each stage records into the result the orchestrator passes along; there
    is no process-wide run state.

    Attributes:
        run_id: Identifier of the run
        status: "running", "success", "quality_failed" (blocking rules
                violated, data committed) or "failed" (aborted, rolled back)
        rows_per_target: Rows produced per target table
        duration_per_stage: Elapsed seconds per stage
        dropped_records: Records dropped per stage (null keys, skippable faults)
        failed_stage: Stage being processed when the run aborted
        error: Error message of the abort
        quality_report: Combined quality report of the run
        started_at: When the run started
        finished_at: When the run finished
    """

    run_id: str
    status: Literal["running", "success", "quality_failed", "failed"] = "running"
    rows_per_target: dict[str, int] = Field(default_factory=dict)
    duration_per_stage: dict[str, float] = Field(default_factory=dict)
    dropped_records: dict[str, int] = Field(default_factory=dict)
    failed_stage: str | None = None
    error: str | None = None
    quality_report: ValidationReport | None = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    def record_rows(self, target: str, count: int) -> None:
        self.rows_per_target[target] = count

    def record_duration(self, stage: str, seconds: float) -> None:
        self.duration_per_stage[stage] = round(seconds, 3)

    def record_dropped(self, stage: str, count: int) -> None:
        if count:
            self.dropped_records[stage] = self.dropped_records.get(stage, 0) + count

    @property
    def total_duration(self) -> float:
        return round(sum(self.duration_per_stage.values()), 3)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def raise_for_status(self) -> None:
        """
        Raise if the run did not succeed.

        Raises:
            PipelineError: If the run aborted
            QualityViolation: If blocking quality rules were violated
        """
        if self.status == "failed":
            raise PipelineError(self.error or "Pipeline run failed", stage=self.failed_stage)
        if self.status == "quality_failed":
            rule_names = [o.rule_name for o in self.quality_report.blocking_violations] \
                if self.quality_report else []
            raise QualityViolation(rule_names)
