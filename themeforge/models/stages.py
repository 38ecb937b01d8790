"""Stage state models and the per-run report."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StageState(str, Enum):
    """State of one pipeline stage within a run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    FAILED = "failed"
    PASSED = "passed"


# Terminal states (PASSED, FAILED) have no outgoing transitions within a run.
VALID_TRANSITIONS: dict[StageState, set[StageState]] = {
    StageState.NOT_STARTED: {StageState.RUNNING},
    StageState.RUNNING: {StageState.PASSED, StageState.FAILED},
    StageState.FAILED: set(),
    StageState.PASSED: set(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when a stage is moved to a state it cannot reach."""


class StageRecord(BaseModel):
    """What the run report knows about one stage."""

    model_config = ConfigDict(frozen=True)

    stage_id: str
    display_name: str
    state: StageState = StageState.NOT_STARTED
    input_hash: str = ""
    output_hash: str = ""
    error: str = ""
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()


class RunReport(BaseModel):
    """Ordered stage records for a single pipeline run."""

    run_id: str
    project_name: str
    tenants: list[str] = Field(default_factory=list)
    records: dict[str, StageRecord] = Field(default_factory=dict)

    def register(self, stage_id: str, display_name: str) -> StageRecord:
        record = self.records.get(stage_id)
        if record is None:
            record = StageRecord(stage_id=stage_id, display_name=display_name)
            self.records[stage_id] = record
        return record

    def transition(self, stage_id: str, to_state: StageState, **fields) -> StageRecord:
        """Move *stage_id* to *to_state*, validating the transition."""
        current = self.records[stage_id]
        if to_state not in VALID_TRANSITIONS[current.state]:
            raise InvalidTransitionError(
                f"{stage_id}: cannot go from {current.state.value} to {to_state.value}"
            )
        now = datetime.now(timezone.utc)
        if to_state == StageState.RUNNING:
            fields.setdefault("started_at", now)
        else:
            fields.setdefault("finished_at", now)
        updated = current.model_copy(update={"state": to_state, **fields})
        self.records[stage_id] = updated
        return updated

    def state_of(self, stage_id: str) -> StageState:
        record = self.records.get(stage_id)
        return record.state if record else StageState.NOT_STARTED

    @property
    def succeeded(self) -> bool:
        return bool(self.records) and all(
            r.state == StageState.PASSED for r in self.records.values()
        )

    @property
    def failed_stages(self) -> list[str]:
        return [
            sid for sid, r in self.records.items() if r.state == StageState.FAILED
        ]
