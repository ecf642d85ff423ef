"""Regional summary models."""

from dataclasses import dataclass, field
from enum import StrEnum

from surfcast.models.common import BeachKey


class CardKind(StrEnum):
    WIND = "wind"
    WAVE = "wave"


class PipelineStage(StrEnum):
    IDLE = "idle"
    FETCHING_ALL = "fetching_all"
    NORMALIZING = "normalizing"
    VALIDATING = "validating"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RegionalSummaryCard:
    kind: CardKind
    magnitude: float
    magnitude_label: str
    secondary: float | None = None
    secondary_label: str | None = None
    direction_deg: float | None = None


@dataclass
class AggregationReport:
    run_id: str
    cards: list[RegionalSummaryCard] = field(default_factory=list)
    requested: list[BeachKey] = field(default_factory=list)
    succeeded: list[BeachKey] = field(default_factory=list)
    failed: list[BeachKey] = field(default_factory=list)
    stage: PipelineStage = PipelineStage.IDLE
    region: str | None = None
    duration_seconds: float = 0.0

    @property
    def is_partial(self) -> bool:
        return bool(self.failed) and bool(self.succeeded)
