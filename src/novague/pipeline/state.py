"""Pipeline state: stage enumeration, stage records and the artifact chain.

Each completed stage is stored as a record of a tagged union keyed by the
stage number. A record carries its artifact plus a ``version`` counter that
is bumped on every regeneration and a ``stale`` flag set when an earlier
stage is regenerated after it.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from novague.models.analysis import ProjectAnalysis
from novague.models.components import ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.project import Project
from novague.models.ux import ScreenAnalysis
from novague.models.validation import ValidationResult


class Stage(IntEnum):
    """Pipeline stages, in order."""

    IDLE = 0
    ANALYZED = 1
    UX_DESIGNED = 2
    DATA_DESIGNED = 3
    COMPONENTS_DESIGNED = 4
    VALIDATED = 5
    VISUALIZED = 6


STAGE_LABELS: dict[Stage, str] = {
    Stage.IDLE: "Idea",
    Stage.ANALYZED: "Project Analysis",
    Stage.UX_DESIGNED: "UX Flow",
    Stage.DATA_DESIGNED: "Data Architecture",
    Stage.COMPONENTS_DESIGNED: "Component Architecture",
    Stage.VALIDATED: "Integration Validation",
    Stage.VISUALIZED: "Visualization",
}


class _RecordBase(BaseModel):
    version: int = Field(default=1, ge=1, description="Generation counter")
    stale: bool = Field(default=False, description="An earlier stage changed since")


class AnalysisRecord(_RecordBase):
    stage: Literal[1] = 1
    artifact: ProjectAnalysis


class UXRecord(_RecordBase):
    stage: Literal[2] = 2
    artifact: ScreenAnalysis


class DataRecord(_RecordBase):
    stage: Literal[3] = 3
    artifact: DataArchitecture


class ComponentsRecord(_RecordBase):
    stage: Literal[4] = 4
    artifact: ComponentArchitecture


class ValidationRecord(_RecordBase):
    stage: Literal[5] = 5
    artifact: ValidationResult


class ProjectRecord(_RecordBase):
    stage: Literal[6] = 6
    artifact: Project


StageRecord = Annotated[
    Union[
        AnalysisRecord,
        UXRecord,
        DataRecord,
        ComponentsRecord,
        ValidationRecord,
        ProjectRecord,
    ],
    Field(discriminator="stage"),
]

RECORD_TYPES: dict[Stage, type[_RecordBase]] = {
    Stage.ANALYZED: AnalysisRecord,
    Stage.UX_DESIGNED: UXRecord,
    Stage.DATA_DESIGNED: DataRecord,
    Stage.COMPONENTS_DESIGNED: ComponentsRecord,
    Stage.VALIDATED: ValidationRecord,
    Stage.VISUALIZED: ProjectRecord,
}


class PipelineState(BaseModel):
    """The idea, the stage pointer and the records of completed stages.

    Invariant: a record for stage ``i`` exists only if stage ``i`` has been
    completed; the pointer may sit below completed stages.

    Attributes:
        idea: Submitted idea, immutable once stage 1 has run
        current: Stage pointer
        records: Completed stage records keyed by stage number
    """

    idea: str | None = None
    current: Stage = Stage.IDLE
    records: dict[int, StageRecord] = Field(default_factory=dict)

    @property
    def stages_completed(self) -> list[bool]:
        """Completion flags for stages 0-6; stage 0 is always complete."""
        return [stage == Stage.IDLE or int(stage) in self.records for stage in Stage]

    def is_completed(self, stage: Stage) -> bool:
        """Whether ``stage`` has been completed at least once."""
        return self.stages_completed[stage]

    def record(self, stage: Stage) -> StageRecord | None:
        """Record of ``stage``, if completed."""
        return self.records.get(int(stage))

    def store(self, stage: Stage, artifact: BaseModel) -> StageRecord:
        """Store a new artifact for ``stage``.

        A first store creates version 1. Later stores bump the version, clear
        the record's own stale flag and mark every later record stale.
        """
        previous = self.records.get(int(stage))
        version = previous.version + 1 if previous is not None else 1
        record = RECORD_TYPES[stage](artifact=artifact, version=version)
        self.records[int(stage)] = record  # type: ignore[assignment]

        if previous is not None:
            for later, later_record in self.records.items():
                if later > stage:
                    later_record.stale = True
        return record  # type: ignore[return-value]

    @property
    def analysis(self) -> ProjectAnalysis | None:
        return self._artifact(Stage.ANALYZED)  # type: ignore[return-value]

    @property
    def ux(self) -> ScreenAnalysis | None:
        return self._artifact(Stage.UX_DESIGNED)  # type: ignore[return-value]

    @property
    def data(self) -> DataArchitecture | None:
        return self._artifact(Stage.DATA_DESIGNED)  # type: ignore[return-value]

    @property
    def components(self) -> ComponentArchitecture | None:
        return self._artifact(Stage.COMPONENTS_DESIGNED)  # type: ignore[return-value]

    @property
    def validation(self) -> ValidationResult | None:
        return self._artifact(Stage.VALIDATED)  # type: ignore[return-value]

    @property
    def project(self) -> Project | None:
        return self._artifact(Stage.VISUALIZED)  # type: ignore[return-value]

    def _artifact(self, stage: Stage) -> BaseModel | None:
        record = self.records.get(int(stage))
        return record.artifact if record is not None else None
