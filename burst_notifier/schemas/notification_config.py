"""Study notification config document schema.

Validates the JSON/YAML document stored per study and converts it into the
immutable StudyConfig used by the decision engine.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from burst_notifier.services.burst.burst_types import StudyConfig


class PreBurstMessages(BaseModel):
    """Pre-burst messages for one data group. List order is match priority."""

    data_group: str = Field(min_length=1)
    messages: list[str] = Field(default_factory=list)


class StudyConfigDocument(BaseModel):
    """Notification config for one study."""

    model_config = ConfigDict(extra="forbid")

    burst_duration_days: int = Field(gt=0)
    burst_start_event_ids: list[str] = Field(min_length=1)
    burst_task_id: str = Field(min_length=1)
    early_late_cutoff_days: int = Field(ge=0)
    excluded_data_groups: list[str] = Field(default_factory=list)
    missed_early_messages: list[str] = Field(default_factory=list)
    missed_late_messages: list[str] = Field(default_factory=list)
    missed_cumulative_messages: list[str] = Field(default_factory=list)
    pre_burst_messages: list[PreBurstMessages] = Field(default_factory=list)
    blackout_days_from_start: int = Field(default=0, ge=0)
    blackout_days_from_end: int = Field(default=0, ge=0)
    activities_to_complete_burst: int = Field(gt=0)
    consecutive_missed_days_to_notify: int = Field(gt=0)
    total_missed_days_to_notify: int = Field(gt=0)
    app_url: str | None = None

    @model_validator(mode="after")
    def _check_blackout_fits(self) -> StudyConfigDocument:
        if self.blackout_days_from_start + self.blackout_days_from_end > self.burst_duration_days:
            raise ValueError("blackout margins exceed burst_duration_days")
        groups = [entry.data_group for entry in self.pre_burst_messages]
        if len(groups) != len(set(groups)):
            raise ValueError("pre_burst_messages lists a data_group more than once")
        return self

    def to_study_config(self, study_id: str) -> StudyConfig:
        return StudyConfig(
            study_id=study_id,
            burst_duration_days=self.burst_duration_days,
            burst_start_event_ids=frozenset(self.burst_start_event_ids),
            burst_task_id=self.burst_task_id,
            early_late_cutoff_days=self.early_late_cutoff_days,
            excluded_data_groups=frozenset(self.excluded_data_groups),
            early_messages=tuple(self.missed_early_messages),
            late_messages=tuple(self.missed_late_messages),
            cumulative_messages=tuple(self.missed_cumulative_messages),
            pre_burst_messages=tuple(
                (entry.data_group, tuple(entry.messages)) for entry in self.pre_burst_messages
            ),
            blackout_days_from_start=self.blackout_days_from_start,
            blackout_days_from_end=self.blackout_days_from_end,
            activities_to_complete_burst=self.activities_to_complete_burst,
            consecutive_missed_days_to_notify=self.consecutive_missed_days_to_notify,
            total_missed_days_to_notify=self.total_missed_days_to_notify,
            app_url=self.app_url,
        )
