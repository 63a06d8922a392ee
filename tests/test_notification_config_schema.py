"""StudyConfigDocument validation and conversion."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from burst_notifier.schemas.notification_config import StudyConfigDocument


def _document(**overrides: Any) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "burst_duration_days": 9,
        "burst_start_event_ids": ["enrollment"],
        "burst_task_id": "study-burst-task",
        "early_late_cutoff_days": 5,
        "missed_early_messages": ["early"],
        "missed_late_messages": ["late"],
        "missed_cumulative_messages": ["cumulative"],
        "pre_burst_messages": [
            {"data_group": "group-b", "messages": ["b"]},
            {"data_group": "group-a", "messages": ["a1", "a2"]},
        ],
        "blackout_days_from_start": 3,
        "blackout_days_from_end": 1,
        "activities_to_complete_burst": 6,
        "consecutive_missed_days_to_notify": 2,
        "total_missed_days_to_notify": 3,
    }
    raw.update(overrides)
    return raw


class TestValidation:
    def test_valid_document(self):
        document = StudyConfigDocument.model_validate(_document())
        assert document.excluded_data_groups == []
        assert document.app_url is None

    @pytest.mark.parametrize(
        "field,value",
        [
            ("burst_duration_days", 0),
            ("burst_start_event_ids", []),
            ("early_late_cutoff_days", -1),
            ("activities_to_complete_burst", 0),
            ("consecutive_missed_days_to_notify", 0),
            ("total_missed_days_to_notify", 0),
            ("blackout_days_from_start", -1),
        ],
    )
    def test_rejects_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            StudyConfigDocument.model_validate(_document(**{field: value}))

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            StudyConfigDocument.model_validate(_document(missed_messages=["typo"]))

    def test_blackout_may_cover_whole_burst(self):
        StudyConfigDocument.model_validate(
            _document(blackout_days_from_start=5, blackout_days_from_end=4)
        )

    def test_blackout_exceeding_duration_rejected(self):
        with pytest.raises(ValidationError, match="blackout"):
            StudyConfigDocument.model_validate(
                _document(blackout_days_from_start=5, blackout_days_from_end=5)
            )

    def test_duplicate_pre_burst_group_rejected(self):
        with pytest.raises(ValidationError, match="data_group"):
            StudyConfigDocument.model_validate(
                _document(
                    pre_burst_messages=[
                        {"data_group": "g", "messages": ["x"]},
                        {"data_group": "g", "messages": ["y"]},
                    ]
                )
            )


def test_to_study_config_keeps_pre_burst_order():
    config = StudyConfigDocument.model_validate(_document()).to_study_config("s1")

    assert config.study_id == "s1"
    assert config.burst_start_event_ids == frozenset({"enrollment"})
    assert config.pre_burst_messages == (("group-b", ("b",)), ("group-a", ("a1", "a2")))
    assert config.early_messages == ("early",)
