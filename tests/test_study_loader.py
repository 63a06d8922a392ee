"""Study config loader tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from burst_notifier.exceptions import ConfigurationError
from burst_notifier.studies.loader import load_study_config_document


def test_loads_bundled_example_study() -> None:
    document = load_study_config_document("example-study")
    config = document.to_study_config("example-study")

    assert config.burst_duration_days == 9
    assert "enrollment" in config.burst_start_event_ids
    assert [group for group, _ in config.pre_burst_messages] == ["clinical_consent", "gr_SC_DB"]
    assert config.app_url == "https://example.org/study-app"


@pytest.mark.parametrize("study_id", ["", "../secrets", "a/b", "study.yaml"])
def test_rejects_unsafe_study_id(study_id: str) -> None:
    with pytest.raises(ValueError):
        load_study_config_document(study_id)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_study_config_document("nope", studies_root=tmp_path)


def test_malformed_yaml(tmp_path: Path) -> None:
    (tmp_path / "bad.yaml").write_text("burst_duration_days: [9\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="malformed YAML"):
        load_study_config_document("bad", studies_root=tmp_path)


def test_schema_violation(tmp_path: Path) -> None:
    (tmp_path / "bad.yaml").write_text("burst_duration_days: 0\n", encoding="utf-8")
    with pytest.raises(ConfigurationError) as exc_info:
        load_study_config_document("bad", studies_root=tmp_path)
    assert exc_info.value.study_id == "bad"
