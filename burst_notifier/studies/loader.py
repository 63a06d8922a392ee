"""Study config loader — load notification config YAML from studies/ directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from burst_notifier.exceptions import ConfigurationError
from burst_notifier.schemas.notification_config import StudyConfigDocument

logger = logging.getLogger(__name__)

# Study identifiers: alphanumeric, underscore, hyphen only. Prevents path traversal.
_STUDY_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def _studies_root() -> Path:
    """Return path to studies/ directory (project root / studies)."""
    # burst_notifier/studies/loader.py -> project_root/studies
    package_dir = Path(__file__).resolve().parent.parent
    return package_dir.parent / "studies"


def load_study_config_document(
    study_id: str,
    studies_root: Path | None = None,
) -> StudyConfigDocument:
    """Load studies/{study_id}.yaml and validate it.

    Raises:
        ValueError: study_id contains unsafe characters.
        FileNotFoundError: No YAML file for the study.
        ConfigurationError: YAML is malformed or fails schema validation.
    """
    if not study_id or not _STUDY_ID_PATTERN.match(study_id):
        raise ValueError(f"study_id must match [a-zA-Z0-9_-]+ (got {study_id!r})")

    path = (studies_root or _studies_root()) / f"{study_id}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Study config not found: {path}")

    try:
        with path.open(encoding="utf-8") as fp:
            raw = yaml.safe_load(fp) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(study_id, f"malformed YAML in {path.name}: {exc}") from exc

    try:
        document = StudyConfigDocument.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(study_id, f"invalid notification config: {exc}") from exc

    logger.info("Loaded study config from %s", path.name, extra={"study_id": study_id})
    return document
