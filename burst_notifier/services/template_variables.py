"""Template variable resolution for reminder text.

Supported variables:
- ${url}: the study's app URL from its notification config.
- ${studyCommitment}: the participant's stated reason for joining, read from the
  "benefits" field of their Engagement report at the global report date.

Missing participant data is reported in the result, not raised.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from burst_notifier.services.burst.burst_constants import (
    ENGAGEMENT_COMMITMENT_KEY,
    REPORT_ID_ENGAGEMENT,
    TEMPLATE_VAR_STUDY_COMMITMENT,
    TEMPLATE_VAR_URL,
)

if TYPE_CHECKING:
    from burst_notifier.clients.participant_api import ParticipantApiClient
    from burst_notifier.services.burst.burst_types import ParticipantSnapshot, StudyConfig

logger = logging.getLogger(__name__)

# Participant reports not tied to a day are stored at the epoch.
GLOBAL_REPORT_DATE = date(1970, 1, 1)

_VARIABLE_PATTERN = re.compile(r"\$\{(\w+)\}")


@dataclass(frozen=True)
class TemplateResolution:
    """Resolved text, or the first variable that had no backing data."""

    text: str | None
    missing_variable: str | None = None

    @property
    def resolved(self) -> bool:
        return self.missing_variable is None


class TemplateVariableResolver:
    """Resolves ${...} variables against study config and participant reports."""

    def __init__(self, participant_api: ParticipantApiClient) -> None:
        self.participant_api = participant_api

    def resolve_template_variables(
        self,
        config: StudyConfig,
        participant: ParticipantSnapshot,
        raw_message: str,
    ) -> TemplateResolution:
        """Replace every variable occurrence in raw_message.

        Collaborators are only called for variables the message uses.
        """
        names = list(dict.fromkeys(_VARIABLE_PATTERN.findall(raw_message)))
        if not names:
            return TemplateResolution(text=raw_message)

        values: dict[str, str] = {}
        for name in names:
            value = self._lookup(name, config, participant)
            if value is None:
                logger.warning(
                    "Template variable %s has no data for user",
                    name,
                    extra={"user_id": participant.user_id, "study_id": config.study_id},
                )
                return TemplateResolution(text=None, missing_variable=name)
            values[name] = value

        text = _VARIABLE_PATTERN.sub(lambda m: values.get(m.group(1), m.group(0)), raw_message)
        return TemplateResolution(text=text)

    def _lookup(
        self,
        name: str,
        config: StudyConfig,
        participant: ParticipantSnapshot,
    ) -> str | None:
        if name == TEMPLATE_VAR_URL:
            return config.app_url or None
        if name == TEMPLATE_VAR_STUDY_COMMITMENT:
            return self._study_commitment(config.study_id, participant.user_id)
        return None

    def _study_commitment(self, study_id: str, user_id: str) -> str | None:
        reports = self.participant_api.get_participant_reports(
            study_id,
            user_id,
            REPORT_ID_ENGAGEMENT,
            GLOBAL_REPORT_DATE,
            GLOBAL_REPORT_DATE,
        )
        if not reports:
            return None
        data = reports[0].get("data")
        if not isinstance(data, dict) or not data:
            return None
        value = data.get(ENGAGEMENT_COMMITMENT_KEY)
        if value is None:
            return None
        return _render_value(value)


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)
