"""Can this participant receive a reminder at all?

Rules run in order; the first failure rejects the participant:
1. Phone verified.
2. UTC offset known and strictly inside the supported range.
3. No data group on the study's excluded list.
4. Active consent, unless a consent-exempt data group is present.
"""

from __future__ import annotations

from dataclasses import dataclass

from burst_notifier.services.burst.burst_constants import (
    CONSENT_EXEMPT_DATA_GROUPS,
    MAX_UTC_OFFSET_EXCLUSIVE,
    MIN_UTC_OFFSET_EXCLUSIVE,
)
from burst_notifier.services.burst.burst_types import ParticipantSnapshot, StudyConfig


@dataclass
class EligibilityResult:
    """Result of eligibility gate check."""

    eligible: bool
    reason_code: str | None


def check_eligibility(
    participant: ParticipantSnapshot,
    config: StudyConfig,
) -> EligibilityResult:
    """Run eligibility rules for a participant.

    Returns:
        EligibilityResult with eligible=False and the failing rule's reason_code
        (ineligible_phone, ineligible_timezone, excluded_data_group, no_consent).
    """
    if not participant.phone_verified:
        return EligibilityResult(eligible=False, reason_code="ineligible_phone")

    offset = participant.utc_offset
    if offset is None or not (MIN_UTC_OFFSET_EXCLUSIVE < offset < MAX_UTC_OFFSET_EXCLUSIVE):
        return EligibilityResult(eligible=False, reason_code="ineligible_timezone")

    if participant.data_groups & config.excluded_data_groups:
        return EligibilityResult(eligible=False, reason_code="excluded_data_group")

    if not (participant.data_groups & CONSENT_EXEMPT_DATA_GROUPS):
        if not participant.has_active_consent:
            return EligibilityResult(eligible=False, reason_code="no_consent")

    return EligibilityResult(eligible=True, reason_code=None)
