"""Burst notification constants.

Fixed rules that are not part of a study's notification config.
"""

from __future__ import annotations

from datetime import timedelta

# ── Eligibility ───────────────────────────────────────────────────────────

# Data groups that waive the consent requirement (clinical sites consent on paper;
# test accounts never consent).
CONSENT_EXEMPT_DATA_GROUPS: frozenset[str] = frozenset({
    "clinical_consent",
    "test_no_consent",
})

# Supported local time zones: UTC offset strictly between these bounds.
MIN_UTC_OFFSET_EXCLUSIVE: timedelta = timedelta(hours=-12)
MAX_UTC_OFFSET_EXCLUSIVE: timedelta = timedelta(0)

# ── Task history ──────────────────────────────────────────────────────────

TASK_STATUS_FINISHED: str = "finished"

# ── Template variables ────────────────────────────────────────────────────

REPORT_ID_ENGAGEMENT: str = "Engagement"
ENGAGEMENT_COMMITMENT_KEY: str = "benefits"
TEMPLATE_VAR_URL: str = "url"
TEMPLATE_VAR_STUDY_COMMITMENT: str = "studyCommitment"
