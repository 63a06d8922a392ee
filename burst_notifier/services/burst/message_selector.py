"""Message selection — pick reminder text from a decided pool."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol

from burst_notifier.exceptions import ConfigurationError
from burst_notifier.services.burst.burst_types import NotificationType


class RandomSource(Protocol):
    """Anything with random.Random's randrange. Inject a seeded or mocked one in tests."""

    def randrange(self, stop: int) -> int: ...


def default_random_source() -> RandomSource:
    return random.Random()


def select_message(
    pool: Sequence[str],
    rng: RandomSource,
    *,
    study_id: str | None = None,
    notification_type: NotificationType | None = None,
) -> str:
    """Return one entry of pool chosen uniformly at random.

    Raises:
        ConfigurationError: pool is empty.
    """
    if not pool:
        type_label = notification_type.value if notification_type else "unknown"
        raise ConfigurationError(study_id, f"no messages configured for {type_label} notifications")
    return pool[rng.randrange(len(pool))]
