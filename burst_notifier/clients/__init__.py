"""External service clients."""

from burst_notifier.clients.participant_api import ParticipantApiClient

__all__ = ["ParticipantApiClient"]
