"""Burst notifier: SMS reminders for study-burst participants."""

__version__ = "0.1.0"
