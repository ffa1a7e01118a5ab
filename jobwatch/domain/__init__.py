"""Domain models for jobwatch."""

from .models import Job, NotificationPayload

__all__ = ["Job", "NotificationPayload"]
