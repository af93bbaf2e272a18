"""Logging helpers (participant-tagged logger and process setup)."""

from __future__ import annotations

from .participantLogger import ParticipantLogger
from .handlers import configure_logging

__all__ = ["ParticipantLogger", "configure_logging"]
