"""Per-participant logging for the agreement protocol."""

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Tuple

from bappvote.types import StrategyID


class ParticipantLogger(logging.LoggerAdapter):
    """Logger adapter tagging every record with the participant it belongs to.

    The helper methods mirror the protocol steps so that a run of several
    participants reads as one interleaved trace.
    """

    def __init__(self, participant_id: StrategyID, logger: logging.Logger | None = None) -> None:
        super().__init__(logger or logging.getLogger("bappvote.consensus"), {"participant_id": participant_id})
        self.participant_id = participant_id

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[strategy {self.participant_id}] {msg}", kwargs

    def success(self, message: str, *args: Any) -> None:
        """Log a decision."""
        self.info(f"✅ {message}", *args)

    def processing(self, message: str, *args: Any) -> None:
        """Log a protocol step."""
        self.info(f"⚙️ {message}", *args)

    def received(self, message: str, *args: Any) -> None:
        """Log an incoming vote."""
        self.info(f"🗳️ {message}", *args)

    def sent(self, message: str, *args: Any) -> None:
        """Log an outgoing vote."""
        self.info(f"📤 {message}", *args)

    def validation(self, message: str, *args: Any) -> None:
        """Log a rejected vote batch."""
        self.warning(f"🔍 {message}", *args)
