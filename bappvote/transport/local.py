"""Single-process synchronous transport."""

from __future__ import annotations

import logging
from typing import Dict

from bappvote.transport.transport import VoteHandler
from bappvote.types import SignedVote, StrategyID

LOGGER = logging.getLogger(__name__)


class LocalNetwork:
    """Deliver each broadcast to every registered handler before returning.

    There is no suspension point: when :py:meth:`broadcast` returns, every
    participant (the sender included) has already processed the vote.
    """

    def __init__(self) -> None:
        self._handlers: Dict[StrategyID, VoteHandler] = {}

    def register(self, participant_id: StrategyID, handler: VoteHandler) -> None:
        self._handlers[participant_id] = handler

    def unregister(self, participant_id: StrategyID) -> None:
        self._handlers.pop(participant_id, None)

    def participants(self) -> list[StrategyID]:
        """Return the identifiers currently registered."""
        return list(self._handlers)

    def broadcast(self, signed_vote: SignedVote) -> None:
        LOGGER.debug(
            "Broadcasting vote from %s for slot %s to %d participants",
            signed_vote.participant_id,
            signed_vote.vote.slot,
            len(self._handlers),
        )
        # Copy so handlers may (un)register while a broadcast is in flight.
        for handler in list(self._handlers.values()):
            handler(signed_vote)
