"""Network abstraction used by agreement states to broadcast votes."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol

from bappvote.types import SignedVote, StrategyID

VoteHandler = Callable[[SignedVote], None]


class Network(Protocol):
    """Protocol that any concrete vote transport must implement."""

    def register(self, participant_id: StrategyID, handler: VoteHandler) -> None:  # pragma: no cover
        """Deliver every future broadcast to *handler* on behalf of *participant_id*."""

    def unregister(self, participant_id: StrategyID) -> None:  # pragma: no cover
        """Stop delivering broadcasts to *participant_id*."""

    def broadcast(self, signed_vote: SignedVote) -> None:  # pragma: no cover
        """Send *signed_vote* to every registered participant, the sender included.

        Fire-and-forget: no acknowledgement is returned and delivery is only
        as reliable as the implementation.
        """


class TransportKind(Enum):
    """User-friendly enumeration to select the desired transport type."""

    LOCAL = "local"
    THREADED = "threaded"
