"""Weighted-quorum block agreement.

Provides the per-participant agreement state machine and the pure quorum
helpers it relies on.
"""

from __future__ import annotations

from .state import AgreementState
from .weighted_quorum import QUORUM_THRESHOLD, has_weighted_quorum, voting_weight

__all__ = [
    "AgreementState",
    "QUORUM_THRESHOLD",
    "has_weighted_quorum",
    "voting_weight",
]
