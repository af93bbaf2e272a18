"""Weighted quorum helpers.

This module contains small, pure functions to determine whether a set of
voters satisfies a quorum under weighted membership. It is independent from
the agreement state so that it can be unit-tested in isolation.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Set

from bappvote.types import ProtocolParticipant, StrategyID

QUORUM_THRESHOLD = 0.66


def voting_weight(voters: Iterable[StrategyID], participants: Mapping[StrategyID, ProtocolParticipant]) -> float:
    """Return the cumulative weight of the distinct, known *voters*.

    Duplicates count once and unknown identifiers contribute nothing.
    """
    voter_set: Set[StrategyID] = set(voters)
    return sum(participants[v].weight for v in voter_set if v in participants)


def has_weighted_quorum(
    voters: Iterable[StrategyID],
    *,
    participants: Mapping[StrategyID, ProtocolParticipant],
    threshold: float = QUORUM_THRESHOLD,
) -> bool:
    """Return *True* if the voters' cumulative weight reaches *threshold*.

    Args:
        voters: Identifiers of the participants that voted.
        participants: Registered participants with their normalised weights.
        threshold: Fraction of the total weight required (default: 0.66).
    """
    return voting_weight(voters, participants) >= threshold


__all__ = ["QUORUM_THRESHOLD", "voting_weight", "has_weighted_quorum"]
