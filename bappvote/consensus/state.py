"""Per-participant agreement state machine.

Every participant runs one :class:`AgreementState`. On a new block it signs a
vote for the slot and broadcasts it; the broadcast delivers the vote back to
every state (the sender included) through :py:meth:`AgreementState.process_vote`.

A state decides a slot once the validated votes stored for it carry at least
``quorum_threshold`` of the total weight. Votes may optionally name a block
hash; stored votes are grouped by hash and each group is weighed on its own,
so slot-only votes are simply the single group whose hash is ``None``.

Safety rules:

* at most one vote per participant per slot is kept (last write wins), and
  the accumulated weight is always recomputed from the stored votes, so
  duplicates are never counted twice;
* a group containing any vote from an unknown participant or with a bad
  signature is rejected as a whole for that evaluation;
* ``last_decided_slot`` never decreases and votes for slots at or below it
  are stored but never re-evaluated.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Mapping, Optional

from bappvote.consensus.weighted_quorum import QUORUM_THRESHOLD, has_weighted_quorum, voting_weight
from bappvote.crypto import CryptoService
from bappvote.logger import ParticipantLogger
from bappvote.transport import Network
from bappvote.types import ProtocolParticipant, SignedVote, Slot, StrategyID, Vote


class AgreementState:
    """Vote storage and quorum decision for a single participant."""

    def __init__(
        self,
        participant_id: StrategyID,
        private_key: bytes,
        participants: Mapping[StrategyID, ProtocolParticipant],
        network: Network,
        crypto_service: CryptoService,
        quorum_threshold: float = QUORUM_THRESHOLD,
    ) -> None:
        """Create the state of *participant_id*.

        Raises:
            InvalidKeyError: if *private_key* is not usable by *crypto_service*.
        """
        # Fails fast on malformed key material.
        crypto_service.public_key_of(private_key)

        self.id = participant_id
        self._private_key = private_key
        self.participants = participants
        self.network = network
        self.crypto_service = crypto_service
        self.quorum_threshold = quorum_threshold

        self.last_decided_slot: Slot = 0
        self.last_decided_hash: Optional[str] = None
        self.votes_by_slot: Dict[Slot, Dict[StrategyID, SignedVote]] = {}

        self._lock = threading.RLock()
        self.logger = ParticipantLogger(participant_id)

    # ------------------------------------------------------------------
    # Protocol entry points
    # ------------------------------------------------------------------

    def handle_new_block(self, slot: Slot, block_hash: Optional[str] = None) -> SignedVote:
        """Sign a vote for *slot* (and *block_hash*) and broadcast it.

        Local state is only updated when the broadcast delivers the vote back.
        """
        self.logger.processing("📦 Handling new block with slot %s", slot)
        vote = Vote(slot=slot, hash=block_hash)
        signed_vote = SignedVote(
            participant_id=self.id,
            vote=vote,
            signature=self.crypto_service.sign(vote, self._private_key),
        )
        self.logger.sent("Broadcasting vote for slot %s", slot)
        self.network.broadcast(signed_vote)
        return signed_vote

    def process_vote(self, signed_vote: SignedVote) -> bool:
        """Store *signed_vote* and look for a quorum on its slot.

        Returns *True* when this call decided the slot.
        """
        if not _is_well_formed(signed_vote):
            self.logger.validation("Dropping malformed vote %r", signed_vote)
            return False
        slot = signed_vote.vote.slot

        with self._lock:
            self.logger.received("Received vote from participant %s with slot %s", signed_vote.participant_id, slot)
            self.votes_by_slot.setdefault(slot, {})[signed_vote.participant_id] = signed_vote

            if slot <= self.last_decided_slot:
                self.logger.info(
                    "⛓️ Vote is for old slot %s. Current highest decided slot is %s",
                    slot,
                    self.last_decided_slot,
                )
                return False
            return self._search_for_quorum(slot)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def voting_weight(self, slot: Slot) -> float:
        """Return the weight of the known participants with a stored vote for *slot*."""
        with self._lock:
            return voting_weight(self.votes_by_slot.get(slot, {}).keys(), self.participants)

    def prune(self, up_to_slot: Optional[Slot] = None) -> int:
        """Forget votes for decided slots up to *up_to_slot*; return how many slots were dropped."""
        with self._lock:
            limit = self.last_decided_slot if up_to_slot is None else min(up_to_slot, self.last_decided_slot)
            stale = [slot for slot in self.votes_by_slot if slot <= limit]
            for slot in stale:
                del self.votes_by_slot[slot]
            return len(stale)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _search_for_quorum(self, slot: Slot) -> bool:
        groups: Dict[Optional[str], Dict[StrategyID, SignedVote]] = {}
        for participant_id, signed_vote in self.votes_by_slot[slot].items():
            groups.setdefault(signed_vote.vote.hash, {})[participant_id] = signed_vote

        for block_hash, votes in groups.items():
            if self._has_quorum(slot, votes):
                self.last_decided_slot = slot
                self.last_decided_hash = block_hash
                if block_hash is None:
                    self.logger.success("Quorum found for slot %s. Updating last decided slot", slot)
                else:
                    self.logger.success("Quorum found for slot %s, hash %s. Updating last decided slot", slot, block_hash)
                return True

        self.logger.info("❌ Quorum not yet reached for slot %s", slot)
        return False

    def _has_quorum(self, slot: Slot, votes: Mapping[StrategyID, SignedVote]) -> bool:
        if not votes:
            return False
        if not self._are_valid_votes(votes):
            self.logger.validation("Invalid votes for slot %s; batch rejected", slot)
            return False

        weight = voting_weight(votes.keys(), self.participants)
        decomposition: List[str] = [
            f"{100 * self.participants[participant_id].weight:.2f}% (from P{participant_id})"
            for participant_id in votes
        ]
        self.logger.info("🔢 Total weight: %.2f%%. Decomposition: %s", 100 * weight, " + ".join(decomposition))
        return has_weighted_quorum(votes.keys(), participants=self.participants, threshold=self.quorum_threshold)

    def _are_valid_votes(self, votes: Mapping[StrategyID, SignedVote]) -> bool:
        for participant_id, signed_vote in votes.items():
            participant = self.participants.get(participant_id)
            if participant is None:
                self.logger.debug("Vote from unknown participant %s", participant_id)
                return False
            if not self.crypto_service.verify(signed_vote.vote, signed_vote.signature, participant.public_key):
                self.logger.debug("Invalid signature from participant %s", participant_id)
                return False
        return True


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_well_formed(signed_vote: SignedVote) -> bool:
    """Integer slot and participant id, hash absent or a string."""
    vote = signed_vote.vote
    if not isinstance(vote, Vote):
        return False
    if not (_is_int(vote.slot) and _is_int(signed_vote.participant_id)):
        return False
    return vote.hash is None or isinstance(vote.hash, str)


__all__ = ["AgreementState"]
