"""Base types and data structures for bApp weighted block agreement."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

StrategyID = int
Address = str
Token = str
Slot = int
PublicKey = Union[bytes, str]
MessagePayload = Dict[str, Any]


@dataclass
class StrategyToken:
    """How much of a token a strategy holds and how it backs the bApp."""

    token: Token
    amount: float
    obligation_percentage: float
    risk: float

    def obligated_amount(self) -> float:
        """Return the share of ``amount`` obligated to the bApp."""
        return self.amount * self.obligation_percentage


@dataclass
class BAppToken:
    """Per-bApp configuration of a capital class."""

    token: Token
    shared_risk_level: float
    significance: float


@dataclass
class Strategy:
    """A strategy that opted in to the bApp."""

    id: StrategyID
    owner: Address
    private_key: bytes
    tokens: List[StrategyToken] = field(default_factory=list)
    validator_balance: float = 0.0

    def token(self, token: Token) -> StrategyToken:
        """Return the strategy's entry for *token*.

        Strategies without an entry for a configured token are treated as
        holding nothing of it, with zero risk.
        """
        for strategy_token in self.tokens:
            if strategy_token.token == token:
                return strategy_token
        return StrategyToken(token=token, amount=0.0, obligation_percentage=0.0, risk=0.0)


@dataclass
class BApp:
    """Configuration root of the application whose weights are computed."""

    address: Address
    tokens: List[BAppToken] = field(default_factory=list)
    validator_balance_significance: float = 0.0

    def token(self, token: Token) -> BAppToken:
        """Return the configuration for *token*."""
        for bapp_token in self.tokens:
            if bapp_token.token == token:
                return bapp_token
        raise KeyError(f"Token {token} not found in bApp {self.address}")

    def significance_sum(self) -> float:
        """Return Σ token significances + validator balance significance."""
        total = sum(bapp_token.significance for bapp_token in self.tokens)
        return total + self.validator_balance_significance


@dataclass(frozen=True)
class ProtocolParticipant:
    """A strategy as seen by the agreement protocol."""

    id: StrategyID
    weight: float
    public_key: PublicKey


@dataclass(frozen=True)
class Vote:
    """A vote on a slot, optionally bound to a candidate block hash."""

    slot: Slot
    hash: Optional[str] = None

    def to_payload(self) -> bytes:
        """Return the canonical serialisation that gets hashed and signed.

        Field order is fixed (slot first) and the encoding is compact JSON, so
        the same vote always yields the same bytes.
        """
        canonical: Dict[str, Any] = {"slot": self.slot}
        if self.hash is not None:
            canonical["hash"] = self.hash
        return json.dumps(canonical, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class SignedVote:
    """A vote together with its author and signature."""

    participant_id: StrategyID
    vote: Vote
    signature: bytes

    def to_payload(self) -> MessagePayload:
        """Convert to a JSON-friendly payload for message-passing transports."""
        payload: MessagePayload = {
            "participant_id": self.participant_id,
            "slot": self.vote.slot,
            "signature": self.signature.hex(),
        }
        if self.vote.hash is not None:
            payload["hash"] = self.vote.hash
        return payload

    @staticmethod
    def from_payload(payload: MessagePayload) -> "SignedVote":
        """Recreate a signed vote from a payload produced by ``to_payload``."""
        block_hash = payload.get("hash")
        return SignedVote(
            participant_id=int(payload["participant_id"]),
            vote=Vote(slot=int(payload["slot"]), hash=str(block_hash) if block_hash is not None else None),
            signature=bytes.fromhex(str(payload["signature"])),
        )


__all__ = [
    "StrategyID",
    "Address",
    "Token",
    "Slot",
    "PublicKey",
    "MessagePayload",
    "StrategyToken",
    "BAppToken",
    "Strategy",
    "BApp",
    "ProtocolParticipant",
    "Vote",
    "SignedVote",
]
