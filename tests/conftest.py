"""Shared fixtures for bappvote tests."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

import pytest

from bappvote.crypto import Ed25519CryptoService
from bappvote.types import (
    BApp,
    BAppToken,
    ProtocolParticipant,
    SignedVote,
    Strategy,
    StrategyID,
    StrategyToken,
    Vote,
)

TOKEN = "0x68a8ddd7a59a900e0657e9f8bbe02b70c947f25f"
BAPP_ADDRESS = "0x89eb9f5e0dd0a3c2f1bc5fc6aa8bf0c1a5b3c7d1"


def private_key_for(strategy_id: StrategyID) -> bytes:
    """Deterministic 32-byte key, valid for both signature schemes."""
    return bytes([strategy_id]) * 32


def make_strategy(
    strategy_id: StrategyID,
    amount: float,
    obligation: float,
    risk: float,
    validator_balance: float,
) -> Strategy:
    return Strategy(
        id=strategy_id,
        owner=f"0x{strategy_id:040x}",
        private_key=private_key_for(strategy_id),
        tokens=[StrategyToken(token=TOKEN, amount=amount, obligation_percentage=obligation, risk=risk)],
        validator_balance=validator_balance,
    )


@pytest.fixture
def crypto_service() -> Ed25519CryptoService:
    return Ed25519CryptoService()


@pytest.fixture
def bapp() -> BApp:
    """bApp with one token (beta 2, significance 2) and validator balance significance 1."""
    return BApp(
        address=BAPP_ADDRESS,
        tokens=[BAppToken(token=TOKEN, shared_risk_level=2.0, significance=2.0)],
        validator_balance_significance=1.0,
    )


@pytest.fixture
def two_strategies() -> List[Strategy]:
    return [
        make_strategy(1, amount=100, obligation=0.5, risk=1.5, validator_balance=32),
        make_strategy(2, amount=200, obligation=0.1, risk=1.0, validator_balance=96),
    ]


@pytest.fixture
def four_strategies(two_strategies: List[Strategy]) -> List[Strategy]:
    return two_strategies + [
        make_strategy(3, amount=150, obligation=0.2, risk=1.2, validator_balance=64),
        make_strategy(4, amount=300, obligation=0.2, risk=1.2, validator_balance=128),
    ]


@pytest.fixture
def participants(crypto_service: Ed25519CryptoService) -> Dict[StrategyID, ProtocolParticipant]:
    """Four participants weighted 0.2 / 0.3 / 0.1 / 0.4."""
    weights = {1: 0.2, 2: 0.3, 3: 0.1, 4: 0.4}
    return {
        pid: ProtocolParticipant(
            id=pid,
            weight=weight,
            public_key=crypto_service.public_key_of(private_key_for(pid)),
        )
        for pid, weight in weights.items()
    }


@pytest.fixture
def sign_vote(crypto_service: Ed25519CryptoService) -> Callable[..., SignedVote]:
    """Return a helper producing a vote signed by a participant's key."""

    def _sign(participant_id: StrategyID, slot: int, block_hash: Optional[str] = None) -> SignedVote:
        vote = Vote(slot=slot, hash=block_hash)
        return SignedVote(
            participant_id=participant_id,
            vote=vote,
            signature=crypto_service.sign(vote, private_key_for(participant_id)),
        )

    return _sign
