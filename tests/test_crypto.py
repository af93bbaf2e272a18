"""Unit tests for vote signing and verification."""

from __future__ import annotations

import pytest

from bappvote.crypto import (
    Ed25519CryptoService,
    EthereumCryptoService,
    crypto_service_for,
    vote_digest,
)
from bappvote.errors import InvalidKeyError
from bappvote.types import SignedVote, Vote
from tests.conftest import private_key_for


def test_vote_payload_is_canonical() -> None:
    """Slot-only and hashed votes serialise to compact JSON with slot first."""
    assert Vote(slot=5).to_payload() == b'{"slot":5}'
    assert Vote(slot=5, hash="0xab").to_payload() == b'{"slot":5,"hash":"0xab"}'
    assert vote_digest(Vote(slot=5)) != vote_digest(Vote(slot=5, hash="0xab"))


def test_signed_vote_payload() -> None:
    """Signed votes survive conversion to and from transport payloads."""
    signed_vote = SignedVote(participant_id=3, vote=Vote(slot=9, hash="0xcd"), signature=b"\x01\x02")

    payload = signed_vote.to_payload()

    assert payload == {"participant_id": 3, "slot": 9, "signature": "0102", "hash": "0xcd"}
    assert SignedVote.from_payload(payload) == signed_vote


class TestEd25519:
    """Ed25519 scheme."""

    def test_sign_and_verify(self, crypto_service: Ed25519CryptoService) -> None:
        """A signature verifies against the signer's public key."""
        private_key = private_key_for(1)
        public_key = crypto_service.public_key_of(private_key)
        vote = Vote(slot=10)

        signature = crypto_service.sign(vote, private_key)

        assert len(public_key) == 32
        assert crypto_service.verify(vote, signature, public_key) is True

    def test_signing_is_deterministic(self, crypto_service: Ed25519CryptoService) -> None:
        """The same vote and key always give the same signature."""
        vote = Vote(slot=10)

        assert crypto_service.sign(vote, private_key_for(1)) == crypto_service.sign(vote, private_key_for(1))

    def test_tampered_vote_fails(self, crypto_service: Ed25519CryptoService) -> None:
        """A signature does not carry over to a different slot."""
        private_key = private_key_for(1)
        signature = crypto_service.sign(Vote(slot=10), private_key)

        assert crypto_service.verify(Vote(slot=11), signature, crypto_service.public_key_of(private_key)) is False

    def test_wrong_public_key_fails(self, crypto_service: Ed25519CryptoService) -> None:
        """Another participant's key does not verify the signature."""
        vote = Vote(slot=10)
        signature = crypto_service.sign(vote, private_key_for(1))

        assert crypto_service.verify(vote, signature, crypto_service.public_key_of(private_key_for(2))) is False

    def test_malformed_inputs_fail_closed(self, crypto_service: Ed25519CryptoService) -> None:
        """Garbage signatures or keys verify as False instead of raising."""
        vote = Vote(slot=10)
        public_key = crypto_service.public_key_of(private_key_for(1))

        assert crypto_service.verify(vote, b"short", public_key) is False
        assert crypto_service.verify(vote, b"\x00" * 64, b"bad") is False
        assert crypto_service.verify(vote, b"\x00" * 64, "0xnot-bytes") is False

    def test_invalid_private_key(self, crypto_service: Ed25519CryptoService) -> None:
        """Private keys of the wrong length are rejected."""
        with pytest.raises(InvalidKeyError):
            crypto_service.public_key_of(b"\x01" * 5)

    def test_generated_keys_work(self, crypto_service: Ed25519CryptoService) -> None:
        """Freshly generated keys sign and verify."""
        private_key = Ed25519CryptoService.generate_private_key()
        vote = Vote(slot=1)

        assert len(private_key) == 32
        assert crypto_service.verify(vote, crypto_service.sign(vote, private_key), crypto_service.public_key_of(private_key))


class TestEthereum:
    """secp256k1 account scheme."""

    def test_sign_and_verify(self) -> None:
        """A signature recovers the signer's address."""
        service = EthereumCryptoService()
        private_key = private_key_for(1)
        address = service.public_key_of(private_key)
        vote = Vote(slot=10, hash="0xab")

        signature = service.sign(vote, private_key)

        assert address.startswith("0x") and len(address) == 42
        assert service.verify(vote, signature, address) is True
        assert service.verify(vote, signature, address.lower()) is True

    def test_tampered_vote_fails(self) -> None:
        """A different vote recovers a different address."""
        service = EthereumCryptoService()
        private_key = private_key_for(1)
        signature = service.sign(Vote(slot=10), private_key)

        assert service.verify(Vote(slot=11), signature, service.public_key_of(private_key)) is False

    def test_malformed_inputs_fail_closed(self) -> None:
        """Unrecoverable signatures and non-address keys verify as False."""
        service = EthereumCryptoService()
        vote = Vote(slot=10)
        address = service.public_key_of(private_key_for(1))

        assert service.verify(vote, b"\x00" * 3, address) is False
        assert service.verify(vote, service.sign(vote, private_key_for(1)), b"\x00" * 32) is False

    def test_invalid_private_key(self) -> None:
        """Private keys of the wrong length are rejected."""
        with pytest.raises(InvalidKeyError):
            EthereumCryptoService().public_key_of(b"\x01" * 5)


def test_crypto_service_for() -> None:
    """Schemes are looked up case-insensitively."""
    assert isinstance(crypto_service_for("ED25519"), Ed25519CryptoService)
    assert isinstance(crypto_service_for("secp256k1"), EthereumCryptoService)
    with pytest.raises(ValueError):
        crypto_service_for("rsa")
