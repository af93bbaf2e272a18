"""Vote signing and verification.

Votes are serialised canonically (:py:meth:`bappvote.types.Vote.to_payload`),
hashed with SHA-512, and the digest is signed. Two schemes are available:

* :class:`Ed25519CryptoService`: 32-byte Ed25519 seeds, raw 32-byte public
  keys. This is the default.
* :class:`EthereumCryptoService`: 32-byte secp256k1 keys as used by the
  strategy owner accounts; the public key is the checksum address and a
  signature verifies when it recovers that address.

Both are deterministic: signing the same vote with the same key always yields
the same signature.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Dict, Protocol, Type

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from eth_account import Account
from eth_account.messages import encode_defunct

from bappvote.errors import InvalidKeyError
from bappvote.types import PublicKey, Vote

LOGGER = logging.getLogger(__name__)


def vote_digest(vote: Vote) -> bytes:
    """Return the SHA-512 digest of the canonical vote payload."""
    return hashlib.sha512(vote.to_payload()).digest()


class CryptoService(Protocol):
    """Capability to sign and verify votes."""

    def sign(self, vote: Vote, private_key: bytes) -> bytes:
        """Return the signature of *vote* under *private_key*."""

    def verify(self, vote: Vote, signature: bytes, public_key: PublicKey) -> bool:
        """Return *True* when *signature* is valid for *vote* and *public_key*."""

    def public_key_of(self, private_key: bytes) -> PublicKey:
        """Derive the public key matching *private_key*."""


# ---------------------------------------------------------------------------
# Ed25519
# ---------------------------------------------------------------------------


class Ed25519CryptoService:
    """Ed25519 signatures over the SHA-512 vote digest."""

    name = "ed25519"

    @staticmethod
    def _load_private(private_key: bytes) -> ed25519.Ed25519PrivateKey:
        try:
            return ed25519.Ed25519PrivateKey.from_private_bytes(bytes(private_key))
        except (TypeError, ValueError) as exc:
            raise InvalidKeyError(f"Invalid Ed25519 private key: {exc}") from exc

    @staticmethod
    def generate_private_key() -> bytes:
        """Return a fresh random 32-byte private key."""
        return ed25519.Ed25519PrivateKey.generate().private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def public_key_of(self, private_key: bytes) -> bytes:
        """Return the raw 32-byte public key."""
        return self._load_private(private_key).public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    def sign_digest(self, digest: bytes, private_key: bytes) -> bytes:
        """Sign an arbitrary digest."""
        return self._load_private(private_key).sign(digest)

    def verify_digest(self, digest: bytes, signature: bytes, public_key: PublicKey) -> bool:
        """Verify a signature over an arbitrary digest."""
        if not isinstance(public_key, (bytes, bytearray)):
            return False
        try:
            ed25519.Ed25519PublicKey.from_public_bytes(bytes(public_key)).verify(bytes(signature), digest)
        except (InvalidSignature, TypeError, ValueError):
            return False
        return True

    def sign(self, vote: Vote, private_key: bytes) -> bytes:
        return self.sign_digest(vote_digest(vote), private_key)

    def verify(self, vote: Vote, signature: bytes, public_key: PublicKey) -> bool:
        return self.verify_digest(vote_digest(vote), signature, public_key)


# ---------------------------------------------------------------------------
# secp256k1 (Ethereum accounts)
# ---------------------------------------------------------------------------


class EthereumCryptoService:
    """EIP-191 signatures over the SHA-512 vote digest with account keys."""

    name = "secp256k1"

    @staticmethod
    def generate_private_key() -> bytes:
        """Return a fresh random 32-byte account key."""
        return bytes(Account.create().key)

    def public_key_of(self, private_key: bytes) -> str:
        """Return the checksum address of the account owning *private_key*."""
        try:
            return Account.from_key(private_key).address
        except Exception as exc:  # eth_keys raises its own ValidationError
            raise InvalidKeyError(f"Invalid secp256k1 private key: {exc}") from exc

    def sign(self, vote: Vote, private_key: bytes) -> bytes:
        message = encode_defunct(primitive=vote_digest(vote))
        try:
            signed = Account.sign_message(message, private_key=private_key)
        except Exception as exc:
            raise InvalidKeyError(f"Invalid secp256k1 private key: {exc}") from exc
        return bytes(signed.signature)

    def verify(self, vote: Vote, signature: bytes, public_key: PublicKey) -> bool:
        if not isinstance(public_key, str):
            return False
        message = encode_defunct(primitive=vote_digest(vote))
        try:
            recovered = Account.recover_message(message, signature=bytes(signature))
        except Exception as exc:
            LOGGER.debug("Signature recovery failed: %s", exc)
            return False
        return recovered.lower() == public_key.lower()


_SCHEMES: Dict[str, Type] = {
    Ed25519CryptoService.name: Ed25519CryptoService,
    EthereumCryptoService.name: EthereumCryptoService,
}


def crypto_service_for(scheme: str) -> CryptoService:
    """Return the crypto service registered under *scheme*."""
    try:
        return _SCHEMES[scheme.lower()]()
    except KeyError:
        raise ValueError(f"Unsupported crypto scheme: {scheme}") from None


__all__ = [
    "CryptoService",
    "Ed25519CryptoService",
    "EthereumCryptoService",
    "crypto_service_for",
    "vote_digest",
]
