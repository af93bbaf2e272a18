"""Opt-in data exchanged when a strategy joins a bApp.

A strategy registers its protocol key by publishing opt-in data: its Ed25519
public key together with a signature over ``sha512(bapp_address)``. Anyone can
check the data against the bApp address and recover the key to use for vote
verification.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Optional

from bappvote.crypto import Ed25519CryptoService

LOGGER = logging.getLogger(__name__)

_ED25519 = Ed25519CryptoService()


def _bapp_digest(bapp_address: str) -> bytes:
    return hashlib.sha512(bapp_address.encode("utf-8")).digest()


def generate_opt_in_data(private_key: bytes, bapp_address: str) -> bytes:
    """Return the JSON opt-in data for *private_key* and *bapp_address*."""
    public_key = _ED25519.public_key_of(private_key)
    signature = _ED25519.sign_digest(_bapp_digest(bapp_address), private_key)
    return json.dumps({"pubkey": public_key.hex(), "signature": signature.hex()}).encode("utf-8")


def verify_opt_in_data(opt_in_data: bytes, bapp_address: str) -> Optional[bytes]:
    """Return the public key carried by *opt_in_data* if its signature is valid."""
    try:
        data = json.loads(opt_in_data.decode("utf-8"))
        public_key = bytes.fromhex(data["pubkey"])
        signature = bytes.fromhex(data["signature"])
    except (UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
        LOGGER.warning("Malformed opt-in data: %s", exc)
        return None

    if not _ED25519.verify_digest(_bapp_digest(bapp_address), signature, public_key):
        LOGGER.warning("Opt-in signature does not match bApp %s", bapp_address)
        return None
    return public_key


__all__ = ["generate_opt_in_data", "verify_opt_in_data"]
