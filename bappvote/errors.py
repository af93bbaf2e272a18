"""Exception hierarchy for bappvote."""

from __future__ import annotations


class BAppVoteError(Exception):
    """Base class for errors raised by bappvote."""


class InvalidKeyError(BAppVoteError, ValueError):
    """Raised when private or public key material cannot be used."""


__all__ = ["BAppVoteError", "InvalidKeyError"]
