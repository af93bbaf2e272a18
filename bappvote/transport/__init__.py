"""Vote transports (single-process and mailbox based)."""

from __future__ import annotations

from .transport import Network, TransportKind, VoteHandler  # noqa: F401
from .local import LocalNetwork  # noqa: F401
from .threaded import ThreadedNetwork  # noqa: F401


def network_for(kind: TransportKind) -> Network:
    """Instantiate the transport selected by *kind*."""
    if kind == TransportKind.LOCAL:
        return LocalNetwork()
    if kind == TransportKind.THREADED:
        return ThreadedNetwork()
    raise ValueError(f"Unsupported transport kind: {kind}")


__all__ = [
    "Network",
    "TransportKind",
    "VoteHandler",
    "LocalNetwork",
    "ThreadedNetwork",
    "network_for",
]
