"""
Chain height providers that supply the slot of each agreement round.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from web3 import Web3

from bappvote.types import Slot

LOGGER = logging.getLogger(__name__)


class SlotProvider(Protocol):
    """Source of the latest slot to vote on."""

    def get_latest_slot(self) -> Slot:  # pragma: no cover
        """Return the latest slot (chain height)."""


class StaticSlotProvider:
    """Return a fixed slot; useful for replays and tests."""

    def __init__(self, slot: Slot) -> None:
        self.slot = slot

    def get_latest_slot(self) -> Slot:
        return self.slot


class Web3SlotProvider:
    """Read the chain height from an execution-layer JSON-RPC endpoint."""

    def __init__(self, rpc_url: str, w3: Optional[Web3] = None) -> None:
        self.rpc_url = rpc_url
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url))

    def get_latest_slot(self) -> Slot:
        """Return the latest block number.

        Raises:
            ConnectionError: if the RPC endpoint is unreachable.
        """
        if not self.w3.is_connected():
            raise ConnectionError(f"Failed to connect to {self.rpc_url}")
        slot = int(self.w3.eth.block_number)
        LOGGER.info("Latest slot from %s: %s", self.rpc_url, slot)
        return slot


__all__ = ["SlotProvider", "StaticSlotProvider", "Web3SlotProvider"]
