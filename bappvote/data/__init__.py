"""Input side of the system: data aggregation, unit conversion, slot sources."""

from __future__ import annotations

from .chain import SlotProvider, StaticSlotProvider, Web3SlotProvider
from .fetcher import (
    BAppDataFetcher,
    BAppsPlatformAPI,
    EthereumNodeAPI,
    SSVNodeAPI,
    ValidatorBalance,
)
from .sanitize import (
    basis_points_to_fraction,
    sanitize_strategies,
    sanitize_strategy_id,
    wei_to_token,
)

__all__ = [
    "SlotProvider",
    "StaticSlotProvider",
    "Web3SlotProvider",
    "BAppDataFetcher",
    "BAppsPlatformAPI",
    "EthereumNodeAPI",
    "SSVNodeAPI",
    "ValidatorBalance",
    "basis_points_to_fraction",
    "sanitize_strategies",
    "sanitize_strategy_id",
    "wei_to_token",
]
