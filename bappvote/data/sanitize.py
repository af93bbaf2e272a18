"""Conversion of raw indexer values into calculator units.

Subgraph and contract data arrive as wei amounts, obligation percentages in
basis points and composite strategy identifiers; the weight calculator expects
token-native decimal amounts, fractions in ``[0, 1]`` and integer ids.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Mapping, Union

from bappvote.types import Strategy, StrategyID, Token

BASIS_POINTS = 10_000
DEFAULT_DECIMALS = 18


def sanitize_strategy_id(strategy_id: Union[int, str]) -> StrategyID:
    """Return the numeric strategy id.

    Relation ids such as ``"12-0xabc..."`` carry the strategy number before
    the first ``0x``.
    """
    if isinstance(strategy_id, int):
        return strategy_id
    prefix = strategy_id.split("0x", 1)[0].rstrip("-_ ")
    if not prefix.isdigit():
        raise ValueError(f"Cannot parse strategy id from {strategy_id!r}")
    return int(prefix)


def wei_to_token(amount: Union[int, str, Decimal], decimals: int = DEFAULT_DECIMALS) -> float:
    """Convert an integer amount in the token's smallest unit to token units."""
    return float(Decimal(amount) / (Decimal(10) ** decimals))


def basis_points_to_fraction(value: Union[int, float]) -> float:
    """Convert basis points (10000 = 100%) to a fraction."""
    return float(value) / BASIS_POINTS


def sanitize_strategies(
    strategies: Iterable[Strategy],
    token_decimals: Mapping[Token, int] | None = None,
) -> List[Strategy]:
    """Return copies of raw *strategies* converted to calculator units.

    Token amounts are converted from wei using *token_decimals* (18 when a
    token is not listed) and obligation percentages from basis points.
    """
    token_decimals = token_decimals or {}
    sanitized: List[Strategy] = []
    for strategy in strategies:
        tokens = [
            replace(
                strategy_token,
                amount=wei_to_token(
                    int(strategy_token.amount),
                    token_decimals.get(strategy_token.token, DEFAULT_DECIMALS),
                ),
                obligation_percentage=basis_points_to_fraction(strategy_token.obligation_percentage),
            )
            for strategy_token in strategy.tokens
        ]
        sanitized.append(replace(strategy, id=sanitize_strategy_id(strategy.id), tokens=tokens))
    return sanitized


__all__ = [
    "BASIS_POINTS",
    "sanitize_strategy_id",
    "wei_to_token",
    "basis_points_to_fraction",
    "sanitize_strategies",
]
