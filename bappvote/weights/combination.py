"""Combination functions blending per-class weights into a final weight.

Each capital class (every bApp token plus the validator balance) contributes
with its significance relative to the total significance. The harmonic mean
is sensitive to small terms: a strategy with no weight in a class that the
bApp considers significant gets a final weight of exactly 0.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Mapping, Tuple

from bappvote.types import BApp, StrategyID, Token

LOGGER = logging.getLogger(__name__)

CombinationFunction = Callable[[BApp, StrategyID, Mapping[Token, float], float], float]

VALIDATOR_BALANCE = "validator-balance"


def _significance_sum(bapp: BApp) -> float:
    total = bapp.significance_sum()
    return total if total != 0 else 1.0


def _classes(
    bapp: BApp,
    token_weights: Mapping[Token, float],
    validator_balance_weight: float,
) -> Iterator[Tuple[str, float, float]]:
    """Yield ``(class, significance, weight)`` for every capital class."""
    for token, weight in token_weights.items():
        yield token, bapp.token(token).significance, weight
    yield VALIDATOR_BALANCE, bapp.validator_balance_significance, validator_balance_weight


def arithmetic_combination_function(
    bapp: BApp,
    strategy_id: StrategyID,
    token_weights: Mapping[Token, float],
    validator_balance_weight: float,
) -> float:
    """Σ (significance / Σ significance) * weight over all classes."""
    significance_sum = _significance_sum(bapp)
    mean = 0.0
    for name, significance, weight in _classes(bapp, token_weights, validator_balance_weight):
        contribution = (significance / significance_sum) * weight
        LOGGER.debug(
            "⚖️ [strategy %s] %s: significance=%s weight=%s -> %s",
            strategy_id,
            name,
            significance,
            weight,
            contribution,
        )
        mean += contribution
    LOGGER.debug("⚖️ [strategy %s] arithmetic mean = %s", strategy_id, mean)
    return mean


def harmonic_combination_function(
    bapp: BApp,
    strategy_id: StrategyID,
    token_weights: Mapping[Token, float],
    validator_balance_weight: float,
) -> float:
    """1 / Σ (significance / Σ significance) / weight over all classes.

    A zero weight in a class with positive significance vetoes the strategy
    and the result is 0. Classes without significance are left out.
    """
    classes = list(_classes(bapp, token_weights, validator_balance_weight))
    for name, significance, weight in classes:
        if significance != 0 and weight == 0:
            LOGGER.debug(
                "⚠️ [strategy %s] %s has significance but the strategy's weight is 0; final weight is 0",
                strategy_id,
                name,
            )
            return 0.0

    significance_sum = _significance_sum(bapp)
    denominator = 0.0
    for name, significance, weight in classes:
        if significance == 0:
            continue
        contribution = significance / significance_sum / weight
        LOGGER.debug(
            "⚖️ [strategy %s] %s: significance=%s weight=%s -> %s",
            strategy_id,
            name,
            significance,
            weight,
            contribution,
        )
        denominator += contribution

    if denominator == 0:
        return 0.0
    mean = 1.0 / denominator
    LOGGER.debug("⚖️ [strategy %s] harmonic mean = %s", strategy_id, mean)
    return mean


__all__ = [
    "CombinationFunction",
    "VALIDATOR_BALANCE",
    "arithmetic_combination_function",
    "harmonic_combination_function",
]
