"""Participant weight calculation for a bApp.

The calculation runs in three passes over the strategy set:

1. **Token weights**: for every configured bApp token, apply the weight
   formula to each strategy and normalise across strategies.
2. **Validator balance weights**: each strategy's share of the total
   validator balance.
3. **Final weights**: blend the per-class weights of every strategy with the
   combination function and normalise so that the weights sum to 1.

Every total is zero-guarded (a zero total is replaced by 1) so degenerate
inputs yield zero weights instead of errors.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from bappvote.types import BApp, Strategy, StrategyID, Token
from bappvote.weights.combination import (
    CombinationFunction,
    arithmetic_combination_function,
    harmonic_combination_function,
)
from bappvote.weights.formula import (
    WeightFormula,
    exponential_weight_formula,
    polynomial_weight_formula,
)

LOGGER = logging.getLogger(__name__)

TokenWeights = Dict[StrategyID, Dict[Token, float]]


def _guard(total: float) -> float:
    return total if total != 0 else 1.0


def total_obligated_amount(token: Token, strategies: Sequence[Strategy]) -> float:
    """Return the total amount of *token* obligated to the bApp."""
    return sum(strategy.token(token).obligated_amount() for strategy in strategies)


def calculate_token_weights(
    bapp: BApp,
    strategies: Sequence[Strategy],
    weight_formula: WeightFormula,
) -> TokenWeights:
    """Return normalised per-token weights for every strategy."""
    token_weights: TokenWeights = {strategy.id: {} for strategy in strategies}

    for bapp_token in bapp.tokens:
        total = _guard(total_obligated_amount(bapp_token.token, strategies))
        LOGGER.debug(
            "🪙 [token %s] total obligated amount=%s beta=%s",
            bapp_token.token,
            total,
            bapp_token.shared_risk_level,
        )

        raw: Dict[StrategyID, float] = {}
        for strategy in strategies:
            raw[strategy.id] = weight_formula(strategy.id, strategy.token(bapp_token.token), bapp_token, total)

        weight_sum = _guard(sum(raw.values()))
        for strategy_id, weight in raw.items():
            token_weights[strategy_id][bapp_token.token] = weight / weight_sum
        LOGGER.debug(
            "🪙 [token %s] normalised weights: %s",
            bapp_token.token,
            {sid: weights[bapp_token.token] for sid, weights in token_weights.items()},
        )

    return token_weights


def calculate_validator_balance_weights(strategies: Sequence[Strategy]) -> Dict[StrategyID, float]:
    """Return each strategy's share of the total validator balance."""
    total = _guard(sum(strategy.validator_balance for strategy in strategies))
    LOGGER.debug("🔑 total validator balance=%s", total)
    weights = {strategy.id: strategy.validator_balance / total for strategy in strategies}
    LOGGER.debug("🔑 validator balance weights: %s", weights)
    return weights


def calculate_final_weights(
    bapp: BApp,
    token_weights: Mapping[StrategyID, Mapping[Token, float]],
    validator_balance_weights: Mapping[StrategyID, float],
    combination_function: CombinationFunction,
) -> Dict[StrategyID, float]:
    """Combine per-class weights and normalise them across strategies."""
    raw: Dict[StrategyID, float] = {}
    for strategy_id, weights in token_weights.items():
        raw[strategy_id] = combination_function(
            bapp,
            strategy_id,
            weights,
            validator_balance_weights.get(strategy_id, 0.0),
        )

    weight_sum = _guard(sum(raw.values()))
    final = {strategy_id: weight / weight_sum for strategy_id, weight in raw.items()}
    for strategy_id, weight in final.items():
        LOGGER.info(
            "⚖️ [strategy %s] final weight %.2f%% (raw %s)",
            strategy_id,
            100 * weight,
            raw[strategy_id],
        )
    return final


def calculate_participants_weight(
    bapp: BApp,
    strategies: Sequence[Strategy],
    weight_formula: WeightFormula,
    combination_function: CombinationFunction,
) -> Dict[StrategyID, float]:
    """Compute the normalised final weight of every strategy."""
    token_weights = calculate_token_weights(bapp, strategies, weight_formula)
    validator_balance_weights = calculate_validator_balance_weights(strategies)
    return calculate_final_weights(bapp, token_weights, validator_balance_weights, combination_function)


def select_weight_functions(
    use_exponential_weight: bool,
    use_harmonic_combination: bool,
) -> Tuple[WeightFormula, CombinationFunction]:
    """Return the ``(formula, combination)`` pair selected by configuration."""
    formula: WeightFormula = exponential_weight_formula if use_exponential_weight else polynomial_weight_formula
    combination: CombinationFunction = (
        harmonic_combination_function if use_harmonic_combination else arithmetic_combination_function
    )
    return formula, combination


__all__: List[str] = [
    "TokenWeights",
    "total_obligated_amount",
    "calculate_token_weights",
    "calculate_validator_balance_weights",
    "calculate_final_weights",
    "calculate_participants_weight",
    "select_weight_functions",
]
