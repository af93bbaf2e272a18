"""Per-token weight formulas.

A weight formula turns one strategy's obligation of one token into an
unnormalised weight. Both formulas discount the strategy's share of the total
obligated amount by its risk, with the risk floored at 1 so that a low risk
can never amplify the share.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from bappvote.types import BAppToken, StrategyID, StrategyToken

LOGGER = logging.getLogger(__name__)

WeightFormula = Callable[[StrategyID, StrategyToken, BAppToken, float], float]


def obligation_participation(strategy_token: StrategyToken, total_obligated_amount: float) -> float:
    """Return the strategy's share of the total amount obligated to the bApp."""
    if total_obligated_amount == 0:
        total_obligated_amount = 1.0
    return strategy_token.obligated_amount() / total_obligated_amount


def exponential_weight_formula(
    strategy_id: StrategyID,
    strategy_token: StrategyToken,
    bapp_token: BAppToken,
    total_obligated_amount: float,
) -> float:
    """Weight decreasing exponentially with risk.

    ``participation * exp(-beta * max(1, risk))``
    """
    participation = obligation_participation(strategy_token, total_obligated_amount)
    beta = bapp_token.shared_risk_level
    weight = participation * math.exp(-beta * max(1.0, strategy_token.risk))
    LOGGER.debug(
        "🧮 [token %s][strategy %s] exponential: participation=%s risk=%s beta=%s -> %s",
        bapp_token.token,
        strategy_id,
        participation,
        strategy_token.risk,
        beta,
        weight,
    )
    return weight


def polynomial_weight_formula(
    strategy_id: StrategyID,
    strategy_token: StrategyToken,
    bapp_token: BAppToken,
    total_obligated_amount: float,
) -> float:
    """Weight decreasing polynomially with risk.

    ``participation / max(1, risk) ** beta``
    """
    participation = obligation_participation(strategy_token, total_obligated_amount)
    beta = bapp_token.shared_risk_level
    weight = participation / math.pow(max(1.0, strategy_token.risk), beta)
    LOGGER.debug(
        "🧮 [token %s][strategy %s] polynomial: participation=%s risk=%s beta=%s -> %s",
        bapp_token.token,
        strategy_id,
        participation,
        strategy_token.risk,
        beta,
        weight,
    )
    return weight


__all__ = [
    "WeightFormula",
    "obligation_participation",
    "exponential_weight_formula",
    "polynomial_weight_formula",
]
