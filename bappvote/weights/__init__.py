"""Weight calculation for bApp participants.

The functions in this package are pure: they take already parsed bApp and
strategy data and return weights without touching any shared state, so the
result can be computed once and shared read-only by every participant.
"""

from __future__ import annotations

from .calculator import (
    calculate_final_weights,
    calculate_participants_weight,
    calculate_token_weights,
    calculate_validator_balance_weights,
    select_weight_functions,
    total_obligated_amount,
)
from .combination import (
    CombinationFunction,
    arithmetic_combination_function,
    harmonic_combination_function,
)
from .formula import (
    WeightFormula,
    exponential_weight_formula,
    polynomial_weight_formula,
)

__all__ = [
    "WeightFormula",
    "CombinationFunction",
    "exponential_weight_formula",
    "polynomial_weight_formula",
    "arithmetic_combination_function",
    "harmonic_combination_function",
    "calculate_token_weights",
    "calculate_validator_balance_weights",
    "calculate_final_weights",
    "calculate_participants_weight",
    "select_weight_functions",
    "total_obligated_amount",
]
