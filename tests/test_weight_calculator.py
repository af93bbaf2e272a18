"""Unit tests for the participant weight calculation."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import pytest

from bappvote.types import BApp, BAppToken, Strategy, StrategyToken
from bappvote.weights import (
    arithmetic_combination_function,
    calculate_participants_weight,
    calculate_token_weights,
    calculate_validator_balance_weights,
    exponential_weight_formula,
    harmonic_combination_function,
    polynomial_weight_formula,
    select_weight_functions,
    total_obligated_amount,
)
from tests.conftest import TOKEN, make_strategy

if TYPE_CHECKING:  # pragma: no cover - typing-only imports
    from _pytest.logging import LogCaptureFixture


ALL_COMBINATIONS = [
    (exponential_weight_formula, arithmetic_combination_function),
    (exponential_weight_formula, harmonic_combination_function),
    (polynomial_weight_formula, arithmetic_combination_function),
    (polynomial_weight_formula, harmonic_combination_function),
]


def test_exponential_harmonic_example(bapp: BApp, two_strategies: List[Strategy]) -> None:
    """Exponential formula with harmonic combination gives roughly 38.7% / 61.3%."""
    weights = calculate_participants_weight(
        bapp, two_strategies, exponential_weight_formula, harmonic_combination_function
    )

    assert weights[1] == pytest.approx(0.387, abs=1e-3)
    assert weights[2] == pytest.approx(0.613, abs=1e-3)


def test_polynomial_arithmetic_example(bapp: BApp, two_strategies: List[Strategy]) -> None:
    """Polynomial formula with arithmetic combination gives 43.42% / 56.58%."""
    weights = calculate_participants_weight(
        bapp, two_strategies, polynomial_weight_formula, arithmetic_combination_function
    )

    assert weights[1] == pytest.approx(0.4342, abs=1e-4)
    assert weights[2] == pytest.approx(0.5658, abs=1e-4)


@pytest.mark.parametrize("formula,combination", ALL_COMBINATIONS)
def test_final_weights_are_normalised(
    bapp: BApp,
    four_strategies: List[Strategy],
    formula,
    combination,
) -> None:
    """Final weights are non-negative and sum to 1 for every function pair."""
    weights = calculate_participants_weight(bapp, four_strategies, formula, combination)

    assert set(weights) == {1, 2, 3, 4}
    assert all(weight >= 0 for weight in weights.values())
    assert sum(weights.values()) == pytest.approx(1.0)


def test_token_weights_are_normalised_per_token(bapp: BApp, four_strategies: List[Strategy]) -> None:
    """Per-token weights sum to 1 across strategies."""
    token_weights = calculate_token_weights(bapp, four_strategies, polynomial_weight_formula)

    assert sum(weights[TOKEN] for weights in token_weights.values()) == pytest.approx(1.0)


def test_validator_balance_weights(two_strategies: List[Strategy]) -> None:
    """Validator balance weights are shares of the total validator balance."""
    weights = calculate_validator_balance_weights(two_strategies)

    assert weights == {1: pytest.approx(0.25), 2: pytest.approx(0.75)}


def test_total_obligated_amount(two_strategies: List[Strategy]) -> None:
    """Only the obligated share of each balance counts."""
    assert total_obligated_amount(TOKEN, two_strategies) == pytest.approx(70.0)


@pytest.mark.parametrize("formula", [exponential_weight_formula, polynomial_weight_formula])
def test_higher_risk_lowers_weight(formula) -> None:
    """With equal obligations, the riskier strategy gets the smaller weight."""
    bapp = BApp(address="0xbapp", tokens=[BAppToken(token=TOKEN, shared_risk_level=2.0, significance=1.0)])
    strategies = [
        make_strategy(1, amount=100, obligation=0.5, risk=1.0, validator_balance=0),
        make_strategy(2, amount=100, obligation=0.5, risk=3.0, validator_balance=0),
    ]

    weights = calculate_participants_weight(bapp, strategies, formula, arithmetic_combination_function)

    assert weights[1] > weights[2]


def test_risk_below_one_is_floored(bapp: BApp) -> None:
    """A risk below 1 weighs the same as a risk of exactly 1."""
    low_risk = make_strategy(1, amount=100, obligation=0.5, risk=0.2, validator_balance=0)
    unit_risk = make_strategy(2, amount=100, obligation=0.5, risk=1.0, validator_balance=0)

    token_weights = calculate_token_weights(bapp, [low_risk, unit_risk], exponential_weight_formula)

    assert token_weights[1][TOKEN] == pytest.approx(token_weights[2][TOKEN])


def test_zero_totals_yield_zero_weights(bapp: BApp) -> None:
    """No obligations and no validator balance produce zero weights, not errors."""
    strategies = [
        make_strategy(1, amount=0, obligation=0, risk=1, validator_balance=0),
        make_strategy(2, amount=100, obligation=0, risk=1, validator_balance=0),
    ]

    weights = calculate_participants_weight(
        bapp, strategies, polynomial_weight_formula, arithmetic_combination_function
    )

    assert weights == {1: 0.0, 2: 0.0}


def test_empty_strategy_set(bapp: BApp) -> None:
    """An empty strategy set yields an empty weight table."""
    assert calculate_participants_weight(bapp, [], polynomial_weight_formula, arithmetic_combination_function) == {}


def test_strategy_without_token_entry(bapp: BApp) -> None:
    """A strategy holding none of a bApp token gets 0 for that token."""
    holder = make_strategy(1, amount=100, obligation=0.5, risk=1.0, validator_balance=32)
    validator_only = Strategy(id=2, owner="0x2", private_key=b"\x02" * 32, validator_balance=32)

    token_weights = calculate_token_weights(bapp, [holder, validator_only], polynomial_weight_formula)
    weights = calculate_participants_weight(
        bapp, [holder, validator_only], polynomial_weight_formula, harmonic_combination_function
    )

    assert token_weights[2][TOKEN] == 0.0
    assert weights[2] == 0.0
    assert weights[1] == pytest.approx(1.0)


def test_multiple_tokens() -> None:
    """Every configured token contributes with its own significance."""
    bapp = BApp(
        address="0xbapp",
        tokens=[
            BAppToken(token="A", shared_risk_level=1.0, significance=1.0),
            BAppToken(token="B", shared_risk_level=1.0, significance=1.0),
        ],
    )
    strategies = [
        Strategy(id=1, owner="0x1", private_key=b"\x01" * 32, tokens=[StrategyToken("A", 100, 1.0, 1.0)]),
        Strategy(id=2, owner="0x2", private_key=b"\x02" * 32, tokens=[StrategyToken("B", 100, 1.0, 1.0)]),
    ]

    weights = calculate_participants_weight(
        bapp, strategies, polynomial_weight_formula, arithmetic_combination_function
    )

    assert weights == {1: pytest.approx(0.5), 2: pytest.approx(0.5)}


def test_select_weight_functions() -> None:
    """Configuration flags select the formula and combination pair."""
    assert select_weight_functions(True, True) == (exponential_weight_formula, harmonic_combination_function)
    assert select_weight_functions(False, False) == (polynomial_weight_formula, arithmetic_combination_function)


def test_final_weights_are_logged(
    bapp: BApp,
    two_strategies: List[Strategy],
    caplog: "LogCaptureFixture",
) -> None:
    """Each strategy's final weight is logged at INFO level."""
    caplog.set_level("INFO", logger="bappvote.weights")

    calculate_participants_weight(bapp, two_strategies, polynomial_weight_formula, arithmetic_combination_function)

    assert "[strategy 1] final weight 43.42%" in caplog.text
    assert "[strategy 2] final weight 56.58%" in caplog.text
