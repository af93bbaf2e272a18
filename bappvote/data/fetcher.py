"""Aggregation of bApp platform, Ethereum node and SSV node data.

The three APIs are external collaborators described only by the protocols
below. :class:`BAppDataFetcher` walks every strategy that opted in to a bApp
and derives the quantities the weight calculator needs:

* obligated balance per token (obligation fraction × strategy balance),
* operational validator balance (Σ over delegators of delegated fraction ×
  balance of their active validators),
* risk per token (Σ of the strategy's obligations for that token across all
  bApps).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, NamedTuple, Optional, Protocol

from bappvote.types import Address, BApp, Strategy, StrategyID, StrategyToken, Token

LOGGER = logging.getLogger(__name__)


class ValidatorBalance(NamedTuple):
    balance: float
    is_active: bool


class BAppsPlatformAPI(Protocol):
    """Read access to the bApps platform contracts or indexer."""

    def get_bapp_tokens(self, bapp: Address) -> Mapping[Token, float]: ...

    def get_strategies(self) -> List[StrategyID]: ...

    def get_strategy_owner_account(self, strategy: StrategyID) -> Address: ...

    def get_strategy_opted_in_to_bapp(self, owner: Address, bapp: Address) -> Optional[StrategyID]: ...

    def get_strategy_balance(self, strategy: StrategyID) -> Mapping[Token, float]: ...

    def get_obligation(self, strategy: StrategyID, bapp: Address, token: Token) -> float: ...

    def get_delegators_to_account(self, account: Address) -> Mapping[Address, float]: ...

    def all_obligations_for_token(self, strategy: StrategyID, token: Token) -> Mapping[Address, float]: ...


class EthereumNodeAPI(Protocol):
    """Beacon node access."""

    def get_validator_balance(self, pub_key: str) -> ValidatorBalance: ...


class SSVNodeAPI(Protocol):
    """SSV node access."""

    def get_validators_pub_keys(self, account: Address) -> List[str]: ...


class BAppDataFetcher:
    """Fetch and aggregate the per-strategy inputs of the weight calculation."""

    def __init__(
        self,
        bapps_platform_api: BAppsPlatformAPI,
        ethereum_node_api: EthereumNodeAPI,
        ssv_node_api: SSVNodeAPI,
    ) -> None:
        self.bapps_platform_api = bapps_platform_api
        self.ethereum_node_api = ethereum_node_api
        self.ssv_node_api = ssv_node_api

    # ------------------------------------------------------------------
    # Opted-in strategies
    # ------------------------------------------------------------------

    def opted_in_strategies(self, bapp: Address) -> Dict[StrategyID, Address]:
        """Return ``{strategy: owner}`` for strategies opted in to *bapp*."""
        opted_in: Dict[StrategyID, Address] = {}
        for strategy in self.bapps_platform_api.get_strategies():
            owner = self.bapps_platform_api.get_strategy_owner_account(strategy)
            if self.bapps_platform_api.get_strategy_opted_in_to_bapp(owner, bapp) != strategy:
                continue
            opted_in[strategy] = owner
        return opted_in

    # ------------------------------------------------------------------
    # Aggregations
    # ------------------------------------------------------------------

    def fetch_obligated_balances(self, bapp: Address) -> Dict[Token, Dict[StrategyID, float]]:
        """Return, per bApp token, the obligated balance of each strategy."""
        bapp_tokens = self.bapps_platform_api.get_bapp_tokens(bapp)
        balances: Dict[Token, Dict[StrategyID, float]] = {token: {} for token in bapp_tokens}

        for strategy in self.opted_in_strategies(bapp):
            strategy_balance = self.bapps_platform_api.get_strategy_balance(strategy)
            for token in bapp_tokens:
                obligation = self.bapps_platform_api.get_obligation(strategy, bapp, token)
                balances[token][strategy] = obligation * strategy_balance.get(token, 0.0)
        return balances

    def fetch_validator_balances(self, bapp: Address) -> Dict[StrategyID, float]:
        """Return the operational validator balance of each opted-in strategy."""
        return {
            strategy: self.operational_validator_balance(owner)
            for strategy, owner in self.opted_in_strategies(bapp).items()
        }

    def fetch_risks(self, bapp: Address) -> Dict[Token, Dict[StrategyID, float]]:
        """Return, per bApp token, each strategy's total obligation across bApps."""
        bapp_tokens = self.bapps_platform_api.get_bapp_tokens(bapp)
        risks: Dict[Token, Dict[StrategyID, float]] = {token: {} for token in bapp_tokens}

        for strategy in self.opted_in_strategies(bapp):
            for token in bapp_tokens:
                obligations = self.bapps_platform_api.all_obligations_for_token(strategy, token)
                risks[token][strategy] = sum(obligations.values())
        return risks

    def operational_validator_balance(self, account: Address) -> float:
        """Σ delegated fraction × active validator balance of each delegator."""
        total = 0.0
        for delegator, percentage in self.bapps_platform_api.get_delegators_to_account(account).items():
            total += self.owned_validator_balance(delegator) * percentage
        return total

    def owned_validator_balance(self, account: Address) -> float:
        """Return the balance of the active SSV validators owned by *account*."""
        total = 0.0
        for pub_key in self.ssv_node_api.get_validators_pub_keys(account):
            validator = self.ethereum_node_api.get_validator_balance(pub_key)
            if validator.is_active:
                total += validator.balance
        return total

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def fetch_strategies(self, bapp: BApp, private_keys: Mapping[Address, bytes]) -> List[Strategy]:
        """Build calculator-ready strategies for *bapp*.

        The obligation fraction is stored as given by the platform and the
        amount as the full strategy balance, so that the product equals the
        obligated balance. Strategies whose owner has no key in
        *private_keys* (looked up in lower case) cannot vote and are skipped.
        """
        tokens = [bapp_token.token for bapp_token in bapp.tokens]
        risks = self.fetch_risks(bapp.address)
        strategies: List[Strategy] = []

        for strategy_id, owner in self.opted_in_strategies(bapp.address).items():
            private_key = private_keys.get(owner.lower())
            if private_key is None:
                LOGGER.warning("No private key for owner %s of strategy %s; skipping", owner, strategy_id)
                continue

            balance = self.bapps_platform_api.get_strategy_balance(strategy_id)
            strategy_tokens = [
                StrategyToken(
                    token=token,
                    amount=balance.get(token, 0.0),
                    obligation_percentage=self.bapps_platform_api.get_obligation(strategy_id, bapp.address, token),
                    risk=risks.get(token, {}).get(strategy_id, 0.0),
                )
                for token in tokens
            ]
            strategies.append(
                Strategy(
                    id=strategy_id,
                    owner=owner,
                    private_key=private_key,
                    tokens=strategy_tokens,
                    validator_balance=self.operational_validator_balance(owner),
                )
            )

        LOGGER.info("Fetched %d strategies for bApp %s", len(strategies), bapp.address)
        return strategies


__all__ = [
    "ValidatorBalance",
    "BAppsPlatformAPI",
    "EthereumNodeAPI",
    "SSVNodeAPI",
    "BAppDataFetcher",
]
