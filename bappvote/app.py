"""Single-process coordinator for weighted block agreement.

:class:`App` computes the participant weights of a bApp once, creates one
:class:`~bappvote.consensus.AgreementState` per strategy and wires every state
to a shared :class:`~bappvote.transport.Network`. Each call to
:py:meth:`App.start_agreement` makes every participant vote on the given slot.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from bappvote.config import Settings
from bappvote.consensus import QUORUM_THRESHOLD, AgreementState
from bappvote.crypto import CryptoService, Ed25519CryptoService, crypto_service_for
from bappvote.data.chain import SlotProvider, Web3SlotProvider
from bappvote.data.fetcher import BAppDataFetcher
from bappvote.errors import BAppVoteError
from bappvote.logger import configure_logging
from bappvote.transport import LocalNetwork, Network
from bappvote.types import Address, BApp, ProtocolParticipant, Slot, Strategy, StrategyID
from bappvote.weights import calculate_participants_weight, select_weight_functions

LOGGER = logging.getLogger(__name__)


class App:
    """Weight calculation plus one agreement state per strategy."""

    def __init__(
        self,
        crypto_service: Optional[CryptoService] = None,
        network: Optional[Network] = None,
        quorum_threshold: float = QUORUM_THRESHOLD,
        use_exponential_weight: bool = False,
        use_harmonic_combination: bool = False,
        bapp_address: Optional[Address] = None,
        private_keys: Optional[Mapping[Address, bytes]] = None,
    ) -> None:
        self.crypto_service: CryptoService = crypto_service or Ed25519CryptoService()
        self.network: Network = network or LocalNetwork()
        self.quorum_threshold = quorum_threshold
        self.use_exponential_weight = use_exponential_weight
        self.use_harmonic_combination = use_harmonic_combination
        self.bapp_address = bapp_address.lower() if bapp_address else None
        self.private_keys: Dict[Address, bytes] = dict(private_keys or {})

        self.bapp: Optional[BApp] = None
        self.weights: Dict[StrategyID, float] = {}
        self.participants: Dict[StrategyID, ProtocolParticipant] = {}
        self.states: Dict[StrategyID, AgreementState] = {}

    @classmethod
    def from_settings(cls, settings: Settings, network: Optional[Network] = None) -> "App":
        """Build an app from *settings* and configure logging accordingly.

        The weight flags become the defaults of :py:meth:`setup`, and the
        bApp address and private keys are used by :py:meth:`setup_from_fetcher`.
        """
        configure_logging(settings.log_level, settings.log_file_path)
        return cls(
            crypto_service=crypto_service_for(settings.crypto_scheme),
            network=network,
            quorum_threshold=settings.quorum_threshold,
            use_exponential_weight=settings.use_exponential_weight,
            use_harmonic_combination=settings.use_harmonic_combination_function,
            bapp_address=settings.bapp_address or None,
            private_keys=settings.private_keys_map(),
        )

    @staticmethod
    def slot_provider_from(settings: Settings) -> SlotProvider:
        """Return a slot provider reading the chain at ``settings.rpc_url``."""
        return Web3SlotProvider(settings.rpc_url)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup(
        self,
        bapp: BApp,
        strategies: Sequence[Strategy],
        use_exponential_weight: Optional[bool] = None,
        use_harmonic_combination: Optional[bool] = None,
    ) -> Dict[StrategyID, float]:
        """Compute weights and create the agreement states.

        Flags left as ``None`` fall back to the app's configured defaults.
        States from a previous setup are unregistered from the network first.

        Raises:
            InvalidKeyError: if a strategy's private key is malformed.
        """
        self._teardown()

        if use_exponential_weight is None:
            use_exponential_weight = self.use_exponential_weight
        if use_harmonic_combination is None:
            use_harmonic_combination = self.use_harmonic_combination
        weight_formula, combination_function = select_weight_functions(
            use_exponential_weight,
            use_harmonic_combination,
        )
        LOGGER.info(
            "Computing weights for bApp %s with %s and %s",
            bapp.address,
            weight_formula.__name__,
            combination_function.__name__,
        )
        weights = calculate_participants_weight(bapp, strategies, weight_formula, combination_function)

        participants: Dict[StrategyID, ProtocolParticipant] = {
            strategy.id: ProtocolParticipant(
                id=strategy.id,
                weight=weights[strategy.id],
                public_key=self.crypto_service.public_key_of(strategy.private_key),
            )
            for strategy in strategies
        }

        states: Dict[StrategyID, AgreementState] = {}
        for strategy in strategies:
            states[strategy.id] = AgreementState(
                participant_id=strategy.id,
                private_key=strategy.private_key,
                participants=participants,
                network=self.network,
                crypto_service=self.crypto_service,
                quorum_threshold=self.quorum_threshold,
            )

        self.bapp = bapp
        self.weights = weights
        self.participants = participants
        self.states = states
        for strategy_id, state in states.items():
            self.network.register(strategy_id, state.process_vote)

        LOGGER.info("Set up %d participants for bApp %s", len(states), bapp.address)
        return weights

    def setup_from_fetcher(self, fetcher: BAppDataFetcher, bapp: BApp) -> Dict[StrategyID, float]:
        """Fetch the strategies of *bapp* with the app's private keys and set up.

        Raises:
            BAppVoteError: if *bapp* is not the configured bApp.
        """
        if self.bapp_address and bapp.address.lower() != self.bapp_address:
            raise BAppVoteError(f"bApp {bapp.address} does not match configured bApp {self.bapp_address}")
        strategies = fetcher.fetch_strategies(bapp, self.private_keys)
        return self.setup(bapp, strategies)

    def _teardown(self) -> None:
        for strategy_id in list(self.states):
            self.network.unregister(strategy_id)
        self.states = {}
        self.participants = {}
        self.weights = {}
        self.bapp = None

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def start_agreement(self, slot: Slot, block_hash: Optional[str] = None) -> None:
        """Make every participant vote on *slot*, then drop votes of decided slots."""
        if not self.states:
            raise RuntimeError("App.setup() must be called before starting an agreement")
        LOGGER.info("Starting agreement on slot %s", slot)
        states = list(self.states.values())
        for state in states:
            state.handle_new_block(slot, block_hash)
        for state in states:
            state.prune()

    def run_round(self, slot_provider: SlotProvider) -> Slot:
        """Start the agreement on the latest slot reported by *slot_provider*."""
        slot = slot_provider.get_latest_slot()
        self.start_agreement(slot)
        return slot

    def decided_slots(self) -> Dict[StrategyID, Slot]:
        """Return each participant's last decided slot."""
        return {strategy_id: state.last_decided_slot for strategy_id, state in self.states.items()}

    def deciders(self, slot: Slot) -> List[StrategyID]:
        """Return the participants whose last decided slot is at least *slot*."""
        return [strategy_id for strategy_id, state in self.states.items() if state.last_decided_slot >= slot]


__all__ = ["App"]
