"""bappvote: weighted block agreement for bApp strategies.

Strategies that opted in to a bApp receive a normalised voting weight derived
from their obligated capital, risk and validator balance. Each strategy then
runs an agreement state that signs votes on new slots and decides a slot once
the votes it has seen carry at least the quorum threshold of the total weight.

Public API re-exports:

  - bappvote.types
  - bappvote.weights
  - bappvote.crypto
  - bappvote.consensus
  - bappvote.transport
  - bappvote.app
"""

from __future__ import annotations

# Domain types
from .types import (  # noqa: F401
    Address,
    BApp,
    BAppToken,
    ProtocolParticipant,
    SignedVote,
    Slot,
    Strategy,
    StrategyID,
    StrategyToken,
    Token,
    Vote,
)

# Weight calculation
from .weights import (  # noqa: F401
    arithmetic_combination_function,
    calculate_participants_weight,
    exponential_weight_formula,
    harmonic_combination_function,
    polynomial_weight_formula,
)

# Signatures
from .crypto import (  # noqa: F401
    CryptoService,
    Ed25519CryptoService,
    EthereumCryptoService,
    crypto_service_for,
)
from .optin import generate_opt_in_data, verify_opt_in_data  # noqa: F401

# Agreement
from .consensus import QUORUM_THRESHOLD, AgreementState  # noqa: F401
from .transport import LocalNetwork, Network, ThreadedNetwork, TransportKind  # noqa: F401
from .app import App  # noqa: F401

# Infra
from .config import Settings, get_settings  # noqa: F401
from .errors import BAppVoteError, InvalidKeyError  # noqa: F401
from .logger import ParticipantLogger, configure_logging  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    # core
    "Address",
    "BApp",
    "BAppToken",
    "ProtocolParticipant",
    "SignedVote",
    "Slot",
    "Strategy",
    "StrategyID",
    "StrategyToken",
    "Token",
    "Vote",
    "arithmetic_combination_function",
    "calculate_participants_weight",
    "exponential_weight_formula",
    "harmonic_combination_function",
    "polynomial_weight_formula",
    "CryptoService",
    "Ed25519CryptoService",
    "EthereumCryptoService",
    "crypto_service_for",
    "generate_opt_in_data",
    "verify_opt_in_data",
    "QUORUM_THRESHOLD",
    "AgreementState",
    # infra
    "LocalNetwork",
    "Network",
    "ThreadedNetwork",
    "TransportKind",
    "Settings",
    "get_settings",
    "BAppVoteError",
    "InvalidKeyError",
    "ParticipantLogger",
    "configure_logging",
    # app
    "App",
]
