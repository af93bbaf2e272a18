"""
Configuration management for bApp block agreement.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_CRYPTO_SCHEMES = ("ed25519", "secp256k1")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # bApp Configuration
    bapp_address: str = ""
    use_exponential_weight: bool = False
    use_harmonic_combination_function: bool = False

    # Protocol Configuration
    quorum_threshold: float = 0.66
    crypto_scheme: str = "ed25519"
    # Comma separated ``owner:hexkey`` entries
    private_keys: str = ""

    # Blockchain Configuration
    rpc_url: str = "http://localhost:8545"

    # Logging Configuration
    log_level: str = "INFO"
    log_file_path: Optional[str] = None

    @field_validator("quorum_threshold")
    @classmethod
    def validate_quorum_threshold(cls, v):
        """Quorum must be a fraction of the total weight."""
        if not 0 < v <= 1:
            raise ValueError("Quorum threshold must be in (0, 1]")
        return v

    @field_validator("crypto_scheme")
    @classmethod
    def validate_crypto_scheme(cls, v):
        """Only the supported signature schemes are accepted."""
        v = v.lower()
        if v not in _CRYPTO_SCHEMES:
            raise ValueError(f"Crypto scheme must be one of {', '.join(_CRYPTO_SCHEMES)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Normalise and validate the log level name."""
        v = v.upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(_LOG_LEVELS)}")
        return v

    @field_validator("bapp_address")
    @classmethod
    def validate_bapp_address(cls, v):
        """Validate the bApp address is a proper Ethereum address if provided."""
        if v and not (len(v) == 42 and v.startswith("0x")):
            raise ValueError("bApp address must be a valid Ethereum address (0x...)")
        return v.lower()

    def private_keys_map(self) -> Dict[str, bytes]:
        """Parse ``private_keys`` into ``{owner (lower case): key bytes}``.

        Malformed entries are skipped with a warning.
        """
        keys: Dict[str, bytes] = {}
        for entry in self.private_keys.split(","):
            owner, _, key = entry.strip().partition(":")
            if not owner or not key:
                continue
            key = key[2:] if key.startswith("0x") else key
            try:
                keys[owner.lower()] = bytes.fromhex(key)
            except ValueError:
                LOGGER.warning("Ignoring malformed private key entry for %s", owner)
        return keys

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "env_prefix": "",
        "extra": "allow",  # Allow extra fields from environment
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()


__all__ = ["Settings", "get_settings"]
