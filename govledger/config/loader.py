"""
govledger TOML Configuration Loader

Loads govledger.toml with environment variable overrides.

Environment variable mapping:
    [ledger] admin              → GOVLEDGER_ADMIN
    [ledger] max_proposals      → GOVLEDGER_MAX_PROPOSALS
    [ledger] proposal_fee       → GOVLEDGER_PROPOSAL_FEE
    [ledger] quorum_threshold   → GOVLEDGER_QUORUM_THRESHOLD
    [ledger] treasury_contract  → GOVLEDGER_TREASURY_CONTRACT
    [ledger] gov_token_contract → GOVLEDGER_GOV_TOKEN_CONTRACT
    [logging] level             → GOVLEDGER_LOG_LEVEL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_MAX_PROPOSALS,
    DEFAULT_PROPOSAL_FEE,
    DEFAULT_QUORUM_THRESHOLD,
    GOVLEDGER_ADMIN,
    GOVLEDGER_CONFIG,
    LOG_LEVEL,
    QUORUM_THRESHOLD_MAX,
    QUORUM_THRESHOLD_MIN,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_int(name: str) -> Optional[int]:
    v = os.environ.get(name)
    if not v:
        return None
    try:
        return int(v)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {v!r}") from e


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class LedgerSectionConfig:
    """[ledger] section."""
    admin: str = str(GOVLEDGER_ADMIN)
    max_proposals: int = DEFAULT_MAX_PROPOSALS
    proposal_fee: int = DEFAULT_PROPOSAL_FEE
    quorum_threshold: int = DEFAULT_QUORUM_THRESHOLD
    treasury_contract: str = ""
    gov_token_contract: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerSectionConfig":
        return cls(
            admin=data.get("admin", str(GOVLEDGER_ADMIN)),
            max_proposals=data.get("max_proposals", DEFAULT_MAX_PROPOSALS),
            proposal_fee=data.get("proposal_fee", DEFAULT_PROPOSAL_FEE),
            quorum_threshold=data.get("quorum_threshold", DEFAULT_QUORUM_THRESHOLD),
            treasury_contract=data.get("treasury_contract", ""),
            gov_token_contract=data.get("gov_token_contract", ""),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("GOVLEDGER_ADMIN"):
            self.admin = v
        if (n := _env_int("GOVLEDGER_MAX_PROPOSALS")) is not None:
            self.max_proposals = n
        if (n := _env_int("GOVLEDGER_PROPOSAL_FEE")) is not None:
            self.proposal_fee = n
        if (n := _env_int("GOVLEDGER_QUORUM_THRESHOLD")) is not None:
            self.quorum_threshold = n
        if v := os.environ.get("GOVLEDGER_TREASURY_CONTRACT"):
            self.treasury_contract = v
        if v := os.environ.get("GOVLEDGER_GOV_TOKEN_CONTRACT"):
            self.gov_token_contract = v

    def validate(self) -> None:
        for name in ("admin", "treasury_contract", "gov_token_contract"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"ledger.{name} must be a string")
        for name in ("max_proposals", "proposal_fee", "quorum_threshold"):
            value = getattr(self, name)
            # bool is an int subclass; TOML true/false is not a count
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"ledger.{name} must be an integer, got {value!r}"
                )
        if not self.admin:
            raise ConfigurationError("ledger.admin must be set")
        if self.max_proposals < 0:
            raise ConfigurationError("ledger.max_proposals must be >= 0")
        if self.proposal_fee < 0:
            raise ConfigurationError("ledger.proposal_fee must be >= 0")
        if not QUORUM_THRESHOLD_MIN <= self.quorum_threshold <= QUORUM_THRESHOLD_MAX:
            raise ConfigurationError(
                f"ledger.quorum_threshold must be {QUORUM_THRESHOLD_MIN}-"
                f"{QUORUM_THRESHOLD_MAX}, got {self.quorum_threshold}"
            )


@dataclass
class LoggingSectionConfig:
    """[logging] section."""
    level: str = str(LOG_LEVEL)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSectionConfig":
        return cls(level=str(data.get("level", str(LOG_LEVEL))).upper())

    def apply_env(self) -> None:
        if v := os.environ.get("GOVLEDGER_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid logging.level: {self.level}")


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass
class GovLedgerConfig:
    """
    Unified govledger configuration.

    Loads every section of govledger.toml and applies environment variable
    overrides.
    """
    ledger: LedgerSectionConfig = field(default_factory=LedgerSectionConfig)
    logging: LoggingSectionConfig = field(default_factory=LoggingSectionConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovLedgerConfig":
        """Create GovLedgerConfig from a parsed TOML dict."""
        return cls(
            ledger=LedgerSectionConfig.from_dict(data.get("ledger", {})),
            logging=LoggingSectionConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "GovLedgerConfig":
        """
        Load configuration from a TOML file.

        Args:
            config_path: Path to govledger.toml

        Returns:
            GovLedgerConfig instance
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.ledger.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Returns:
            True if all valid

        Raises:
            ConfigurationError: on invalid config
        """
        self.ledger.validate()
        self.logging.validate()
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "ledger": {
                "admin": self.ledger.admin,
                "max_proposals": self.ledger.max_proposals,
                "proposal_fee": self.ledger.proposal_fee,
                "quorum_threshold": self.ledger.quorum_threshold,
                "treasury_contract": self.ledger.treasury_contract,
                "gov_token_contract": self.ledger.gov_token_contract,
            },
            "logging": {
                "level": self.logging.level,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> GovLedgerConfig:
    """
    Load and validate govledger configuration.

    Resolution order:
        1. Explicit *path* argument
        2. GOVLEDGER_CONFIG env var
        3. GOVLEDGER_CONFIG from .env, else ./govledger.toml
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("GOVLEDGER_CONFIG", str(GOVLEDGER_CONFIG))

    cfg = GovLedgerConfig.from_file(path)
    cfg.validate()
    return cfg
