"""
govledger Configuration

Loads govledger.toml. Environment variables override TOML values.
"""

from .loader import (
    GovLedgerConfig,
    LedgerSectionConfig,
    LoggingSectionConfig,
    load_config,
)

__all__ = [
    "GovLedgerConfig",
    "LedgerSectionConfig",
    "LoggingSectionConfig",
    "load_config",
]
