"""
govledger Governance Token

Provides:
  - GovernanceToken  : In-memory fungible token whose balances weight votes
  - TokenRegistry    : Contract reference → token lookup for the host
"""

from .gov_token import (
    GovernanceToken,
    TokenRegistry,
    TokenTransferEvent,
    TokenError,
    InsufficientBalanceError,
)

__all__ = [
    "GovernanceToken",
    "TokenRegistry",
    "TokenTransferEvent",
    "TokenError",
    "InsufficientBalanceError",
]
