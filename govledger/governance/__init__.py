"""
govledger Governance Core

Provides:
  - Proposal / ProposalBook                      (proposals.py)
  - VoteRecord / VoteBook / TallyResult           (voting.py)
  - TransferKind / TransferRequest                (transfers.py)
  - CallContext / Result                          (result.py)
  - LedgerConfig / GovernanceLedger               (ledger.py)
"""

from .proposals import (
    Proposal,
    ProposalBook,
)
from .voting import (
    TallyResult,
    VoteBook,
    VoteRecord,
    is_approved,
    quorum_votes,
)
from .transfers import (
    TransferKind,
    TransferRequest,
)
from .result import (
    CallContext,
    Result,
)
from .ledger import (
    BalanceFn,
    GovernanceLedger,
    LedgerConfig,
)

__all__ = [
    # Proposals
    "Proposal",
    "ProposalBook",
    # Voting
    "TallyResult",
    "VoteBook",
    "VoteRecord",
    "is_approved",
    "quorum_votes",
    # Transfers
    "TransferKind",
    "TransferRequest",
    # Calls
    "CallContext",
    "Result",
    # Ledger
    "BalanceFn",
    "GovernanceLedger",
    "LedgerConfig",
]
