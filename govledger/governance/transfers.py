"""
Transfer requests emitted by the ledger.

The ledger never moves funds. Creating a proposal asks the host to move the
proposal fee from the proposer to the treasury; executing one asks the
treasury to pay the recipient. Both are plain values the host applies.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional


class TransferKind(IntEnum):
    """What a transfer request pays for."""
    PROPOSAL_FEE = 1            # proposer → treasury, on creation
    TREASURY_DISBURSEMENT = 2   # treasury → recipient, on execution


@dataclass(frozen=True)
class TransferRequest:
    """A balance movement the host runtime is asked to perform."""
    kind: TransferKind
    amount: int
    sender: str
    recipient: str
    proposal_id: Optional[int] = None
    block_height: Optional[int] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("Transfer amount cannot be negative")

    @property
    def is_fee(self) -> bool:
        return self.kind == TransferKind.PROPOSAL_FEE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.name,
            "amount": self.amount,
            "from": self.sender,
            "to": self.recipient,
            "proposalId": self.proposal_id,
            "blockHeight": self.block_height,
        }
