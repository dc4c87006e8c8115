"""
Governance Proposals

Defines the Proposal dataclass that tracks a funding request from creation
to execution, and the ProposalBook aggregate that owns the id → proposal map
together with the title → id index.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from ..logger import get_logger
from ..constants import (
    PROPOSAL_DESCRIPTION_MAX_LENGTH,
    PROPOSAL_TITLE_MAX_LENGTH,
)
from ..exceptions import ErrorCode, governance_error

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  FIELD CHECKS
# ══════════════════════════════════════════════════════════════════════

def check_title(title: str):
    if not title or len(title) > PROPOSAL_TITLE_MAX_LENGTH:
        raise governance_error(
            ErrorCode.INVALID_TITLE,
            f"Title must be 1-{PROPOSAL_TITLE_MAX_LENGTH} characters",
        )


def check_description(description: str):
    if not description or len(description) > PROPOSAL_DESCRIPTION_MAX_LENGTH:
        raise governance_error(
            ErrorCode.INVALID_DESCRIPTION,
            f"Description must be 1-{PROPOSAL_DESCRIPTION_MAX_LENGTH} characters",
        )


def check_amount(amount: int):
    if amount <= 0:
        raise governance_error(
            ErrorCode.INVALID_PROPOSAL_AMOUNT,
            f"Requested amount must be positive, got {amount}",
        )


def check_recipient(recipient: str, proposer: str):
    if recipient == proposer:
        raise governance_error(
            ErrorCode.INVALID_RECIPIENT,
            "Proposer cannot be the recipient of their own proposal",
        )


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Proposal:
    """
    Funding proposal subject to a token-weighted vote.

    Fields:
        id:            Monotonic identifier, assigned from 0
        title:         Short title, unique across all proposals
        description:   Rationale for the request
        amount:        Funds requested from the treasury
        recipient:     Identity that receives the funds on execution
        proposer:      Identity that created the proposal
        start_height:  First block height at which votes are accepted
        end_height:    First block height at which votes are refused
        yes_votes:     Token weight cast in favour
        no_votes:      Token weight cast against
        executed:      Set once the treasury disbursement has been requested
    """
    id: int
    title: str
    description: str
    amount: int
    recipient: str
    proposer: str
    start_height: int
    end_height: int
    yes_votes: int = 0
    no_votes: int = 0
    executed: bool = False

    def __post_init__(self):
        check_title(self.title)
        check_description(self.description)
        check_amount(self.amount)
        check_recipient(self.recipient, self.proposer)
        if self.end_height <= self.start_height:
            raise governance_error(
                ErrorCode.INVALID_VOTING_PERIOD,
                f"Voting window [{self.start_height}, {self.end_height}) is empty",
            )

    # ── Properties ────────────────────────────────────────────────────

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes

    @property
    def voting_period(self) -> int:
        return self.end_height - self.start_height

    def is_open(self, block_height: int) -> bool:
        """Votes are accepted on [start_height, end_height)."""
        return self.start_height <= block_height < self.end_height

    def is_closed(self, block_height: int) -> bool:
        """Execution may only be attempted once the window has fully passed."""
        return block_height >= self.end_height

    # ── Mutations ─────────────────────────────────────────────────────

    def add_votes(self, choice: bool, weight: int):
        if self.executed:
            raise governance_error(ErrorCode.PROPOSAL_EXECUTED)
        if weight <= 0:
            raise governance_error(ErrorCode.INSUFFICIENT_TOKENS)
        if choice:
            self.yes_votes += weight
        else:
            self.no_votes += weight

    def mark_executed(self):
        if self.executed:
            raise governance_error(ErrorCode.PROPOSAL_EXECUTED)
        self.executed = True

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "amount": self.amount,
            "recipient": self.recipient,
            "proposer": self.proposer,
            "startHeight": self.start_height,
            "endHeight": self.end_height,
            "yesVotes": self.yes_votes,
            "noVotes": self.no_votes,
            "executed": self.executed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            amount=data["amount"],
            recipient=data["recipient"],
            proposer=data["proposer"],
            start_height=data["startHeight"],
            end_height=data["endHeight"],
            yes_votes=data.get("yesVotes", 0),
            no_votes=data.get("noVotes", 0),
            executed=data.get("executed", False),
        )

    def __repr__(self) -> str:
        return (
            f"<Proposal #{self.id} '{self.title}' amount={self.amount} "
            f"yes={self.yes_votes} no={self.no_votes} executed={self.executed}>"
        )


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL BOOK
# ══════════════════════════════════════════════════════════════════════

class ProposalBook:
    """
    Proposals keyed by their monotonic id, with a title index.

    Ids are dense: the proposal stored under id ``n`` is the (n+1)-th ever
    created, so ``next_id`` doubles as the creation count. The two maps are
    only written by ``add``.
    """

    def __init__(self):
        self._proposals: Dict[int, Proposal] = {}
        self._by_title: Dict[str, int] = {}
        self._next_id = 0

    @property
    def next_id(self) -> int:
        return self._next_id

    # ── Lookup ────────────────────────────────────────────────────────

    def get(self, proposal_id: int) -> Optional[Proposal]:
        return self._proposals.get(proposal_id)

    def get_or_raise(self, proposal_id: int) -> Proposal:
        proposal = self.get(proposal_id)
        if proposal is None:
            raise governance_error(
                ErrorCode.PROPOSAL_NOT_FOUND,
                f"Proposal #{proposal_id} does not exist",
            )
        return proposal

    def id_for_title(self, title: str) -> Optional[int]:
        return self._by_title.get(title)

    def has_title(self, title: str) -> bool:
        return title in self._by_title

    # ── Insert ────────────────────────────────────────────────────────

    def add(self, proposal: Proposal) -> Proposal:
        """Store *proposal* under the next id and index its title."""
        if proposal.id != self._next_id:
            raise ValueError(
                f"Proposal id {proposal.id} does not match next id {self._next_id}"
            )
        if proposal.title in self._by_title:
            raise governance_error(
                ErrorCode.PROPOSAL_ALREADY_EXISTS,
                f"A proposal titled '{proposal.title}' already exists",
            )
        self._proposals[proposal.id] = proposal
        self._by_title[proposal.title] = proposal.id
        self._next_id += 1
        logger.debug(f"Indexed proposal #{proposal.id} under title '{proposal.title}'")
        return proposal

    # ── Enumeration ───────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._proposals)

    def __iter__(self) -> Iterator[Proposal]:
        return iter(list(self._proposals.values()))

    def __contains__(self, proposal_id: int) -> bool:
        return proposal_id in self._proposals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nextProposalId": self._next_id,
            "proposals": {pid: p.to_dict() for pid, p in self._proposals.items()},
        }

    def __repr__(self) -> str:
        return f"<ProposalBook proposals={len(self._proposals)}>"
