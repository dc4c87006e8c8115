"""
Token-Weighted Voting

Implements:
  - One vote per identity per proposal
  - Vote weight = voter's governance-token balance when the vote is cast
  - Approval rule: yes-weight must exceed quorum_threshold percent of the
    weight cast (yes + no), using truncating integer division
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..logger import get_logger
from ..exceptions import ErrorCode, governance_error

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  VOTE DATA
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VoteRecord:
    """An individual vote cast by a voter. Never updated once stored."""
    proposal_id: int
    voter: str
    choice: bool
    weight: int
    block_height: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "vote": self.choice,
            "tokens": self.weight,
            "blockHeight": self.block_height,
        }


def quorum_votes(total_votes: int, quorum_threshold: int) -> int:
    """Weight the yes side must exceed: floor(total * threshold / 100)."""
    return total_votes * quorum_threshold // 100


def is_approved(yes_votes: int, no_votes: int, quorum_threshold: int) -> bool:
    return yes_votes > quorum_votes(yes_votes + no_votes, quorum_threshold)


@dataclass(frozen=True)
class TallyResult:
    """Snapshot of a proposal's tally against the current threshold."""
    proposal_id: int
    yes_votes: int
    no_votes: int
    quorum_threshold: int

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes

    @property
    def quorum_votes(self) -> int:
        return quorum_votes(self.total_votes, self.quorum_threshold)

    @property
    def is_approved(self) -> bool:
        return self.yes_votes > self.quorum_votes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "yesVotes": self.yes_votes,
            "noVotes": self.no_votes,
            "totalVotes": self.total_votes,
            "quorumThreshold": self.quorum_threshold,
            "quorumVotes": self.quorum_votes,
            "isApproved": self.is_approved,
        }


# ══════════════════════════════════════════════════════════════════════
#  VOTE BOOK
# ══════════════════════════════════════════════════════════════════════

class VoteBook:
    """Vote records keyed by (proposal_id, voter)."""

    def __init__(self):
        self._votes: Dict[Tuple[int, str], VoteRecord] = {}
        self._by_proposal: Dict[int, List[VoteRecord]] = {}

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return (proposal_id, voter) in self._votes

    def require_not_voted(self, proposal_id: int, voter: str):
        if self.has_voted(proposal_id, voter):
            raise governance_error(
                ErrorCode.ALREADY_VOTED,
                f"{voter} has already voted on proposal #{proposal_id}",
            )

    def get(self, proposal_id: int, voter: str) -> Optional[VoteRecord]:
        return self._votes.get((proposal_id, voter))

    def record(self, vote: VoteRecord) -> VoteRecord:
        self.require_not_voted(vote.proposal_id, vote.voter)
        self._votes[(vote.proposal_id, vote.voter)] = vote
        self._by_proposal.setdefault(vote.proposal_id, []).append(vote)
        logger.debug(
            f"Recorded vote {vote.voter} on #{vote.proposal_id} "
            f"(choice={vote.choice}, weight={vote.weight})"
        )
        return vote

    def voter_count(self, proposal_id: int) -> int:
        return len(self._by_proposal.get(proposal_id, []))

    def __len__(self) -> int:
        return len(self._votes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voteCount": len(self._votes),
            "votes": {
                pid: [v.to_dict() for v in records]
                for pid, records in self._by_proposal.items()
            },
        }

    def __repr__(self) -> str:
        return f"<VoteBook votes={len(self._votes)}>"
