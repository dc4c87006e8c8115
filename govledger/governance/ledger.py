"""
Governance Ledger

The proposal / voting state machine a host runtime drives:

  - Admin-only configuration (treasury, governance token, quorum threshold)
  - Fee-charged proposal creation with unique titles
  - One token-weighted vote per identity per proposal
  - Quorum-gated execution that requests a treasury disbursement

Every entry point is a single check-then-mutate step: all validation runs
before the first write, so a rejected call leaves the ledger untouched.
"""

import functools
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from ..logger import get_logger
from ..constants import (
    DEFAULT_MAX_PROPOSALS,
    DEFAULT_PROPOSAL_FEE,
    DEFAULT_QUORUM_THRESHOLD,
    MAX_UINT,
    QUORUM_THRESHOLD_MAX,
    QUORUM_THRESHOLD_MIN,
)
from ..exceptions import ConfigurationError, ErrorCode, GovernanceError, governance_error
from .proposals import (
    Proposal,
    ProposalBook,
    check_amount,
    check_description,
    check_recipient,
    check_title,
)
from .result import CallContext, Result
from .transfers import TransferKind, TransferRequest
from .voting import TallyResult, VoteBook, VoteRecord, is_approved

if TYPE_CHECKING:
    from ..config.loader import LedgerSectionConfig

logger = get_logger(__name__)

# (token_contract, identity) → balance
BalanceFn = Callable[[str, str], int]


# ══════════════════════════════════════════════════════════════════════
#  CONFIG
# ══════════════════════════════════════════════════════════════════════

def _valid_quorum(value: int) -> bool:
    return QUORUM_THRESHOLD_MIN <= value <= QUORUM_THRESHOLD_MAX


@dataclass
class LedgerConfig:
    """
    Ledger parameters.

    ``admin`` is fixed at construction; the contract references and the
    quorum threshold are changed afterwards only through the admin entry
    points of GovernanceLedger.
    """
    admin: str
    max_proposals: int = DEFAULT_MAX_PROPOSALS
    proposal_fee: int = DEFAULT_PROPOSAL_FEE
    quorum_threshold: int = DEFAULT_QUORUM_THRESHOLD
    treasury_contract: Optional[str] = None
    gov_token_contract: Optional[str] = None

    def __post_init__(self):
        if not self.admin:
            raise ConfigurationError("Ledger admin identity is required")
        if self.max_proposals < 0:
            raise ConfigurationError("max_proposals cannot be negative")
        if self.proposal_fee < 0:
            raise ConfigurationError("proposal_fee cannot be negative")
        if not _valid_quorum(self.quorum_threshold):
            raise ConfigurationError(
                f"quorum_threshold must be {QUORUM_THRESHOLD_MIN}-{QUORUM_THRESHOLD_MAX}, "
                f"got {self.quorum_threshold}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "admin": self.admin,
            "maxProposals": self.max_proposals,
            "proposalFee": self.proposal_fee,
            "quorumThreshold": self.quorum_threshold,
            "treasuryContract": self.treasury_contract,
            "govTokenContract": self.gov_token_contract,
        }


# ══════════════════════════════════════════════════════════════════════
#  ENTRY POINT WRAPPER
# ══════════════════════════════════════════════════════════════════════

def entrypoint(fn):
    """Turn a GovernanceError raised by *fn* into a failed Result."""
    @functools.wraps(fn)
    def wrapper(self, ctx: CallContext, *args, **kwargs) -> Result:
        try:
            return fn(self, ctx, *args, **kwargs)
        except GovernanceError as e:
            logger.debug(
                f"{fn.__name__} rejected for {ctx.caller} @{ctx.block_height}: "
                f"{e.code} | {e}"
            )
            return Result.failure(e.code)
    return wrapper


# ══════════════════════════════════════════════════════════════════════
#  GOVERNANCE LEDGER
# ══════════════════════════════════════════════════════════════════════

class GovernanceLedger:
    """
    Token-weighted governance over treasury funding proposals.

    Responsibilities:
        - Hold the admin-set configuration
        - Create proposals and keep titles unique
        - Accept one weighted vote per identity per proposal
        - Gate execution on the quorum threshold
        - Emit fee / disbursement TransferRequests for the host to apply
    """

    def __init__(
        self,
        admin: str,
        *,
        max_proposals: int = DEFAULT_MAX_PROPOSALS,
        proposal_fee: int = DEFAULT_PROPOSAL_FEE,
        quorum_threshold: int = DEFAULT_QUORUM_THRESHOLD,
        treasury_contract: Optional[str] = None,
        gov_token_contract: Optional[str] = None,
        balance_of_fn: Optional[BalanceFn] = None,
    ):
        """
        Args:
            admin:              Identity allowed to change configuration
            max_proposals:      Cap on proposals ever created
            proposal_fee:       Flat fee requested on each creation
            quorum_threshold:   Percent of votes cast the yes side must exceed
            treasury_contract:  Initial treasury reference (optional)
            gov_token_contract: Initial governance token reference (optional)
            balance_of_fn:      Callable(token_contract, identity) → int
        """
        self._config = LedgerConfig(
            admin=admin,
            max_proposals=max_proposals,
            proposal_fee=proposal_fee,
            quorum_threshold=quorum_threshold,
            treasury_contract=treasury_contract,
            gov_token_contract=gov_token_contract,
        )
        self._balance_of = balance_of_fn
        self._proposals = ProposalBook()
        self._votes = VoteBook()
        self._transfer_log: List[TransferRequest] = []

    @classmethod
    def from_config(
        cls,
        config: "LedgerSectionConfig",
        balance_of_fn: Optional[BalanceFn] = None,
    ) -> "GovernanceLedger":
        """Build a ledger from the ``[ledger]`` section of a loaded config."""
        return cls(
            config.admin,
            max_proposals=config.max_proposals,
            proposal_fee=config.proposal_fee,
            quorum_threshold=config.quorum_threshold,
            treasury_contract=config.treasury_contract or None,
            gov_token_contract=config.gov_token_contract or None,
            balance_of_fn=balance_of_fn,
        )

    # ── Guards ────────────────────────────────────────────────────────

    def _require_admin(self, ctx: CallContext):
        if ctx.caller != self._config.admin:
            raise governance_error(
                ErrorCode.NOT_AUTHORIZED,
                f"{ctx.caller} is not the ledger admin",
            )

    def _require_treasury(self) -> str:
        if not self._config.treasury_contract:
            raise governance_error(ErrorCode.TREASURY_NOT_SET)
        return self._config.treasury_contract

    def _require_gov_token(self) -> str:
        if not self._config.gov_token_contract:
            raise governance_error(ErrorCode.GOV_TOKEN_NOT_SET)
        return self._config.gov_token_contract

    def _token_balance(self, token_contract: str, identity: str) -> int:
        if self._balance_of is None:
            return 0
        return int(self._balance_of(token_contract, identity))

    def _emit(self, request: TransferRequest) -> TransferRequest:
        self._transfer_log.append(request)
        return request

    # ── Admin configuration ───────────────────────────────────────────

    @entrypoint
    def set_treasury_contract(self, ctx: CallContext, contract: str) -> Result:
        self._require_admin(ctx)
        old = self._config.treasury_contract
        self._config.treasury_contract = contract
        logger.info(f"Treasury contract changed: {old} → {contract}")
        return Result.success(True)

    @entrypoint
    def set_gov_token_contract(self, ctx: CallContext, contract: str) -> Result:
        self._require_admin(ctx)
        old = self._config.gov_token_contract
        self._config.gov_token_contract = contract
        logger.info(f"Governance token contract changed: {old} → {contract}")
        return Result.success(True)

    @entrypoint
    def set_quorum_threshold(self, ctx: CallContext, value: int) -> Result:
        self._require_admin(ctx)
        if not _valid_quorum(value):
            raise governance_error(
                ErrorCode.INVALID_QUORUM_THRESHOLD,
                f"Quorum threshold must be in ({QUORUM_THRESHOLD_MIN - 1}, "
                f"{QUORUM_THRESHOLD_MAX}], got {value}",
            )
        old = self._config.quorum_threshold
        self._config.quorum_threshold = value
        logger.info(f"Quorum threshold changed: {old}% → {value}%")
        return Result.success(True)

    # ── Proposals ─────────────────────────────────────────────────────

    @entrypoint
    def create_proposal(
        self,
        ctx: CallContext,
        title: str,
        description: str,
        amount: int,
        recipient: str,
        voting_period: int,
    ) -> Result:
        """
        Create a funding proposal whose voting window opens at the current
        height and lasts *voting_period* blocks.

        Returns the new proposal id; the Result carries the fee request.
        """
        if self._proposals.next_id >= self._config.max_proposals:
            raise governance_error(
                ErrorCode.MAX_PROPOSALS_EXCEEDED,
                f"Proposal cap of {self._config.max_proposals} reached",
            )
        check_title(title)
        check_description(description)
        check_amount(amount)
        check_recipient(recipient, ctx.caller)

        start = ctx.block_height
        end = start + voting_period
        if end <= start or end > MAX_UINT:
            raise governance_error(
                ErrorCode.INVALID_VOTING_PERIOD,
                f"Voting period {voting_period} gives an empty or out-of-range window",
            )
        if self._proposals.has_title(title):
            raise governance_error(
                ErrorCode.PROPOSAL_ALREADY_EXISTS,
                f"A proposal titled '{title}' already exists",
            )
        treasury = self._require_treasury()

        proposal_id = self._proposals.next_id
        proposal = Proposal(
            id=proposal_id,
            title=title,
            description=description,
            amount=amount,
            recipient=recipient,
            proposer=ctx.caller,
            start_height=start,
            end_height=end,
        )
        fee = TransferRequest(
            kind=TransferKind.PROPOSAL_FEE,
            amount=self._config.proposal_fee,
            sender=ctx.caller,
            recipient=treasury,
            proposal_id=proposal_id,
            block_height=ctx.block_height,
        )

        self._proposals.add(proposal)
        self._emit(fee)

        logger.info(
            f"Proposal #{proposal_id} '{title}' created by {ctx.caller} @{start} "
            f"(amount={amount}, window=[{start}, {end}), fee={fee.amount})"
        )
        return Result.success(proposal_id, transfers=(fee,))

    @entrypoint
    def vote_on_proposal(self, ctx: CallContext, proposal_id: int, choice: bool) -> Result:
        """Cast the caller's token-weighted vote for (True) or against (False)."""
        proposal = self._proposals.get_or_raise(proposal_id)
        if not proposal.is_open(ctx.block_height):
            raise governance_error(
                ErrorCode.VOTING_CLOSED,
                f"Proposal #{proposal_id} accepts votes on "
                f"[{proposal.start_height}, {proposal.end_height})",
            )
        self._votes.require_not_voted(proposal_id, ctx.caller)
        token_contract = self._require_gov_token()

        weight = self._token_balance(token_contract, ctx.caller)
        if weight <= 0:
            raise governance_error(
                ErrorCode.INSUFFICIENT_TOKENS,
                f"{ctx.caller} holds no {token_contract} tokens",
            )

        self._votes.record(VoteRecord(
            proposal_id=proposal_id,
            voter=ctx.caller,
            choice=bool(choice),
            weight=weight,
            block_height=ctx.block_height,
        ))
        proposal.add_votes(bool(choice), weight)

        logger.info(
            f"Vote: {ctx.caller} → {'YES' if choice else 'NO'} on proposal "
            f"#{proposal_id} @{ctx.block_height} (weight={weight})"
        )
        return Result.success(True)

    @entrypoint
    def execute_proposal(self, ctx: CallContext, proposal_id: int) -> Result:
        """
        Request the treasury disbursement of an approved proposal.

        Checks:
            1. Proposal exists
            2. Voting window has closed
            3. Not executed yet
            4. yes_votes > floor((yes + no) * quorum_threshold / 100)
            5. Treasury is configured
        """
        proposal = self._proposals.get_or_raise(proposal_id)
        if not proposal.is_closed(ctx.block_height):
            raise governance_error(
                ErrorCode.VOTING_CLOSED,
                f"Voting on proposal #{proposal_id} runs until height {proposal.end_height}",
            )
        if proposal.executed:
            raise governance_error(
                ErrorCode.PROPOSAL_EXECUTED,
                f"Proposal #{proposal_id} was already executed",
            )
        threshold = self._config.quorum_threshold
        if not is_approved(proposal.yes_votes, proposal.no_votes, threshold):
            raise governance_error(
                ErrorCode.PROPOSAL_NOT_APPROVED,
                f"Proposal #{proposal_id}: yes={proposal.yes_votes} of "
                f"{proposal.total_votes} does not exceed {threshold}%",
            )
        treasury = self._require_treasury()

        disbursement = TransferRequest(
            kind=TransferKind.TREASURY_DISBURSEMENT,
            amount=proposal.amount,
            sender=treasury,
            recipient=proposal.recipient,
            proposal_id=proposal_id,
            block_height=ctx.block_height,
        )
        proposal.mark_executed()
        self._emit(disbursement)

        logger.info(
            f"Proposal #{proposal_id} EXECUTED @{ctx.block_height}: "
            f"{proposal.amount} from {treasury} → {proposal.recipient}"
        )
        return Result.success(True, transfers=(disbursement,))

    # ── Queries ───────────────────────────────────────────────────────

    def get_proposal_count(self) -> Result:
        return Result.success(self._proposals.next_id)

    @property
    def next_proposal_id(self) -> int:
        return self._proposals.next_id

    def get_proposal(self, proposal_id: int) -> Optional[Proposal]:
        proposal = self._proposals.get(proposal_id)
        return replace(proposal) if proposal is not None else None

    def get_proposal_by_title(self, title: str) -> Optional[Proposal]:
        proposal_id = self._proposals.id_for_title(title)
        if proposal_id is None:
            return None
        return self.get_proposal(proposal_id)

    def get_vote(self, proposal_id: int, voter: str) -> Optional[VoteRecord]:
        return self._votes.get(proposal_id, voter)

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self._votes.has_voted(proposal_id, voter)

    def voter_count(self, proposal_id: int) -> int:
        return self._votes.voter_count(proposal_id)

    def get_tally(self, proposal_id: int) -> Optional[TallyResult]:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            return None
        return TallyResult(
            proposal_id=proposal_id,
            yes_votes=proposal.yes_votes,
            no_votes=proposal.no_votes,
            quorum_threshold=self._config.quorum_threshold,
        )

    def get_config(self) -> LedgerConfig:
        return replace(self._config)

    @property
    def admin(self) -> str:
        return self._config.admin

    @property
    def transfer_log(self) -> List[TransferRequest]:
        return list(self._transfer_log)

    def transfers_of_kind(self, kind: TransferKind) -> List[TransferRequest]:
        return [t for t in self._transfer_log if t.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self._config.to_dict(),
            **self._proposals.to_dict(),
            "votes": self._votes.to_dict(),
            "transferLog": [t.to_dict() for t in self._transfer_log],
        }

    def __repr__(self) -> str:
        return (
            f"<GovernanceLedger proposals={self._proposals.next_id} "
            f"votes={len(self._votes)} quorum={self._config.quorum_threshold}%>"
        )
