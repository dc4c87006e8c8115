"""
Host Runtime Simulator

Drives a GovernanceLedger the way a ledger host does: it tracks the block
height, attaches caller identity and height to each call, resolves
governance-token balances through a TokenRegistry, and applies the transfer
requests a successful call returns.

Transfers are applied to two logs only (proposal fees and treasury
disbursements); native-coin and treasury balances are not modelled.
"""

from typing import Any, Dict, List, Optional

from .logger import get_logger, set_log_level
from .config import GovLedgerConfig
from .exceptions import RuntimeStateError
from .governance import (
    CallContext,
    GovernanceLedger,
    Result,
    TransferKind,
    TransferRequest,
)
from .tokens import GovernanceToken, TokenRegistry

logger = get_logger(__name__)

# Ledger operations that take a CallContext
_MUTATING_OPS = frozenset({
    "set_treasury_contract",
    "set_gov_token_contract",
    "set_quorum_threshold",
    "create_proposal",
    "vote_on_proposal",
    "execute_proposal",
})


class HostRuntime:
    """
    Sequential host for a single GovernanceLedger.

    Calls are applied one at a time; the block height never moves backwards.
    """

    def __init__(
        self,
        ledger: Optional[GovernanceLedger] = None,
        *,
        admin: Optional[str] = None,
        tokens: Optional[TokenRegistry] = None,
        block_height: int = 0,
    ):
        """
        Args:
            ledger: Ledger to drive; built around *admin* when omitted
            admin: Admin identity for a fresh ledger
            tokens: Token registry used for balance lookups
            block_height: Starting height
        """
        if block_height < 0:
            raise RuntimeStateError("Block height cannot be negative")

        self.tokens = tokens or TokenRegistry()
        if ledger is None:
            if not admin:
                raise RuntimeStateError("HostRuntime needs a ledger or an admin identity")
            ledger = GovernanceLedger(admin, balance_of_fn=self.tokens.balance_of)
        self.ledger = ledger
        self._block_height = block_height
        self._fee_transfers: List[TransferRequest] = []
        self._treasury_transfers: List[TransferRequest] = []

    @classmethod
    def from_config(
        cls,
        config: GovLedgerConfig,
        tokens: Optional[TokenRegistry] = None,
    ) -> "HostRuntime":
        """Build a host and its ledger from a loaded configuration."""
        config.validate()
        set_log_level(config.logging.level)
        registry = tokens or TokenRegistry()
        ledger = GovernanceLedger.from_config(config.ledger, balance_of_fn=registry.balance_of)
        return cls(ledger, tokens=registry)

    # ── Block height ──────────────────────────────────────────────────

    @property
    def block_height(self) -> int:
        return self._block_height

    def set_block_height(self, height: int):
        if height < self._block_height:
            raise RuntimeStateError(
                f"Block height cannot move backwards ({self._block_height} → {height})"
            )
        self._block_height = height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise RuntimeStateError("Cannot advance by a negative number of blocks")
        self._block_height += blocks
        return self._block_height

    # ── Tokens ────────────────────────────────────────────────────────

    def deploy_token(
        self,
        contract: str,
        symbol: str,
        balances: Optional[Dict[str, int]] = None,
    ) -> GovernanceToken:
        return self.tokens.deploy(GovernanceToken(contract, symbol, balances))

    # ── Calls ─────────────────────────────────────────────────────────

    def context(self, caller: str) -> CallContext:
        return CallContext(caller=caller, block_height=self._block_height)

    def call(self, caller: str, op: str, *args: Any) -> Result:
        """
        Invoke ledger operation *op* as *caller* at the current height.

        Transfer requests on a successful Result are applied before returning.
        """
        if op not in _MUTATING_OPS:
            raise RuntimeStateError(f"Unknown ledger operation: {op}")
        result = getattr(self.ledger, op)(self.context(caller), *args)
        if result.ok:
            for request in result.transfers:
                self._apply(request)
        return result

    def _apply(self, request: TransferRequest):
        if request.kind == TransferKind.PROPOSAL_FEE:
            self._fee_transfers.append(request)
        else:
            self._treasury_transfers.append(request)
        logger.debug(
            f"[{request.kind.name}] {request.amount} {request.sender} → {request.recipient}"
        )

    def get_proposal_count(self) -> int:
        return self.ledger.get_proposal_count().value

    # ── Transfer logs ─────────────────────────────────────────────────

    @property
    def fee_transfers(self) -> List[Dict[str, Any]]:
        """Applied proposal fees as {amount, from, to}."""
        return [
            {"amount": t.amount, "from": t.sender, "to": t.recipient}
            for t in self._fee_transfers
        ]

    @property
    def treasury_transfers(self) -> List[Dict[str, Any]]:
        """Applied treasury disbursements as {amount, to}."""
        return [{"amount": t.amount, "to": t.recipient} for t in self._treasury_transfers]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockHeight": self._block_height,
            "ledger": self.ledger.to_dict(),
            "tokens": self.tokens.to_dict(),
            "feeTransfers": self.fee_transfers,
            "treasuryTransfers": self.treasury_transfers,
        }

    def __repr__(self) -> str:
        return f"<HostRuntime height={self._block_height} ledger={self.ledger!r}>"
