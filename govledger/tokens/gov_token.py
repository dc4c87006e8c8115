"""
Governance Token

An in-memory fungible token standing in for the governance-token contract a
ledger host resolves balances from:
  - balanceOf / transfer / mint / burn with integer amounts
  - Transfer and mint events
  - TokenRegistry mapping contract references to deployed tokens
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import GovLedgerException
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TokenError(GovLedgerException):
    """Base exception for governance token operations."""


class InsufficientBalanceError(TokenError):
    """Raised when sender balance is too low."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TokenTransferEvent:
    """Emitted on every successful transfer, mint or burn."""
    token_symbol: str
    sender: Optional[str]      # None for mint
    recipient: Optional[str]   # None for burn
    amount: int
    timestamp: float = field(default_factory=time.time)

    @property
    def kind(self) -> str:
        if self.sender is None:
            return "Mint"
        if self.recipient is None:
            return "Burn"
        return "Transfer"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.kind,
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  GOVERNANCE TOKEN
# ══════════════════════════════════════════════════════════════════════

class GovernanceToken:
    """
    Fungible token whose balances weight governance votes.

    Mirrors the read/write surface the ledger host needs:
        - balance_of(identity) → int
        - transfer(sender, recipient, amount)
        - mint(recipient, amount) / burn(holder, amount)
    """

    def __init__(
        self,
        contract: str,
        symbol: str,
        initial_balances: Optional[Dict[str, int]] = None,
    ):
        """
        Args:
            contract: Contract reference the ledger is configured with
            symbol: Short ticker
            initial_balances: identity → starting balance
        """
        if not contract:
            raise TokenError("Token contract reference cannot be empty")
        if not symbol:
            raise TokenError("Token symbol cannot be empty")

        self.contract = contract
        self.symbol = symbol
        self._balances: Dict[str, int] = {}
        self._events: List[TokenTransferEvent] = []

        for holder, amount in (initial_balances or {}).items():
            self.mint(holder, amount)

        logger.info(f"Governance token deployed: {symbol} at {contract}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    @property
    def holders(self) -> int:
        return sum(1 for b in self._balances.values() if b > 0)

    @property
    def events(self) -> List[TokenTransferEvent]:
        return list(self._events)

    # ── Supply ────────────────────────────────────────────────────────

    def mint(self, recipient: str, amount: int) -> TokenTransferEvent:
        if amount <= 0:
            raise TokenError("Mint amount must be positive")
        self._balances[recipient] = self.balance_of(recipient) + amount
        event = TokenTransferEvent(self.symbol, None, recipient, amount)
        self._events.append(event)
        logger.debug(f"Mint: {amount} {self.symbol} → {recipient}")
        return event

    def burn(self, holder: str, amount: int) -> TokenTransferEvent:
        if amount <= 0:
            raise TokenError("Burn amount must be positive")
        bal = self.balance_of(holder)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{holder} balance {bal} < burn amount {amount}"
            )
        self._balances[holder] = bal - amount
        event = TokenTransferEvent(self.symbol, holder, None, amount)
        self._events.append(event)
        logger.debug(f"Burn: {holder} {amount} {self.symbol}")
        return event

    # ── Transfers ─────────────────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> TokenTransferEvent:
        if amount <= 0:
            raise TokenError("Transfer amount must be positive")
        if sender == recipient:
            raise TokenError("Cannot transfer to self")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = TokenTransferEvent(self.symbol, sender, recipient, amount)
        self._events.append(event)
        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.symbol}")
        return event

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract": self.contract,
            "symbol": self.symbol,
            "totalSupply": self.total_supply,
            "holders": self.holders,
            "eventCount": len(self._events),
        }

    def __repr__(self) -> str:
        return f"<GovernanceToken {self.symbol} at {self.contract} supply={self.total_supply}>"


# ══════════════════════════════════════════════════════════════════════
#  TOKEN REGISTRY
# ══════════════════════════════════════════════════════════════════════

class TokenRegistry:
    """Deployed tokens keyed by contract reference."""

    def __init__(self):
        self._tokens: Dict[str, GovernanceToken] = {}

    def deploy(self, token: GovernanceToken) -> GovernanceToken:
        """
        Register a token under its contract reference.

        Raises TokenError if the reference is already taken.
        """
        if token.contract in self._tokens:
            raise TokenError(f"Contract {token.contract} already registered")
        self._tokens[token.contract] = token
        logger.info(f"Token registered: {token.symbol} at {token.contract}")
        return token

    def get(self, contract: str) -> Optional[GovernanceToken]:
        return self._tokens.get(contract)

    def get_or_raise(self, contract: str) -> GovernanceToken:
        token = self.get(contract)
        if token is None:
            raise TokenError(f"No token deployed at {contract}")
        return token

    def balance_of(self, contract: str, identity: str) -> int:
        """Balance lookup by contract reference; unknown contracts hold nothing."""
        token = self.get(contract)
        if token is None:
            return 0
        return token.balance_of(identity)

    def list_contracts(self) -> List[str]:
        return list(self._tokens.keys())

    @property
    def count(self) -> int:
        return len(self._tokens)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenCount": len(self._tokens),
            "tokens": {c: t.to_dict() for c, t in self._tokens.items()},
        }

    def __repr__(self) -> str:
        return f"<TokenRegistry tokens={len(self._tokens)}>"
