"""
govledger Exceptions

Error codes and the exception hierarchy of the governance ledger.

Every validation failure maps to exactly one ErrorCode. The numeric values
are the ones the deployed contract returns, so hosts can surface them
unchanged.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Closed set of ledger failure codes."""
    NOT_AUTHORIZED = 100
    INVALID_PROPOSAL_AMOUNT = 101
    INVALID_VOTING_PERIOD = 102
    INVALID_QUORUM_THRESHOLD = 103
    PROPOSAL_ALREADY_EXISTS = 104
    PROPOSAL_NOT_FOUND = 105
    VOTING_CLOSED = 106
    ALREADY_VOTED = 107
    INSUFFICIENT_TOKENS = 108
    PROPOSAL_EXECUTED = 109
    PROPOSAL_NOT_APPROVED = 110
    INVALID_RECIPIENT = 111
    INVALID_DESCRIPTION = 112
    INVALID_TITLE = 113
    TREASURY_NOT_SET = 114
    GOV_TOKEN_NOT_SET = 115
    MAX_PROPOSALS_EXCEEDED = 119

    @property
    def label(self) -> str:
        """CamelCase name, e.g. ``ProposalNotFound``."""
        return "".join(part.title() for part in self.name.split("_"))

    def __str__(self) -> str:
        return f"{self.label} ({self.value})"


class GovLedgerException(Exception):
    """Base exception for govledger."""
    pass


class ConfigurationError(GovLedgerException):
    """Invalid ledger or host configuration."""
    pass


class RuntimeStateError(GovLedgerException):
    """Host runtime misuse (e.g. moving the block height backwards)."""
    pass


# ══════════════════════════════════════════════════════════════════════
#  LEDGER ERRORS
# ══════════════════════════════════════════════════════════════════════

class GovernanceError(GovLedgerException):
    """
    A rejected ledger call.

    Raised by the validation steps inside GovernanceLedger and converted to
    a failed Result at the entry point; never escapes a public operation.
    """
    code: ErrorCode

    def __init__(self, code: ErrorCode, message: str = ""):
        self.code = ErrorCode(code)
        super().__init__(message or self.code.label)


class AuthorizationError(GovernanceError):
    """Caller is not allowed to perform the operation."""


class ValidationError(GovernanceError):
    """Call arguments are out of range."""


class StateConflictError(GovernanceError):
    """Call conflicts with the current ledger state."""


class PrerequisiteError(GovernanceError):
    """A required contract reference has not been configured."""


class InsufficientResourcesError(GovernanceError):
    """Caller lacks the tokens the operation needs."""


_CATEGORY = {
    ErrorCode.NOT_AUTHORIZED: AuthorizationError,
    ErrorCode.INVALID_PROPOSAL_AMOUNT: ValidationError,
    ErrorCode.INVALID_VOTING_PERIOD: ValidationError,
    ErrorCode.INVALID_QUORUM_THRESHOLD: ValidationError,
    ErrorCode.INVALID_RECIPIENT: ValidationError,
    ErrorCode.INVALID_DESCRIPTION: ValidationError,
    ErrorCode.INVALID_TITLE: ValidationError,
    ErrorCode.PROPOSAL_ALREADY_EXISTS: StateConflictError,
    ErrorCode.PROPOSAL_NOT_FOUND: StateConflictError,
    ErrorCode.VOTING_CLOSED: StateConflictError,
    ErrorCode.ALREADY_VOTED: StateConflictError,
    ErrorCode.PROPOSAL_EXECUTED: StateConflictError,
    ErrorCode.PROPOSAL_NOT_APPROVED: StateConflictError,
    ErrorCode.MAX_PROPOSALS_EXCEEDED: StateConflictError,
    ErrorCode.TREASURY_NOT_SET: PrerequisiteError,
    ErrorCode.GOV_TOKEN_NOT_SET: PrerequisiteError,
    ErrorCode.INSUFFICIENT_TOKENS: InsufficientResourcesError,
}


def governance_error(code: ErrorCode, message: str = "") -> GovernanceError:
    """Build the GovernanceError subclass matching *code*'s category."""
    return _CATEGORY[code](code, message)
