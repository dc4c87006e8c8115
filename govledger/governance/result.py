"""
Call context and call results.

The host passes a CallContext into every ledger entry point and receives a
Result back: either a typed success value (plus any transfer requests the
call emitted) or exactly one ErrorCode.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..exceptions import ErrorCode, governance_error
from .transfers import TransferRequest


@dataclass(frozen=True)
class CallContext:
    """Identity and block height the host attaches to a call."""
    caller: str
    block_height: int

    def __post_init__(self):
        if not self.caller:
            raise ValueError("CallContext requires a caller identity")
        if self.block_height < 0:
            raise ValueError(f"Block height cannot be negative: {self.block_height}")


@dataclass(frozen=True)
class Result:
    """Discriminated success/failure outcome of a ledger call."""
    value: Any = None
    error: Optional[ErrorCode] = None
    transfers: Tuple[TransferRequest, ...] = ()

    @classmethod
    def success(cls, value: Any, transfers: Tuple[TransferRequest, ...] = ()) -> "Result":
        return cls(value=value, transfers=tuple(transfers))

    @classmethod
    def failure(cls, code: ErrorCode) -> "Result":
        return cls(error=ErrorCode(code))

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the success value or raise the matching GovernanceError."""
        if self.error is not None:
            raise governance_error(self.error)
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {
                "ok": True,
                "value": self.value,
                "transfers": [t.to_dict() for t in self.transfers],
            }
        return {"ok": False, "value": int(self.error), "error": self.error.label}

    def __repr__(self) -> str:
        if self.ok:
            return f"<Result ok value={self.value!r}>"
        return f"<Result err {self.error}>"
