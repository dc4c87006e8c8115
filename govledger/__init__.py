"""
govledger Package

Token-weighted governance ledger: proposal creation, single-vote-per-identity
weighted voting, and quorum-gated treasury disbursement.

Core imports are lazily loaded so that importing a submodule does not pull in
the whole package. For direct module access, import from submodules:

    from govledger.governance import GovernanceLedger, CallContext
    from govledger.runtime import HostRuntime
    from govledger.exceptions import ErrorCode
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    if name in ('GovernanceLedger', 'CallContext', 'Result'):
        from . import governance
        return getattr(governance, name)
    elif name == 'HostRuntime':
        from .runtime import HostRuntime
        return HostRuntime
    elif name == 'ErrorCode':
        from .exceptions import ErrorCode
        return ErrorCode
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'govledger' has no attribute {name!r}")

__all__ = ['GovernanceLedger', 'CallContext', 'Result', 'HostRuntime', 'ErrorCode', 'load_config']
