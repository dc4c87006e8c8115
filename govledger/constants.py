"""
govledger Constants

This module consolidates the protocol constants of the governance ledger and
the environment configuration used throughout the codebase. Constants are
organized by category for easy reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LEDGER_DEFAULTS = {
    'GOVLEDGER_CONFIG':                'govledger.toml',
    'GOVLEDGER_ADMIN':                 'ST1TEST',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW MIRROR THE DEPLOYED GOVERNANCE CONTRACT. CHANGING THEM MAKES
# THIS MODEL DIVERGE FROM THE ON-CHAIN BEHAVIOUR IT IS MEANT TO REPRODUCE.

# ==================================================================================
# PROPOSAL LIMITS
# ==================================================================================
PROPOSAL_TITLE_MAX_LENGTH = 100
PROPOSAL_DESCRIPTION_MAX_LENGTH = 500


# ==================================================================================
# LEDGER DEFAULTS
# ==================================================================================
DEFAULT_MAX_PROPOSALS = 1000
DEFAULT_PROPOSAL_FEE = 100  # Flat fee charged per proposal creation
DEFAULT_QUORUM_THRESHOLD = 50  # Percent of votes cast

QUORUM_THRESHOLD_MIN = 1
QUORUM_THRESHOLD_MAX = 100


# ==================================================================================
# LEDGER ARITHMETIC
# ==================================================================================
# Block heights, amounts and tallies are unsigned 128-bit on the host ledger.
# A voting window whose end height would exceed this value is rejected.
MAX_UINT = 2 ** 128 - 1


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LEDGER_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        # ast.literal_eval expects "True"/"False"
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    # Parses only boolean-literals. Leaves other values untouched.
    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
