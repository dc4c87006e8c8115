"""
Configuration Test Suite

Coverage:
  - TOML loading of the [ledger] and [logging] sections
  - GOVLEDGER_* environment overrides
  - Validation errors
  - Building a ledger from a loaded config
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from govledger.config import (
    GovLedgerConfig,
    LedgerSectionConfig,
    LoggingSectionConfig,
    load_config,
)
from govledger.constants import (
    ConfigBool,
    ConfigString,
    DEFAULT_MAX_PROPOSALS,
    DEFAULT_PROPOSAL_FEE,
    DEFAULT_QUORUM_THRESHOLD,
    GOVLEDGER_ADMIN,
    parse_bool,
)
from govledger.exceptions import ConfigurationError
from govledger.governance import GovernanceLedger


_ENV_VARS = (
    "GOVLEDGER_CONFIG",
    "GOVLEDGER_ADMIN",
    "GOVLEDGER_MAX_PROPOSALS",
    "GOVLEDGER_PROPOSAL_FEE",
    "GOVLEDGER_QUORUM_THRESHOLD",
    "GOVLEDGER_TREASURY_CONTRACT",
    "GOVLEDGER_GOV_TOKEN_CONTRACT",
    "GOVLEDGER_LOG_LEVEL",
)

SAMPLE_TOML = """
[ledger]
admin = "ST9ADMIN"
max_proposals = 5
proposal_fee = 40
quorum_threshold = 66
treasury_contract = "ST2TEST"
gov_token_contract = "ST3TEST"

[logging]
level = "debug"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "govledger.toml"
    path.write_text(SAMPLE_TOML)
    return path


class TestDefaults:
    """Missing file falls back to defaults."""

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = load_config(str(tmp_path / "missing.toml"))
        assert cfg.ledger.admin == str(GOVLEDGER_ADMIN)
        assert cfg.ledger.max_proposals == DEFAULT_MAX_PROPOSALS
        assert cfg.ledger.proposal_fee == DEFAULT_PROPOSAL_FEE
        assert cfg.ledger.quorum_threshold == DEFAULT_QUORUM_THRESHOLD
        assert cfg.ledger.treasury_contract == ""
        assert cfg.ledger.gov_token_contract == ""

    def test_missing_file_still_applies_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOVLEDGER_PROPOSAL_FEE", "7")
        cfg = load_config(str(tmp_path / "missing.toml"))
        assert cfg.ledger.proposal_fee == 7

    def test_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("GOVLEDGER_CONFIG", str(config_file))
        assert load_config().ledger.admin == "ST9ADMIN"


class TestTomlLoading:
    """Reading govledger.toml."""

    def test_sections(self, config_file):
        cfg = load_config(str(config_file))
        assert cfg.ledger.admin == "ST9ADMIN"
        assert cfg.ledger.max_proposals == 5
        assert cfg.ledger.proposal_fee == 40
        assert cfg.ledger.quorum_threshold == 66
        assert cfg.ledger.treasury_contract == "ST2TEST"
        assert cfg.ledger.gov_token_contract == "ST3TEST"
        assert cfg.logging.level == "DEBUG"

    def test_partial_section(self, tmp_path):
        path = tmp_path / "partial.toml"
        path.write_text('[ledger]\nquorum_threshold = 75\n')
        cfg = load_config(str(path))
        assert cfg.ledger.quorum_threshold == 75
        assert cfg.ledger.proposal_fee == DEFAULT_PROPOSAL_FEE

    def test_malformed_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[ledger\nadmin = ")
        with pytest.raises(ConfigurationError, match="Malformed"):
            load_config(str(path))

    def test_to_dict(self, config_file):
        d = load_config(str(config_file)).to_dict()
        assert d["ledger"]["quorum_threshold"] == 66
        assert d["logging"]["level"] == "DEBUG"


class TestEnvOverrides:
    """GOVLEDGER_* variables win over the file."""

    def test_override_values(self, config_file, monkeypatch):
        monkeypatch.setenv("GOVLEDGER_ADMIN", "ST8ENV")
        monkeypatch.setenv("GOVLEDGER_QUORUM_THRESHOLD", "51")
        monkeypatch.setenv("GOVLEDGER_TREASURY_CONTRACT", "ST8VAULT")
        monkeypatch.setenv("GOVLEDGER_LOG_LEVEL", "warning")
        cfg = load_config(str(config_file))
        assert cfg.ledger.admin == "ST8ENV"
        assert cfg.ledger.quorum_threshold == 51
        assert cfg.ledger.treasury_contract == "ST8VAULT"
        assert cfg.ledger.gov_token_contract == "ST3TEST"
        assert cfg.logging.level == "WARNING"

    def test_non_integer_env(self, config_file, monkeypatch):
        monkeypatch.setenv("GOVLEDGER_MAX_PROPOSALS", "lots")
        with pytest.raises(ConfigurationError, match="GOVLEDGER_MAX_PROPOSALS"):
            load_config(str(config_file))

    def test_out_of_range_env_rejected(self, config_file, monkeypatch):
        monkeypatch.setenv("GOVLEDGER_QUORUM_THRESHOLD", "101")
        with pytest.raises(ConfigurationError, match="quorum_threshold"):
            load_config(str(config_file))


class TestValidation:
    """Section validation."""

    def test_valid(self):
        assert GovLedgerConfig().validate() is True

    def test_empty_admin(self):
        with pytest.raises(ConfigurationError, match="admin"):
            LedgerSectionConfig(admin="").validate()

    @pytest.mark.parametrize("field_name", ["max_proposals", "proposal_fee"])
    def test_negative_values(self, field_name):
        section = LedgerSectionConfig(**{field_name: -1})
        with pytest.raises(ConfigurationError, match=field_name):
            section.validate()

    @pytest.mark.parametrize("value", [0, 101])
    def test_quorum_range(self, value):
        with pytest.raises(ConfigurationError):
            LedgerSectionConfig(quorum_threshold=value).validate()

    @pytest.mark.parametrize(
        "line,field_name",
        [
            ('quorum_threshold = "50"', "quorum_threshold"),
            ("max_proposals = 10.5", "max_proposals"),
            ("proposal_fee = true", "proposal_fee"),
        ],
    )
    def test_non_integer_toml_values(self, tmp_path, line, field_name):
        path = tmp_path / "typed.toml"
        path.write_text(f"[ledger]\n{line}\n")
        with pytest.raises(ConfigurationError, match=f"ledger.{field_name} must be an integer"):
            load_config(str(path))

    def test_non_string_contract(self, tmp_path):
        path = tmp_path / "typed.toml"
        path.write_text("[ledger]\ntreasury_contract = 42\n")
        with pytest.raises(ConfigurationError, match="ledger.treasury_contract must be a string"):
            load_config(str(path))

    def test_log_level(self):
        with pytest.raises(ConfigurationError, match="logging.level"):
            LoggingSectionConfig(level="LOUD").validate()


class TestLedgerFromConfig:
    """GovernanceLedger.from_config."""

    def test_from_config(self, config_file):
        cfg = load_config(str(config_file))
        ledger = GovernanceLedger.from_config(cfg.ledger)
        lc = ledger.get_config()
        assert lc.admin == "ST9ADMIN"
        assert lc.max_proposals == 5
        assert lc.proposal_fee == 40
        assert lc.quorum_threshold == 66
        assert lc.treasury_contract == "ST2TEST"
        assert lc.gov_token_contract == "ST3TEST"

    def test_blank_contracts_become_unset(self):
        ledger = GovernanceLedger.from_config(LedgerSectionConfig(admin="ST9ADMIN"))
        assert ledger.get_config().treasury_contract is None
        assert ledger.get_config().gov_token_contract is None


class TestConstantsWrappers:
    """.env value wrappers."""

    def test_parse_bool(self):
        assert parse_bool(" true ") is True
        assert parse_bool("FALSE") is False
        assert parse_bool("INFO") == "INFO"
        assert parse_bool("") == ""

    def test_config_string_default(self):
        s = ConfigString("DEBUG", "INFO")
        assert s == "DEBUG"
        assert s.default() == "INFO"

    def test_config_bool(self):
        b = ConfigBool(False, True)
        assert not b
        assert b == False  # noqa: E712
        assert b.default() is True
        assert str(b) == "False"
