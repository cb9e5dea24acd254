"""
Tests for Runtime Configuration loading.
"""

import pytest
from pydantic import ValidationError

from cstlens.config import RuntimeConfig, _load_toml_settings
from cstlens.enums import Severity
from cstlens.rules.blocklist import DEFAULT_EXEMPT_PACKAGES, UNSAFE_IMPORTS


def test_defaults(tmp_path):
  config = RuntimeConfig.load(search_path=tmp_path)

  assert config.tools == []
  assert config.rule_id == "G702"
  assert config.severity == Severity.MEDIUM
  assert config.effective_blocklist() == UNSAFE_IMPORTS
  assert config.to_exemptions().packages == DEFAULT_EXEMPT_PACKAGES


def test_toml_settings_found_in_parent(tmp_path):
  """
  Scenario: pyproject.toml with a [tool.cstlens] table two levels up.
  Expectation: Values applied; nested start directory is searched upwards.
  """
  (tmp_path / "pyproject.toml").write_text(
    """
[tool.cstlens]
tools = ["uses", "types"]
rule_id = "X9"
severity = "high"
exempt_packages = ["fixtures"]

[tool.cstlens.blocklist]
pickle = "Blocklisted import pickle"
""",
    encoding="utf-8",
  )
  nested = tmp_path / "src" / "app"
  nested.mkdir(parents=True)

  config = RuntimeConfig.load(search_path=nested)

  assert config.tools == ["uses", "types"]
  assert config.rule_id == "X9"
  assert config.severity == Severity.HIGH
  assert config.effective_blocklist()["pickle"] == "Blocklisted import pickle"
  assert "random" in config.effective_blocklist()
  assert config.to_exemptions().packages == frozenset({"fixtures"})


def test_cli_values_override_toml(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.cstlens]\nrule_id = "X9"\ntools = ["ast"]\n', encoding="utf-8")

  config = RuntimeConfig.load(tools=["defs"], rule_id="G702", search_path=tmp_path)

  assert config.tools == ["defs"]
  assert config.rule_id == "G702"


def test_unknown_tool_rejected():
  with pytest.raises(ValidationError, match="valid tools are"):
    RuntimeConfig(tools=["ast", "bogus"])


def test_invalid_toml_yields_defaults(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.cstlens\nbroken", encoding="utf-8")

  settings, found = _load_toml_settings(tmp_path)

  assert settings == {}
  assert found is None
  assert RuntimeConfig.load(search_path=tmp_path).rule_id == "G702"


def test_pyproject_without_section(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")

  settings, found = _load_toml_settings(tmp_path)

  assert settings == {}
  assert found == tmp_path.resolve()
