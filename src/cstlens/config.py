"""
Runtime Configuration Store.

Settings are read from the ``[tool.cstlens]`` table of the nearest
``pyproject.toml`` and overridden by command-line values.

Example:

.. code-block:: toml

    [tool.cstlens]
    tools = ["uses", "types"]
    rule_id = "G702"
    severity = "HIGH"
    exempt_packages = ["fixtures"]

    [tool.cstlens.blocklist]
    "pickle" = "Blocklisted import pickle"
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from cstlens.enums import Confidence, Severity
from cstlens.rules.blocklist import (
  DEFAULT_EXEMPT_PACKAGES,
  DEFAULT_PATH_MARKERS,
  UNSAFE_IMPORTS,
  Exemptions,
)
from cstlens.views.registry import DEFAULT_VIEWS

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the inspection views and the policy rule.
  """

  tools: List[str] = Field(default_factory=list, description="Views run by 'inspect' when no --tool is given.")
  rule_id: str = Field("G702", description="Identifier reported on blocklisted-import issues.")
  severity: Severity = Field(Severity.MEDIUM, description="Severity of blocklisted-import issues.")
  confidence: Confidence = Field(Confidence.HIGH, description="Confidence of blocklisted-import issues.")
  blocklist: Dict[str, str] = Field(
    default_factory=dict, description="Extra module path -> description entries, merged over the defaults."
  )
  exempt_packages: List[str] = Field(
    default_factory=lambda: sorted(DEFAULT_EXEMPT_PACKAGES),
    description="Package names allowed to import blocklisted modules.",
  )
  exempt_path_markers: List[str] = Field(
    default_factory=lambda: sorted(DEFAULT_PATH_MARKERS),
    description="Directory names exempting every package beneath them.",
  )

  @field_validator("tools")
  @classmethod
  def validate_tools(cls, v: List[str]) -> List[str]:
    """
    Ensures every selected view is registered.

    Raises:
        ValueError: If a name is unknown.
    """
    valid = sorted(DEFAULT_VIEWS)
    for name in v:
      if name not in DEFAULT_VIEWS:
        raise ValueError(f"unknown command '{name}', valid tools are: {', '.join(valid)}")
    return v

  @field_validator("severity", "confidence", mode="before")
  @classmethod
  def normalize_level(cls, v: Any) -> Any:
    if isinstance(v, str):
      return v.strip().upper()
    return v

  def to_exemptions(self) -> Exemptions:
    return Exemptions(packages=frozenset(self.exempt_packages), path_markers=frozenset(self.exempt_path_markers))

  def effective_blocklist(self) -> Dict[str, str]:
    """
    Returns the default blocklist with the configured entries merged over it.
    """
    return {**UNSAFE_IMPORTS, **self.blocklist}

  @classmethod
  def load(
    cls,
    tools: Optional[List[str]] = None,
    rule_id: Optional[str] = None,
    severity: Optional[str] = None,
    confidence: Optional[str] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        tools (Optional[List[str]]): Override for the view selection.
        rule_id (Optional[str]): Override for the rule identifier.
        severity (Optional[str]): Override for the issue severity.
        confidence (Optional[str]): Override for the issue confidence.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.

    Raises:
        pydantic.ValidationError: If a value is invalid.
    """
    toml_config, _ = _load_toml_settings(search_path or Path.cwd())

    values: Dict[str, Any] = {
      key: toml_config[key]
      for key in ("tools", "rule_id", "severity", "confidence", "blocklist", "exempt_packages", "exempt_path_markers")
      if key in toml_config
    }
    if tools:
      values["tools"] = tools
    if rule_id:
      values["rule_id"] = rule_id
    if severity:
      values["severity"] = severity
    if confidence:
      values["confidence"] = confidence

    return cls(**values)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The ``[tool.cstlens]`` table and the
      directory it was found in. Empty when absent or unreadable.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      section = data.get("tool", {}).get("cstlens", {})
      return (section if isinstance(section, dict) else {}), parent

  return {}, None
