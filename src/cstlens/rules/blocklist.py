"""
Blocklisted Import Rule.

Flags imports of modules that ordinary application packages must not use:
modules that escape memory safety, reflect on private members, touch
interpreter internals or introduce nondeterminism.

Packages that legitimately need such modules (cryptography, simulation and
test utilities, code generators) are exempt, either by package name or because
their directory lies under a path segment such as ``crypto``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional

import libcst as cst

from cstlens.analysis.context import AnalysisContext
from cstlens.analysis.symbols import PackageInfo
from cstlens.enums import Confidence, Severity
from cstlens.rules.base import Issue, Rule
from cstlens.utils.node_source import get_full_name, normalize_import_path

DEFAULT_EXEMPT_PACKAGES: FrozenSet[str] = frozenset(
  # These packages rely on ctypes, random or secrets for their core
  # functionality, e.g. randomising data in simulations.
  {"codegen", "crypto", "secp256k1", "simapp", "simulation", "testutil"}
)
DEFAULT_PATH_MARKERS: FrozenSet[str] = frozenset({"crypto"})

UNSAFE_IMPORTS: Dict[str, str] = {
  # raw pointers and foreign memory
  "ctypes": "Blocklisted import ctypes",
  # reads private attributes and frames of other modules
  "inspect": "Blocklisted import inspect",
  # exposes every live object of the interpreter
  "gc": "Blocklisted import gc",
  # nondeterministic
  "random": "Blocklisted import random",
  "secrets": "Blocklisted import secrets",
}


@dataclass(frozen=True)
class Exemptions:
  """
  Packages allowed to import blocklisted modules.

  Attributes:
      packages: Exempt package names.
      path_markers: Directory names that exempt every package beneath them.
  """

  packages: FrozenSet[str] = DEFAULT_EXEMPT_PACKAGES
  path_markers: FrozenSet[str] = DEFAULT_PATH_MARKERS

  @classmethod
  def default(cls) -> "Exemptions":
    return cls()

  def exempts(self, package: PackageInfo) -> bool:
    """
    Decides whether a package may import blocklisted modules.

    The package name is checked first. Otherwise the package directory is
    resolved to an absolute path and each of its segments compared with the
    path markers. A directory that cannot be resolved exempts nothing.

    Args:
        package: The analysed file's package.

    Returns:
        bool: True if the package is exempt.
    """
    if package.name in self.packages:
      return True
    try:
      resolved = Path(package.path).resolve(strict=True)
    except (OSError, RuntimeError):
      return False
    return any(part in self.path_markers for part in resolved.parts)


class BlocklistedImportRule(Rule):
  """
  Reports imports whose module path is blocklisted.

  Import declarations are the aliases of ``import a, b`` statements and
  absolute ``from a import b`` statements. A path matches when it, or one of
  its parent packages, is blocklisted; the most specific entry wins.
  """

  node_types = (cst.ImportAlias, cst.ImportFrom)

  def __init__(
    self,
    rule_id: str,
    blocklist: Mapping[str, str],
    severity: Severity = Severity.MEDIUM,
    confidence: Confidence = Confidence.HIGH,
    exemptions: Optional[Exemptions] = None,
  ):
    """
    Initializes the rule.

    Args:
        rule_id: Identifier reported on every Issue.
        blocklist: Module path -> finding description.
        severity: Severity of every Issue.
        confidence: Confidence of every Issue.
        exemptions: Exempt packages. Defaults to :meth:`Exemptions.default`.
    """
    self.id = rule_id
    self.blocklist: Dict[str, str] = dict(blocklist)
    self.severity = severity
    self.confidence = confidence
    self.exemptions = exemptions if exemptions is not None else Exemptions.default()

  @staticmethod
  def import_path(node: cst.CSTNode, ctx: AnalysisContext) -> Optional[str]:
    """
    Extracts the imported module path of an import declaration.

    Returns:
        The normalised dotted path, or None if ``node`` is not an import
        declaration (including aliases of ``from`` statements and relative
        imports).
    """
    if isinstance(node, cst.ImportAlias):
      if not isinstance(ctx.parents.get(node), cst.Import):
        return None
      return normalize_import_path(get_full_name(node.name))
    if isinstance(node, cst.ImportFrom):
      if node.relative or node.module is None:
        return None
      return normalize_import_path(get_full_name(node.module))
    return None

  def lookup(self, path: str) -> Optional[str]:
    """
    Finds the blocklist entry covering ``path``, most specific first.

    Example:
        ``ctypes.util`` matches ``ctypes.util`` if listed, else ``ctypes``.
    """
    parts = path.split(".")
    for end in range(len(parts), 0, -1):
      description = self.blocklist.get(".".join(parts[:end]))
      if description is not None:
        return description
    return None

  def match(self, node: cst.CSTNode, ctx: AnalysisContext) -> Optional[Issue]:
    path = self.import_path(node, ctx)
    if not path or self.exemptions.exempts(ctx.package):
      return None
    description = self.lookup(path)
    if description is None:
      return None
    return Issue.from_node(ctx, node, self.id, description, self.severity, self.confidence)


def new_blocklisted_imports(rule_id: str, blocklist: Mapping[str, str], config=None) -> BlocklistedImportRule:
  """
  Creates a blocklisted-import rule.

  Args:
      rule_id: Rule identifier.
      blocklist: Module path -> description.
      config (RuntimeConfig, optional): Supplies severity, confidence and
          exemptions. Defaults apply when omitted.

  Returns:
      BlocklistedImportRule: The configured rule.
  """
  if config is None:
    return BlocklistedImportRule(rule_id, blocklist)
  return BlocklistedImportRule(
    rule_id,
    blocklist,
    severity=config.severity,
    confidence=config.confidence,
    exemptions=config.to_exemptions(),
  )


def new_unsafe_import_rule(rule_id: str, config=None) -> BlocklistedImportRule:
  """
  Creates the rule flagging ``ctypes``, ``inspect``, ``gc``, ``random`` and
  ``secrets`` (plus any entries added by ``config``).

  Args:
      rule_id: Rule identifier.
      config (RuntimeConfig, optional): Runtime configuration.

  Returns:
      BlocklistedImportRule: The configured rule.
  """
  blocklist = config.effective_blocklist() if config is not None else UNSAFE_IMPORTS
  return new_blocklisted_imports(rule_id, blocklist, config)
