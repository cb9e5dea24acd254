"""
Tests for the Blocklisted Import Rule.

Verifies:
1. Issues for ``import`` and absolute ``from`` declarations of listed modules.
2. No issue for unlisted modules, relative imports or non-import nodes.
3. Exemption by package name, by path marker, and fail-closed path errors.
"""

import sys

import libcst as cst
import pytest

from cstlens.analysis.context import AnalysisContext, build_context
from cstlens.analysis.symbols import PackageInfo
from cstlens.enums import Confidence, Severity
from cstlens.rules.blocklist import (
  UNSAFE_IMPORTS,
  BlocklistedImportRule,
  Exemptions,
  new_blocklisted_imports,
  new_unsafe_import_rule,
)
from cstlens.rules.engine import RuleEngine


def _check(path, rule=None):
  ctx = build_context(path)
  assert isinstance(ctx, AnalysisContext), str(ctx)
  return RuleEngine([rule or new_unsafe_import_rule("G702")]).check(ctx)


def test_import_of_nondeterministic_module(write_source):
  """
  Scenario: ``import random`` in an ordinary module.
  Expectation: One G702 issue at the import declaration.
  """
  path = write_source("app.py", "import random\n")

  issues = _check(path)

  assert len(issues) == 1
  issue = issues[0]
  assert issue.rule_id == "G702"
  assert issue.description == "Blocklisted import random"
  assert issue.severity == Severity.MEDIUM
  assert issue.confidence == Confidence.HIGH
  assert (issue.file, issue.line, issue.column) == (str(path), 1, 8)
  assert issue.code == "random"
  assert str(issue) == f"[{path}:1:8] - G702: Blocklisted import random (Confidence: HIGH, Severity: MEDIUM)"


def test_import_of_memory_unsafe_module(write_source):
  issues = _check(write_source("app.py", "import ctypes\n"))

  assert [i.description for i in issues] == ["Blocklisted import ctypes"]


def test_unlisted_module_is_clean(write_source):
  assert _check(write_source("app.py", "import json\nprint(json.dumps({}))\n")) == []


def test_from_import_reports_statement(write_source):
  path = write_source("app.py", "import json\nfrom random import choice\n")

  issues = _check(path)

  assert len(issues) == 1
  assert (issues[0].line, issues[0].column) == (2, 1)
  assert issues[0].code == "from random import choice"


def test_one_issue_per_alias(write_source):
  issues = _check(write_source("app.py", "import random, json, inspect\n"))

  assert [i.description for i in issues] == ["Blocklisted import random", "Blocklisted import inspect"]


@pytest.mark.skipif(sys.version_info < (3, 10), reason="match statements need Python 3.10+")
def test_import_reported_in_module_with_match_captures(write_source):
  """
  Scenario: A module whose function binds names through a ``match`` pattern.
  Expectation: The module still builds and its blocklisted import is reported.
  """
  code = """
    import random

    def total(p):
      match p:
        case [a, b]:
          return a + b
      return random.random()
    """
  issues = _check(write_source("widgets.py", code))

  assert [(i.description, i.line) for i in issues] == [("Blocklisted import random", 1)]


def test_relative_import_is_not_a_declaration(write_source):
  """
  Scenario: A local module called ``random`` imported relatively.
  Expectation: No issue.
  """
  write_source("pkg/random.py", "SEED = 1\n", package=True)
  path = write_source("pkg/core.py", "from . import random\nfrom .random import SEED\n")

  assert _check(path) == []


def test_package_name_exemption(write_source):
  path = write_source("simulation/engine.py", "import random\n", package=True)

  assert _check(path) == []


def test_path_marker_exemption(write_source):
  """
  Scenario: A standalone module inside a ``crypto`` directory.
  Expectation: Exempt through the path marker.
  """
  path = write_source("vendor/crypto/keys/gen.py", "import secrets\n")

  assert _check(path) == []


def test_parent_package_match():
  rule = new_blocklisted_imports("G702", {"xml": "Blocklisted import xml"})

  assert rule.lookup("xml.dom.minidom") == "Blocklisted import xml"
  assert rule.lookup("xmlrpc") is None


def test_most_specific_entry_wins():
  rule = BlocklistedImportRule("G702", {"a": "parent", "a.b": "child"})

  assert rule.lookup("a.b.c") == "child"
  assert rule.lookup("a.x") == "parent"


def test_exemptions_fail_closed_on_missing_directory(tmp_path):
  package = PackageInfo(name="app", module="app", path=str(tmp_path / "crypto" / "gone"), file="")

  assert Exemptions.default().exempts(package) is False


def test_exemptions_resolve_symlinks(tmp_path):
  target = tmp_path / "crypto" / "impl"
  target.mkdir(parents=True)
  link = tmp_path / "linked"
  link.symlink_to(target)
  package = PackageInfo(name="impl", module="impl", path=str(link), file="")

  assert Exemptions.default().exempts(package) is True


def test_custom_exemptions():
  exemptions = Exemptions(packages=frozenset({"tools"}), path_markers=frozenset())

  assert exemptions.exempts(PackageInfo(name="tools", module="tools", path="/nowhere", file="")) is True
  assert exemptions.exempts(PackageInfo(name="crypto", module="crypto", path="/nowhere", file="")) is False


def test_non_import_nodes_are_ignored(write_source):
  ctx = build_context(write_source("app.py", "random = 1\n"))
  rule = new_unsafe_import_rule("G702")

  results = [rule.match(node, ctx) for node in ctx.walk()]

  assert results == [None] * len(results)


def test_import_path_extraction(write_source):
  ctx = build_context(write_source("app.py", "import xml.dom as dom\n"))
  alias = next(n for n in ctx.walk() if isinstance(n, cst.ImportAlias))

  assert BlocklistedImportRule.import_path(alias, ctx) == "xml.dom"


def test_default_blocklist_contents():
  assert sorted(UNSAFE_IMPORTS) == ["ctypes", "gc", "inspect", "random", "secrets"]


@pytest.mark.parametrize("severity", [Severity.LOW, Severity.HIGH])
def test_rule_carries_configured_severity(write_source, severity):
  rule = BlocklistedImportRule("X1", UNSAFE_IMPORTS, severity=severity)

  issues = _check(write_source("app.py", "import inspect\n"), rule)

  assert issues[0].severity == severity
  assert issues[0].rule_id == "X1"
