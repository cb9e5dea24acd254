"""
Rule Engine.

Walks each Analysis Context once in source order and hands every node to the
rules that registered for its type. Rules are independent; every match is
reported, so two rules (or one rule on two nodes of the same statement) may
report the same line.
"""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence, Type, Union

import libcst as cst

from cstlens.analysis.context import AnalysisContext, ContextFailure, build_context
from cstlens.rules.base import Issue, Rule
from cstlens.views.registry import should_skip

Builder = Callable[[str], Union[AnalysisContext, ContextFailure]]


class RuleEngine:
  """
  Dispatches syntax nodes to policy rules.

  Attributes:
      rules (List[Rule]): Registered rules, in registration order.
  """

  def __init__(self, rules: Sequence[Rule]):
    self.rules: List[Rule] = list(rules)
    self._dispatch: Dict[Type[cst.CSTNode], List[Rule]] = {}

  def _rules_for(self, node_type: Type[cst.CSTNode]) -> List[Rule]:
    cached = self._dispatch.get(node_type)
    if cached is None:
      cached = [rule for rule in self.rules if issubclass(node_type, rule.node_types)]
      self._dispatch[node_type] = cached
    return cached

  def check(self, ctx: AnalysisContext) -> List[Issue]:
    """
    Runs every rule over one file.

    Args:
        ctx: The Analysis Context of the file.

    Returns:
        List[Issue]: Findings in source order.
    """
    issues: List[Issue] = []
    for node in ctx.walk():
      for rule in self._rules_for(type(node)):
        issue = rule.match(node, ctx)
        if issue is not None:
          issues.append(issue)
    return issues

  def scan(self, paths: Iterable[Union[str, Path]], builder: Builder = build_context) -> List[Issue]:
    """
    Runs every rule over a batch of files.

    Missing paths and directories are skipped with a warning. Files whose
    context fails to build are reported by the builder and skipped.

    Args:
        paths: Input files, processed in order.
        builder: Analysis Context factory.

    Returns:
        List[Issue]: Findings ordered by file, then source position.
    """
    issues: List[Issue] = []
    for path in paths:
      if should_skip(path):
        continue
      ctx = builder(str(path))
      if isinstance(ctx, ContextFailure):
        continue
      issues.extend(self.check(ctx))
    return issues
