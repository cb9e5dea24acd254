"""
Policy Rule Interface and Findings.

A rule declares the syntax node types it wants to inspect and returns an
:class:`Issue` for each offending node. Issues are pydantic models so that the
CLI can serialise them as JSON for a static-analysis pipeline.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple, Type

import libcst as cst
from pydantic import BaseModel, ConfigDict, Field

from cstlens.analysis.context import AnalysisContext
from cstlens.enums import Confidence, Severity


class Issue(BaseModel):
  """
  A structured finding emitted by a policy rule.
  """

  model_config = ConfigDict(frozen=True)

  rule_id: str = Field(..., description="Identifier of the rule that fired (e.g. 'G702').")
  severity: Severity
  confidence: Confidence
  description: str
  file: str = Field(..., description="Path of the analysed file.")
  line: int = Field(..., description="1-based line of the offending node.")
  column: int = Field(..., description="1-based column of the offending node.")
  code: str = Field("", description="Source text of the offending node.")

  @classmethod
  def from_node(
    cls,
    ctx: AnalysisContext,
    node: cst.CSTNode,
    rule_id: str,
    description: str,
    severity: Severity,
    confidence: Confidence,
  ) -> "Issue":
    """
    Creates an Issue located at ``node``.

    Args:
        ctx: The Analysis Context holding the node.
        node: The offending node.
        rule_id: Rule identifier.
        description: Finding text.
        severity: Impact level.
        confidence: Certainty level.

    Returns:
        Issue: The finding.
    """
    position = ctx.position_of(node)
    line = position.start.line if position is not None else 0
    column = position.start.column + 1 if position is not None else 0
    return cls(
      rule_id=rule_id,
      severity=severity,
      confidence=confidence,
      description=description,
      file=ctx.path,
      line=line,
      column=column,
      code=ctx.code_for(node),
    )

  def __str__(self) -> str:
    return (
      f"[{self.file}:{self.line}:{self.column}] - {self.rule_id}: {self.description} "
      f"(Confidence: {self.confidence.value}, Severity: {self.severity.value})"
    )


class Rule(ABC):
  """
  Abstract base class for policy rules.

  Attributes:
      id (str): Rule identifier reported on every Issue.
      node_types (Tuple[Type[cst.CSTNode], ...]): Node types dispatched to
          :meth:`match`.
  """

  id: str
  node_types: Tuple[Type[cst.CSTNode], ...] = ()

  @abstractmethod
  def match(self, node: cst.CSTNode, ctx: AnalysisContext) -> Optional[Issue]:
    """
    Inspects one node.

    Args:
        node: A node whose type is one of ``node_types`` (others must be
            ignored).
        ctx: The Analysis Context of the file.

    Returns:
        An Issue if the node violates the rule, else None.
    """
