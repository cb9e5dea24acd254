"""
Comment Extraction.

Collects every ``#`` comment of a parsed module and groups adjacent comment
lines that belong to the same syntax node. A group is owned by the innermost
statement the comment is attached to (leading lines or trailing whitespace),
or by the Module itself for header and footer comments.

A comment that follows code on its line always starts a new group: code
separates it from any comment above.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Set, Tuple

import libcst as cst
from libcst.metadata import CodeRange

Positions = Mapping[cst.CSTNode, CodeRange]


@dataclass(frozen=True, eq=False)
class CommentGroup:
  """
  A run of comments on consecutive lines with the same owner.
  """

  owner: cst.CSTNode
  comments: Tuple[cst.Comment, ...]
  start_line: int
  end_line: int

  @property
  def text(self) -> str:
    """
    The comment text with ``#`` markers, the first following space and
    trailing whitespace removed. Lines are joined with newlines.
    """
    lines = []
    for comment in self.comments:
      body = comment.value[1:]
      if body.startswith(" "):
        body = body[1:]
      lines.append(body.rstrip())
    return "\n".join(lines)


@dataclass(frozen=True, eq=False)
class CommentMap:
  """
  Read-only mapping from syntax node to the comment groups it owns.
  """

  by_node: Mapping[cst.CSTNode, Tuple[CommentGroup, ...]]

  def __getitem__(self, node: cst.CSTNode) -> Tuple[CommentGroup, ...]:
    return self.by_node[node]

  def __contains__(self, node: object) -> bool:
    return node in self.by_node

  def __len__(self) -> int:
    return len(self.by_node)

  def get(self, node: cst.CSTNode) -> Tuple[CommentGroup, ...]:
    return self.by_node.get(node, ())

  def groups(self) -> List[CommentGroup]:
    """
    All comment groups in source order.
    """
    result = [group for groups in self.by_node.values() for group in groups]
    result.sort(key=lambda g: (g.start_line, g.comments[0].value))
    return result


class _CommentCollector(cst.CSTVisitor):
  """
  Records each comment together with its innermost owning statement.
  """

  def __init__(self, module: cst.Module):
    self._owners: List[cst.CSTNode] = [module]
    self.found: List[Tuple[cst.CSTNode, cst.Comment]] = []
    self.own_line: Set[cst.Comment] = set()

  def on_visit(self, node: cst.CSTNode) -> bool:
    if isinstance(node, cst.EmptyLine) and node.comment is not None:
      self.own_line.add(node.comment)
    elif isinstance(node, cst.Comment):
      self.found.append((self._owners[-1], node))
    elif isinstance(node, (cst.SimpleStatementLine, cst.BaseCompoundStatement)):
      self._owners.append(node)
    return True

  def on_leave(self, original_node: cst.CSTNode) -> None:
    if isinstance(original_node, (cst.SimpleStatementLine, cst.BaseCompoundStatement)):
      self._owners.pop()


def collect_comments(module: cst.Module, positions: Positions) -> CommentMap:
  """
  Builds the comment map of a module.

  Args:
      module: The parsed module (the tree held by the metadata wrapper).
      positions: Position table covering ``module``.

  Returns:
      CommentMap: Groups keyed by owning node.
  """
  collector = _CommentCollector(module)
  module.visit(collector)

  found = sorted(collector.found, key=lambda item: (positions[item[1]].start.line, positions[item[1]].start.column))

  by_node: Dict[cst.CSTNode, List[CommentGroup]] = {}
  current: List[cst.Comment] = []
  current_owner = None
  last_line = -1

  def flush() -> None:
    if current:
      group = CommentGroup(
        owner=current_owner,
        comments=tuple(current),
        start_line=positions[current[0]].start.line,
        end_line=positions[current[-1]].start.line,
      )
      by_node.setdefault(current_owner, []).append(group)

  for owner, comment in found:
    line = positions[comment].start.line
    follows_code = comment not in collector.own_line
    if current and (follows_code or owner is not current_owner or line != last_line + 1):
      flush()
      current = []
    current.append(comment)
    current_owner = owner
    last_line = line
  flush()

  return CommentMap(by_node=MappingProxyType({k: tuple(v) for k, v in by_node.items()}))
