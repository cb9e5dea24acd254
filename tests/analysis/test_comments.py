"""
Tests for Comment Grouping.
"""

import libcst as cst
from libcst.metadata import MetadataWrapper, PositionProvider

from cstlens.analysis.comments import collect_comments


def _collect(code: str):
  wrapper = MetadataWrapper(cst.parse_module(code))
  return wrapper.module, collect_comments(wrapper.module, wrapper.resolve(PositionProvider))


CODE = """# header one
# header two

x = 1  # trailing


def f():
  # inside
  return x
"""


def test_groups_in_source_order():
  """
  Scenario: Header block, trailing comment and a comment inside a function.
  Expectation: Three groups, adjacent header lines merged.
  """
  _, comments = _collect(CODE)

  texts = [group.text for group in comments.groups()]

  assert texts == ["header one\nheader two", "trailing", "inside"]


def test_group_line_span():
  _, comments = _collect(CODE)

  first = comments.groups()[0]

  assert (first.start_line, first.end_line) == (1, 2)


def test_inner_comment_owned_by_statement():
  module, comments = _collect(CODE)

  inside = comments.groups()[-1]

  assert isinstance(inside.owner, cst.SimpleStatementLine)
  assert inside.owner in comments
  assert comments[inside.owner] == (inside,)


def test_non_adjacent_lines_split():
  _, comments = _collect("# a\n\n# b\nx = 1\n")

  assert [g.text for g in comments.groups()] == ["a", "b"]


def test_no_comments():
  _, comments = _collect("x = 1\n")

  assert len(comments) == 0
  assert comments.groups() == []
  assert comments.get(object()) == ()
