"""
Tests for the Inspection Views.

Verifies the exact line formats of the seven views and that repeated runs on
the same input produce identical output.
"""

import pytest

from cstlens.analysis.context import AnalysisContext, build_context
from cstlens.views.package import dump_comments, dump_imports
from cstlens.views.symbols import dump_callobj, dump_defs, dump_types, dump_uses, object_block
from cstlens.views.syntax import dump_ast


@pytest.fixture
def simple_ctx(write_source):
  ctx = build_context(write_source("m.py", "x = 1\ny = x\n"))
  assert isinstance(ctx, AnalysisContext), str(ctx)
  return ctx


def test_dump_uses(simple_ctx):
  assert dump_uses(simple_ctx) == ["IDENT: x (2:5), OBJECT: var m.x int"]


def test_dump_defs_sorted_by_identifier(simple_ctx):
  assert dump_defs(simple_ctx) == [
    "IDENT: x (1:1), OBJECT: var m.x int",
    "IDENT: y (2:1), OBJECT: var m.y int",
  ]


def test_dump_types(simple_ctx):
  assert dump_types(simple_ctx) == [
    "EXPR: 1 (1:5), TYPE: int = 1",
    "EXPR: x (2:5), TYPE: int",
  ]


def test_dump_callobj_walk_order(simple_ctx):
  """
  Scenario: ``x`` defined, ``y`` defined from ``x``.
  Expectation: OBJECT blocks for x (def), y (def), x (use), in tree order.
  """
  out = dump_callobj(simple_ctx)

  assert out[:7] == [
    "OBJECT",
    '   Package = package m ("m")',
    "   Path = m",
    "   Name = x",
    "   Kind = var",
    "   Type = int",
    "   Id = m:x",
  ]
  assert [line for line in out if line.startswith("   Name =")] == [
    "   Name = x",
    "   Name = y",
    "   Name = x",
  ]


def test_dump_callobj_includes_attribute_members(write_source):
  code = """
    class Point:
      def __init__(self):
        self.x = 0


    p = Point()
    v = p.x
    """
  ctx = build_context(write_source("geo.py", code))

  out = dump_callobj(ctx)

  # self.x (def) and p.x (use) both print the field
  assert out.count("   Id = geo:Point.x") == 2
  assert "   Kind = field" in out


def test_object_block_for_dotted_package(write_source):
  write_source("app/__init__.py", "")
  ctx = build_context(write_source("app/core.py", "flag = True\n"))

  symbol = next(iter(ctx.info.defs.values()))

  assert object_block(symbol)[1:3] == ['   Package = package core ("app.core")', "   Path = app.core"]


def test_dump_ast(simple_ctx):
  out = dump_ast(simple_ctx)

  assert out[0].startswith("Module")
  assert "        target: Name (1:1) value='x'" in out
  assert "      value: Integer (1:5) value='1'" in out
  assert not any("Whitespace" in line or "Newline" in line for line in out)


def test_dump_comments(write_source):
  code = """
    # first
    # second
    x = 1  # after

    # last
    """
  ctx = build_context(write_source("notes.py", code))

  assert dump_comments(ctx) == ["first", "second", "", "after", "", "last", ""]


def test_dump_imports(write_source):
  write_source("helpers.py", "def add(a, b):\n  return a + b\n\nLIMIT = 3\n_secret = 1\n")
  ctx = build_context(write_source("main.py", "import helpers\nfrom helpers import add\n"))

  assert dump_imports(ctx) == ["helpers helpers", "  =>  LIMIT", "  =>  add"]


def test_sorting_ties_broken_by_position(write_source):
  ctx = build_context(write_source("ties.py", "a = 1\nb = a + a\n"))

  out = dump_uses(ctx)

  assert out == [
    "IDENT: a (2:5), OBJECT: var ties.a int",
    "IDENT: a (2:9), OBJECT: var ties.a int",
  ]


@pytest.mark.parametrize("view", [dump_ast, dump_callobj, dump_uses, dump_defs, dump_types, dump_comments, dump_imports])
def test_views_are_idempotent(write_source, view):
  """
  Scenario: Two contexts built independently from the same file.
  Expectation: Identical view output.
  """
  code = """
    import json

    # config
    settings = {"debug": True}
    names = [k for k in settings]
    payload = json.dumps(settings)
    """
  path = write_source("idem.py", code)

  assert view(build_context(path)) == view(build_context(path))
