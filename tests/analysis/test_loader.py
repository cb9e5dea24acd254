"""
Tests for the static Import Loader.
"""

import pytest

from cstlens.analysis.loader import ImportLoader, builtin_symbol
from cstlens.enums import SymbolKind
from cstlens.errors import ImportResolutionError, ResolutionError

HELPERS = """
__all__ = ["Box", "VALUE", "add"]

VALUE: str = "x"
_hidden = 1


class Box:
  pass


def add(a: int, b: int) -> int:
  return a + b
"""


@pytest.fixture
def loader(write_source, tmp_path):
  write_source("helpers.py", HELPERS)
  write_source("plain.py", "PUBLIC = 1\n_private = 2\n")
  return ImportLoader(tmp_path)


def test_load_local_module(loader):
  imported = loader.load("helpers")

  assert imported.path == "helpers"
  assert imported.name == "helpers"
  assert imported.exported == ("Box", "VALUE", "add")
  assert imported.file.endswith("helpers.py")


def test_exported_names_without_all(loader):
  assert loader.exported_names("plain") == ("PUBLIC",)


def test_load_stdlib_module(loader):
  imported = loader.load("json")

  assert imported.name == "json"
  assert "dumps" in imported.exported


def test_missing_module_raises(loader):
  """
  Scenario: Module that exists nowhere on the search path.
  Expectation: ImportResolutionError (a ResolutionError) naming the module.
  """
  with pytest.raises(ImportResolutionError) as exc:
    loader.load("surely_missing_module_xyz")

  assert isinstance(exc.value, ResolutionError)
  assert exc.value.module == "surely_missing_module_xyz"
  assert "could not import 'surely_missing_module_xyz'" in str(exc.value)


@pytest.mark.parametrize(
  "name, kind, type_str",
  [
    ("add", SymbolKind.FUNCTION, "function(a, b) -> int"),
    ("Box", SymbolKind.CLASS, "type[helpers.Box]"),
    ("VALUE", SymbolKind.VARIABLE, "str"),
  ],
)
def test_member_kinds(loader, name, kind, type_str):
  member = loader.member("helpers", name)

  assert member.kind == kind
  assert member.type == type_str
  assert member.package == "helpers"


def test_member_missing_is_none(loader):
  assert loader.member("helpers", "nothing_here") is None
  assert loader.member("surely_missing_module_xyz", "x") is None


def test_member_submodule(write_source, tmp_path):
  write_source("pkg/sub.py", "X = 1\n", package=True)
  loader = ImportLoader(tmp_path)

  member = loader.member("pkg", "sub")

  assert member.kind == SymbolKind.MODULE
  assert member.type == "module pkg.sub"


def test_relative_load_anchors_on_base_dir(write_source, tmp_path):
  write_source("pkg/sibling.py", "X = 1\n", package=True)
  loader = ImportLoader(tmp_path / "pkg")

  imported = loader.load("sibling", level=1)

  assert imported.path == ".sibling"
  assert imported.exported == ("X",)


def test_builtin_symbols():
  assert builtin_symbol("len").type == "function -> int"
  assert builtin_symbol("int").type == "type[int]"
  assert builtin_symbol("True").type == "bool"
  assert builtin_symbol("len").kind == SymbolKind.BUILTIN
