"""
Tests for node source helpers.
"""

import libcst as cst
import pytest

from cstlens.utils.node_source import capture_node_source, get_full_name, normalize_import_path, root_name


def test_get_full_name():
  node = cst.parse_expression("a.b.c")

  assert get_full_name(node) == "a.b.c"
  assert get_full_name(cst.parse_expression("f().x")) == ""


def test_root_name():
  assert root_name(cst.parse_expression("os.path.join")).value == "os"
  assert root_name(cst.parse_expression("f().x")) is None


def test_capture_node_source_keeps_inner_spacing():
  node = cst.parse_expression("(x +  1)")

  assert capture_node_source(node) == "(x +  1)"


@pytest.mark.parametrize("raw", ['"random"', "'random'", "  random  ", "random"])
def test_normalize_import_path(raw):
  assert normalize_import_path(raw) == "random"
