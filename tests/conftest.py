"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A fixture writing dedented Python sources into the test's temporary directory.
- Console isolation so Rich handlers never leak between tests.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

# Add src to path so we can import 'cstlens' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from cstlens.utils.console import reset_console  # noqa: E402


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[..., Path]:
  """
  Returns a helper writing ``code`` (dedented) to ``tmp_path / name``.

  Intermediate directories are created; ``package=True`` also drops an empty
  ``__init__.py`` into the file's directory.
  """

  def _write(name: str, code: str, package: bool = False) -> Path:
    path = tmp_path / name
    path.parent.mkdir(parents=True, exist_ok=True)
    if package:
      (path.parent / "__init__.py").touch()
    path.write_text(textwrap.dedent(code).lstrip("\n"), encoding="utf-8")
    return path

  return _write


@pytest.fixture(autouse=True)
def isolate_console():
  """
  Rebinds the diagnostics console after each test so that a console
  injected by one test does not capture the logs of the next.
  """
  yield
  reset_console()
