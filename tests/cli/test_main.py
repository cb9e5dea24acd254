"""
Tests for the CLI entry point.

Verifies:
1. ``inspect`` replays repeatable ``--tool`` selections over files.
2. Invalid tool names fail at parse time (exit 2) with the valid list.
3. ``scan`` exit codes and text/JSON output.
4. Dispatch to the command handlers.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from cstlens.cli.__main__ import main


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
  """Keeps RuntimeConfig from picking up a pyproject.toml around the test run."""
  monkeypatch.chdir(tmp_path)


def test_inspect_runs_selected_tools_in_order(write_source, capsys):
  path = write_source("m.py", "x = 1\n")

  ret = main(["inspect", "--tool", "defs", "--tool", "types", "--tool", "defs", str(path)])

  assert ret == 0
  assert capsys.readouterr().out.splitlines() == [
    "IDENT: x (1:1), OBJECT: var m.x int",
    "EXPR: 1 (1:5), TYPE: int = 1",
    "IDENT: x (1:1), OBJECT: var m.x int",
  ]


def test_inspect_invalid_tool_exits_2(write_source, capsys):
  """
  Scenario: ``--tool bogus``.
  Expectation: argparse error before any file is read.
  """
  path = write_source("m.py", "x = 1\n")

  with pytest.raises(SystemExit) as exc:
    main(["inspect", "--tool", "bogus", str(path)])

  assert exc.value.code == 2
  err = capsys.readouterr().err
  assert "unknown command 'bogus', valid tools are: ast, callobj, comments, defs, imports, types, uses" in err


def test_inspect_uses_configured_tools(write_source, tmp_path, capsys):
  (tmp_path / "pyproject.toml").write_text('[tool.cstlens]\ntools = ["uses"]\n', encoding="utf-8")
  path = write_source("m.py", "x = 1\ny = x\n")

  ret = main(["inspect", str(path)])

  assert ret == 0
  assert capsys.readouterr().out == "IDENT: x (2:5), OBJECT: var m.x int\n"


def test_inspect_failure_still_exits_0(write_source, capsys):
  broken = write_source("broken.py", "def f(:\n")

  ret = main(["inspect", "--tool", "ast", str(broken)])

  assert ret == 0
  captured = capsys.readouterr()
  assert captured.out == ""
  assert "Unable to parse file" in captured.err


def test_scan_reports_issues(write_source, capsys):
  path = write_source("app.py", "import random\n")

  ret = main(["scan", str(path)])

  assert ret == 1
  out = capsys.readouterr().out
  assert out == f"[{path}:1:8] - G702: Blocklisted import random (Confidence: HIGH, Severity: MEDIUM)\n"


def test_scan_clean_exits_0(write_source, capsys):
  path = write_source("app.py", "import json\n")

  assert main(["scan", str(path)]) == 0
  assert capsys.readouterr().out == ""


def test_scan_json_with_rule_id(write_source, capsys):
  path = write_source("app.py", "import json\nfrom ctypes import c_int\n")

  ret = main(["scan", "--json", "--rule-id", "SEC1", str(path)])

  assert ret == 1
  data = json.loads(capsys.readouterr().out)
  assert len(data) == 1
  assert data[0]["rule_id"] == "SEC1"
  assert data[0]["description"] == "Blocklisted import ctypes"
  assert (data[0]["line"], data[0]["column"]) == (2, 1)


def test_dispatch_to_handlers(tmp_path):
  target = tmp_path / "a.py"

  with patch("cstlens.cli.commands.handle_scan", return_value=0) as mock_scan:
    main(["scan", "--json", str(target)])
  mock_scan.assert_called_once_with([Path(target)], True, None)

  with patch("cstlens.cli.commands.handle_inspect", return_value=0) as mock_inspect:
    main(["inspect", "--tool", "ast", str(target)])
  mock_inspect.assert_called_once_with([Path(target)], ["ast"])


def test_no_command_is_usage_error():
  with pytest.raises(SystemExit) as exc:
    main([])

  assert exc.value.code == 2
