"""
Main Entry Point for the cstlens CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `cstlens.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from cstlens import __version__
from cstlens.cli import commands
from cstlens.views.registry import DEFAULT_VIEWS


def _view_name(value: str) -> str:
  """
  Validates a ``--tool`` value while the command line is parsed.

  Raises:
      argparse.ArgumentTypeError: With the sorted list of valid names.
  """
  if value not in DEFAULT_VIEWS:
    raise argparse.ArgumentTypeError(f"unknown command '{value}', valid tools are: {', '.join(sorted(DEFAULT_VIEWS))}")
  return value


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, 1 when issues were found, 2 for usage errors).
  """
  parser = argparse.ArgumentParser(description="cstlens: Python source introspection and import policy checks")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: INSPECT ---
  cmd_inspect = subparsers.add_parser("inspect", help="Dump syntax, symbol, type, comment or import views")
  cmd_inspect.add_argument(
    "--tool",
    dest="tools",
    action="append",
    type=_view_name,
    default=None,
    help=f"View to run, repeatable and run in order ({', '.join(sorted(DEFAULT_VIEWS))})",
  )
  cmd_inspect.add_argument("files", nargs="+", type=Path, help="Python source files")

  # --- Command: SCAN ---
  cmd_scan = subparsers.add_parser("scan", help="Report imports of blocklisted modules")
  cmd_scan.add_argument("--json", dest="json_mode", action="store_true", help="Print issues as a JSON array")
  cmd_scan.add_argument("--rule-id", default=None, help="Identifier reported on issues (default: from toml, else G702)")
  cmd_scan.add_argument("files", nargs="+", type=Path, help="Python source files")

  args = parser.parse_args(argv)

  if args.command == "inspect":
    return commands.handle_inspect(args.files, args.tools)

  elif args.command == "scan":
    return commands.handle_scan(args.files, args.json_mode, args.rule_id)

  return 0


if __name__ == "__main__":
  sys.exit(main())
