"""
Scan Command Handler.

Runs the blocklisted-import rule over a batch of files and reports the issues
as text lines or as a JSON array on stdout.
"""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from cstlens.config import RuntimeConfig
from cstlens.rules.blocklist import new_unsafe_import_rule
from cstlens.rules.engine import RuleEngine
from cstlens.utils.console import log_error, log_info, log_success


def handle_scan(files: List[Path], json_mode: bool = False, rule_id: Optional[str] = None) -> int:
  """
  Scans ``files`` for blocklisted imports.

  Args:
      files: Input source files.
      json_mode: If True, print a JSON array of issues instead of text lines.
      rule_id: Override for the configured rule identifier.

  Returns:
      int: 0 if no issue was found, 1 if issues were found, 2 on an invalid
      configuration.
  """
  try:
    config = RuntimeConfig.load(rule_id=rule_id)
  except ValidationError as e:
    log_error(f"Invalid configuration: {e}")
    return 2

  engine = RuleEngine([new_unsafe_import_rule(config.rule_id, config)])
  issues = engine.scan(files)

  if json_mode:
    print(json.dumps([issue.model_dump(mode="json") for issue in issues], indent=2))
    return 1 if issues else 0

  for issue in issues:
    print(str(issue))

  if issues:
    log_info(f"{len(issues)} issue(s) found.")
    return 1
  log_success("No issues found.")
  return 0
