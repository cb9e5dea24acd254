"""
Policy Rules.

Modules:
    - ``base``: The Issue model and the abstract Rule interface.
    - ``blocklist``: The blocklisted-import rule and its exemptions.
    - ``engine``: Node dispatch over one file or a batch of files.
"""

from cstlens.rules.base import Issue, Rule
from cstlens.rules.blocklist import (
  UNSAFE_IMPORTS,
  BlocklistedImportRule,
  Exemptions,
  new_blocklisted_imports,
  new_unsafe_import_rule,
)
from cstlens.rules.engine import RuleEngine

__all__ = [
  "UNSAFE_IMPORTS",
  "BlocklistedImportRule",
  "Exemptions",
  "Issue",
  "Rule",
  "RuleEngine",
  "new_blocklisted_imports",
  "new_unsafe_import_rule",
]
