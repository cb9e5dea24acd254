"""
Tests for Analysis Context construction.

Verifies:
1. A valid file yields a fully populated context.
2. Read, parse and resolution failures come back as ContextFailure.
3. Failures are logged with the right prefix.
4. Package description from ``__init__.py`` files.
"""

from cstlens.analysis.context import AnalysisContext, ContextFailure, build_context, describe_package
from cstlens.enums import FailureStage


def test_build_context_success(write_source):
  """
  Scenario: A small module with an assignment and a use.
  Expectation: AnalysisContext with defs, uses and types populated.
  """
  path = write_source("sample.py", "x = 1\ny = x\n")

  ctx = build_context(path)

  assert isinstance(ctx, AnalysisContext)
  assert ctx.path == str(path)
  assert len(ctx.info.defs) == 2
  assert len(ctx.info.uses) == 1
  assert ctx.package.name == "sample"
  assert ctx.package.module == "sample"


def test_missing_file_is_read_failure(tmp_path, caplog):
  """
  Scenario: Path does not exist.
  Expectation: READ failure, logged as a parse failure.
  """
  missing = tmp_path / "nope.py"

  result = build_context(missing)

  assert isinstance(result, ContextFailure)
  assert result.stage == FailureStage.READ
  assert str(result).startswith(f"Unable to parse file: {missing}. Reason:")
  assert "Unable to parse file" in caplog.text


def test_undecodable_file_is_read_failure(tmp_path):
  path = tmp_path / "binary.py"
  path.write_bytes(b"\xff\xfe\x00 = 1\n")

  result = build_context(path)

  assert isinstance(result, ContextFailure)
  assert result.stage == FailureStage.READ


def test_syntax_error_is_parse_failure(write_source, caplog):
  """
  Scenario: File with a syntax error.
  Expectation: PARSE failure naming the file.
  """
  path = write_source("broken.py", "def f(:\n  pass\n")

  result = build_context(path)

  assert isinstance(result, ContextFailure)
  assert result.stage == FailureStage.PARSE
  assert result.path == str(path)
  assert "Unable to parse file" in caplog.text


def test_undefined_name_is_type_check_failure(write_source, caplog):
  """
  Scenario: A load of a name that is never bound.
  Expectation: RESOLVE failure reporting the name and its position.
  """
  path = write_source("undefined.py", "print(missing_name)\n")

  result = build_context(path)

  assert isinstance(result, ContextFailure)
  assert result.stage == FailureStage.RESOLVE
  assert "undefined name 'missing_name' at 1:7" in result.reason
  assert str(result).startswith(f"Type check failed for file: {path}. Reason:")
  assert "Type check failed" in caplog.text


def test_unresolvable_import_is_type_check_failure(write_source):
  path = write_source("bad_import.py", "import surely_missing_module_xyz\n")

  result = build_context(path)

  assert isinstance(result, ContextFailure)
  assert result.stage == FailureStage.RESOLVE
  assert "surely_missing_module_xyz" in result.reason


def test_guarded_import_is_not_a_failure(write_source):
  """
  Scenario: Optional dependency imported inside try/except ImportError.
  Expectation: Context builds.
  """
  code = """
    try:
      import surely_missing_module_xyz
    except ImportError:
      surely_missing_module_xyz = None
    """
  path = write_source("optional.py", code)

  assert isinstance(build_context(path), AnalysisContext)


def test_implicit_module_names_resolve(write_source):
  path = write_source("implicit.py", "here = __file__\n")

  ctx = build_context(path)

  assert isinstance(ctx, AnalysisContext)
  use = next(n for n in ctx.info.uses if n.value == "__file__")
  assert ctx.info.uses[use].type == "str"


def test_context_records_direct_imports_in_order(write_source):
  path = write_source("imports_order.py", "import json\nimport string\nimport json as j\n")

  ctx = build_context(path)

  assert [m.path for m in ctx.package.imports] == ["json", "string"]


def test_describe_package_inside_package(write_source):
  """
  Scenario: File inside nested packages.
  Expectation: Innermost package name and dotted module path.
  """
  write_source("outer/__init__.py", "")
  path = write_source("outer/inner/mod.py", "", package=True)

  info = describe_package(path)

  assert info.name == "inner"
  assert info.module == "outer.inner.mod"
  assert info.path == str(path.parent.absolute())


def test_describe_package_standalone_script(write_source):
  path = write_source("script.py", "")

  info = describe_package(path)

  assert info.name == "script"
  assert info.module == "script"


def test_object_of_prefers_uses(write_source):
  path = write_source("prefer.py", "x = 1\nprint(x)\n")

  ctx = build_context(path)
  names = [n for n in ctx.walk() if getattr(n, "value", None) == "x"]

  assert len(names) == 2
  assert all(ctx.object_of(n).name == "x" for n in names)
  assert ctx.object_of(names[1]) is ctx.info.uses[names[1]]
