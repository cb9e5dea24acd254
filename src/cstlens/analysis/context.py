"""
Analysis Context Construction.

Builds the immutable, per-file bundle every inspection view and policy rule
consumes: the parsed tree, its position table, comment groups, resolved symbol
tables and package description.

Building never raises. Read and parse failures, and type check failures, are
logged to the diagnostics channel and returned as a :class:`ContextFailure`.

LibCST walks trees recursively, so expressions nested deeper than the
interpreter recursion limit allows (a few hundred levels, e.g. a long flat
sum of that many terms) fail at the resolve stage.
"""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Optional, Union

import libcst as cst
from libcst.metadata import CodeRange, MetadataWrapper, ParentNodeProvider, PositionProvider

from cstlens.analysis.comments import CommentMap, collect_comments
from cstlens.analysis.loader import ImportLoader
from cstlens.analysis.resolver import Resolver
from cstlens.analysis.symbols import PackageInfo, Symbol, SymbolInfo
from cstlens.enums import FailureStage
from cstlens.errors import ResolutionError
from cstlens.utils.console import log_error
from cstlens.utils.node_source import capture_node_source


@dataclass(frozen=True)
class ContextFailure:
  """
  The explicit failure outcome of :func:`build_context`.

  Attributes:
      path: The file that failed.
      stage: Whether reading, parsing or resolution failed.
      reason: Human readable cause.
  """

  path: str
  stage: FailureStage
  reason: str

  def __str__(self) -> str:
    if self.stage == FailureStage.RESOLVE:
      return f"Type check failed for file: {self.path}. Reason: {self.reason}"
    return f"Unable to parse file: {self.path}. Reason: {self.reason}"


@dataclass(frozen=True, eq=False)
class AnalysisContext:
  """
  Everything known about one analysed file.

  Node-keyed tables refer to the nodes of ``tree`` by identity.
  """

  path: str
  tree: cst.Module
  positions: Mapping[cst.CSTNode, CodeRange]
  parents: Mapping[cst.CSTNode, cst.CSTNode]
  comments: CommentMap
  info: SymbolInfo
  package: PackageInfo

  def position_of(self, node: cst.CSTNode) -> Optional[CodeRange]:
    return self.positions.get(node)

  def object_of(self, name: cst.Name) -> Optional[Symbol]:
    return self.info.object_of(name)

  def code_for(self, node: cst.CSTNode) -> str:
    return capture_node_source(node, self.tree)

  def walk(self) -> Iterator[cst.CSTNode]:
    """Yields every node of the tree depth-first, in source order."""
    return walk(self.tree)


def walk(node: cst.CSTNode) -> Iterator[cst.CSTNode]:
  """
  Pre-order traversal over a node and all of its descendants.
  """
  yield node
  for child in node.children:
    yield from walk(child)


def describe_package(path: Path) -> PackageInfo:
  """
  Derives the package of a source file from the ``__init__.py`` files around it.

  Args:
      path: The analysed file.

  Returns:
      PackageInfo: Name, dotted module path and directory (imports left empty).
  """
  file = Path(path).absolute()
  directory = file.parent

  parts = [] if file.stem == "__init__" else [file.stem]
  pkg_dir = directory
  while (pkg_dir / "__init__.py").is_file() and pkg_dir.parent != pkg_dir:
    parts.insert(0, pkg_dir.name)
    pkg_dir = pkg_dir.parent

  in_package = (directory / "__init__.py").is_file()
  return PackageInfo(
    name=directory.name if in_package else file.stem,
    module=".".join(parts) or file.stem,
    path=str(directory),
    file=str(file),
  )


def _package_root(package: PackageInfo) -> Path:
  root = Path(package.path)
  for _ in range(package.module.count(".")):
    root = root.parent
  return root


def build_context(path: Union[str, Path], loader: Optional[ImportLoader] = None) -> Union[AnalysisContext, ContextFailure]:
  """
  Reads, parses and resolves one source file.

  Args:
      path: The file to analyse.
      loader: Import-resolution strategy. Defaults to a fresh loader searching
          the file's directory (and its package root) before ``sys.path``.

  Returns:
      AnalysisContext on success, ContextFailure otherwise. Never raises for
      per-file problems.
  """
  path_str = str(path)

  try:
    source = Path(path).read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError) as e:
    return _fail(path_str, FailureStage.READ, str(e))

  try:
    tree = cst.parse_module(source)
  except cst.ParserSyntaxError as e:
    return _fail(path_str, FailureStage.PARSE, f"{e.message} at {e.editor_line}:{e.editor_column}")

  package = describe_package(Path(path))
  if loader is None:
    root = _package_root(package)
    extra = [root] if str(root) != package.path else []
    loader = ImportLoader(Path(package.path), extra_paths=extra)

  try:
    wrapper = MetadataWrapper(tree)
    positions = wrapper.resolve(PositionProvider)
    parents = wrapper.resolve(ParentNodeProvider)
    resolver = Resolver(loader)
    info = resolver.resolve(wrapper, package)
  except ResolutionError as e:
    return _fail(path_str, FailureStage.RESOLVE, str(e))
  except RecursionError:
    return _fail(path_str, FailureStage.RESOLVE, "expression nesting too deep")

  return AnalysisContext(
    path=path_str,
    tree=wrapper.module,
    positions=positions,
    parents=parents,
    comments=collect_comments(wrapper.module, positions),
    info=info,
    package=dataclasses.replace(package, imports=resolver.imports),
  )


def _fail(path: str, stage: FailureStage, reason: str) -> ContextFailure:
  failure = ContextFailure(path=path, stage=stage, reason=reason)
  log_error(str(failure))
  return failure
