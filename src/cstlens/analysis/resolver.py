"""
Symbol Resolver.

Binds every identifier of a parsed module to the declaration it denotes.

Scoping rules come from LibCST's ``ScopeProvider``; imported modules are loaded
through an :class:`ImportLoader`. The resolver fails (``ResolutionError``) on:

1.  **Unresolvable imports**, unless the import sits in a ``try`` body whose
    handlers catch ``ImportError`` (or a broader class).
2.  **Undefined names**, i.e. loads with no visible binding, builtin, implicit
    module attribute or star-imported name.

Types and member selections are delegated to the :class:`TypeInferencer`.
"""

from typing import Dict, List, Optional, Set, Tuple, Union

import libcst as cst
from libcst.metadata import (
  Access,
  BaseAssignment,
  BuiltinAssignment,
  BuiltinScope,
  ClassScope,
  FunctionScope,
  ImportAssignment,
  MetadataWrapper,
  ParentNodeProvider,
  PositionProvider,
  Scope,
  ScopeProvider,
)

from cstlens.analysis.bindings import Binding, receiver_param, scope_prefix
from cstlens.analysis.inference import TypeInferencer
from cstlens.analysis.loader import ImportLoader, builtin_symbol
from cstlens.analysis.symbols import ImportedModule, PackageInfo, Symbol, SymbolInfo
from cstlens.enums import SymbolKind
from cstlens.errors import ImportResolutionError, ResolutionError
from cstlens.utils.node_source import format_position, get_full_name, root_name

# Names every module (or class body) provides without binding them.
IMPLICIT_MODULE_NAMES: Dict[str, str] = {
  "__annotations__": "dict[str, Any]",
  "__builtins__": "module builtins",
  "__cached__": "str",
  "__class__": "type",
  "__dict__": "dict[str, Any]",
  "__file__": "str",
  "__module__": "str",
  "__path__": "list[str]",
  "__qualname__": "str",
}

GUARD_EXCEPTIONS = frozenset({"ImportError", "ModuleNotFoundError", "Exception", "BaseException"})

Target = Union[Binding, Symbol]


class _ImportCollector(cst.CSTVisitor):
  """Gathers import statements in source order."""

  def __init__(self) -> None:
    self.imports: List[Union[cst.Import, cst.ImportFrom]] = []

  def visit_Import(self, node: cst.Import) -> bool:
    self.imports.append(node)
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    self.imports.append(node)
    return False


class _FieldTargetCollector(cst.CSTVisitor):
  """Gathers attribute targets of assignments (``obj.attr = ...``)."""

  def __init__(self) -> None:
    self.targets: List[cst.Attribute] = []

  def _add(self, target: cst.BaseExpression) -> None:
    if isinstance(target, cst.Attribute):
      self.targets.append(target)
    elif isinstance(target, (cst.Tuple, cst.List)):
      for element in target.elements:
        self._add(element.value)

  def visit_AssignTarget(self, node: cst.AssignTarget) -> None:
    self._add(node.target)

  def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
    self._add(node.target)

  def visit_AugAssign(self, node: cst.AugAssign) -> None:
    self._add(node.target)


class _PatternNameCollector(cst.CSTVisitor):
  """
  Gathers the names a ``match`` statement's patterns bind (``case [a, *rest]``,
  ``case {"k": v, **kw}``, ``case P() as p``) and the keyword names of class
  patterns (``x`` in ``case Point(x=px)``), which bind nothing.
  """

  def __init__(self) -> None:
    self.captures: List[cst.Name] = []
    self.keywords: Set[cst.Name] = set()

  def visit_MatchAs(self, node: cst.MatchAs) -> None:
    if node.name is not None:
      self.captures.append(node.name)

  def visit_MatchStar(self, node: cst.MatchStar) -> None:
    if node.name is not None:
      self.captures.append(node.name)

  def visit_MatchMapping(self, node: cst.MatchMapping) -> None:
    if node.rest is not None:
      self.captures.append(node.rest)

  def visit_MatchKeywordElement(self, node: cst.MatchKeywordElement) -> None:
    self.keywords.add(node.key)


def _is_method(scope: Optional[Scope]) -> bool:
  return (
    isinstance(scope, FunctionScope) and isinstance(scope.node, cst.FunctionDef) and isinstance(scope.parent, ClassScope)
  )


class Resolver:
  """
  Resolves the identifiers of one module.

  A resolver is single-use: it is created per Analysis Context build and its
  ``imports`` attribute lists the module's direct imports after
  :meth:`resolve` returns.

  Attributes:
      loader (ImportLoader): Import-resolution strategy.
      imports (Tuple[ImportedModule, ...]): Direct imports, first-seen order.
  """

  def __init__(self, loader: ImportLoader):
    """
    Initializes the resolver.

    Args:
        loader: Loader bound to the analysed file's directory.
    """
    self.loader = loader
    self.imports: Tuple[ImportedModule, ...] = ()

    self._package = ""
    self._bindings: Dict[Tuple[Scope, str], Binding] = {}
    self._defs: Dict[cst.Name, Binding] = {}
    self._uses: Dict[cst.Name, Target] = {}
    self._builtins: Dict[str, Symbol] = {}
    self._alias_symbols: Dict[cst.ImportAlias, Symbol] = {}
    self._loaded_paths: Set[str] = set()
    self._star_imports: List[Tuple[str, int]] = []
    self._class_members: Dict[cst.ClassDef, Dict[str, Binding]] = {}
    self._captures: Dict[Tuple[Scope, str], Binding] = {}
    self._pattern_names: Set[cst.Name] = set()

  def resolve(self, wrapper: MetadataWrapper, package: PackageInfo) -> SymbolInfo:
    """
    Resolves the module held by ``wrapper``.

    Args:
        wrapper: Metadata wrapper around the parsed module. Node identity in the
            result refers to ``wrapper.module``.
        package: The analysed file's package (its ``module`` names symbols).

    Returns:
        SymbolInfo: The frozen defs/uses/types/selections tables.

    Raises:
        ResolutionError: On unresolvable imports or undefined names.
    """
    self._package = package.module
    self._tree = wrapper.module
    self._scopes = wrapper.resolve(ScopeProvider)
    self._parents = wrapper.resolve(ParentNodeProvider)
    self._positions = wrapper.resolve(PositionProvider)

    self._load_imports()
    self._bind_scopes()
    self._bind_fields()
    self._bind_captures()
    self._bind_uses()

    inferencer = TypeInferencer(
      loader=self.loader,
      package=self._package,
      defs=self._defs,
      uses=self._uses,
      parents=self._parents,
      scopes=self._scopes,
      class_members=self._class_members,
    )
    types, selections, member_uses = inferencer.run(self._tree)

    defs = {node: inferencer.symbol_of(binding) for node, binding in self._defs.items()}
    uses = {node: inferencer.symbol_of(target) for node, target in self._uses.items()}
    uses.update(member_uses)
    return SymbolInfo.freeze(defs, uses, types, selections)

  # --- Imports ---

  def _is_guarded(self, node: cst.CSTNode) -> bool:
    child = node
    parent = self._parents.get(node)
    while parent is not None:
      if isinstance(parent, (cst.Try, cst.TryStar)) and child is parent.body:
        if any(self._catches_import_error(h) for h in parent.handlers):
          return True
      child, parent = parent, self._parents.get(parent)
    return False

  @staticmethod
  def _catches_import_error(handler: Union[cst.ExceptHandler, cst.ExceptStarHandler]) -> bool:
    if handler.type is None:
      return True
    caught = handler.type
    exprs = [e.value for e in caught.elements] if isinstance(caught, cst.Tuple) else [caught]
    return any(get_full_name(e).rsplit(".", 1)[-1] in GUARD_EXCEPTIONS for e in exprs)

  def _load(self, module: str, level: int, guarded: bool, seen: Dict[str, ImportedModule]) -> Optional[ImportedModule]:
    try:
      loaded = self.loader.load(module, level)
    except ImportResolutionError:
      if guarded:
        return None
      raise
    self._loaded_paths.add(loaded.path)
    seen.setdefault(loaded.path, loaded)
    return loaded

  def _load_imports(self) -> None:
    collector = _ImportCollector()
    self._tree.visit(collector)
    seen: Dict[str, ImportedModule] = {}

    for node in collector.imports:
      guarded = self._is_guarded(node)
      if isinstance(node, cst.Import):
        for alias in node.names:
          self._load(get_full_name(alias.name), 0, guarded, seen)
        continue

      level = len(node.relative)
      module = get_full_name(node.module) if node.module is not None else ""
      prefix = "." * level + module

      if module or isinstance(node.names, cst.ImportStar):
        if self._load(module, level, guarded, seen) is None:
          continue
        if isinstance(node.names, cst.ImportStar):
          self._star_imports.append((module, level))
          continue

      for alias in node.names:
        name = get_full_name(alias.name)
        member = self.loader.member(module, name, level)
        if not module:
          # `from . import x` imports submodule x or a name of the package itself
          if member is None:
            if guarded:
              continue
            raise ImportResolutionError(f"{prefix}{name}", "no submodule or package member of that name")
          if member.kind == SymbolKind.MODULE:
            self._load(name, level, guarded, seen)
          else:
            self._load("", level, guarded, seen)
        origin = f"{prefix}{name}" if prefix.endswith(".") else f"{prefix}.{name}"
        if member is None:
          member = Symbol(name=name, kind=SymbolKind.VARIABLE, package=prefix)
        self._alias_symbols[alias] = Symbol(
          name=name,
          kind=member.kind,
          package=prefix,
          type=member.type,
          origin=origin,
        )

    self.imports = tuple(seen.values())

  def _enclosing_alias(self, node: cst.CSTNode) -> Optional[cst.ImportAlias]:
    curr = node
    while curr is not None and not isinstance(curr, cst.ImportAlias):
      curr = self._parents.get(curr)
    return curr

  def _import_external(self, assignment: ImportAssignment) -> Optional[Symbol]:
    alias = self._enclosing_alias(assignment.as_name)
    if alias is None:
      return None
    if isinstance(assignment.node, cst.ImportFrom):
      return self._alias_symbols.get(alias)

    full = get_full_name(alias.name)
    target = full if alias.asname is not None else full.split(".")[0]
    loaded = full in self._loaded_paths
    return Symbol(
      name=target.rsplit(".", 1)[-1],
      kind=SymbolKind.MODULE,
      package=target,
      type=f"module {target}" if loaded else "Any",
      origin=target,
    )

  # --- Bindings ---

  def _all_scopes(self) -> List[Scope]:
    scopes = {s for s in self._scopes.values() if s is not None and not isinstance(s, BuiltinScope)}
    return list(scopes)

  def _order(self, assignment: BaseAssignment) -> Tuple[int, int]:
    node = getattr(assignment, "node", None)
    pos = self._positions.get(node) if node is not None else None
    if pos is None:
      return (0, 0)
    return (pos.start.line, pos.start.column)

  @staticmethod
  def _kind_of(assignment: BaseAssignment) -> SymbolKind:
    if isinstance(assignment, ImportAssignment):
      return SymbolKind.IMPORT
    node = assignment.node
    if isinstance(node, cst.FunctionDef):
      return SymbolKind.FUNCTION
    if isinstance(node, cst.ClassDef):
      return SymbolKind.CLASS
    if isinstance(node, cst.Param):
      return SymbolKind.PARAMETER
    if isinstance(assignment.scope, ClassScope):
      return SymbolKind.FIELD
    return SymbolKind.VARIABLE

  @staticmethod
  def _identifier(assignment: BaseAssignment) -> Optional[cst.Name]:
    node = assignment.node
    if isinstance(assignment, ImportAssignment):
      root = root_name(assignment.as_name)
      return root if root is not None and root.value == assignment.name else None
    if isinstance(node, cst.Name):
      return node
    if isinstance(node, (cst.FunctionDef, cst.ClassDef, cst.Param)):
      return node.name
    return None

  def _binding_for(self, scope: Scope, name: str, kind: SymbolKind) -> Binding:
    key = (scope, name)
    binding = self._bindings.get(key)
    if binding is None:
      owner = scope.node if isinstance(scope, ClassScope) else None
      binding = Binding(
        name=name,
        kind=kind,
        package=self._package,
        scope=scope_prefix(scope),
        owner=owner,
      )
      self._bindings[key] = binding
      if owner is not None:
        self._class_members.setdefault(owner, {})[name] = binding
    return binding

  def _bind_scopes(self) -> None:
    for scope in self._all_scopes():
      for assignment in sorted(scope.assignments, key=self._order):
        if isinstance(assignment, BuiltinAssignment) or "." in assignment.name:
          # dotted import names are bound through their first segment
          continue
        binding = self._binding_for(assignment.scope, assignment.name, self._kind_of(assignment))
        if isinstance(assignment, ImportAssignment):
          if binding.external is None:
            binding.external = self._import_external(assignment)
          binding.nodes.append(assignment.as_name)
        else:
          binding.nodes.append(assignment.node)
        ident = self._identifier(assignment)
        if ident is not None:
          self._defs[ident] = binding

  def _bind_fields(self) -> None:
    collector = _FieldTargetCollector()
    self._tree.visit(collector)
    for target in collector.targets:
      if not isinstance(target.value, cst.Name):
        continue
      scope = self._scopes.get(target)
      if not _is_method(scope):
        continue
      receiver = receiver_param(scope.node)
      if receiver is None or receiver.name.value != target.value.value:
        continue
      binding = self._binding_for(scope.parent, target.attr.value, SymbolKind.FIELD)
      binding.nodes.append(target)
      self._defs[target.attr] = binding

  def _bind_captures(self) -> None:
    # ScopeProvider records no assignment for names bound by match patterns
    collector = _PatternNameCollector()
    self._tree.visit(collector)
    self._pattern_names = set(collector.captures) | collector.keywords
    for name in collector.captures:
      scope = self._scopes.get(name)
      if scope is None:
        continue
      kind = SymbolKind.FIELD if isinstance(scope, ClassScope) else SymbolKind.VARIABLE
      binding = self._binding_for(scope, name.value, kind)
      self._captures[(scope, name.value)] = binding
      if name not in self._defs:
        binding.nodes.append(name)
        self._defs[name] = binding

  def _capture_for(self, scope: Optional[Scope], name: str, assigned: Set[Scope]) -> Optional[Binding]:
    """Finds a pattern capture of ``name`` nearer than any scope in ``assigned``."""
    start = scope
    while scope is not None and not isinstance(scope, BuiltinScope):
      # class bodies are only visible to their own statements
      if scope is start or not isinstance(scope, ClassScope):
        if scope in assigned:
          return None
        binding = self._captures.get((scope, name))
        if binding is not None:
          return binding
      if scope.parent is scope:
        break
      scope = scope.parent
    return None

  # --- Uses ---

  def _builtin(self, name: str) -> Symbol:
    if name not in self._builtins:
      self._builtins[name] = builtin_symbol(name)
    return self._builtins[name]

  def _referent(self, access: Access, node: cst.Name) -> Target:
    name = node.value
    referents = sorted(access.referents, key=self._order)
    if self._captures:
      capture = self._capture_for(access.scope, name, {a.scope for a in referents})
      if capture is not None:
        return capture

    for assignment in referents:
      if isinstance(assignment, BuiltinAssignment):
        return self._builtin(assignment.name)
      binding = self._bindings.get((assignment.scope, assignment.name.split(".")[0]))
      if binding is not None:
        return binding

    if name in IMPLICIT_MODULE_NAMES:
      return Symbol(name=name, kind=SymbolKind.VARIABLE, package=self._package, type=IMPLICIT_MODULE_NAMES[name])

    for module, level in self._star_imports:
      if name in self.loader.exported_names(module, level):
        member = self.loader.member(module, name, level)
        if member is not None:
          return member
        return Symbol(name=name, kind=SymbolKind.VARIABLE, package="." * level + module)

    raise ResolutionError(f"undefined name {name!r} at {format_position(self._positions[node])}")

  def _bind_uses(self) -> None:
    for scope in self._all_scopes():
      for access in scope.accesses:
        node = access.node
        if isinstance(node, cst.Attribute):
          node = root_name(node)
        if not isinstance(node, cst.Name):
          # string annotations
          continue
        if node in self._pattern_names:
          continue
        self._uses[node] = self._referent(access, node)
