"""
Static Import Loader.

This module provides the :class:`ImportLoader`, the import-resolution strategy
used while type checking a single file. It locates every module the file
imports and describes its top-level scope without executing the file itself.

Modules are loaded with Griffe, which parses source statically and falls back to
runtime inspection for compiled modules (C-Extensions such as ``math``). The
search path is the analysed file's own directory followed by ``sys.path``, which
mirrors how Python resolves imports for a script.
"""

import builtins
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import griffe

from cstlens.analysis.symbols import ImportedModule, Symbol
from cstlens.enums import SymbolKind
from cstlens.errors import ImportResolutionError

# Suppress Griffe errors which are often noisy static analysis failures
logging.getLogger("griffe").setLevel(logging.CRITICAL)

BUILTIN_RETURNS: Dict[str, str] = {
  "ascii": "str",
  "bin": "str",
  "callable": "bool",
  "chr": "str",
  "dir": "list[str]",
  "format": "str",
  "hasattr": "bool",
  "hash": "int",
  "hex": "str",
  "id": "int",
  "input": "str",
  "isinstance": "bool",
  "issubclass": "bool",
  "len": "int",
  "oct": "str",
  "open": "io.TextIOWrapper",
  "ord": "int",
  "print": "None",
  "repr": "str",
  "sorted": "list",
  "vars": "dict[str, Any]",
}


def builtin_symbol(name: str) -> Symbol:
  """
  Describes a name provided by the ``builtins`` module.

  Args:
      name: The builtin identifier (e.g. ``len``, ``int``, ``True``).

  Returns:
      Symbol: A BUILTIN symbol owned by the ``builtins`` package.
  """
  value = getattr(builtins, name, None)
  if isinstance(value, type):
    type_str = f"type[{name}]"
  elif callable(value):
    ret = BUILTIN_RETURNS.get(name)
    type_str = f"function -> {ret}" if ret else "function"
  else:
    type_str = type(value).__name__
  return Symbol(name=name, kind=SymbolKind.BUILTIN, package="builtins", type=type_str)


def _expr_text(expr) -> str:
  return str(expr) if expr is not None else ""


def _function_type(func: griffe.Object) -> str:
  params = []
  try:
    for param in func.parameters:
      params.append(param.name)
  except AttributeError:
    pass
  signature = f"function({', '.join(params)})"
  returns = _expr_text(getattr(func, "returns", None))
  return f"{signature} -> {returns}" if returns else signature


class ImportLoader:
  """
  Resolves imported modules for one analysed file.

  A loader is created per Analysis Context build and memoises loaded modules
  for that build only.

  Attributes:
      base_dir (Path): Directory of the analysed file.
      _cache (Dict[str, griffe.Object]): Loaded modules keyed by import path.
  """

  def __init__(self, base_dir: Path, extra_paths: Iterable[Path] = ()):
    """
    Initializes the loader.

    Args:
        base_dir: Directory of the analysed file. Searched first, and the anchor
            of relative imports.
        extra_paths: Additional directories searched after ``base_dir``.
    """
    self.base_dir = Path(base_dir)
    self.extra_paths = [Path(p) for p in extra_paths]
    self._cache: Dict[str, griffe.Object] = {}

  def _anchor(self, level: int) -> Path:
    anchor = self.base_dir
    for _ in range(level - 1):
      anchor = anchor.parent
    return anchor

  def _search_paths(self, level: int) -> List[str]:
    if level:
      return [str(self._anchor(level))]
    paths = [self.base_dir, *self.extra_paths]
    return [str(p) for p in paths] + [p for p in sys.path if p]

  def _load_object(self, module: str, level: int = 0) -> griffe.Object:
    key = "." * level + module
    if key in self._cache:
      return self._cache[key]

    search_paths = self._search_paths(level)
    if level and not module:
      # `from . import x`: the anchor directory is the package itself
      anchor = self._anchor(level)
      module, search_paths = anchor.name, [str(anchor.parent)]
    try:
      obj = griffe.load(module, submodules=False, search_paths=search_paths)
    except Exception as e:
      if "." not in module:
        raise ImportResolutionError(key, str(e) or type(e).__name__) from e
      # Dotted paths name submodules that are only loaded with the full package
      try:
        obj = griffe.load(module, submodules=True, search_paths=search_paths)
      except Exception as e2:
        raise ImportResolutionError(key, str(e2) or type(e2).__name__) from e2

    if obj.is_alias:
      # e.g. os.path -> posixpath
      obj = self._load_object(obj.target_path)

    self._cache[key] = obj
    return obj

  def load(self, module: str, level: int = 0) -> ImportedModule:
    """
    Loads an imported module and describes its top-level scope.

    Args:
        module: Dotted module path, without leading dots.
        level: Number of leading dots of a relative import.

    Returns:
        ImportedModule: The import path, module name and exported names.

    Raises:
        ImportResolutionError: If the module cannot be located or parsed.
    """
    obj = self._load_object(module, level)
    try:
      filepath = obj.filepath
    except griffe.BuiltinModuleError:
      filepath = ""
    if isinstance(filepath, list):
      # namespace packages span several directories
      filepath = filepath[0] if filepath else ""
    return ImportedModule(
      path="." * level + module,
      name=obj.name,
      exported=self.exported_names(module, level),
      file=str(filepath),
    )

  def exported_names(self, module: str, level: int = 0) -> Tuple[str, ...]:
    """
    Lists the public names of a module's top-level scope.

    ``__all__`` is honoured when the module declares it; otherwise every member
    not starting with an underscore is public.

    Args:
        module: Dotted module path.
        level: Number of leading dots of a relative import.

    Returns:
        Sorted tuple of names.
    """
    obj = self._load_object(module, level)
    exports = getattr(obj, "exports", None)
    if exports:
      names = {e if isinstance(e, str) else getattr(e, "name", str(e)) for e in exports}
    else:
      names = {name for name in obj.members if not name.startswith("_")}
    return tuple(sorted(names))

  def member(self, module: str, name: str, level: int = 0) -> Optional[Symbol]:
    """
    Resolves a member of an imported module.

    Args:
        module: Dotted module path.
        name: The member name.
        level: Number of leading dots of a relative import.

    Returns:
        A Symbol owned by the module, or None if the member cannot be resolved.
    """
    package = "." * level + module
    try:
      obj = self._load_object(module, level)
    except ImportResolutionError:
      return None

    member = obj.members.get(name)
    if member is None:
      submodule = f"{module}.{name}" if module else name
      try:
        self._load_object(submodule, level)
      except ImportResolutionError:
        return None
      return Symbol(
        name=name,
        kind=SymbolKind.MODULE,
        package=package,
        type=f"module {'.' * level}{submodule}",
      )

    kind, type_str = self._describe(member)
    return Symbol(name=name, kind=kind, package=package, type=type_str)

  def _describe(self, member: griffe.Object) -> Tuple[SymbolKind, str]:
    if member.is_alias:
      target_path = member.target_path
      try:
        member = member.final_target
      except Exception:
        # Target lives in a module that was not loaded yet
        try:
          member = self._load_object(target_path)
        except ImportResolutionError:
          return SymbolKind.VARIABLE, "Any"
    if member.is_module:
      return SymbolKind.MODULE, f"module {member.path}"
    if member.is_class:
      return SymbolKind.CLASS, f"type[{member.path}]"
    if member.is_function:
      return SymbolKind.FUNCTION, _function_type(member)
    annotation = _expr_text(getattr(member, "annotation", None))
    return SymbolKind.VARIABLE, annotation or "Any"
