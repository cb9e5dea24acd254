"""
Type Inference.

Bottom-up inference of expression types over a resolved module. Types are
rendered strings (``int``, ``list[str]``, ``type[pkg.Widget]``,
``module os``, ``function(a, b) -> int``, ``Union[int, str]``).

The inferencer is memoised per node and guards against cycles through variable
bindings (``x = x + 1``). Expressions whose type cannot be determined get no
entry; there is no placeholder type.

Supported constructs:
1.  **Literals**: numbers, strings, bytes, ``True``/``False``/``None`` (with
    their constant values).
2.  **Containers & Comprehensions**: ``list[T]``, ``set[T]``, ``dict[K, V]``,
    ``tuple[A, B]``.
3.  **Operators**: numeric promotion, ``/`` yields float, str/bytes/list
    arithmetic, comparisons and ``not`` yield bool, ``and``/``or`` and
    conditional expressions yield unions.
4.  **Calls**: classes construct instances, annotated functions return their
    annotation.
5.  **Attributes**: module members (via the loader), fields and methods of
    classes defined in the module.
"""

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple, Union

import libcst as cst
from libcst.metadata import ClassScope, Scope

from cstlens.analysis.bindings import Binding, decorator_names, receiver_param
from cstlens.analysis.loader import ImportLoader
from cstlens.analysis.symbols import Selection, Symbol, TypeAndValue
from cstlens.enums import SelectionKind, SymbolKind
from cstlens.utils.node_source import capture_node_source

Target = Union[Binding, Symbol]

NUMERIC_TYPES = ("bool", "int", "float", "complex")
ITERABLE_HEADS = ("list", "set", "frozenset", "generator")
BITWISE_OPS = (cst.BitAnd, cst.BitOr, cst.BitXor, cst.LeftShift, cst.RightShift)


def split_type_args(inner: str) -> List[str]:
  """
  Splits the argument list of a rendered generic at top-level commas.

  Example:
      >>> split_type_args("str, dict[str, int]")
      ['str', 'dict[str, int]']
  """
  args, depth, start = [], 0, 0
  for i, ch in enumerate(inner):
    if ch == "[":
      depth += 1
    elif ch == "]":
      depth -= 1
    elif ch == "," and depth == 0:
      args.append(inner[start:i].strip())
      start = i + 1
  tail = inner[start:].strip()
  if tail:
    args.append(tail)
  return args


def parse_generic(type_str: str) -> Tuple[str, List[str]]:
  """
  Splits ``head[a, b]`` into ``("head", ["a", "b"])``. Non-generic types have
  no arguments.
  """
  if type_str.endswith("]") and "[" in type_str:
    head, _, inner = type_str.partition("[")
    return head, split_type_args(inner[:-1])
  return type_str, []


class _ExpressionCollector(cst.CSTVisitor):
  """Gathers expressions in source order, skipping import statements."""

  def __init__(self) -> None:
    self.expressions: List[cst.BaseExpression] = []
    self.member_names: Set[cst.Name] = set()

  def visit_Import(self, node: cst.Import) -> bool:
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    return False

  def visit_Attribute(self, node: cst.Attribute) -> None:
    self.member_names.add(node.attr)

  def on_visit(self, node: cst.CSTNode) -> bool:
    if isinstance(node, cst.BaseExpression):
      self.expressions.append(node)
    return super().on_visit(node)


class TypeInferencer:
  """
  Computes expression types and member selections for one module.

  Attributes:
      loader (ImportLoader): Resolves members of imported modules.
      package (str): Dotted module path of the analysed file.
  """

  def __init__(
    self,
    loader: ImportLoader,
    package: str,
    defs: Mapping[cst.Name, Binding],
    uses: Mapping[cst.Name, Target],
    parents: Mapping[cst.CSTNode, cst.CSTNode],
    scopes: Mapping[cst.CSTNode, Optional[Scope]],
    class_members: Mapping[cst.ClassDef, Dict[str, Binding]],
  ):
    self.loader = loader
    self.package = package
    self._defs = defs
    self._uses = uses
    self._parents = parents
    self._scopes = scopes
    self._class_members = class_members
    self._module: Optional[cst.Module] = None

    self._memo: Dict[cst.CSTNode, Optional[TypeAndValue]] = {}
    self._binding_types: Dict[Binding, Optional[str]] = {}
    self._symbols: Dict[Binding, Symbol] = {}
    self._in_progress: Set[Binding] = set()
    self._unions: Dict[str, FrozenSet[str]] = {}
    self._selections: Dict[cst.Attribute, Selection] = {}
    self._member_uses: Dict[cst.Name, Symbol] = {}

    self._classes: Dict[str, cst.ClassDef] = {}
    for binding in set(defs.values()):
      if binding.kind == SymbolKind.CLASS:
        class_def = self._first(binding.nodes, cst.ClassDef)
        if class_def is not None:
          self._classes[self.instance_type(binding)] = class_def

  def run(
    self, module: cst.Module
  ) -> Tuple[Dict[cst.BaseExpression, TypeAndValue], Dict[cst.Attribute, Selection], Dict[cst.Name, Symbol]]:
    """
    Infers every expression of ``module``.

    Args:
        module: The resolved module tree.

    Returns:
        Tuple of (types, selections, member uses). Member uses map the ``attr``
        identifier of a resolved attribute to the member's symbol.
    """
    self._module = module
    collector = _ExpressionCollector()
    module.visit(collector)

    types: Dict[cst.BaseExpression, TypeAndValue] = {}
    for node in collector.expressions:
      if node in self._defs or node in collector.member_names:
        continue
      result = self.infer(node)
      if result is not None:
        types[node] = result
    return types, dict(self._selections), dict(self._member_uses)

  # --- Symbols ---

  def instance_type(self, binding: Binding) -> str:
    qualname = f"{binding.scope}.{binding.name}" if binding.scope else binding.name
    return f"{binding.package}.{qualname}"

  def symbol_of(self, target: Target) -> Symbol:
    """
    Freezes a binding into its Symbol (symbols are returned unchanged).
    """
    if isinstance(target, Symbol):
      return target
    cached = self._symbols.get(target)
    if cached is not None:
      return cached
    symbol = target.freeze(self.binding_type(target))
    if not self._in_progress:
      self._symbols[target] = symbol
    return symbol

  def binding_type(self, binding: Binding) -> Optional[str]:
    """
    Resolves the type of a binding, or None when unknown or cyclic.
    """
    if binding in self._binding_types:
      return self._binding_types[binding]
    if binding in self._in_progress:
      return None
    self._in_progress.add(binding)
    try:
      result = self._compute_binding_type(binding)
    finally:
      self._in_progress.discard(binding)
    self._binding_types[binding] = result
    return result

  def _compute_binding_type(self, binding: Binding) -> Optional[str]:
    if binding.kind == SymbolKind.IMPORT:
      external = binding.external
      return external.type if external is not None and external.type != "Any" else None
    if binding.kind == SymbolKind.CLASS:
      return f"type[{self.instance_type(binding)}]"
    if binding.kind == SymbolKind.FUNCTION:
      func = self._first(binding.nodes, cst.FunctionDef)
      return self.function_type(func) if func is not None else None
    if binding.kind == SymbolKind.PARAMETER:
      param = self._first(binding.nodes, cst.Param)
      return self._param_type(param) if param is not None else None
    return self._variable_type(binding)

  @staticmethod
  def _first(nodes: Iterable[cst.CSTNode], node_type):
    for node in nodes:
      if isinstance(node, node_type):
        return node
    return None

  def _code(self, node: cst.CSTNode) -> str:
    return capture_node_source(node, self._module)

  # --- Unions ---

  def _members(self, type_str: str) -> FrozenSet[str]:
    return self._unions.get(type_str, frozenset({type_str}))

  def union(self, types: Iterable[str]) -> Optional[str]:
    """
    Joins types into a flattened, sorted ``Union[...]`` (a single type is
    returned as is).
    """
    members: Set[str] = set()
    for t in types:
      members |= self._members(t)
    if not members:
      return None
    if len(members) == 1:
      return next(iter(members))
    rendered = f"Union[{', '.join(sorted(members))}]"
    self._unions[rendered] = frozenset(members)
    return rendered

  # --- Functions and parameters ---

  @staticmethod
  def _param_names(params: cst.Parameters) -> List[str]:
    names = [p.name.value for p in params.posonly_params]
    names += [p.name.value for p in params.params]
    if isinstance(params.star_arg, cst.Param):
      names.append(params.star_arg.name.value)
    names += [p.name.value for p in params.kwonly_params]
    if params.star_kwarg is not None:
      names.append(params.star_kwarg.name.value)
    return names

  def function_type(self, func: cst.FunctionDef, bound: bool = False) -> str:
    """
    Renders a function signature type, e.g. ``function(a, b) -> int``.

    Args:
        func: The function definition.
        bound: Drop the receiver parameter (bound method view).
    """
    names = self._param_names(func.params)
    if bound:
      names = names[1:]
    signature = f"function({', '.join(names)})"
    if func.returns is not None:
      return f"{signature} -> {self._code(func.returns.annotation)}"
    return signature

  def _enclosing_class(self, func: cst.FunctionDef) -> Optional[cst.ClassDef]:
    scope = self._scopes.get(func)
    if isinstance(scope, ClassScope) and isinstance(scope.node, cst.ClassDef):
      return scope.node
    return None

  def _param_type(self, param: cst.Param) -> Optional[str]:
    params = self._parents.get(param)
    is_star = isinstance(params, cst.Parameters) and params.star_arg is param
    is_kwargs = isinstance(params, cst.Parameters) and params.star_kwarg is param

    if param.annotation is not None:
      annotation = self._code(param.annotation.annotation)
      if is_star:
        return f"tuple[{annotation}, ...]"
      if is_kwargs:
        return f"dict[str, {annotation}]"
      return annotation
    if is_star:
      return "tuple"
    if is_kwargs:
      return "dict[str, Any]"

    func = self._parents.get(params) if params is not None else None
    if isinstance(func, cst.FunctionDef) and receiver_param(func) is param:
      class_def = self._enclosing_class(func)
      class_binding = self._defs.get(class_def.name) if class_def is not None else None
      if class_binding is not None:
        instance = self.instance_type(class_binding)
        if "classmethod" in decorator_names(func):
          return f"type[{instance}]"
        return instance

    if param.default is not None:
      default = self.infer(param.default)
      return default.type if default is not None else None
    return None

  # --- Variables ---

  def _variable_type(self, binding: Binding) -> Optional[str]:
    found: List[str] = []
    for site in binding.nodes:
      parent = self._parents.get(site)
      if isinstance(parent, cst.AnnAssign) and parent.target is site:
        # an annotation wins over every assigned value
        return self._code(parent.annotation.annotation)
      site_type = self._site_type(site)
      if site_type is not None:
        found.append(site_type)
    return self.union(found)

  def _site_type(self, target: cst.CSTNode) -> Optional[str]:
    parent = self._parents.get(target)
    if isinstance(parent, cst.AssignTarget):
      return self._type_of(self._parents[parent].value)
    if isinstance(parent, (cst.For, cst.CompFor)) and parent.target is target:
      return self.element_type(self._type_of(parent.iter))
    if isinstance(parent, cst.NamedExpr) and parent.target is target:
      return self._type_of(parent.value)
    if isinstance(parent, cst.AsName):
      owner = self._parents.get(parent)
      if isinstance(owner, cst.WithItem):
        return self._type_of(owner.item)
      if isinstance(owner, (cst.ExceptHandler, cst.ExceptStarHandler)) and owner.type is not None:
        return self._exception_type(owner.type)
      return None
    if isinstance(parent, (cst.StarredElement, cst.MatchStar)):
      return "list"
    if isinstance(parent, cst.MatchMapping):
      return "dict"
    if isinstance(parent, cst.Element):
      return self._unpacked_type(parent)
    return None

  def _exception_type(self, caught: cst.BaseExpression) -> Optional[str]:
    exprs = [e.value for e in caught.elements] if isinstance(caught, cst.Tuple) else [caught]
    found = []
    for expr in exprs:
      head, args = parse_generic(self._type_of(expr) or "")
      if head != "type" or len(args) != 1:
        return None
      found.append(args[0])
    return self.union(found)

  def _unpacked_type(self, element: cst.Element) -> Optional[str]:
    container = self._parents.get(element)
    if not isinstance(container, (cst.Tuple, cst.List)):
      return None
    index = next(i for i, e in enumerate(container.elements) if e is element)
    size = len(container.elements)
    if any(isinstance(e, cst.StarredElement) for e in container.elements):
      return None

    holder = self._parents.get(container)
    if isinstance(holder, cst.AssignTarget):
      value = self._parents[holder].value
      if isinstance(value, (cst.Tuple, cst.List)) and len(value.elements) == size:
        if not any(isinstance(e, cst.StarredElement) for e in value.elements):
          return self._type_of(value.elements[index].value)
      return self._element_at(self._type_of(value), index)
    if isinstance(holder, (cst.For, cst.CompFor)) and holder.target is container:
      return self._element_at(self.element_type(self._type_of(holder.iter)), index)
    if isinstance(holder, cst.Element):
      return self._element_at(self._unpacked_type(holder), index)
    return None

  def _element_at(self, type_str: Optional[str], index: int) -> Optional[str]:
    if type_str is None:
      return None
    head, args = parse_generic(type_str)
    if head == "tuple" and args and args[-1] != "...":
      return args[index] if index < len(args) else None
    return self.element_type(type_str)

  def element_type(self, type_str: Optional[str]) -> Optional[str]:
    """
    The type produced by iterating over a value of ``type_str``.
    """
    if type_str is None:
      return None
    if type_str in ("str", "range", "bytes"):
      return "int" if type_str != "str" else "str"
    head, args = parse_generic(type_str)
    if head in ITERABLE_HEADS and len(args) == 1:
      return args[0]
    if head == "dict" and len(args) == 2:
      return args[0]
    if head == "tuple" and args:
      if args[-1] == "...":
        return args[0]
      return self.union(args)
    return None

  # --- Expressions ---

  def _type_of(self, node: cst.BaseExpression) -> Optional[str]:
    result = self.infer(node)
    return result.type if result is not None else None

  def infer(self, node: cst.BaseExpression) -> Optional[TypeAndValue]:
    """
    Infers the type of an expression.

    Args:
        node: Any expression node of the module.

    Returns:
        The type (with constant value for literals), or None if unknown.
    """
    if node in self._memo:
      return self._memo[node]
    handler = getattr(self, f"_infer_{type(node).__name__}", None)
    result = handler(node) if handler is not None else None
    if not self._in_progress:
      self._memo[node] = result
    return result

  @staticmethod
  def _known(type_str: Optional[str]) -> Optional[TypeAndValue]:
    if type_str is None or type_str == "Any":
      return None
    return TypeAndValue(type_str)

  def _infer_Name(self, node: cst.Name) -> Optional[TypeAndValue]:
    target = self._uses.get(node)
    if target is None:
      target = self._defs.get(node)
    if target is None:
      return None
    if isinstance(target, Symbol):
      if target.kind == SymbolKind.BUILTIN and target.name in ("True", "False", "None"):
        return TypeAndValue("None" if target.name == "None" else "bool", target.name)
      return self._known(target.type)
    return self._known(self.binding_type(target))

  def _infer_Integer(self, node: cst.Integer) -> TypeAndValue:
    return TypeAndValue("int", repr(node.evaluated_value))

  def _infer_Float(self, node: cst.Float) -> TypeAndValue:
    return TypeAndValue("float", repr(node.evaluated_value))

  def _infer_Imaginary(self, node: cst.Imaginary) -> TypeAndValue:
    return TypeAndValue("complex", repr(node.evaluated_value))

  def _infer_SimpleString(self, node: cst.SimpleString) -> TypeAndValue:
    kind = "bytes" if "b" in node.prefix.lower() else "str"
    return TypeAndValue(kind, repr(node.evaluated_value))

  def _infer_ConcatenatedString(self, node: cst.ConcatenatedString) -> Optional[TypeAndValue]:
    left = self.infer(node.left)
    if left is None:
      return None
    value = node.evaluated_value
    return TypeAndValue(left.type, repr(value) if value is not None else None)

  def _infer_FormattedString(self, node: cst.FormattedString) -> TypeAndValue:
    return TypeAndValue("str")

  def _infer_Ellipsis(self, node: cst.Ellipsis) -> TypeAndValue:
    return TypeAndValue("ellipsis", "Ellipsis")

  def _infer_Lambda(self, node: cst.Lambda) -> TypeAndValue:
    return TypeAndValue(f"function({', '.join(self._param_names(node.params))})")

  def _infer_NamedExpr(self, node: cst.NamedExpr) -> Optional[TypeAndValue]:
    return self.infer(node.value)

  def _infer_Comparison(self, node: cst.Comparison) -> TypeAndValue:
    return TypeAndValue("bool")

  def _infer_UnaryOperation(self, node: cst.UnaryOperation) -> Optional[TypeAndValue]:
    if isinstance(node.operator, cst.Not):
      return TypeAndValue("bool")
    operand = self.infer(node.expression)
    if operand is None or operand.type not in NUMERIC_TYPES:
      return None
    type_str = "int" if operand.type == "bool" else operand.type
    if isinstance(node.operator, cst.BitInvert):
      return TypeAndValue(type_str) if type_str == "int" else None
    value = operand.value
    if value is not None and operand.type != "bool" and isinstance(node.operator, cst.Minus):
      value = value[1:] if value.startswith("-") else f"-{value}"
    elif operand.type == "bool":
      value = None
    return TypeAndValue(type_str, value)

  def _infer_BinaryOperation(self, node: cst.BinaryOperation) -> Optional[TypeAndValue]:
    # left-nested chains (a + b + c ...) are folded iteratively
    chain = [node]
    while isinstance(chain[-1].left, cst.BinaryOperation) and chain[-1].left not in self._memo:
      chain.append(chain[-1].left)

    left = self._type_of(chain[-1].left)
    result = None
    for current in reversed(chain):
      right = self._type_of(current.right)
      result = self._binary_result(current.operator, left, right)
      if current is not node and not self._in_progress:
        self._memo[current] = result
      left = result.type if result is not None else None
    return result

  @staticmethod
  def _binary_result(op: cst.BaseBinaryOp, left: Optional[str], right: Optional[str]) -> Optional[TypeAndValue]:
    if left is None or right is None:
      return None

    if left in NUMERIC_TYPES and right in NUMERIC_TYPES:
      rank = max(NUMERIC_TYPES.index(left), NUMERIC_TYPES.index(right), 1)
      if isinstance(op, BITWISE_OPS):
        return TypeAndValue("int") if rank == 1 else None
      if isinstance(op, cst.MatrixMultiply):
        return None
      if isinstance(op, cst.Divide):
        rank = max(rank, 2)
      return TypeAndValue(NUMERIC_TYPES[rank])

    if isinstance(op, cst.Modulo) and left in ("str", "bytes"):
      return TypeAndValue(left)

    left_head, _ = parse_generic(left)
    right_head, _ = parse_generic(right)
    sequences = ("str", "bytes", "list", "tuple")
    if isinstance(op, cst.Add) and left_head == right_head and left_head in sequences:
      return TypeAndValue(left if left == right else left_head)
    if isinstance(op, cst.Multiply):
      if left_head in sequences and right in ("int", "bool"):
        return TypeAndValue(left)
      if right_head in sequences and left in ("int", "bool"):
        return TypeAndValue(right)
    return None

  def _infer_BooleanOperation(self, node: cst.BooleanOperation) -> Optional[TypeAndValue]:
    left, right = self._type_of(node.left), self._type_of(node.right)
    if left is None or right is None:
      return None
    return TypeAndValue(self.union([left, right]))

  def _infer_IfExp(self, node: cst.IfExp) -> Optional[TypeAndValue]:
    body, orelse = self._type_of(node.body), self._type_of(node.orelse)
    if body is None or orelse is None:
      return None
    return TypeAndValue(self.union([body, orelse]))

  # --- Containers ---

  def _element_types(self, elements) -> Optional[List[str]]:
    found = []
    for element in elements:
      if isinstance(element, cst.StarredElement):
        return None
      t = self._type_of(element.value)
      if t is None:
        return None
      found.append(t)
    return found

  def _sequence(self, head: str, elements) -> TypeAndValue:
    found = self._element_types(elements)
    if not found:
      return TypeAndValue(head)
    return TypeAndValue(f"{head}[{self.union(found)}]")

  def _infer_List(self, node: cst.List) -> TypeAndValue:
    return self._sequence("list", node.elements)

  def _infer_Set(self, node: cst.Set) -> TypeAndValue:
    return self._sequence("set", node.elements)

  def _infer_Tuple(self, node: cst.Tuple) -> TypeAndValue:
    if not node.elements or any(isinstance(e, cst.StarredElement) for e in node.elements):
      return TypeAndValue("tuple")
    parts = [self._type_of(e.value) or "Any" for e in node.elements]
    return TypeAndValue(f"tuple[{', '.join(parts)}]")

  def _infer_Dict(self, node: cst.Dict) -> TypeAndValue:
    keys, values = [], []
    for element in node.elements:
      if not isinstance(element, cst.DictElement):
        return TypeAndValue("dict")
      key, value = self._type_of(element.key), self._type_of(element.value)
      if key is None or value is None:
        return TypeAndValue("dict")
      keys.append(key)
      values.append(value)
    if not keys:
      return TypeAndValue("dict")
    return TypeAndValue(f"dict[{self.union(keys)}, {self.union(values)}]")

  def _comprehension(self, head: str, elt: cst.BaseExpression) -> TypeAndValue:
    t = self._type_of(elt)
    return TypeAndValue(f"{head}[{t}]" if t is not None else head)

  def _infer_ListComp(self, node: cst.ListComp) -> TypeAndValue:
    return self._comprehension("list", node.elt)

  def _infer_SetComp(self, node: cst.SetComp) -> TypeAndValue:
    return self._comprehension("set", node.elt)

  def _infer_GeneratorExp(self, node: cst.GeneratorExp) -> TypeAndValue:
    return self._comprehension("generator", node.elt)

  def _infer_DictComp(self, node: cst.DictComp) -> TypeAndValue:
    key, value = self._type_of(node.key), self._type_of(node.value)
    if key is None or value is None:
      return TypeAndValue("dict")
    return TypeAndValue(f"dict[{key}, {value}]")

  def _infer_Subscript(self, node: cst.Subscript) -> Optional[TypeAndValue]:
    base = self._type_of(node.value)
    if base is None or len(node.slice) != 1:
      return None
    head, args = parse_generic(base)
    index = node.slice[0].slice

    if isinstance(index, cst.Slice):
      if head in ("list", "tuple", "str", "bytes"):
        return TypeAndValue(base if head != "tuple" else "tuple")
      return None
    if base == "str":
      return TypeAndValue("str")
    if base == "bytes":
      return TypeAndValue("int")
    if head == "list" and len(args) == 1:
      return self._known(args[0])
    if head == "dict" and len(args) == 2:
      return self._known(args[1])
    if head == "tuple" and args:
      if args[-1] == "...":
        return self._known(args[0])
      if isinstance(index.value, cst.Integer):
        position = index.value.evaluated_value
        if -len(args) <= position < len(args):
          return self._known(args[position])
      return self._known(self.union(args))
    return None

  # --- Calls and attributes ---

  def _call_result(self, type_str: str) -> Optional[str]:
    head, args = parse_generic(type_str)
    if head == "type" and len(args) == 1:
      return args[0]
    if head == "Union":
      results = [self._call_result(member) for member in args]
      if any(r is None for r in results):
        return None
      return self.union(results)
    if type_str.startswith("function"):
      _, arrow, returns = type_str.partition(" -> ")
      return returns if arrow else None
    return None

  def _infer_Call(self, node: cst.Call) -> Optional[TypeAndValue]:
    func = self._type_of(node.func)
    if func is None:
      return None
    return self._known(self._call_result(func))

  def _record_member_use(self, node: cst.Attribute, symbol: Symbol) -> None:
    if node.attr not in self._defs:
      self._member_uses[node.attr] = symbol

  def _lookup_member(self, class_def: cst.ClassDef, name: str, seen=None) -> Optional[Binding]:
    seen = seen or set()
    if class_def in seen:
      return None
    seen.add(class_def)
    members = self._class_members.get(class_def, {})
    if name in members:
      return members[name]
    for base in class_def.bases:
      head, args = parse_generic(self._type_of(base.value) or "")
      if head == "type" and len(args) == 1 and args[0] in self._classes:
        found = self._lookup_member(self._classes[args[0]], name, seen)
        if found is not None:
          return found
    return None

  def _infer_Attribute(self, node: cst.Attribute) -> Optional[TypeAndValue]:
    receiver = self._type_of(node.value)
    if receiver is None:
      return None
    attr = node.attr.value

    if receiver.startswith("module "):
      path = receiver[len("module ") :]
      level = len(path) - len(path.lstrip("."))
      member = self.loader.member(path[level:], attr, level)
      if member is None:
        return None
      self._record_member_use(node, member)
      return self._known(member.type)

    head, args = parse_generic(receiver)
    on_class = head == "type" and len(args) == 1
    class_def = self._classes.get(args[0] if on_class else receiver)
    if class_def is None:
      return None
    binding = self._lookup_member(class_def, attr)
    if binding is None:
      return None

    symbol = self.symbol_of(binding)
    self._record_member_use(node, symbol)
    member_type = symbol.type

    func = self._first(binding.nodes, cst.FunctionDef)
    if binding.kind == SymbolKind.FUNCTION and func is not None:
      decorators = decorator_names(func)
      if decorators & {"property", "cached_property", "functools.cached_property"}:
        kind = SelectionKind.FIELD_VAL
        member_type = self._code(func.returns.annotation) if func.returns is not None else "Any"
      elif on_class and "classmethod" not in decorators:
        kind = SelectionKind.METHOD_EXPR
      else:
        kind = SelectionKind.METHOD_VAL
        member_type = self.function_type(func, bound=receiver_param(func) is not None)
    elif binding.kind == SymbolKind.CLASS:
      return self._known(member_type)
    else:
      kind = SelectionKind.FIELD_VAL

    self._selections[node] = Selection(kind=kind, receiver=receiver, obj=symbol)
    return self._known(member_type)
