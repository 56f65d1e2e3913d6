"""
notifyprops Compilation - Semantic Binding of a Program Snapshot
================================================================

A Compilation is an immutable set of parsed modules plus the machinery to bind
names inside them to symbols. Binding is lazy: a module's SemanticModel is
built on first use and kept in an LRU cache, and the well-known marker and
capability identities are resolved at most once per compilation.

Name resolution is intentionally module-level and structural. A name resolves
through the bindings a module creates at top level:

- ``class X`` / ``def X`` declare a local symbol
- ``import a.b`` / ``import a.b as m`` / ``from a import b as c`` bind a target
  name; relative imports are anchored at the module's package
- plain assignments bind a variable symbol, which is never followed, so
  ``alias = observable_object`` does not carry the marker identity

Imports are followed across modules of the compilation (re-exports), bounded
by a fixed depth so that import cycles end in an unresolved name.

Usage:
    compilation = Compilation.from_sources({
        "notifyprops.markers": markers_source,
        "app.models": models_source,
    })
    marker = compilation.get_type_by_metadata_name_or_raise(
        "notifyprops.markers.observable_object"
    )
"""

import ast
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from cachetools import LRUCache

from ..errors import MissingWellKnownSymbolError
from .symbols import (
    FieldSymbol,
    Symbol,
    SymbolKind,
    TypeSymbol,
    WellKnownNames,
    WellKnownSymbols,
    module_symbol,
)
from .syntax import Location, SyntaxTree, parse_module

logger = logging.getLogger(__name__)

# Maximum number of import hops followed while resolving one dotted name
MAX_REEXPORT_DEPTH = 16


@dataclass(frozen=True)
class AttributeData:
    """One decorator applied to a class, bound to the symbol it names."""

    attribute_class: Optional[Symbol]
    application_location: Location
    node: ast.expr


class SemanticModel:
    """
    Bound view of a single module.

    The model walks the module once at construction, creating a symbol for every
    class (nested ones included) and recording the module's top-level name
    bindings. Everything else is computed on request and has no side effects.
    """

    def __init__(self, compilation: "Compilation", tree: SyntaxTree):
        self.compilation = compilation
        self.tree = tree
        self.module = module_symbol(tree.module_name)

        self._types: Dict[ast.ClassDef, TypeSymbol] = {}
        # name -> dotted target; local declarations map to "<module>.<name>"
        self._bindings: Dict[str, str] = {}
        # name -> symbol declared in this module at top level
        self._declarations: Dict[str, Symbol] = {}

        self._bind_scope(tree.root.body, self.module)
        self._bind_module_names(tree.root.body)
        logger.debug(
            "Bound module %s: %d types, %d names",
            tree.module_name,
            len(self._types),
            len(self._bindings),
        )

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def _bind_scope(self, body: Sequence[ast.stmt], container: Symbol) -> None:
        for node in body:
            if isinstance(node, ast.ClassDef):
                symbol = TypeSymbol(
                    name=node.name,
                    kind=SymbolKind.TYPE,
                    containing_symbol=container,
                    location=Location.from_node(self.tree.path, node),
                    node=node,
                    tree=self.tree,
                )
                self._types[node] = symbol
                self._bind_scope(node.body, symbol)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                function = Symbol(
                    node.name,
                    SymbolKind.FUNCTION,
                    container,
                    Location.from_node(self.tree.path, node),
                )
                self._bind_scope(node.body, function)
            else:
                # Classes under if/try/with/for blocks still belong to this scope
                for child_body in self._nested_bodies(node):
                    self._bind_scope(child_body, container)

    @staticmethod
    def _nested_bodies(node: ast.stmt) -> List[List[ast.stmt]]:
        bodies = []
        for name in ("body", "orelse", "finalbody"):
            value = getattr(node, name, None)
            if isinstance(value, list) and value and isinstance(value[0], ast.stmt):
                bodies.append(value)
        for handler in getattr(node, "handlers", None) or []:
            bodies.append(handler.body)
        for case in getattr(node, "cases", None) or []:
            bodies.append(case.body)
        return bodies

    def _bind_module_names(self, body: Sequence[ast.stmt]) -> None:
        for node in body:
            if isinstance(node, ast.ClassDef):
                self._declare(node.name, self._types[node])
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self._declare(
                    node.name,
                    Symbol(
                        node.name,
                        SymbolKind.FUNCTION,
                        self.module,
                        Location.from_node(self.tree.path, node),
                    ),
                )
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        self._bindings[alias.asname] = alias.name
                    else:
                        head = alias.name.partition(".")[0]
                        self._bindings[head] = head
                    self._declarations.pop(alias.asname or alias.name.partition(".")[0], None)
            elif isinstance(node, ast.ImportFrom):
                source = self._import_source(node)
                if source is None:
                    continue
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    local = alias.asname or alias.name
                    self._bindings[local] = f"{source}.{alias.name}"
                    self._declarations.pop(local, None)
            elif isinstance(node, (ast.Assign, ast.AnnAssign)):
                targets = node.targets if isinstance(node, ast.Assign) else [node.target]
                for target in targets:
                    if isinstance(target, ast.Name):
                        self._declare(
                            target.id,
                            Symbol(
                                target.id,
                                SymbolKind.VARIABLE,
                                self.module,
                                Location.from_node(self.tree.path, target),
                            ),
                        )
            else:
                self._bind_module_names_nested(node)

    def _bind_module_names_nested(self, node: ast.stmt) -> None:
        for child_body in self._nested_bodies(node):
            self._bind_module_names(child_body)

    def _declare(self, name: str, symbol: Symbol) -> None:
        self._declarations[name] = symbol
        self._bindings[name] = f"{self.tree.module_name}.{name}"

    def _import_source(self, node: ast.ImportFrom) -> Optional[str]:
        if not node.level:
            return node.module
        package = self.tree.package
        parts = package.split(".") if package else []
        if node.level - 1 > len(parts):
            return None
        base = parts[: len(parts) - (node.level - 1)]
        if node.module:
            base.append(node.module)
        return ".".join(base) or None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def declared_symbol(self, node: ast.ClassDef) -> TypeSymbol:
        """Return the symbol bound to a class declaration of this module."""
        return self._types[node]

    def resolve_expression(self, expr: ast.expr) -> Optional[Symbol]:
        """Bind a (possibly called) dotted-name expression to a symbol."""
        if isinstance(expr, ast.Call):
            expr = expr.func
        dotted = _dotted_name(expr)
        if dotted is None:
            return None
        head, _, rest = dotted.partition(".")
        target = self._bindings.get(head)
        if target is None:
            return None
        return self.compilation.get_type_by_metadata_name(
            f"{target}.{rest}" if rest else target
        )

    def attributes(self, symbol: TypeSymbol) -> List[AttributeData]:
        """Decorators of a class in application order, each bound to a symbol."""
        return [
            AttributeData(
                attribute_class=self.resolve_expression(decorator),
                application_location=Location.from_node(self.tree.path, decorator),
                node=decorator,
            )
            for decorator in symbol.node.decorator_list
        ]

    def declared_interfaces(self, symbol: TypeSymbol) -> List[Symbol]:
        """Directly declared base classes that resolve to a symbol."""
        interfaces = []
        for base in symbol.node.bases:
            resolved = self.resolve_expression(base)
            if resolved is not None:
                interfaces.append(resolved)
        return interfaces

    def declared_fields(self, symbol: TypeSymbol) -> List[FieldSymbol]:
        """
        Fields declared by the class itself, in declaration order.

        Class-body assignments and ``self.<name>`` assignments inside ``__init__``
        count; inherited members, methods, dunder names and ClassVar
        declarations do not. The first declaration of a name wins.
        """
        found: "OrderedDict[str, Tuple[Tuple[int, int], Optional[str], ast.AST]]" = (
            OrderedDict()
        )

        def add(name: str, type_name: Optional[str], node: ast.AST) -> None:
            if _is_dunder(name):
                return
            position = (node.lineno, node.col_offset)
            existing = found.get(name)
            if existing is None:
                found[name] = (position, type_name, node)
            elif existing[1] is None and type_name is not None:
                found[name] = (existing[0], type_name, existing[2])

        for statement in symbol.node.body:
            if isinstance(statement, ast.AnnAssign) and isinstance(statement.target, ast.Name):
                if not _is_class_var(statement.annotation):
                    add(statement.target.id, ast.unparse(statement.annotation), statement)
            elif isinstance(statement, ast.Assign):
                for target in statement.targets:
                    if isinstance(target, ast.Name):
                        add(target.id, None, statement)
            elif isinstance(statement, ast.FunctionDef) and statement.name == "__init__":
                for name, type_name, node in _instance_assignments(statement):
                    add(name, type_name, node)

        ordered = sorted(found.items(), key=lambda item: item[1][0])
        return [
            FieldSymbol(
                name=name,
                kind=SymbolKind.FIELD,
                containing_symbol=symbol,
                location=Location.from_node(self.tree.path, node),
                type_name=type_name,
                ordinal=index,
            )
            for index, (name, (_, type_name, node)) in enumerate(ordered)
        ]

    def lookup_member(self, path: Sequence[str], depth: int) -> Optional[Symbol]:
        """Resolve a dotted path relative to this module."""
        head, rest = path[0], list(path[1:])
        symbol = self._declarations.get(head)
        if symbol is None:
            target = self._bindings.get(head)
            if target is None or target == f"{self.tree.module_name}.{head}":
                return None
            # Import binding: follow the re-export into its source module
            return self.compilation._lookup(".".join([target, *rest]), depth + 1)
        for name in rest:
            if not isinstance(symbol, TypeSymbol):
                return None
            symbol = self._nested_type(symbol, name)
            if symbol is None:
                return None
        return symbol

    def _nested_type(self, symbol: TypeSymbol, name: str) -> Optional[TypeSymbol]:
        for statement in symbol.node.body:
            if isinstance(statement, ast.ClassDef) and statement.name == name:
                return self._types[statement]
        return None


class Compilation:
    """
    Immutable snapshot of the analyzed program.

    Attributes:
        trees: Parsed modules in the order the host supplied them
    """

    def __init__(self, trees: Iterable[SyntaxTree], model_cache_size: int = 256):
        self._trees: Dict[str, SyntaxTree] = {}
        for tree in trees:
            if tree.module_name in self._trees:
                raise ValueError(f"Module '{tree.module_name}' supplied more than once")
            self._trees[tree.module_name] = tree

        self._models = LRUCache(maxsize=model_cache_size)
        self._lock = threading.RLock()
        self._well_known: Dict[WellKnownNames, WellKnownSymbols] = {}

    @classmethod
    def from_sources(
        cls, sources: Mapping[str, str], packages: Iterable[str] = ()
    ) -> "Compilation":
        """
        Parse a mapping of module name to source text.

        Args:
            sources: Module name -> Python source
            packages: Names of modules that are package ``__init__`` modules
        """
        package_names = set(packages)
        return cls(
            parse_module(source, name, is_package=name in package_names)
            for name, source in sources.items()
        )

    @property
    def trees(self) -> List[SyntaxTree]:
        return list(self._trees.values())

    def get_tree(self, module_name: str) -> Optional[SyntaxTree]:
        return self._trees.get(module_name)

    def get_semantic_model(self, tree: SyntaxTree) -> SemanticModel:
        with self._lock:
            model = self._models.get(tree.module_name)
            if model is None:
                model = SemanticModel(self, tree)
                self._models[tree.module_name] = model
            return model

    def get_type_by_metadata_name(self, metadata_name: str) -> Optional[Symbol]:
        """Resolve a fully qualified dotted name, or return None."""
        return self._lookup(metadata_name, 0)

    def get_type_by_metadata_name_or_raise(self, metadata_name: str) -> Symbol:
        symbol = self.get_type_by_metadata_name(metadata_name)
        if symbol is None:
            raise MissingWellKnownSymbolError(metadata_name)
        return symbol

    def _lookup(self, dotted: str, depth: int) -> Optional[Symbol]:
        if depth > MAX_REEXPORT_DEPTH:
            logger.debug("Gave up resolving %s: re-export chain too deep", dotted)
            return None
        if dotted in self._trees:
            return module_symbol(dotted)
        parts = dotted.split(".")
        for split in range(len(parts) - 1, 0, -1):
            tree = self._trees.get(".".join(parts[:split]))
            if tree is not None:
                return self.get_semantic_model(tree).lookup_member(parts[split:], depth)
        return None

    def well_known_symbols(self, names: WellKnownNames) -> WellKnownSymbols:
        """
        Resolve the marker and capability identities once per compilation.

        Concurrent first calls may each resolve; they compute the same value and
        the first stored result is the one every caller receives.

        Raises:
            MissingWellKnownSymbolError: If any of the three names is unresolvable
        """
        cached = self._well_known.get(names)
        if cached is not None:
            return cached
        symbols = WellKnownSymbols(
            marker=self.get_type_by_metadata_name_or_raise(names.marker),
            changed=self.get_type_by_metadata_name_or_raise(names.changed),
            changing=self.get_type_by_metadata_name_or_raise(names.changing),
            names=names,
        )
        with self._lock:
            return self._well_known.setdefault(names, symbols)


def _dotted_name(expr: ast.expr) -> Optional[str]:
    parts = []
    while isinstance(expr, ast.Attribute):
        parts.append(expr.attr)
        expr = expr.value
    if not isinstance(expr, ast.Name):
        return None
    parts.append(expr.id)
    return ".".join(reversed(parts))


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def _is_class_var(annotation: ast.expr) -> bool:
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        return annotation.value.split("[", 1)[0].rsplit(".", 1)[-1] == "ClassVar"
    dotted = _dotted_name(annotation)
    return dotted is not None and dotted.rsplit(".", 1)[-1] == "ClassVar"


def _instance_assignments(init: ast.FunctionDef):
    """Yield (name, type_name, node) for ``self.<name>`` stores inside __init__."""
    positional = init.args.posonlyargs + init.args.args
    if not positional:
        return
    receiver = positional[0].arg
    parameters = {
        arg.arg: ast.unparse(arg.annotation)
        for arg in positional + init.args.kwonlyargs
        if arg.annotation is not None
    }

    def walk(body):
        for statement in body:
            if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                continue
            if isinstance(statement, ast.AnnAssign):
                target = statement.target
                if _is_receiver_attribute(target, receiver):
                    yield target.attr, ast.unparse(statement.annotation), statement
            elif isinstance(statement, ast.Assign):
                for target in statement.targets:
                    if _is_receiver_attribute(target, receiver):
                        type_name = None
                        if isinstance(statement.value, ast.Name):
                            type_name = parameters.get(statement.value.id)
                        yield target.attr, type_name, statement
            for child_body in SemanticModel._nested_bodies(statement):
                yield from walk(child_body)

    yield from walk(init.body)


def _is_receiver_attribute(target: ast.expr, receiver: str) -> bool:
    return (
        isinstance(target, ast.Attribute)
        and isinstance(target.value, ast.Name)
        and target.value.id == receiver
    )
