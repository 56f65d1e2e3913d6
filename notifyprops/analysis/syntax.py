"""
notifyprops Syntax - Parsed Modules and the Marker Scanner
==========================================================

This module holds the syntactic half of the analysis: parsed module trees,
source locations, and the scanner that picks out candidate class declarations.

The scanner is deliberately cheap. It keeps every class that carries at least
one decorator and leaves the question "is this really our marker?" to the
semantic resolver, so false positives are expected here but false negatives
are not.

Usage:
    tree = parse_module(source, "app.models", "app/models.py")
    for candidate in MarkerScanner().scan([tree]):
        print(candidate.node.name)
"""

import ast
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ..errors import SourceParseError


@dataclass(frozen=True)
class Location:
    """A span of source text, 1-based lines and 0-based columns like `ast`."""

    path: str
    line: int
    column: int
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @classmethod
    def from_node(cls, path: str, node: ast.AST) -> "Location":
        return cls(
            path=path,
            line=node.lineno,
            column=node.col_offset,
            end_line=getattr(node, "end_lineno", None),
            end_column=getattr(node, "end_col_offset", None),
        )

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column + 1}"


@dataclass(frozen=True, eq=False)
class SyntaxTree:
    """One parsed module of the program snapshot."""

    module_name: str
    path: str
    source: str
    root: ast.Module
    is_package: bool = False

    @property
    def package(self) -> str:
        """Package that relative imports in this module are anchored to."""
        if self.is_package:
            return self.module_name
        return self.module_name.rpartition(".")[0]


def parse_module(
    source: str,
    module_name: str,
    path: Optional[str] = None,
    is_package: bool = False,
) -> SyntaxTree:
    """
    Parse module source into a SyntaxTree.

    Args:
        source: Python source text
        module_name: Dotted import name of the module
        path: Path reported in diagnostics (defaults to one derived from the name)
        is_package: Whether the source is a package ``__init__`` module

    Raises:
        SourceParseError: If the source is not valid Python
    """
    if path is None:
        path = module_name.replace(".", "/") + ("/__init__.py" if is_package else ".py")
    try:
        root = ast.parse(source, filename=path)
    except SyntaxError as e:
        raise SourceParseError(module_name, path, e) from e
    return SyntaxTree(module_name, path, source, root, is_package)


@dataclass(frozen=True)
class CandidateDeclaration:
    """A decorated class declaration found by the scanner."""

    tree: SyntaxTree
    node: ast.ClassDef

    @property
    def location(self) -> Location:
        return Location.from_node(self.tree.path, self.node)


class MarkerScanner:
    """Syntactic pre-filter for classes that might carry the marker."""

    def scan(self, trees: Iterable[SyntaxTree]) -> Iterator[CandidateDeclaration]:
        """Yield every decorated class in source order, nested ones included."""
        for tree in trees:
            for node in self._walk(tree.root):
                if isinstance(node, ast.ClassDef) and node.decorator_list:
                    yield CandidateDeclaration(tree, node)

    def _walk(self, node: ast.AST) -> Iterator[ast.AST]:
        # ast.walk is breadth-first; candidates must come out in source order
        for child in ast.iter_child_nodes(node):
            yield child
            yield from self._walk(child)
