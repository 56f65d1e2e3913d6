"""
notifyprops Renderers
=====================

Renderers turn a ClassDocument into source text. The document decides what is
emitted; a renderer only decides how it is spelled, so the same document can
produce an importable module (PythonRenderer) or a type stub (StubRenderer).

Output of PythonRenderer for a type ``Person`` in module ``models`` with one
field ``_name: str``:

```python
# The following was generated by notifyprops. Do not edit.
from __future__ import annotations

import models as _origin
import notifyprops.markers as _support


@_support.partial_class(_origin.Person)
class Person(_support.NotifyPropertyChanged, _support.NotifyPropertyChanging):
    property_changed = _support.Event()
    property_changing = _support.Event()

    @property
    def Name(self) -> str:
        return self._name

    @Name.setter
    def Name(self, value: str) -> None:
        handlers = self.property_changing
        if handlers:
            handlers.notify(self, _support.PropertyChangingEventArgs("Name"))
        self._name = value
        handlers = self.property_changed
        if handlers:
            handlers.notify(self, _support.PropertyChangedEventArgs("Name"))
```

The carrier class keeps the marked type's name so that private fields
(``__field``) are mangled the same way in generated and hand-written code.
"""

import ast
import builtins
from abc import ABC, abstractmethod
from typing import Dict, List, Set

from .document import ClassDocument, NotificationMember, PropertyNode

HEADER = "# The following was generated by notifyprops. Do not edit."

INDENT = "    "


class Renderer(ABC):
    """Turns a ClassDocument into text."""

    file_extension = ".py"

    @abstractmethod
    def render(self, document: ClassDocument) -> str:
        pass


class PythonRenderer(Renderer):
    """Renders an importable module that merges itself into the marked type."""

    file_extension = ".py"

    def render(self, document: ClassDocument) -> str:
        aliases = self._module_aliases(document)
        support = aliases[document.support_module]

        lines = [HEADER, "from __future__ import annotations", ""]
        for module, alias in sorted(aliases.items(), key=lambda item: item[1]):
            lines.append(f"import {module} as {alias}")
        lines += ["", ""]

        bases = ", ".join(
            f"{aliases[ref.module]}.{ref.name}" for ref in document.interfaces
        )
        lines.append(
            f"@{support}.partial_class({aliases[document.module]}.{document.type_name})"
        )
        lines.append(f"class {document.type_name}({bases}):" if bases else f"class {document.type_name}:")

        body: List[str] = [
            f"{member.name} = {support}.Event()" for member in document.notifications
        ]
        for node in document.properties:
            if body:
                body.append("")
            body.extend(self._property(node, document, support))
        lines.extend(INDENT + line if line else "" for line in body)
        return "\n".join(lines) + "\n"

    def _property(
        self, node: PropertyNode, document: ClassDocument, support: str
    ) -> List[str]:
        returns = f" -> {node.type_name}" if node.type_name else ""
        value = f"value: {node.type_name}" if node.type_name else "value"
        return [
            "@property",
            f"def {node.name}(self){returns}:",
            f"{INDENT}return self.{node.backing_field}",
            "",
            f"@{node.name}.setter",
            f"def {node.name}(self, {value}) -> None:",
            *self._notify(document.changing, node, support),
            f"{INDENT}self.{node.backing_field} = value",
            *self._notify(document.changed, node, support),
        ]

    @staticmethod
    def _notify(member: NotificationMember, node: PropertyNode, support: str) -> List[str]:
        return [
            f"{INDENT}handlers = self.{member.name}",
            f"{INDENT}if handlers:",
            f'{INDENT * 2}handlers.notify(self, {support}.{member.args_type}("{node.name}"))',
        ]

    @staticmethod
    def _module_aliases(document: ClassDocument) -> Dict[str, str]:
        aliases = {document.module: "_origin"}
        aliases.setdefault(document.support_module, "_support")
        for ref in document.interfaces:
            if ref.module not in aliases:
                aliases[ref.module] = f"_capability{len(aliases) - 1}"
        return aliases


class StubRenderer(Renderer):
    """
    Renders a ``.pyi`` stub listing the members merged into the marked type.

    The stub describes the generated module, so a checker only picks it up
    next to that module. Names used by field annotations are imported from the
    marked type's module, where the annotations were written.
    """

    file_extension = ".pyi"

    def render(self, document: ClassDocument) -> str:
        imports: Dict[str, set] = {}
        for ref in document.interfaces:
            imports.setdefault(ref.module, set()).add(ref.name)
        if document.notifications:
            imports.setdefault(document.support_module, set()).add("Event")

        annotated: Set[str] = set()
        for node in document.properties:
            if node.type_name:
                annotated |= annotation_names(node.type_name)
        annotated -= {document.type_name}
        annotated = {name for name in annotated if not hasattr(builtins, name)}
        for names in imports.values():
            annotated -= names
        if annotated:
            imports.setdefault(document.module, set()).update(annotated)

        lines = [HEADER]
        if any(node.type_name is None for node in document.properties) and "Any" not in annotated:
            lines.append("from typing import Any")
        for module in sorted(imports):
            lines.append(f"from {module} import {', '.join(sorted(imports[module]))}")
        lines.append("")

        bases = ", ".join(ref.name for ref in document.interfaces)
        lines.append(f"class {document.type_name}({bases}):" if bases else f"class {document.type_name}:")
        for member in document.notifications:
            lines.append(f"{INDENT}{member.name}: Event")
        for node in document.properties:
            type_name = node.type_name or "Any"
            lines += [
                f"{INDENT}@property",
                f"{INDENT}def {node.name}(self) -> {type_name}: ...",
                f"{INDENT}@{node.name}.setter",
                f"{INDENT}def {node.name}(self, value: {type_name}) -> None: ...",
            ]
        return "\n".join(lines) + "\n"


def annotation_names(annotation: str) -> Set[str]:
    """Top-level names an annotation refers to; a quoted annotation is unquoted first."""
    try:
        expression = ast.parse(annotation, mode="eval").body
    except SyntaxError:
        return set()
    if isinstance(expression, ast.Constant) and isinstance(expression.value, str):
        return annotation_names(expression.value)
    return {node.id for node in ast.walk(expression) if isinstance(node, ast.Name)}
