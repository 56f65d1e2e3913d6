"""
notifyprops Errors
==================

Exceptions raised to the generation host. Structural and naming problems in
the analyzed program are reported as diagnostics instead; only conditions that
make correct generation impossible are raised.
"""

from typing import Optional


class GeneratorError(Exception):
    """Base class for all notifyprops errors."""

    pass


class MissingWellKnownSymbolError(GeneratorError):
    """Raised when the marker or a capability declaration cannot be resolved."""

    def __init__(self, metadata_name: str):
        self.metadata_name = metadata_name
        super().__init__(
            f"Well-known declaration '{metadata_name}' is not resolvable in the "
            "compilation; the host must supply it before generation runs"
        )


class SourceParseError(GeneratorError):
    """Raised when a module handed to the compilation is not valid Python."""

    def __init__(self, module_name: str, path: Optional[str], cause: SyntaxError):
        self.module_name = module_name
        self.path = path
        super().__init__(
            f"Cannot parse module '{module_name}' ({path or '<string>'}): {cause.msg} "
            f"at line {cause.lineno}"
        )


class ArtifactCollisionError(GeneratorError):
    """Raised when two marked types would produce the same artifact name."""

    def __init__(self, hint_name: str):
        self.hint_name = hint_name
        super().__init__(f"Artifact '{hint_name}' was generated more than once")


class GenerationCancelled(GeneratorError):
    """Raised when the host cancels a generation pass between two types."""

    pass
