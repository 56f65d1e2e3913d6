"""
Shared pytest fixtures and configuration for notifyprops tests.

The fixtures play the part of the generation host: they put the well-known
declarations into every compilation and load generated modules so their
behavior can be checked at run time.
"""

import inspect
import sys
import types

import pytest

from notifyprops import markers
from notifyprops.analysis import Compilation

# Package __init__ re-exporting the markers, as the installed package does
PACKAGE_SOURCE = (
    "from .markers import NotifyPropertyChanged, NotifyPropertyChanging, "
    "observable_object\n"
)


@pytest.fixture(scope="session")
def markers_source():
    return inspect.getsource(markers)


@pytest.fixture
def make_compilation(markers_source):
    """Build a compilation of the given modules plus the well-known declarations."""

    def factory(modules, include_markers=True):
        sources = {}
        if include_markers:
            sources["notifyprops"] = PACKAGE_SOURCE
            sources["notifyprops.markers"] = markers_source
        sources.update(modules)
        return Compilation.from_sources(sources, packages=["notifyprops"])

    return factory


@pytest.fixture
def load_module(monkeypatch):
    """Execute source as a registered module; removed again after the test."""

    def loader(name, source):
        module = types.ModuleType(name)
        module.__file__ = f"<{name}>"
        monkeypatch.setitem(sys.modules, name, module)
        exec(compile(source, module.__file__, "exec"), module.__dict__)
        return module

    return loader
