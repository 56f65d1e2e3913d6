"""Unit tests for diagnostics and the reporter."""

import threading

import pytest

from notifyprops.analysis.syntax import Location
from notifyprops.diagnostics import (
    NESTED_TYPE,
    SKIPPED_FIELD,
    Diagnostic,
    DiagnosticBag,
    DiagnosticReporter,
    Severity,
)


@pytest.mark.unit
def test_message_substitutes_arguments():
    diagnostic = Diagnostic(NESTED_TYPE, Location("models.py", 4, 4), ("models.Outer.Inner",))

    assert diagnostic.code == "NP100"
    assert diagnostic.severity is Severity.WARNING
    assert diagnostic.message == (
        "Targeted class models.Outer.Inner can not be a part of another class."
    )
    assert str(diagnostic) == (
        "models.py:4:5: warning NP100: Targeted class models.Outer.Inner "
        "can not be a part of another class."
    )


@pytest.mark.unit
def test_reporter_delivers_to_host_channel():
    received = []
    reporter = DiagnosticReporter(received.append)

    diagnostic = reporter.report(SKIPPED_FIELD, Location("m.py", 2, 4), "_", "m.P", "empty")

    assert received == [diagnostic]
    assert diagnostic.message == "Field _ of class m.P produces no property: empty."


@pytest.mark.unit
def test_reporter_defaults_to_a_bag():
    reporter = DiagnosticReporter()
    reporter.report(NESTED_TYPE, Location("m.py", 1, 0), "m.A.B")
    assert isinstance(reporter.channel, DiagnosticBag)
    assert len(reporter.channel) == 1


@pytest.mark.unit
def test_bag_orders_by_location_regardless_of_arrival():
    bag = DiagnosticBag()
    late = Diagnostic(NESTED_TYPE, Location("b.py", 1, 0), ("b.X.Y",))
    early = Diagnostic(NESTED_TYPE, Location("a.py", 9, 0), ("a.X.Y",))
    middle = Diagnostic(SKIPPED_FIELD, Location("a.py", 10, 4), ("_", "a.X", "empty"))

    for diagnostic in (late, middle, early):
        bag(diagnostic)

    assert bag.sorted() == [early, middle, late]
    assert list(bag) == [early, middle, late]


@pytest.mark.unit
def test_bag_accepts_concurrent_reports():
    bag = DiagnosticBag()
    reporter = DiagnosticReporter(bag)

    def report(index):
        for line in range(50):
            reporter.report(NESTED_TYPE, Location(f"m{index}.py", line + 1, 0), "x")

    threads = [threading.Thread(target=report, args=(i,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(bag) == 200
