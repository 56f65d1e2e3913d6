"""
Integration tests running whole generation passes and loading the generated
modules to check their run-time behavior.
"""

import sys
import textwrap
import threading

import pytest

from notifyprops import (
    ArtifactCollisionError,
    GenerationCancelled,
    GeneratorOptions,
    MissingWellKnownSymbolError,
    NotifyPropertyChanged,
    NotifyPropertyChanging,
    ObservableObjectGenerator,
    SkipReason,
    StubRenderer,
)
from notifyprops.generation.naming import Emitted, Skipped

PERSON = textwrap.dedent(
    """
    from typing import List

    from notifyprops.markers import observable_object


    @observable_object
    class Person:
        _name: str = ""
        _age: int = 0
        name_cache = None

        def __init__(self, tags: List[str]):
            self._tags = tags
            self.__secret = 0
            self._ = None
    """
)


SHADOWED = textwrap.dedent(
    """
    from notifyprops.markers import observable_object


    @observable_object
    class Person:
        _name: str = ""

        def __init__(self):
            self.__name = "hidden"
    """
)


def run(compilation, **options):
    return ObservableObjectGenerator(GeneratorOptions(**options)).run(compilation)


@pytest.mark.integration
class TestGeneration:
    def test_one_artifact_per_marked_type(self, make_compilation):
        result = run(make_compilation({"models": PERSON}))

        assert [a.hint_name for a in result.artifacts] == ["Person_observable.py"]
        artifact = result.artifacts[0]
        assert artifact.content == artifact.text.encode("utf-8")

    def test_properties_in_declaration_order(self, make_compilation):
        text = run(make_compilation({"models": PERSON})).artifacts[0].text

        positions = [text.index(f"def {name}(self)") for name in ("Name", "Age", "Tags", "Secret")]
        assert positions == sorted(positions)

    def test_skipped_fields_are_reported_and_observable(self, make_compilation):
        result = run(make_compilation({"models": PERSON}))

        outcomes = result.field_outcomes["models.Person"]
        assert [type(o) for o in outcomes] == [Emitted, Emitted, Skipped, Emitted, Emitted, Skipped]
        skipped = [o for o in outcomes if isinstance(o, Skipped)]
        assert [(o.field.name, o.reason) for o in skipped] == [
            ("name_cache", SkipReason.UNCHANGED_NAME),
            ("_", SkipReason.EMPTY_NAME),
        ]
        assert [(d.code, d.arguments[0]) for d in result.diagnostics] == [
            ("NP101", "name_cache"),
            ("NP101", "_"),
        ]

    def test_skip_reports_can_be_disabled(self, make_compilation):
        result = run(make_compilation({"models": PERSON}), report_skipped_fields=False)

        assert result.diagnostics == []
        assert len(result.artifacts) == 1

    def test_type_without_eligible_fields_produces_nothing(self, make_compilation):
        source = "from notifyprops.markers import observable_object\n\n@observable_object\nclass Empty:\n    value = 1\n"
        result = run(make_compilation({"models": source}))

        assert result.artifacts == []
        assert [d.code for d in result.diagnostics] == ["NP101"]

    def test_nested_type_warning_does_not_stop_other_types(self, make_compilation):
        source = textwrap.dedent(
            """
            from notifyprops.markers import observable_object

            class Outer:
                @observable_object
                class Inner:
                    _x: int = 0

            @observable_object
            class Sibling:
                _y: int = 0
            """
        )
        result = run(make_compilation({"models": source}))

        assert [a.hint_name for a in result.artifacts] == ["Sibling_observable.py"]
        (diagnostic,) = result.diagnostics
        assert diagnostic.code == "NP100"
        assert "models.Outer.Inner" in diagnostic.message
        assert (diagnostic.location.line, diagnostic.location.column) == (5, 5)

    def test_existing_capabilities_are_not_redeclared(self, make_compilation):
        source = textwrap.dedent(
            """
            from notifyprops.markers import (
                NotifyPropertyChanged,
                NotifyPropertyChanging,
                observable_object,
            )

            @observable_object
            class Both(NotifyPropertyChanged, NotifyPropertyChanging):
                _x: int = 0

            @observable_object
            class Neither:
                _x: int = 0
            """
        )
        result = run(make_compilation({"models": source}))
        both = result.artifact("Both_observable.py").text
        neither = result.artifact("Neither_observable.py").text

        assert "class Both:\n" in both
        assert "Event()" not in both
        assert "def X(self) -> int:" in both
        assert neither.count("_support.NotifyPropertyChanged") == 1
        assert neither.count("_support.NotifyPropertyChanging") == 1
        assert neither.count("property_changed = _support.Event()") == 1
        assert neither.count("property_changing = _support.Event()") == 1

    def test_later_field_with_taken_name_is_skipped(self, make_compilation):
        result = run(make_compilation({"models": SHADOWED}))

        outcomes = result.field_outcomes["models.Person"]
        assert [(o.field.name, type(o)) for o in outcomes] == [
            ("_name", Emitted),
            ("__name", Skipped),
        ]
        assert outcomes[1].reason is SkipReason.DUPLICATE_NAME
        (diagnostic,) = result.diagnostics
        assert (diagnostic.code, diagnostic.arguments[0]) == ("NP101", "__name")
        assert result.artifacts[0].text.count("def Name(self)") == 1

    def test_positional_only_receiver_keeps_instance_fields(self, make_compilation):
        source = textwrap.dedent(
            """
            from notifyprops.markers import observable_object

            @observable_object
            class Person:
                def __init__(self, /, name: str):
                    self._name = name
            """
        )
        result = run(make_compilation({"models": source}))

        assert "def Name(self) -> str:" in result.artifact("Person_observable.py").text
        assert result.diagnostics == []

    @pytest.mark.skipif(sys.version_info < (3, 10), reason="match statements need Python 3.10")
    def test_classes_under_match_cases_do_not_break_the_pass(self, make_compilation):
        source = PERSON + textwrap.dedent(
            """
            import dataclasses

            match 1:
                case 1:
                    @dataclasses.dataclass
                    class Other:
                        _value: int = 0
            """
        )
        result = run(make_compilation({"models": source}))

        assert [a.hint_name for a in result.artifacts] == ["Person_observable.py"]

    def test_missing_declarations_fail_fast(self, make_compilation):
        compilation = make_compilation({"models": PERSON}, include_markers=False)

        with pytest.raises(MissingWellKnownSymbolError):
            run(compilation)

    def test_colliding_artifact_names_raise(self, make_compilation):
        source = "from notifyprops.markers import observable_object\n\n@observable_object\nclass Person:\n    _x = 0\n"
        compilation = make_compilation({"a": source, "b": source})

        with pytest.raises(ArtifactCollisionError, match="Person_observable.py"):
            run(compilation)

    def test_stub_renderer_is_swappable(self, make_compilation):
        result = run(make_compilation({"models": PERSON}), renderer=StubRenderer())

        (artifact,) = result.artifacts
        assert artifact.hint_name == "Person_observable.pyi"
        assert "def Name(self) -> str: ..." in artifact.text
        assert "from models import List\n" in artifact.text

    def test_execute_requires_host_channel(self, make_compilation):
        with pytest.raises(TypeError):
            ObservableObjectGenerator().execute(make_compilation({"models": PERSON}))

    def test_execute_reports_to_host_channel(self, make_compilation):
        received = []
        artifacts = ObservableObjectGenerator().execute(
            make_compilation({"models": PERSON}), report=received.append
        )

        assert len(artifacts) == 1
        assert sorted(d.arguments[0] for d in received) == ["_", "name_cache"]


def many_types(count):
    return {
        f"module{i}": (
            "from notifyprops.markers import observable_object\n\n"
            f"@observable_object\nclass Type{i}:\n    _a: int = {i}\n    _b: str = ''\n    c = 0\n"
        )
        for i in range(count)
    }


@pytest.mark.integration
class TestDeterminism:
    def test_parallel_pass_matches_serial_pass(self, make_compilation):
        serial = run(make_compilation(many_types(12)))
        parallel = run(make_compilation(many_types(12)), max_workers=4)

        assert [(a.hint_name, a.text) for a in parallel.artifacts] == [
            (a.hint_name, a.text) for a in serial.artifacts
        ]
        assert parallel.diagnostics == serial.diagnostics

    def test_output_independent_of_module_order(self, make_compilation):
        modules = many_types(5)
        forward = run(make_compilation(modules))
        backward = run(make_compilation(dict(reversed(list(modules.items())))))

        assert {a.hint_name: a.text for a in forward.artifacts} == {
            a.hint_name: a.text for a in backward.artifacts
        }

    def test_cancellation_between_types(self, make_compilation):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(GenerationCancelled):
            ObservableObjectGenerator().run(make_compilation(many_types(3)), cancel=cancel)


@pytest.mark.integration
class TestGeneratedBehavior:
    @pytest.fixture
    def person_class(self, make_compilation, load_module):
        result = run(make_compilation({"models": PERSON}))
        models = load_module("models", PERSON)
        load_module("Person_observable", result.artifacts[0].text)
        return models.Person

    def test_round_trip(self, person_class):
        person = person_class(["a"])

        person.Name = "Ada"
        person.Age = 36
        person.Tags = ["b"]
        person.Secret = 7

        assert (person.Name, person.Age, person.Tags, person.Secret) == ("Ada", 36, ["b"], 7)
        assert person._name == "Ada"
        assert person._Person__secret == 7

    def test_setter_without_observers_does_not_fail(self, person_class):
        person = person_class([])
        person.Name = "quiet"
        assert person.Name == "quiet"
        assert not person.property_changed
        assert not person.property_changing

    def test_notifications_surround_assignment(self, person_class):
        person = person_class([])
        events = []

        def on_changing(sender, args):
            events.append(("changing", args.property_name, sender._name))

        def on_changed(sender, args):
            events.append(("changed", args.property_name, sender._name))

        person.property_changing += on_changing
        person.property_changed += on_changed
        person.Name = "Grace"

        assert events == [("changing", "Name", ""), ("changed", "Name", "Grace")]

    def test_generated_type_declares_capabilities(self, person_class):
        person = person_class([])
        assert isinstance(person, NotifyPropertyChanged)
        assert isinstance(person, NotifyPropertyChanging)

    def test_observers_are_per_instance(self, person_class):
        first, second = person_class([]), person_class([])
        seen = []
        first.property_changed += lambda sender, args: seen.append(sender)

        second.Name = "other"
        first.Name = "mine"

        assert seen == [first]

    def test_taken_name_stays_with_the_first_field(self, make_compilation, load_module):
        result = run(make_compilation({"models": SHADOWED}))
        models = load_module("models", SHADOWED)
        load_module("Person_observable", result.artifacts[0].text)
        person = models.Person()

        person.Name = "z"

        assert (person._name, person._Person__name) == ("z", "hidden")


@pytest.mark.integration
def test_generate_parses_sources(markers_source):
    from notifyprops import generate

    result = generate({"notifyprops.markers": markers_source, "models": PERSON})

    assert [a.hint_name for a in result.artifacts] == ["Person_observable.py"]
    assert "def Name(self) -> str:" in result.artifacts[0].text
