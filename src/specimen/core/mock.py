"""A fixed sample exception model, used by `specimen --demo` and tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from specimen.core.values import (
    CodeLocation,
    ExceptionValue,
    GlobalState,
    StackFrame,
    StaticProperty,
    StaticVariable,
    Variable,
)

if TYPE_CHECKING:
    from specimen.core.introspection import Introspection


class DummyClass1:
    def __init__(self):
        self.__private1 = None
        self._protected1 = None
        self.public1 = None


class DummyClass2(DummyClass1):
    def __init__(self):
        self.__private2 = None
        self._protected2 = None
        self.public2 = None
        super().__init__()


def build_mock_exception(introspection: Introspection) -> ExceptionValue:
    null = introspection.introspect(None)
    location = CodeLocation("/path/to/muh/file", 1928)
    return ExceptionValue(
        class_name="MuhMockException",
        code="Dummy exception code",
        message="This is a dummy exception message.\n\nlololool",
        location=CodeLocation("/the/path/to/muh/file", 9000),
        locals=[
            Variable("lol", introspection.introspect(8)),
            Variable("foo", introspection.introspect("bar")),
        ],
        stack=[
            StackFrame(
                function="a_function",
                class_name=DummyClass1.__qualname__,
                is_static=False,
                receiver=introspection.introspect(DummyClass1()),
                args=[introspection.introspect(DummyClass2())],
                location=location,
            ),
            StackFrame(
                function="a_function",
                args=[introspection.introspect(DummyClass2())],
                location=location,
            ),
        ],
        globals=GlobalState(
            static_properties=[StaticProperty("blah_property", null, "BlahClass", access="protected")],
            static_variables=[
                StaticVariable("public", null, "blah_another_function"),
                StaticVariable("lol_static", null, "blah_method", class_name="BlahYetAnotherClass"),
            ],
            global_variables=[Variable("lol global", null), Variable("blah_variable", null)],
        ),
    )
