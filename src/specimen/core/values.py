"""The closed value model that every renderer consumes.

A value is exactly one of the variants listed in `Variant`. Sequences and
composites carry the id their reference was given by the session's identity
registry; all other variants are plain copies.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Union

if TYPE_CHECKING:
    from specimen.core.introspection import Introspection

# Values that are copied by value and have no reference identity.
SCALAR_TYPES = (type(None), bool, int, float, str, bytes)


class Variant(enum.Enum):
    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    COMPOSITE = "composite"
    RESOURCE = "resource"
    EXCEPTION = "exception"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NullValue:
    variant: ClassVar[Variant] = Variant.NULL


@dataclass(frozen=True)
class BoolValue:
    value: bool
    variant: ClassVar[Variant] = Variant.BOOL


@dataclass(frozen=True)
class IntValue:
    value: int
    variant: ClassVar[Variant] = Variant.INT


@dataclass(frozen=True)
class FloatValue:
    value: float
    variant: ClassVar[Variant] = Variant.FLOAT


@dataclass(frozen=True)
class StringValue:
    value: str | bytes
    variant: ClassVar[Variant] = Variant.STRING


@dataclass(frozen=True)
class ResourceValue:
    kind: str
    id: int
    variant: ClassVar[Variant] = Variant.RESOURCE


@dataclass(frozen=True)
class UnknownValue:
    variant: ClassVar[Variant] = Variant.UNKNOWN


@dataclass(frozen=True)
class SequenceEntry:
    key: Value
    value: Value


@dataclass(eq=False)
class SequenceValue:
    """A list, tuple, set or dict.

    `references` counts how often the underlying container was reached while
    building the model; more than one means it is shared or cyclic.
    """

    id: int
    kind: str = "list"
    is_associative: bool = False
    entries: list[SequenceEntry] = field(default_factory=list, repr=False)
    references: int = 1
    variant: ClassVar[Variant] = Variant.SEQUENCE


@dataclass(frozen=True)
class CompositeField:
    name: str
    value: Value
    access: str = "public"
    class_name: str | None = None
    is_default: bool = False


@dataclass(eq=False)
class CompositeValue:
    id: int
    class_name: str
    fields: list[CompositeField] = field(default_factory=list, repr=False)
    hash: str = ""
    references: int = 1
    variant: ClassVar[Variant] = Variant.COMPOSITE


@dataclass(frozen=True)
class CodeLocation:
    file: str
    line: int
    source_code: dict[int, str] | None = None


@dataclass(frozen=True)
class Variable:
    name: str
    value: Value


@dataclass(frozen=True)
class StaticProperty:
    name: str
    value: Value
    class_name: str
    access: str = "public"
    is_default: bool = True


@dataclass(frozen=True)
class StaticVariable:
    name: str
    value: Value
    function: str
    class_name: str | None = None


@dataclass
class GlobalState:
    static_properties: list[StaticProperty] = field(default_factory=list)
    static_variables: list[StaticVariable] = field(default_factory=list)
    global_variables: list[Variable] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.static_properties or self.static_variables or self.global_variables)


@dataclass
class StackFrame:
    """One call on the stack. Every part is optional."""

    function: str | None = None
    class_name: str | None = None
    is_static: bool | None = None
    receiver: Value | None = None
    args: list[Value] | None = None
    location: CodeLocation | None = None
    call_type: str = "."

    @classmethod
    def from_mapping(cls, frame: Mapping[str, Any], introspection: Introspection) -> StackFrame:
        """Build a frame from a loose mapping; malformed keys become None.

        Recognised keys: function, class, type ("->", "::" or "."), object,
        args, file, line.
        """
        function = frame.get("function")
        class_name = frame.get("class")
        call_type = frame.get("type")
        receiver = frame.get("object")
        args = frame.get("args")

        if call_type == "::":
            is_static = True
        elif call_type in ("->", "."):
            is_static = False
        else:
            is_static = None

        return cls(
            function=str(function) if isinstance(function, (str, int, float)) else None,
            class_name=str(class_name) if isinstance(class_name, str) else None,
            is_static=is_static,
            receiver=introspection.introspect(receiver) if receiver is not None else None,
            args=[introspection.introspect(a) for a in args] if isinstance(args, (list, tuple)) else None,
            location=introspection.introspect_location(frame.get("file"), frame.get("line")),
            call_type=call_type if isinstance(call_type, str) and call_type else ".",
        )


@dataclass(eq=False)
class ExceptionValue:
    class_name: str
    code: str = ""
    message: str = ""
    location: CodeLocation | None = None
    previous: ExceptionValue | None = None
    locals: list[Variable] | None = None
    stack: list[StackFrame] = field(default_factory=list)
    globals: GlobalState | None = None
    variant: ClassVar[Variant] = Variant.EXCEPTION


Value = Union[
    NullValue,
    BoolValue,
    IntValue,
    FloatValue,
    StringValue,
    SequenceValue,
    CompositeValue,
    ResourceValue,
    ExceptionValue,
    UnknownValue,
]
