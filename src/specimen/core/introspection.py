"""Introspection of live Python values into the specimen value model.

One `Introspection` instance is one session: every value built through it
shares the same identity registries, so a container reached twice (or
through a cycle) becomes one model node with one id.
"""

from __future__ import annotations

import collections
import inspect
import io
import linecache
import math
import mmap
import re
import socket
from typing import TYPE_CHECKING, Any

from loguru import logger

from specimen.core.identity import IdentityRegistry
from specimen.core.values import (
    BoolValue,
    CodeLocation,
    CompositeField,
    CompositeValue,
    ExceptionValue,
    FloatValue,
    GlobalState,
    IntValue,
    NullValue,
    ResourceValue,
    SequenceEntry,
    SequenceValue,
    StackFrame,
    StaticProperty,
    StaticVariable,
    StringValue,
    UnknownValue,
    Variable,
    Variant,
)
from specimen.utils.safe_access import is_dunder, qualified_name, safe_str, safe_type_name

if TYPE_CHECKING:
    from types import FrameType, TracebackType

    from specimen.core.values import Value

SEQUENCE_TYPES = (dict, list, tuple, set, frozenset, collections.deque)
RESOURCE_TYPES = ((io.IOBase, "stream"), (socket.socket, "socket"), (mmap.mmap, "mmap"))
SOURCE_CONTEXT_LINES = 5

_MANGLED_NAME = re.compile(r"^_([A-Za-z0-9_]*[A-Za-z0-9])__(.+)$")


class Introspection:
    """Builds model values from Python objects for one print session."""

    def __init__(self):
        self.arrays = IdentityRegistry("sequence")
        self.objects = IdentityRegistry("composite")
        self._sequences: list[SequenceValue] = []
        self._composites: list[CompositeValue] = []
        logger.debug("Started introspection session {}", id(self))

    @property
    def sequences(self) -> list[SequenceValue]:
        """Every sequence built in this session, indexed by id."""
        return list(self._sequences)

    @property
    def composites(self) -> list[CompositeValue]:
        """Every composite built in this session, indexed by id."""
        return list(self._composites)

    def classify(self, value: Any) -> Variant:
        """Return the variant `value` maps to. Never raises."""
        try:
            if value is None:
                return Variant.NULL
            if isinstance(value, bool):
                return Variant.BOOL
            if isinstance(value, int):
                return Variant.INT
            if isinstance(value, float):
                return Variant.FLOAT
            if isinstance(value, (str, bytes, bytearray)):
                return Variant.STRING
            if isinstance(value, SEQUENCE_TYPES):
                return Variant.SEQUENCE
            if _resource_kind(value) is not None:
                return Variant.RESOURCE
        except Exception:
            return Variant.UNKNOWN
        return Variant.COMPOSITE

    def introspect(self, value: Any) -> Value:
        variant = self.classify(value)

        if variant is Variant.NULL:
            return NullValue()
        if variant is Variant.BOOL:
            return BoolValue(bool(value))
        if variant is Variant.INT:
            return IntValue(int(value))
        if variant is Variant.FLOAT:
            return FloatValue(float(value))
        if variant is Variant.STRING:
            return StringValue(bytes(value) if isinstance(value, bytearray) else value)
        if variant is Variant.SEQUENCE:
            return self._introspect_sequence(value)
        if variant is Variant.RESOURCE:
            return self._introspect_resource(value)
        if variant is Variant.COMPOSITE:
            return self._introspect_composite(value)
        return UnknownValue()

    def introspect_location(self, file: Any, line: Any) -> CodeLocation | None:
        if not isinstance(file, (str, int, float)) or not isinstance(line, (int, float, str)):
            return None
        try:
            line = int(line)
        except (TypeError, ValueError):
            return None
        file = str(file)
        return CodeLocation(file=file, line=line, source_code=_source_window(file, line))

    def introspect_exception(self, exc: BaseException, include_globals: bool = True) -> ExceptionValue:
        """Build the full exception model: locals, stack, globals and the chain."""
        return self._introspect_exception(exc, include_globals, seen={id(exc)})

    def introspect_frame_mapping(self, frame: Any) -> StackFrame:
        if not isinstance(frame, dict):
            frame = {}
        return StackFrame.from_mapping(frame, self)

    def mock_exception(self) -> ExceptionValue:
        """A fixed sample exception, for demos and tests."""
        from specimen.core.mock import build_mock_exception

        return build_mock_exception(self)

    # Sequences and composites ------------------------------------------------------------------------------------------

    def _introspect_sequence(self, seq: Any) -> SequenceValue:
        known = self.arrays.lookup(seq)
        ident = self.arrays.id_for(seq)
        if known is not None:
            existing = self._sequences[ident]
            existing.references = self.arrays.observations(ident)
            return existing

        result = SequenceValue(id=ident, kind=type(seq).__name__)
        self._sequences.append(result)

        try:
            if isinstance(seq, dict):
                items = list(seq.items())
            else:
                items = list(enumerate(seq))
        except Exception as e:
            logger.debug("Could not iterate {}: {}", safe_type_name(seq), e)
            items = []

        result.is_associative = isinstance(seq, dict) and not _keys_are_list_like(items)
        result.entries = [SequenceEntry(self.introspect(k), self.introspect(v)) for k, v in items]
        return result

    def _introspect_composite(self, obj: Any) -> CompositeValue | UnknownValue:
        known = self.objects.lookup(obj)
        if known is not None:
            existing = self._composites[self.objects.id_for(obj)]
            existing.references = self.objects.observations(known)
            return existing

        try:
            raw_fields = _object_fields(obj)
        except Exception as e:
            logger.debug("Could not read fields of {}: {}", safe_type_name(obj), e)
            return UnknownValue()

        ident = self.objects.id_for(obj)
        result = CompositeValue(id=ident, class_name=safe_type_name(obj), hash=f"{id(obj):#x}")
        self._composites.append(result)
        result.fields = [
            CompositeField(name=name, value=self.introspect(raw), access=access,
                           class_name=class_name, is_default=is_default)
            for name, raw, access, class_name, is_default in raw_fields
        ]
        return result

    def _introspect_resource(self, value: Any) -> ResourceValue:
        kind = _resource_kind(value) or "resource"
        try:
            fd = value.fileno()
        except Exception:
            fd = -1
        return ResourceValue(kind=kind, id=fd if isinstance(fd, int) else -1)

    # Exceptions --------------------------------------------------------------------------------------------------------

    def _introspect_exception(self, exc: BaseException, include_globals: bool, seen: set[int]) -> ExceptionValue:
        frames = _traceback_frames(exc.__traceback__)
        innermost = frames[-1][0] if frames else None

        location = None
        if frames:
            frame, lineno = frames[-1]
            location = self.introspect_location(frame.f_code.co_filename, lineno)

        previous = _previous_exception(exc)
        previous_value = None
        if previous is not None and id(previous) not in seen:
            seen.add(id(previous))
            previous_value = self._introspect_exception(previous, include_globals=False, seen=seen)

        result = ExceptionValue(
            class_name=safe_type_name(exc),
            code=_exception_code(exc),
            message=safe_str(exc),
            location=location,
            previous=previous_value,
        )
        if innermost is not None:
            namespace = _frame_locals(innermost)
            if innermost.f_code.co_name == "<module>":
                namespace = {k: v for k, v in namespace.items() if _is_plain_variable(k, v)}
            result.locals = self._variables(namespace)
        result.stack = [self._introspect_frame(frame, lineno) for frame, lineno in reversed(frames)]
        if include_globals and innermost is not None:
            result.globals = self._introspect_globals(innermost.f_globals)
        return result

    def _introspect_frame(self, frame: FrameType, lineno: int) -> StackFrame:
        code = frame.f_code
        result = StackFrame(function=code.co_name, location=self.introspect_location(code.co_filename, lineno))

        try:
            arginfo = inspect.getargvalues(frame)
        except Exception:
            return result

        names = list(arginfo.args)
        local_values = arginfo.locals
        if names and names[0] in ("self", "cls") and names[0] in local_values:
            first = local_values[names.pop(0)]
            if isinstance(first, type):
                result.class_name = qualified_name(first)
                result.is_static = True
            else:
                result.class_name = safe_type_name(first)
                result.receiver = self.introspect(first)
                result.is_static = False

        args = [self.introspect(local_values[name]) for name in names if name in local_values]
        if arginfo.varargs and isinstance(local_values.get(arginfo.varargs), tuple):
            args.extend(self.introspect(v) for v in local_values[arginfo.varargs])
        if arginfo.keywords and isinstance(local_values.get(arginfo.keywords), dict):
            args.extend(self.introspect(v) for v in local_values[arginfo.keywords].values())
        result.args = args
        return result

    def _introspect_globals(self, module_globals: dict[str, Any]) -> GlobalState:
        module_name = module_globals.get("__name__")
        state = GlobalState()

        for name, value in list(module_globals.items()):
            if is_dunder(name):
                continue
            if inspect.isclass(value):
                if getattr(value, "__module__", None) == module_name:
                    self._class_statics(value, state)
            elif inspect.isfunction(value):
                if getattr(value, "__module__", None) == module_name:
                    self._function_statics(value, None, state)
            elif _is_plain_variable(name, value):
                state.global_variables.append(Variable(name, self.introspect(value)))
        return state

    def _class_statics(self, cls: type, state: GlobalState) -> None:
        class_name = qualified_name(cls)
        for name, value in list(vars(cls).items()):
            if is_dunder(name):
                continue
            if inspect.isfunction(value):
                self._function_statics(value, class_name, state)
                continue
            if inspect.isroutine(value) or inspect.isclass(value) or _is_descriptor(value):
                continue
            display, access, _ = _field_access(name, [cls])
            state.static_properties.append(
                StaticProperty(name=display, value=self.introspect(value), class_name=class_name, access=access)
            )

    def _function_statics(self, func: Any, class_name: str | None, state: GlobalState) -> None:
        attributes = getattr(func, "__dict__", None) or {}
        for name, value in list(attributes.items()):
            if is_dunder(name):
                continue
            state.static_variables.append(
                StaticVariable(name=name, value=self.introspect(value), function=func.__name__, class_name=class_name)
            )

    def _variables(self, namespace: dict[str, Any]) -> list[Variable]:
        return [Variable(str(name), self.introspect(value)) for name, value in namespace.items()]


def _keys_are_list_like(items: list[tuple[Any, Any]]) -> bool:
    return all(type(k) is int and k == i for i, (k, _) in enumerate(items))


def _resource_kind(value: Any) -> str | None:
    for cls, kind in RESOURCE_TYPES:
        if isinstance(value, cls):
            return kind
    return None


def _is_plain_variable(name: str, value: Any) -> bool:
    """True for module-level names that hold data rather than code."""
    return not (
        is_dunder(name)
        or inspect.ismodule(value)
        or inspect.isclass(value)
        or inspect.isroutine(value)
    )


def _is_descriptor(value: Any) -> bool:
    return isinstance(value, (property, staticmethod, classmethod)) or hasattr(type(value), "__get__")


def _field_access(name: str, mro: list[type]) -> tuple[str, str, str | None]:
    """Map an attribute name to (display name, visibility, declaring class)."""
    match = _MANGLED_NAME.match(name)
    if match:
        for cls in mro:
            if cls.__name__.lstrip("_") == match.group(1):
                return f"__{match.group(2)}", "private", qualified_name(cls)
    if name.startswith("_"):
        return name, "protected", None
    return name, "public", None


def _object_fields(obj: Any) -> list[tuple[str, Any, str, str | None, bool]]:
    """List (name, value, access, declaring class, is_default) for an object.

    Slots come first, most derived class first, then the instance dict in
    insertion order.
    """
    cls = type(obj)
    mro = list(cls.__mro__)
    fields = []
    seen: set[str] = set()
    declared: set[str] = set()
    for klass in mro:
        try:
            declared.update(inspect.get_annotations(klass))
        except Exception:
            continue

    for klass in mro:
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            attr = f"_{klass.__name__.lstrip('_')}{slot}" if slot.startswith("__") and not slot.endswith("__") else slot
            descriptor = vars(klass).get(attr)
            if attr in seen or descriptor is None:
                continue
            try:
                value = descriptor.__get__(obj, cls)
            except AttributeError:
                continue
            seen.add(attr)
            display, access, owner = _field_access(attr, mro)
            fields.append((display, value, access, owner or qualified_name(klass), True))

    try:
        instance_dict = object.__getattribute__(obj, "__dict__")
    except AttributeError:
        instance_dict = {}
    if isinstance(instance_dict, dict):
        for name, value in list(instance_dict.items()):
            if not isinstance(name, str) or name in seen:
                continue
            display, access, owner = _field_access(name, mro)
            fields.append((display, value, access, owner or qualified_name(cls), name in declared))
    return fields


def _traceback_frames(tb: TracebackType | None) -> list[tuple[FrameType, int]]:
    """Frames from a traceback, outermost first."""
    frames = []
    while tb is not None:
        frames.append((tb.tb_frame, tb.tb_lineno))
        tb = tb.tb_next
    return frames


def _frame_locals(frame: FrameType) -> dict[str, Any]:
    try:
        return dict(frame.f_locals)
    except Exception:
        return {}


def _previous_exception(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__context__ is not None and not exc.__suppress_context__:
        return exc.__context__
    return None


def _exception_code(exc: BaseException) -> str:
    for attr in ("code", "errno"):
        try:
            code = getattr(exc, attr, None)
        except Exception:
            continue
        if isinstance(code, float) and not math.isfinite(code):
            continue
        if isinstance(code, (str, int, float)) and not isinstance(code, bool):
            return str(code)
    return ""


def _source_window(file: str, line: int) -> dict[int, str] | None:
    lines = linecache.getlines(file)
    if not lines:
        return None
    window = {}
    for lineno in range(line - SOURCE_CONTEXT_LINES, line + SOURCE_CONTEXT_LINES + 1):
        if 1 <= lineno <= len(lines):
            window[lineno] = lines[lineno - 1].rstrip("\n")
    return window or None
