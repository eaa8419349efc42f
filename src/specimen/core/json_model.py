"""JSON-serializable mirror of the value model, for external viewers.

The document has three keys: `root` (the value itself), `arrays` and
`objects`. Sequences and composites appear in the tree only as
`["array", id]` / `["object", id]` and are described once in the side
tables, which list every one built in the session in id order.
"""

from __future__ import annotations

import json
import math
from typing import Any

from specimen.core.introspection import Introspection
from specimen.core.renderers import INT_CHUNK, format_int
from specimen.core.values import (
    CodeLocation,
    CompositeValue,
    ExceptionValue,
    GlobalState,
    SequenceValue,
    StackFrame,
    Value,
    Variable,
    Variant,
)


class JsonModelBuilder:
    """Converts values from one `Introspection` session into plain data."""

    def __init__(self, introspection: Introspection):
        self.introspection = introspection

    def build(self, root: Value) -> dict[str, Any]:
        # The side tables are read after the root is converted so nothing
        # added along the way is missed.
        root_data = self.value(root)
        return {
            "root": root_data,
            "arrays": [self._sequence(seq) for seq in self.introspection.sequences],
            "objects": [self._composite(obj) for obj in self.introspection.composites],
        }

    def value(self, value: Value) -> Any:
        variant = getattr(value, "variant", Variant.UNKNOWN)

        if variant is Variant.NULL:
            return None
        if variant is Variant.BOOL:
            return value.value
        if variant is Variant.INT:
            return _int(value.value)
        if variant is Variant.FLOAT:
            return _float(value.value)
        if variant is Variant.STRING:
            if isinstance(value.value, bytes):
                return ["bytes", value.value.decode("latin-1")]
            return value.value
        if variant is Variant.SEQUENCE:
            return ["array", value.id]
        if variant is Variant.COMPOSITE:
            return ["object", value.id]
        if variant is Variant.RESOURCE:
            return ["resource", {"type": value.kind, "id": value.id}]
        if variant is Variant.EXCEPTION:
            return ["exception", self.exception(value)]
        return ["unknown"]

    def exception(self, exc: ExceptionValue) -> dict[str, Any]:
        return {
            "class": exc.class_name,
            "code": exc.code,
            "message": exc.message,
            "location": _location(exc.location),
            "previous": self.exception(exc.previous) if exc.previous is not None else None,
            "stack": [self._frame(frame) for frame in exc.stack],
            "locals": self._variables(exc.locals) if exc.locals is not None else None,
            "globals": self._globals(exc.globals) if exc.globals is not None else None,
        }

    def _sequence(self, seq: SequenceValue) -> dict[str, Any]:
        return {
            "type": seq.kind,
            "isAssociative": seq.is_associative,
            "entries": [[self.value(e.key), self.value(e.value)] for e in seq.entries],
        }

    def _composite(self, obj: CompositeValue) -> dict[str, Any]:
        return {
            "class": obj.class_name,
            "hash": obj.hash,
            "properties": [
                {
                    "name": f.name,
                    "value": self.value(f.value),
                    "class": f.class_name,
                    "access": f.access,
                    "isDefault": f.is_default,
                }
                for f in obj.fields
            ],
        }

    def _frame(self, frame: StackFrame) -> dict[str, Any]:
        return {
            "function": frame.function,
            "class": frame.class_name,
            "isStatic": frame.is_static,
            "location": _location(frame.location),
            "object": self.value(frame.receiver) if frame.receiver is not None else None,
            "args": [self.value(a) for a in frame.args] if frame.args is not None else None,
        }

    def _variables(self, variables: list[Variable]) -> list[dict[str, Any]]:
        return [{"name": v.name, "value": self.value(v.value)} for v in variables]

    def _globals(self, state: GlobalState) -> dict[str, Any]:
        return {
            "staticProperties": [
                {
                    "name": p.name,
                    "value": self.value(p.value),
                    "class": p.class_name,
                    "access": p.access,
                    "isDefault": p.is_default,
                }
                for p in state.static_properties
            ],
            "globalVariables": self._variables(state.global_variables),
            "staticVariables": [
                {
                    "name": v.name,
                    "value": self.value(v.value),
                    "function": v.function,
                    "class": v.class_name,
                }
                for v in state.static_variables
            ],
        }


def to_json(model: dict[str, Any], indent: int | None = None) -> str:
    # Non-finite floats are tagged by _float, so plain NaN never reaches the encoder.
    return json.dumps(model, indent=indent, ensure_ascii=False, allow_nan=False)


def _float(value: float) -> Any:
    if math.isnan(value):
        return ["float", "nan"]
    if math.isinf(value):
        return ["float", "inf" if value > 0 else "-inf"]
    return value


def _location(location: CodeLocation | None) -> dict[str, Any] | None:
    if location is None:
        return None
    source = location.source_code
    return {
        "file": location.file,
        "line": location.line,
        "sourceCode": {str(k): v for k, v in source.items()} if source is not None else None,
    }


def _int(value: int) -> Any:
    # json.dumps goes through str(), which rejects very long ints.
    if abs(value) < INT_CHUNK:
        return value
    return ["int", format_int(value)]
