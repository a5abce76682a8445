"""Per-method request/response schemas.

The server and client only ever call ``decode``, ``encode`` and read
``keys``, so any object satisfying ``Schema`` can be plugged in.
``PydanticSchema`` is the bundled implementation.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Protocol, get_type_hints, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError
from typing_extensions import is_typeddict


class DecodeError(Exception):
    """Raised by ``Schema.decode`` when a value does not match the schema."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(self.report())

    def report(self) -> str:
        return "; ".join(self.errors)


@runtime_checkable
class Schema(Protocol):
    """Capability interface for a request or response validator."""

    @property
    def keys(self) -> tuple[str, ...]:
        """Declared top-level keys, in declaration order."""
        ...

    def decode(self, raw: Any) -> Any:
        ...

    def encode(self, value: Any) -> Any:
        ...


def _declared_keys(tp: Any) -> tuple[str, ...]:
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return tuple(tp.model_fields)
    if is_typeddict(tp):
        return tuple(get_type_hints(tp))
    if dataclasses.is_dataclass(tp):
        return tuple(f.name for f in dataclasses.fields(tp))
    return ()


def _format_error(err: dict[str, Any]) -> str:
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


class PydanticSchema:
    """``Schema`` backed by a ``pydantic.TypeAdapter``.

    Usage::

        class Echo(BaseModel):
            arg: str

        request = PydanticSchema(Echo)
        request.decode({"arg": "hi"})   # -> Echo(arg="hi")
        request.encode(Echo(arg="hi"))  # -> {"arg": "hi"}
    """

    def __init__(self, tp: Any) -> None:
        self.type = tp
        self._adapter: TypeAdapter[Any] = TypeAdapter(tp)
        self._keys = _declared_keys(tp)

    def __repr__(self) -> str:
        return f"PydanticSchema({self.type!r})"

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    def decode(self, raw: Any) -> Any:
        try:
            return self._adapter.validate_python(raw)
        except ValidationError as exc:
            raise DecodeError([_format_error(e) for e in exc.errors()]) from exc

    def encode(self, value: Any) -> Any:
        # Values that do not match the type are serialised as-is; the
        # receiving side reports the mismatch.
        return self._adapter.dump_python(value, mode="json", warnings=False)


@dataclass(frozen=True, slots=True)
class Method:
    """Request/response schema pair for one RPC method."""

    request: Schema
    response: Schema


def method(request: Any, response: Any) -> Method:
    """Build a ``Method`` from plain types, wrapping them in ``PydanticSchema``."""

    def wrap(tp: Any) -> Schema:
        if not isinstance(tp, type) and isinstance(tp, Schema):
            return tp
        return PydanticSchema(tp)

    return Method(request=wrap(request), response=wrap(response))
