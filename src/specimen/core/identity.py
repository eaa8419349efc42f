"""Stable small-integer ids for shared and cyclic references."""

from __future__ import annotations

from typing import Any

from specimen.core.values import SCALAR_TYPES


class InvalidReference(TypeError):
    """Raised when a value without reference identity is registered."""


class IdentityRegistry:
    """Assigns ids to references in the order they are first observed.

    Lookup is by object identity (`id()`), never by equality, so two equal
    but distinct containers get distinct ids. Registered objects are kept
    alive for the lifetime of the registry so their `id()` cannot be
    recycled by a new object mid-session.
    """

    def __init__(self, kind: str = "reference"):
        self.kind = kind
        self._ids: dict[int, int] = {}
        self._refs: list[Any] = []
        self._observations: list[int] = []

    def __len__(self) -> int:
        return len(self._refs)

    def __contains__(self, ref: Any) -> bool:
        return id(ref) in self._ids

    def id_for(self, ref: Any) -> int:
        """Return the id of `ref`, assigning the next free one if it is new."""
        token = self._token(ref)
        existing = self._ids.get(token)
        if existing is not None:
            self._observations[existing] += 1
            return existing

        new_id = len(self._refs)
        self._ids[token] = new_id
        self._refs.append(ref)
        self._observations.append(1)
        return new_id

    def lookup(self, ref: Any) -> int | None:
        """Return the id of `ref` without registering or counting it."""
        return self._ids.get(self._token(ref))

    def observations(self, ident: int) -> int:
        """How many times the reference with this id has been observed."""
        return self._observations[ident]

    def _token(self, ref: Any) -> int:
        if isinstance(ref, SCALAR_TYPES):
            raise InvalidReference(
                f"{type(ref).__name__} values have no reference identity and "
                f"cannot be registered as a {self.kind}"
            )
        return id(ref)
