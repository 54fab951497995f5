"""Declared authorization needs: one permission, any of several, or all of several."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union


def _as_tuple(keys: Iterable[str]) -> tuple[str, ...]:
    # A lone string is one key, not a sequence of characters.
    if isinstance(keys, str):
        return (keys,)
    return tuple(keys)


@dataclass(frozen=True)
class Single:
    permission: str

    def permissions(self) -> tuple[str, ...]:
        return (self.permission,)

    def __str__(self) -> str:
        return self.permission


@dataclass(frozen=True)
class AnyOf:
    keys: tuple[str, ...]

    def __init__(self, keys: Iterable[str]) -> None:
        object.__setattr__(self, "keys", _as_tuple(keys))

    def permissions(self) -> tuple[str, ...]:
        return self.keys

    def __str__(self) -> str:
        return f"any({', '.join(self.keys)})"


@dataclass(frozen=True)
class AllOf:
    keys: tuple[str, ...]

    def __init__(self, keys: Iterable[str]) -> None:
        object.__setattr__(self, "keys", _as_tuple(keys))

    def permissions(self) -> tuple[str, ...]:
        return self.keys

    def __str__(self) -> str:
        return f"all({', '.join(self.keys)})"


Requirement = Union[Single, AnyOf, AllOf]


def requirement_from_config(match: str, permissions: Iterable[str]) -> Requirement:
    """
    Build a requirement from a route rule's ``match`` + ``permissions`` fields.

    ``single`` needs exactly one permission; ``any`` / ``all`` take a list
    (an empty list is accepted here and denies at evaluation time).
    """

    keys = tuple(permissions)
    match = match.strip().lower()
    if match == "single":
        if len(keys) != 1:
            raise ValueError(f"'single' requirement needs exactly one permission, got {len(keys)}")
        return Single(keys[0])
    if match == "any":
        return AnyOf(keys)
    if match == "all":
        return AllOf(keys)
    raise ValueError(f"unknown requirement match {match!r} (expected single, any or all)")
