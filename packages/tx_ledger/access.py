"""Caller identity and authorization collaborators.

The ledger never decides *who* is calling; it asks an ``IdentityContext``.
Authorization is an injected ``AccessControl`` capability rather than a base
class, so hosts can swap in their own policy without touching ledger code.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from .models import Identity


class IdentityContext(Protocol):
    def current_caller(self) -> Identity: ...


class AccessControl(Protocol):
    def is_admin(self, identity: Identity) -> bool: ...


class AdminAccessControl:
    """Single fixed administrator; ``is_admin`` is one equality check."""

    __slots__ = ("_admin",)

    def __init__(self, admin: Identity) -> None:
        self._admin = admin

    @property
    def admin(self) -> Identity:
        return self._admin

    def is_admin(self, identity: Identity) -> bool:
        return identity == self._admin


class StaticIdentity:
    """Identity context holding one caller, switchable for a block.

    Used by the CLI (one caller per process) and by tests that act as several
    users in sequence.
    """

    def __init__(self, caller: Identity) -> None:
        self._caller = caller

    def current_caller(self) -> Identity:
        return self._caller

    def set_caller(self, caller: Identity) -> None:
        self._caller = caller

    @contextmanager
    def acting_as(self, caller: Identity) -> Iterator[None]:
        previous = self._caller
        self._caller = caller
        try:
            yield
        finally:
            self._caller = previous


__all__ = [
    "IdentityContext",
    "AccessControl",
    "AdminAccessControl",
    "StaticIdentity",
]
