"""
StarScope error taxonomy.

All of these are programmer errors: they signal a defect in how components
are composed, so they are raised immediately and never retried.
"""

from typing import Optional


class StarScopeError(Exception):
    """Base class for all StarScope errors."""


class InvalidIdentifier(StarScopeError, ValueError):
    """A scope id or local name is empty or uses characters outside [A-Za-z0-9_]."""

    def __init__(self, value, kind: str = "identifier", reason: Optional[str] = None):
        self.value = value
        self.kind = kind
        self.reason = reason or "must be a non-empty string of letters, digits or underscores"
        super().__init__(f"Invalid {kind} {value!r}: {self.reason}")


class DuplicateScope(StarScopeError):
    """Two sibling instantiations share one scope under the same parent."""

    def __init__(self, scope: str, parent: Optional[str] = None, reason: Optional[str] = None):
        self.scope = scope
        self.parent = parent
        where = f"under '{parent}'" if parent else "at the root"
        message = f"Scope '{scope}' is already in use {where}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OutOfScopeAccess(StarScopeError, PermissionError):
    """A scoped host was asked for a name it does not own."""

    def __init__(self, name: str, scope: Optional[str]):
        self.name = name
        self.scope = scope
        super().__init__(f"'{name}' is outside scope '{scope or '<root>'}'")


class ScopeDisposed(StarScopeError, RuntimeError):
    """A scope, signal or computation was used after teardown."""


class ReactiveCycleError(StarScopeError, RuntimeError):
    """Effects kept rescheduling each other past the flush limit."""


__all__ = [
    "StarScopeError",
    "InvalidIdentifier",
    "DuplicateScope",
    "OutOfScopeAccess",
    "ScopeDisposed",
    "ReactiveCycleError",
]
