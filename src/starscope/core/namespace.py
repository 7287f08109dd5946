"""
Namespace allocation for component identifiers.

A component author picks short local names ("date", "error"); the caller
picks the scope ("birthday"). Qualified names join the two with a reserved
separator that neither part may contain, which keeps the mapping injective
and reversible:

    qualify("birthday")("date")              -> "birthday.date"
    Namespace("birthday").signal("date")     -> "$birthday.date"   (Datastar)
    Namespace("birthday").id("date")         -> "birthday-date"    (HTML id)

Nothing here keeps state. The same scope always yields the same names.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .errors import InvalidIdentifier

SEP = "."
ID_SEP = "-"
_IDENTIFIER = re.compile(r"[A-Za-z0-9_]+")


def validate_identifier(value, kind: str = "identifier") -> str:
    """Return ``value`` unchanged or raise InvalidIdentifier."""
    if not isinstance(value, str) or not value:
        raise InvalidIdentifier(value, kind)
    if SEP in value:
        raise InvalidIdentifier(value, kind, f"'{SEP}' is reserved as the scope separator")
    if not _IDENTIFIER.fullmatch(value):
        raise InvalidIdentifier(value, kind)
    return value


def validate_scope(scope) -> str:
    """Validate a possibly composed scope (``outer.inner``) segment by segment."""
    if not isinstance(scope, str) or not scope:
        raise InvalidIdentifier(scope, "scope")
    for part in scope.split(SEP):
        if not part or not _IDENTIFIER.fullmatch(part):
            raise InvalidIdentifier(scope, "scope")
    return scope


def compose_scope(outer: str, inner: str) -> str:
    """Nest ``inner`` under ``outer``. Both must be valid; ``inner`` must be a single segment."""
    return f"{validate_scope(outer)}{SEP}{validate_identifier(inner, 'scope')}"


def qualify(scope: str) -> Callable[[str], str]:
    """Return a pure function mapping local names to names qualified by ``scope``."""
    prefix = validate_scope(scope) + SEP

    def qualified(local: str) -> str:
        return prefix + validate_identifier(local, "local name")

    qualified.scope = scope
    return qualified


def split_qualified(name: str) -> Tuple[Optional[str], str]:
    """Inverse of ``qualify``: ``"a.b.c"`` -> ``("a.b", "c")``, ``"c"`` -> ``(None, "c")``."""
    if not isinstance(name, str) or not name:
        raise InvalidIdentifier(name, "qualified name")
    scope, sep, local = name.rpartition(SEP)
    if sep:
        validate_scope(scope)
        validate_identifier(local, "local name")
        return scope, local
    return None, validate_identifier(local, "local name")


@dataclass(frozen=True)
class Namespace:
    """
    Value object for one (possibly composed) scope.

    ``Namespace.root()`` has no scope and qualifies a local name to itself;
    it is what top-level application code uses.
    """

    scope: Optional[str] = None

    def __post_init__(self):
        if self.scope is not None:
            validate_scope(self.scope)

    @classmethod
    def root(cls) -> "Namespace":
        return cls(None)

    @property
    def is_root(self) -> bool:
        return self.scope is None

    @property
    def depth(self) -> int:
        return 0 if self.scope is None else self.scope.count(SEP) + 1

    def __call__(self, local: str) -> str:
        validate_identifier(local, "local name")
        return local if self.scope is None else f"{self.scope}{SEP}{local}"

    def id(self, local: str) -> str:
        """HTML element id for ``local``; uses '-' so it is usable in CSS selectors."""
        return self(local).replace(SEP, ID_SEP)

    def signal(self, local: str) -> str:
        """Datastar expression reading ``local``, e.g. ``$birthday.date``."""
        return f"${self(local)}"

    def child(self, inner: str) -> "Namespace":
        if self.scope is None:
            return Namespace(validate_identifier(inner, "scope"))
        return Namespace(compose_scope(self.scope, inner))

    def owns(self, name: str) -> bool:
        """True when ``name`` was produced by this namespace directly (not by a child)."""
        try:
            scope, _ = split_qualified(name)
        except InvalidIdentifier:
            return False
        return scope == self.scope

    def contains(self, name: str) -> bool:
        """True when ``name`` lives in this namespace or any namespace nested under it."""
        if self.scope is None:
            return True
        return isinstance(name, str) and name.startswith(self.scope + SEP)

    def local_name(self, name: str) -> str:
        scope, local = split_qualified(name)
        if scope != self.scope:
            raise InvalidIdentifier(name, "qualified name", f"not owned by scope {self.scope!r}")
        return local

    def __str__(self):
        return self.scope or ""


__all__ = [
    "SEP",
    "ID_SEP",
    "validate_identifier",
    "validate_scope",
    "compose_scope",
    "qualify",
    "split_qualified",
    "Namespace",
]
