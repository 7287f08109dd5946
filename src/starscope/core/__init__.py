"""
StarScope Core Module

Namespacing, host capabilities and the component binding contract.
No FastHTML dependency.
"""

from .errors import (
    StarScopeError,
    InvalidIdentifier,
    DuplicateScope,
    OutOfScopeAccess,
    ScopeDisposed,
    ReactiveCycleError,
)
from .namespace import Namespace, qualify, compose_scope, split_qualified, validate_identifier
from .host import AppHost, ScopedHost, Output, flatten_signals, nest_signals
from .component import Component, BoundComponent, ComponentHandle, UIScope, Declarations, component

__all__ = [
    "StarScopeError",
    "InvalidIdentifier",
    "DuplicateScope",
    "OutOfScopeAccess",
    "ScopeDisposed",
    "ReactiveCycleError",
    "Namespace",
    "qualify",
    "compose_scope",
    "split_qualified",
    "validate_identifier",
    "AppHost",
    "ScopedHost",
    "Output",
    "flatten_signals",
    "nest_signals",
    "Component",
    "BoundComponent",
    "ComponentHandle",
    "UIScope",
    "Declarations",
    "component",
]
