"""
StarScope - Namespaced, reusable components for FastHTML and Datastar

A component pairs a UI builder and a behavior builder that share one scope,
so the same component can be placed on a page any number of times without
its identifiers colliding.
"""

from .core import (
    StarScopeError,
    InvalidIdentifier,
    DuplicateScope,
    OutOfScopeAccess,
    ScopeDisposed,
    ReactiveCycleError,
    Namespace,
    qualify,
    compose_scope,
    split_qualified,
    validate_identifier,
    AppHost,
    ScopedHost,
    Output,
    Component,
    BoundComponent,
    ComponentHandle,
    UIScope,
    Declarations,
    component,
)
from .reactive import ReactiveEngine, Signal, ReadableSignal, Computed, Effect
from .config import StarScopeConfig, Environment, DuplicateScopePolicy, get_config, set_config, configure_logging
from .ui import datastar_script, bound_input, output_slot, scope_container

__version__ = "0.1.0"

__all__ = [
    # Errors
    'StarScopeError',
    'InvalidIdentifier',
    'DuplicateScope',
    'OutOfScopeAccess',
    'ScopeDisposed',
    'ReactiveCycleError',

    # Namespacing
    'Namespace',
    'qualify',
    'compose_scope',
    'split_qualified',
    'validate_identifier',

    # Hosts and components
    'AppHost',
    'ScopedHost',
    'Output',
    'Component',
    'BoundComponent',
    'ComponentHandle',
    'UIScope',
    'Declarations',
    'component',

    # Reactivity
    'ReactiveEngine',
    'Signal',
    'ReadableSignal',
    'Computed',
    'Effect',

    # Configuration
    'StarScopeConfig',
    'Environment',
    'DuplicateScopePolicy',
    'get_config',
    'set_config',
    'configure_logging',

    # UI
    'datastar_script',
    'bound_input',
    'output_slot',
    'scope_container',
]
