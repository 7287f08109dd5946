"""
Component Binding

A component pairs a UI builder with a behavior builder. Both receive the
same scope, so identifiers the UI renders are exactly the ones the behavior
reads and writes:

    date_input = Component("date_input")

    @date_input.ui
    def date_input_ui(ns: UIScope, label: str = "Date"):
        return Div(Label(label, fr=ns.id("date")), bound_input(ns, "date"), output_slot(ns, "error"))

    @date_input.behavior
    def date_input_behavior(host: ScopedHost) -> DateInputHandle:
        raw = host.declare_input("date", "")
        ...
        return DateInputHandle(value=parsed, error=error)

    birthday = date_input("birthday")      # scope bound here
    page = birthday.render(parent=page_scope)
    handle = birthday.mount(app_host)

The handle is the only thing the caller gets back.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set, Union

from pydantic import BaseModel, ConfigDict

from ..reactive.signals import ReadableSignal
from .errors import DuplicateScope, InvalidIdentifier
from .namespace import Namespace, validate_identifier

logger = logging.getLogger(__name__)


@dataclass
class Declarations:
    """Identifiers a UI fragment declared: the component's wiring surface."""
    inputs: Set[str] = field(default_factory=set)
    outputs: Set[str] = field(default_factory=set)

    @property
    def names(self) -> Set[str]:
        return self.inputs | self.outputs

    def add(self, kind: str, local: str):
        validate_identifier(local, "local name")
        own, other = (self.inputs, self.outputs) if kind == "input" else (self.outputs, self.inputs)
        if local in other:
            raise InvalidIdentifier(local, "local name", "declared as both an input and an output")
        own.add(local)


class UIScope:
    """
    What a UI builder sees: the namespace plus a recorder of declared names.

    ``ns.input(local)`` and ``ns.output(local)`` return qualified names and
    record them; ``ns.id`` and ``ns.signal`` give the HTML id and Datastar
    expression for a local name.
    """

    def __init__(self, namespace: Namespace, parent: Optional["UIScope"] = None):
        self.namespace = namespace
        self.parent = parent
        self.declarations = Declarations()
        self._children: Set[str] = set()

    @classmethod
    def root(cls) -> "UIScope":
        """Page-level scope; sibling components rendered under it are checked for duplicates."""
        return cls(Namespace.root())

    @property
    def scope(self) -> Optional[str]:
        return self.namespace.scope

    def __call__(self, local: str) -> str:
        return self.namespace(local)

    def input(self, local: str) -> str:
        if local in self._children:
            raise DuplicateScope(local, self.scope, "the name is already used as a child scope")
        self.declarations.add("input", local)
        return self.namespace(local)

    def output(self, local: str) -> str:
        if local in self._children:
            raise DuplicateScope(local, self.scope, "the name is already used as a child scope")
        self.declarations.add("output", local)
        return self.namespace(local)

    def id(self, local: str) -> str:
        return self.namespace.id(local)

    def signal(self, local: str) -> str:
        return self.namespace.signal(local)

    def child(self, inner: str) -> "UIScope":
        validate_identifier(inner, "scope")
        if inner in self._children:
            raise DuplicateScope(inner, self.scope)
        if inner in self.declarations.names:
            raise DuplicateScope(inner, self.scope, "the name is already declared as a signal here")
        self._children.add(inner)
        return UIScope(self.namespace.child(inner), parent=self)

    def __repr__(self):
        return f"UIScope({self.scope or '<root>'})"


class ComponentHandle(BaseModel):
    """
    Base class for what a behavior returns: a typed record of readable signals.

    Subclasses declare their fields as ``ReadableSignal``.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    def snapshot(self) -> Dict[str, Any]:
        """Current value of every signal field."""
        values = {}
        for name in type(self).model_fields:
            attr = getattr(self, name)
            values[name] = attr() if isinstance(attr, ReadableSignal) else attr
        return values


Handle = Union[ComponentHandle, ReadableSignal, None]


class Component:
    """A named pair of UI and behavior builders. Call it with a scope to bind."""

    def __init__(
        self,
        name: Optional[str] = None,
        build_ui: Optional[Callable[..., Any]] = None,
        build_behavior: Optional[Callable[..., Handle]] = None,
    ):
        self.name = name
        self.build_ui = build_ui
        self.build_behavior = build_behavior

    def ui(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator registering the UI builder: ``fn(ns: UIScope, *args, **kwargs)``."""
        self.build_ui = fn
        if self.name is None:
            self.name = fn.__name__
        return fn

    def behavior(self, fn: Callable[..., Handle]) -> Callable[..., Handle]:
        """Decorator registering the behavior builder: ``fn(host: ScopedHost, *args, **kwargs)``."""
        self.build_behavior = fn
        if self.name is None:
            self.name = fn.__name__
        return fn

    def __call__(self, scope: str) -> "BoundComponent":
        return BoundComponent(self, scope)

    def __repr__(self):
        return f"Component({self.name})"


def component(
    build_ui: Callable[..., Any],
    build_behavior: Callable[..., Handle],
    name: Optional[str] = None,
) -> Component:
    """Build a Component from its two halves."""
    return Component(name or build_ui.__name__, build_ui, build_behavior)


class BoundComponent:
    """A component with its scope fixed. Construction happens in ``render`` and ``mount``."""

    def __init__(self, component: Component, scope: str):
        self.component = component
        self.scope = validate_identifier(scope, "scope")
        self.declarations: Optional[Declarations] = None

    def render(self, *args, parent: Optional[UIScope] = None, **kwargs) -> Any:
        """Build the UI fragment under ``parent`` (the page root when omitted)."""
        if self.component.build_ui is None:
            raise TypeError(f"{self.component!r} has no UI builder")
        if parent is None:
            ui_scope = UIScope(Namespace(self.scope))
        else:
            ui_scope = parent.child(self.scope)
        fragment = self.component.build_ui(ui_scope, *args, **kwargs)
        self.declarations = ui_scope.declarations
        return fragment

    def mount(self, host, *args, **kwargs) -> Handle:
        """Build the behavior in a child scope of ``host`` and return its handle."""
        if self.component.build_behavior is None:
            raise TypeError(f"{self.component!r} has no behavior builder")
        scoped = host.child(self.scope, declarations=self.declarations)
        try:
            handle = self.component.build_behavior(scoped, *args, **kwargs)
            _check_handle(self.component, handle)
        except Exception:
            scoped.dispose()
            raise
        logger.debug("Mounted %r at '%s'", self.component, scoped.scope)
        return handle

    def __repr__(self):
        return f"BoundComponent({self.component.name}, {self.scope!r})"


def _check_handle(component: Component, handle: Any):
    if handle is None or isinstance(handle, (ComponentHandle, ReadableSignal)):
        return
    raise TypeError(
        f"Behavior of {component!r} returned {type(handle).__name__}; "
        "expected a ComponentHandle, a ReadableSignal or None"
    )


__all__ = [
    "Declarations",
    "UIScope",
    "ComponentHandle",
    "Component",
    "BoundComponent",
    "component",
]
