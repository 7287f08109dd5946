"""
Component hosts.

``AppHost`` is the root of one session's identifier space: it owns the
reactive engine and the table of every input and output by qualified name,
and it is the side the client (a browser, a test) writes inputs through.

``ScopedHost`` is the capability a component's behavior function receives.
It is bound to one namespace and only ever creates, reads or writes names of
that namespace, so a component cannot reach a sibling's or its parent's
state through it. Children get their own ``ScopedHost`` via ``child()``.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..config import DuplicateScopePolicy, StarScopeConfig, get_config
from ..reactive.signals import Computed, Effect, ReactiveEngine, ReadableSignal, Signal, _same
from .errors import DuplicateScope, InvalidIdentifier, OutOfScopeAccess, ScopeDisposed
from .namespace import SEP, Namespace, validate_identifier

if TYPE_CHECKING:
    from .component import Declarations

logger = logging.getLogger(__name__)

Readable = Union[ReadableSignal, Signal, Computed, Callable[[], Any]]


class Output:
    """A declared output: a qualified name plus the memoized render function behind it."""

    def __init__(self, name: str, computed: Computed):
        self.name = name
        self._computed = computed

    @property
    def value(self) -> Any:
        return self._computed.get()

    def __call__(self) -> Any:
        return self._computed.get()

    def readonly(self) -> ReadableSignal:
        return self._computed.readonly()

    def dispose(self):
        self._computed.dispose()

    @property
    def disposed(self) -> bool:
        return self._computed.disposed

    def __repr__(self):
        return f"Output({self.name})"


class ScopedHost:
    """Reactive capability restricted to one namespace."""

    def __init__(
        self,
        app: "AppHost",
        namespace: Namespace,
        parent: Optional["ScopedHost"] = None,
        declarations: Optional["Declarations"] = None,
    ):
        self._app = app
        self.namespace = namespace
        self._parent = parent
        self._declarations = declarations
        self._inputs: Dict[str, Signal] = {}
        self._outputs: Dict[str, Output] = {}
        self._children: Dict[str, "ScopedHost"] = {}
        self._nodes: List[Union[Computed, Effect]] = []
        self._disposed = False

    @property
    def scope(self) -> Optional[str]:
        return self.namespace.scope

    @property
    def key(self) -> Optional[str]:
        """Last segment of the scope: the id this instance was mounted under."""
        return None if self.namespace.is_root else self.namespace.scope.rsplit(SEP, 1)[-1]

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def children(self) -> List[str]:
        return list(self._children)

    @property
    def declared(self) -> Dict[str, List[str]]:
        return {"inputs": list(self._inputs), "outputs": list(self._outputs)}

    def _check_alive(self):
        if self._disposed:
            raise ScopeDisposed(f"Scope '{self.scope or '<root>'}' has been disposed")

    def _local(self, name: str) -> str:
        """Resolve a local or own-qualified name to its local part."""
        if isinstance(name, str) and SEP in name:
            if not self.namespace.owns(name):
                raise OutOfScopeAccess(name, self.scope)
            return self.namespace.local_name(name)
        return validate_identifier(name, "local name")

    def _claim(self, local: str):
        if local in self._inputs or local in self._outputs:
            raise InvalidIdentifier(local, "local name", f"already declared in scope {self.scope!r}")
        if local in self._children:
            raise InvalidIdentifier(local, "local name", f"already used as a child scope of {self.scope!r}")

    def _check_declared(self, kind: str, local: str):
        if self._declarations is None:
            return
        declared = self._declarations.inputs if kind == "input" else self._declarations.outputs
        if local in declared:
            return
        qualified = self.namespace(local)
        if self._app.config.scope.strict_declarations:
            raise OutOfScopeAccess(qualified, self.scope)
        logger.warning("Behavior declares %s '%s' that the UI never declared", kind, qualified)

    # Declarations

    def declare_input(self, local: str, default: Any = None) -> ReadableSignal:
        """Create the input signal for ``local``; the client writes it, the component reads it."""
        self._check_alive()
        validate_identifier(local, "local name")
        self._claim(local)
        self._check_declared("input", local)
        qualified = self.namespace(local)
        signal = self._app.engine.signal(default, name=qualified)
        self._inputs[local] = signal
        self._app._register_input(qualified, signal)
        return signal.readonly()

    def declare_output(self, local: str, render_fn: Callable[[], Any]) -> Output:
        """Register ``render_fn`` as the value shown at ``local``."""
        self._check_alive()
        validate_identifier(local, "local name")
        self._claim(local)
        self._check_declared("output", local)
        qualified = self.namespace(local)
        output = Output(qualified, self._app.engine.computed(render_fn, name=qualified))
        self._outputs[local] = output
        self._app._register_output(qualified, output)
        return output

    def derive(self, fn: Callable[[], Any], name: Optional[str] = None) -> ReadableSignal:
        """Memoized derived value, dropped with this scope."""
        self._check_alive()
        computed = self._app.engine.computed(fn, name=name)
        self._nodes.append(computed)
        return computed.readonly()

    def effect(self, fn: Callable[[], Any], name: Optional[str] = None) -> Effect:
        """Run ``fn`` now and whenever what it read changes."""
        self._check_alive()
        effect = self._app.engine.effect(fn, name=name)
        self._nodes.append(effect)
        return effect

    def on_event(self, signal: Readable, handler: Callable[[Any], Any]) -> Effect:
        """Call ``handler(value)`` each time the value of ``signal`` changes (not on registration)."""
        self._check_alive()
        if isinstance(signal, str):
            signal = self._signal_for(self._local(signal))
        engine = self._app.engine
        last = None

        def fire():
            nonlocal last
            value = signal()
            # derived values notify on every upstream change, even when they recompute equal
            if _same(last, value):
                return
            last = value
            with engine.untracked():
                handler(value)

        effect = Effect(engine, fire, name=getattr(handler, "__name__", None))
        (last,) = effect.track_only(signal)
        self._nodes.append(effect)
        return effect

    # Access

    def _signal_for(self, local: str) -> Readable:
        if local in self._inputs:
            return self._inputs[local].readonly()
        if local in self._outputs:
            return self._outputs[local].readonly()
        raise KeyError(f"No signal '{local}' in scope '{self.scope or '<root>'}'")

    def read(self, name: str) -> Any:
        """Current value of an input or output of this scope."""
        self._check_alive()
        local = self._local(name)
        return self._signal_for(local)()

    def write(self, name: str, value: Any) -> bool:
        """Update one of this scope's inputs."""
        self._check_alive()
        local = self._local(name)
        if local in self._outputs:
            raise TypeError(f"'{self.namespace(local)}' is an output and cannot be written")
        if local not in self._inputs:
            raise KeyError(f"No input '{local}' in scope '{self.scope or '<root>'}'")
        return self._inputs[local].set(value)

    def batch(self):
        return self._app.engine.batch()

    # Children

    def child(self, inner: str, declarations: Optional["Declarations"] = None) -> "ScopedHost":
        """Open the scope for a component instantiated inside this one."""
        self._check_alive()
        validate_identifier(inner, "scope")
        if inner in self._inputs or inner in self._outputs:
            raise DuplicateScope(inner, self.scope, "the name is already declared as a signal here")
        if inner in self._children:
            if self._app.config.scope.duplicate_scope == DuplicateScopePolicy.RAISE:
                raise DuplicateScope(inner, self.scope)
            logger.warning(
                "Scope '%s' mounted twice under '%s'; disposing the previous instance",
                inner, self.scope or "<root>",
            )
            self._children[inner].dispose()
        host = ScopedHost(self._app, self.namespace.child(inner), parent=self, declarations=declarations)
        self._children[inner] = host
        logger.debug("Opened scope '%s'", host.scope)
        return host

    def get_child(self, inner: str) -> "ScopedHost":
        return self._children[inner]

    def unmount(self, inner: str):
        """Tear down the child instance mounted at ``inner``."""
        self._check_alive()
        self._children[inner].dispose()

    def dispose(self):
        """Tear down this scope, its children, and every name it allocated."""
        if self._disposed:
            return
        for child in list(self._children.values()):
            child.dispose()
        for node in self._nodes:
            node.dispose()
        for signal in self._inputs.values():
            signal.dispose()
        for output in self._outputs.values():
            output.dispose()
        self._app._release([self.namespace(local) for local in (*self._inputs, *self._outputs)])
        self._nodes.clear()
        self._disposed = True
        if self._parent is not None and self._parent._children.get(self.key) is self:
            del self._parent._children[self.key]
        logger.debug("Disposed scope '%s'", self.scope or "<root>")

    def __repr__(self):
        return f"ScopedHost({self.scope or '<root>'})"


class AppHost:
    """
    Root of one session's component tree.

    Application code mounts components here; the web adapter feeds client
    input through ``apply_signals`` and reads back ``signals()``.
    """

    def __init__(self, config: Optional[StarScopeConfig] = None, engine: Optional[ReactiveEngine] = None):
        self.config = config or get_config()
        self.engine = engine or ReactiveEngine(self.config.scope.max_flush_iterations)
        self._inputs: Dict[str, Signal] = {}
        self._outputs: Dict[str, Output] = {}
        self.root = ScopedHost(self, Namespace.root())

    # Registration (called by ScopedHost)

    def _register_input(self, name: str, signal: Signal):
        self._inputs[name] = signal

    def _register_output(self, name: str, output: Output):
        self._outputs[name] = output

    def _release(self, names: Iterable[str]):
        for name in names:
            self._inputs.pop(name, None)
            self._outputs.pop(name, None)

    # Tree

    @property
    def disposed(self) -> bool:
        return self.root.disposed

    def child(self, inner: str, declarations: Optional["Declarations"] = None) -> ScopedHost:
        return self.root.child(inner, declarations=declarations)

    def unmount(self, inner: str):
        self.root.unmount(inner)

    def dispose(self):
        self.root.dispose()

    # Client side

    @property
    def input_names(self) -> List[str]:
        return list(self._inputs)

    @property
    def output_names(self) -> List[str]:
        return list(self._outputs)

    def set_input(self, name: str, value: Any) -> bool:
        """Write an input by qualified name, as a client would."""
        if self.disposed:
            raise ScopeDisposed("Application host has been disposed")
        if name not in self._inputs:
            raise KeyError(f"No input named '{name}'")
        return self._inputs[name].set(value)

    def set_inputs(self, values: Mapping[str, Any]) -> List[str]:
        """Write several inputs; effects run once after all of them are applied."""
        changed = []
        with self.engine.batch():
            for name, value in values.items():
                if self.set_input(name, value):
                    changed.append(name)
        return changed

    def apply_signals(self, payload: Mapping[str, Any]) -> List[str]:
        """Apply a Datastar-shaped (nested) payload; names that are not inputs are ignored."""
        flat = flatten_signals(payload)
        known = {}
        for name, value in flat.items():
            if name in self._inputs:
                known[name] = value
            else:
                logger.debug("Ignoring client signal '%s' (not a declared input)", name)
        return self.set_inputs(known)

    def input_value(self, name: str) -> Any:
        return self._inputs[name].peek()

    def output_value(self, name: str) -> Any:
        return self._outputs[name]()

    def output_values(self) -> Dict[str, Any]:
        return {name: output() for name, output in self._outputs.items()}

    def signals(self, include_inputs: bool = True) -> Dict[str, Any]:
        """Nested dict of current values, shaped for ``data-signals`` and merge-signals."""
        flat: Dict[str, Any] = {}
        if include_inputs:
            flat.update({name: signal.peek() for name, signal in self._inputs.items()})
        flat.update(self.output_values())
        return nest_signals(flat)


def flatten_signals(payload: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """``{"a": {"b": 1}}`` -> ``{"a.b": 1}``."""
    flat: Dict[str, Any] = {}
    for key, value in payload.items():
        name = f"{prefix}{SEP}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_signals(value, name))
        else:
            flat[name] = value
    return flat


def nest_signals(flat: Mapping[str, Any]) -> Dict[str, Any]:
    """``{"a.b": 1}`` -> ``{"a": {"b": 1}}``."""
    nested: Dict[str, Any] = {}
    for name, value in flat.items():
        *scopes, local = name.split(SEP)
        target = nested
        for part in scopes:
            target = target.setdefault(part, {})
        target[local] = value
    return nested


__all__ = ["AppHost", "ScopedHost", "Output", "flatten_signals", "nest_signals"]
