"""
Reactive Signal Engine

🔄 Minimal dependency-tracking engine behind component hosts:

- Signal: writable value; notifies dependents when it changes
- Computed: memoized derived value, recomputed lazily when a dependency changed
- Effect: side-effecting observer, re-run after its dependencies change
- batch(): coalesce writes; effects flush once when the outermost batch exits

Everything runs on one logical thread. Effects run to completion and in the
order they were scheduled; derived values are pulled on read so they always
follow dependency order. Disposed nodes are dropped from the schedule instead
of being run.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Set

from ..core.errors import ReactiveCycleError, ScopeDisposed

logger = logging.getLogger(__name__)

_MISSING = object()


class _Node:
    """Common bookkeeping for everything that lives in the graph."""

    def __init__(self, engine: "ReactiveEngine", name: Optional[str] = None):
        self._engine = engine
        self.name = name
        self._observers: Set["_Observer"] = set()
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _check_alive(self):
        if self._disposed:
            raise ScopeDisposed(f"{self!r} has been disposed")

    def _track(self):
        observer = self._engine._current_observer()
        if observer is not None and observer is not self:
            observer._sources.add(self)
            self._observers.add(observer)

    def _notify(self):
        for observer in list(self._observers):
            observer._mark_stale()

    def dispose(self):
        self._disposed = True
        for observer in list(self._observers):
            observer._sources.discard(self)
        self._observers.clear()

    def __repr__(self):
        return f"{self.__class__.__name__}({self.name or hex(id(self))})"


class _Observer(_Node):
    """A node that reads other nodes while it runs."""

    def __init__(self, engine, name=None):
        super().__init__(engine, name)
        self._sources: Set[_Node] = set()

    def _clear_sources(self):
        for source in self._sources:
            source._observers.discard(self)
        self._sources = set()

    def _mark_stale(self):
        raise NotImplementedError

    def dispose(self):
        self._clear_sources()
        super().dispose()


class ReadableSignal:
    """Read-only view over a Signal or Computed. Call it or use ``.value``."""

    __slots__ = ("_node",)

    def __init__(self, node: _Node):
        self._node = node

    @property
    def name(self) -> Optional[str]:
        return self._node.name

    @property
    def value(self) -> Any:
        return self._node.get()

    @property
    def disposed(self) -> bool:
        return self._node.disposed

    def peek(self) -> Any:
        """Read without registering a dependency."""
        return self._node.peek()

    def __call__(self) -> Any:
        return self._node.get()

    def __repr__(self):
        return f"ReadableSignal({self._node.name})"


class Signal(_Node):
    """Writable reactive value."""

    def __init__(self, engine, value: Any = None, name: Optional[str] = None):
        super().__init__(engine, name)
        self._value = value

    def get(self) -> Any:
        self._check_alive()
        self._track()
        return self._value

    def peek(self) -> Any:
        self._check_alive()
        return self._value

    @property
    def value(self) -> Any:
        return self.get()

    @value.setter
    def value(self, new_value: Any):
        self.set(new_value)

    def __call__(self) -> Any:
        return self.get()

    def set(self, new_value: Any) -> bool:
        """Store ``new_value``; returns False when it equals the current value."""
        self._check_alive()
        if _same(self._value, new_value):
            return False
        self._value = new_value
        with self._engine.batch():
            self._notify()
        return True

    def readonly(self) -> ReadableSignal:
        return ReadableSignal(self)


class Computed(_Observer):
    """Memoized derived value. Recomputed on the next read after a dependency changed."""

    def __init__(self, engine, fn: Callable[[], Any], name: Optional[str] = None):
        super().__init__(engine, name or getattr(fn, "__name__", None))
        self._fn = fn
        self._value = _MISSING
        self._error: Optional[BaseException] = None
        self._stale = True

    def _mark_stale(self):
        if self._stale or self._disposed:
            return
        self._stale = True
        self._notify()

    def _recompute(self):
        # A failed run still counts as fresh so the next source change notifies again.
        self._clear_sources()
        try:
            with self._engine._observing(self):
                self._value = self._fn()
            self._error = None
        except Exception as exc:
            self._value = _MISSING
            self._error = exc
            raise
        finally:
            self._stale = False

    def _current(self) -> Any:
        if self._stale:
            self._recompute()
        elif self._error is not None:
            raise self._error
        return self._value

    def get(self) -> Any:
        self._check_alive()
        self._track()
        return self._current()

    def peek(self) -> Any:
        self._check_alive()
        return self._current()

    @property
    def value(self) -> Any:
        return self.get()

    def __call__(self) -> Any:
        return self.get()

    def readonly(self) -> ReadableSignal:
        return ReadableSignal(self)

    def dispose(self):
        super().dispose()
        self._value = _MISSING
        self._error = None


class Effect(_Observer):
    """Runs ``fn`` now (unless deferred) and again whenever something it read changes."""

    def __init__(self, engine, fn: Callable[[], Any], name: Optional[str] = None):
        super().__init__(engine, name or getattr(fn, "__name__", None))
        self._fn = fn
        self._scheduled = False

    def _mark_stale(self):
        if self._disposed or self._scheduled:
            return
        self._scheduled = True
        self._engine._schedule(self)

    def run(self):
        if self._disposed:
            return
        self._scheduled = False
        self._clear_sources()
        with self._engine._observing(self):
            self._fn()

    def track_only(self, *readers: Callable[[], Any]) -> List[Any]:
        """Subscribe to ``readers`` without running the effect body; returns what they read."""
        self._clear_sources()
        with self._engine._observing(self):
            return [read() for read in readers]

    def dispose(self):
        super().dispose()
        self._scheduled = False


class ReactiveEngine:
    """Owns the observer stack and the effect schedule for one reactive graph."""

    def __init__(self, max_flush_iterations: int = 100):
        self.max_flush_iterations = max_flush_iterations
        self._stack: List[_Observer] = []
        self._pending: Dict[int, Effect] = {}
        self._batch_depth = 0
        self._flushing = False

    # Node factories

    def signal(self, value: Any = None, name: Optional[str] = None) -> Signal:
        return Signal(self, value, name)

    def computed(self, fn: Callable[[], Any], name: Optional[str] = None) -> Computed:
        return Computed(self, fn, name)

    def effect(self, fn: Callable[[], Any], name: Optional[str] = None, defer: bool = False) -> Effect:
        effect = Effect(self, fn, name)
        if not defer:
            effect.run()
        return effect

    # Tracking

    def _current_observer(self) -> Optional[_Observer]:
        return self._stack[-1] if self._stack else None

    @contextmanager
    def _observing(self, observer: _Observer):
        self._stack.append(observer)
        try:
            yield observer
        finally:
            self._stack.pop()

    @contextmanager
    def untracked(self):
        """Read signals without subscribing the current observer."""
        saved, self._stack = self._stack, []
        try:
            yield
        finally:
            self._stack = saved

    # Scheduling

    def _schedule(self, effect: Effect):
        self._pending[id(effect)] = effect

    @property
    def pending(self) -> int:
        return sum(1 for effect in self._pending.values() if not effect.disposed)

    @contextmanager
    def batch(self):
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and not self._flushing:
                self.flush()

    def flush(self):
        """Run scheduled effects until the schedule is empty."""
        self._flushing = True
        try:
            rounds = 0
            while self._pending:
                rounds += 1
                if rounds > self.max_flush_iterations:
                    names = [repr(e) for e in self._pending.values()]
                    self._pending.clear()
                    raise ReactiveCycleError(
                        f"Effects still scheduled after {self.max_flush_iterations} rounds: {names}"
                    )
                queue, self._pending = list(self._pending.values()), {}
                for index, effect in enumerate(queue):
                    if effect.disposed:
                        logger.debug("Dropping effect %r of a disposed scope", effect)
                        continue
                    try:
                        effect.run()
                    except Exception:
                        # keep the rest of this round for the next flush
                        for rest in queue[index + 1:]:
                            self._pending.setdefault(id(rest), rest)
                        raise
        finally:
            self._flushing = False


def _same(old: Any, new: Any) -> bool:
    if old is new:
        return True
    try:
        return bool(old == new)
    except Exception:
        return False


__all__ = ["ReactiveEngine", "Signal", "ReadableSignal", "Computed", "Effect"]
