"""
Reactivity - the signal graph component hosts are built on.

Example:
    engine = ReactiveEngine()
    count = engine.signal(1)
    doubled = engine.computed(lambda: count() * 2)
    engine.effect(lambda: print(doubled()))
    count.set(2)   # prints 4
"""

from .signals import ReactiveEngine, Signal, ReadableSignal, Computed, Effect

__all__ = ["ReactiveEngine", "Signal", "ReadableSignal", "Computed", "Effect"]
