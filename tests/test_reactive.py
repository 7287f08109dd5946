"""Tests for the signal engine behind component hosts."""

import pytest

from starscope import ReactiveCycleError, ReactiveEngine, ScopeDisposed


@pytest.fixture
def engine():
    return ReactiveEngine()


def test_computed_is_lazy_and_memoized(engine):
    calls = []
    count = engine.signal(1)

    def doubled():
        calls.append(1)
        return count() * 2

    value = engine.computed(doubled)
    assert calls == []
    assert value() == 2
    assert value() == 2
    assert len(calls) == 1

    count.set(5)
    assert value() == 10
    assert len(calls) == 2


def test_effect_reruns_on_change(engine):
    seen = []
    name = engine.signal("a")
    engine.effect(lambda: seen.append(name()))
    name.set("b")
    assert seen == ["a", "b"]


def test_setting_equal_value_does_not_notify(engine):
    seen = []
    name = engine.signal("a")
    engine.effect(lambda: seen.append(name()))
    assert name.set("a") is False
    assert seen == ["a"]


def test_batch_coalesces_effects(engine):
    seen = []
    first = engine.signal(1)
    second = engine.signal(2)
    engine.effect(lambda: seen.append(first() + second()))
    with engine.batch():
        first.set(10)
        second.set(20)
        assert seen == [3]
    assert seen == [3, 30]


def test_diamond_dependency_sees_consistent_values(engine):
    seen = []
    base = engine.signal(1)
    left = engine.computed(lambda: base() + 1)
    right = engine.computed(lambda: base() * 10)
    engine.effect(lambda: seen.append((left(), right())))
    base.set(2)
    assert seen == [(2, 10), (3, 20)]


def test_dependencies_are_retracked(engine):
    flag = engine.signal(True)
    a = engine.signal("a")
    b = engine.signal("b")
    seen = []
    engine.effect(lambda: seen.append(a() if flag() else b()))
    flag.set(False)
    a.set("a2")
    assert seen == ["a", "b"]
    b.set("b2")
    assert seen == ["a", "b", "b2"]


def test_deferred_effect_waits_for_change(engine):
    seen = []
    value = engine.signal(0)
    effect = engine.effect(lambda: seen.append(value()), defer=True)
    assert seen == []
    effect.track_only(value)
    value.set(1)
    assert seen == [1]


def test_disposed_effect_is_dropped_from_pending_batch(engine):
    seen = []
    value = engine.signal(0)
    effect = engine.effect(lambda: seen.append(value()))
    with engine.batch():
        value.set(1)
        assert engine.pending == 1
        effect.dispose()
        assert engine.pending == 0
    assert seen == [0]


def test_reading_disposed_signal_raises(engine):
    value = engine.signal(0)
    value.dispose()
    with pytest.raises(ScopeDisposed):
        value()
    with pytest.raises(ScopeDisposed):
        value.set(1)


def test_readonly_view_has_no_setter(engine):
    value = engine.signal(3)
    view = value.readonly()
    assert view() == 3
    assert view.value == 3
    assert not hasattr(view, "set")


def test_untracked_reads_do_not_subscribe(engine):
    seen = []
    tracked = engine.signal(1)
    hidden = engine.signal(1)

    def body():
        with engine.untracked():
            extra = hidden()
        seen.append(tracked() + extra)

    engine.effect(body)
    hidden.set(5)
    assert seen == [2]
    tracked.set(2)
    assert seen == [2, 7]


def test_runaway_effects_raise_cycle_error():
    engine = ReactiveEngine(max_flush_iterations=10)
    value = engine.signal(0)
    engine.effect(lambda: value.set(value() + 1) if value() >= 100 else None)
    with pytest.raises(ReactiveCycleError):
        value.set(100)


def test_computed_errors_propagate_to_reader(engine):
    value = engine.signal(0)
    ratio = engine.computed(lambda: 1 / value())
    with pytest.raises(ZeroDivisionError):
        ratio()
    value.set(4)
    assert ratio() == 0.25


def test_effect_recovers_after_computed_error(engine):
    raw = engine.signal("1")
    parsed = engine.computed(lambda: int(raw()))
    seen = []
    engine.effect(lambda: seen.append(parsed()))
    with pytest.raises(ValueError):
        raw.set("bad")
    with pytest.raises(ValueError):
        parsed()
    raw.set("5")
    assert seen == [1, 5]
    assert parsed() == 5


def test_computed_error_propagates_through_downstream_computed(engine):
    raw = engine.signal("2")
    parsed = engine.computed(lambda: int(raw()))
    doubled = engine.computed(lambda: parsed() * 2)
    assert doubled() == 4
    raw.set("x")
    with pytest.raises(ValueError):
        doubled()
    raw.set("3")
    assert doubled() == 6


def test_failed_computed_is_not_rerun_until_a_source_changes(engine):
    calls = []
    value = engine.signal(0)

    def ratio():
        calls.append(1)
        return 1 / value()

    computed = engine.computed(ratio)
    for _ in range(2):
        with pytest.raises(ZeroDivisionError):
            computed()
    assert len(calls) == 1
