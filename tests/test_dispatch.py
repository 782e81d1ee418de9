import logging
import threading

import pytest

from hookrelay import HookRegistry, RegistryConfig


def test_priority_ordering_with_ties_in_registration_order() -> None:
    hooks = HookRegistry()
    order: list[str] = []

    hooks.add("h", lambda: order.append("20"), 20, 0)
    hooks.add("h", lambda: order.append("5a"), 5, 0)
    hooks.add("h", lambda: order.append("5b"), 5, 0)
    hooks.add("h", lambda: order.append("10"), 10, 0)
    hooks.call("h")

    assert order == ["5a", "5b", "10", "20"]


def test_sort_cache_is_refreshed_after_mutation() -> None:
    hooks = HookRegistry()
    order: list[int] = []

    hooks.add("h", lambda: order.append(10), 10, 0)
    hooks.call("h")
    hooks.add("h", lambda: order.append(1), 1, 0)
    hooks.call("h")

    assert order == [10, 1, 10]


def test_accepted_args_truncates_dispatch_arguments() -> None:
    hooks = HookRegistry()
    received: list[tuple] = []

    hooks.add("h", lambda *args: received.append(args), accepted_args=1)
    hooks.add("h", lambda *args: received.append(args), accepted_args=0)
    hooks.add("h", lambda *args: received.append(args), accepted_args=5)
    hooks.call("h", "a", "b", "c")

    assert received == [("a",), (), ("a", "b", "c")]


def test_call_array_matches_variadic_call() -> None:
    hooks = HookRegistry()
    received: list[tuple] = []

    hooks.add("h", lambda *args: received.append(args), accepted_args=2)
    hooks.call("h", 1, 2, 3)
    hooks.call_array("h", [1, 2, 3])

    assert received == [(1, 2), (1, 2)]


def test_action_return_values_are_discarded() -> None:
    hooks = HookRegistry()
    hooks.add("h", lambda value: value * 2)

    assert hooks.call("h", 4) is None


def test_filter_threads_value_through_chain() -> None:
    hooks = HookRegistry()

    hooks.add("transform", lambda value, extra: value + extra, 10, 2)
    hooks.add("transform", lambda value, extra: value * 2, 20, 2)

    assert hooks.apply("transform", 5, 3) == 16
    assert hooks.apply_array("transform", 5, [3]) == 16


def test_filter_with_zero_accepted_args_still_replaces_value() -> None:
    hooks = HookRegistry()
    hooks.add("h", lambda: "constant", accepted_args=0)

    assert hooks.apply("h", "original") == "constant"


def test_unregistered_hook_is_a_no_op() -> None:
    hooks = HookRegistry()

    assert hooks.did("nope") == 0
    assert hooks.call("nope", 1, 2) is None
    assert hooks.apply("nope", 7) == 7
    assert hooks.apply_array("nope", 7, [1]) == 7
    assert hooks.did("nope") == 0
    assert hooks.current() is None


def test_call_counts_skip_unregistered_dispatches() -> None:
    hooks = HookRegistry()
    hooks.add("x", lambda: None, accepted_args=0)

    hooks.call("x")
    hooks.call("x")
    hooks.apply("x", None)
    assert hooks.did("x") == 3

    hooks.remove_all("x")
    hooks.call("x")
    assert hooks.did("x") == 3


def test_reentrant_dispatch_keeps_current_hook() -> None:
    hooks = HookRegistry()
    seen: list = []

    def on_a():
        seen.append(hooks.current())
        if len(seen) == 1:
            hooks.call("a")
            seen.append(hooks.current())

    hooks.add("a", on_a, accepted_args=0)

    assert hooks.current() is None
    hooks.call("a")

    assert seen == ["a", "a", "a"]
    assert hooks.current() is None
    assert hooks.did("a") == 2


def test_nested_dispatch_of_other_hook() -> None:
    hooks = HookRegistry()
    seen: list = []

    def outer():
        seen.append(hooks.current())
        seen.append(hooks.apply("inner", 1))
        seen.append(hooks.current())

    hooks.add("outer", outer, accepted_args=0)
    hooks.add("inner", lambda value: seen.append(hooks.current()) or value + 1)
    hooks.call("outer")

    assert seen == ["outer", "inner", 2, "outer"]


def test_callback_exception_propagates_and_unwinds_stack() -> None:
    hooks = HookRegistry()
    observed: list = []

    def boom():
        raise RuntimeError("boom")

    def outer():
        with pytest.raises(RuntimeError):
            hooks.call("explode")
        observed.append(hooks.current())

    hooks.add("explode", boom, accepted_args=0)
    hooks.add("outer", outer, accepted_args=0)

    with pytest.raises(RuntimeError, match="boom"):
        hooks.call("explode")
    assert hooks.current() is None

    hooks.call("outer")
    assert observed == ["outer"]

    hooks.add("bad-filter", lambda value: 1 / 0)
    with pytest.raises(ZeroDivisionError):
        hooks.apply("bad-filter", 3)
    assert hooks.current() is None


def test_catch_all_hook_sees_full_argument_list() -> None:
    hooks = HookRegistry()
    traced: list[tuple] = []

    hooks.add("all", lambda *args: traced.append(args), accepted_args=4)
    hooks.add("save", lambda *args: None)
    hooks.call("save", "doc", 1)
    hooks.apply("title", "hello", "ctx")

    assert traced == [("save", "doc", 1), ("title", "hello", "ctx")]


def test_catch_all_runs_before_target_with_target_as_current() -> None:
    hooks = HookRegistry()
    events: list = []

    hooks.add("all", lambda name: events.append(("all", name, hooks.current())))
    hooks.add("save", lambda: events.append(("save",)), accepted_args=0)
    hooks.call("save")

    assert events == [("all", "save", "save"), ("save",)]
    assert hooks.did("all") == 0


def test_dispatching_catch_all_directly_runs_it_once() -> None:
    hooks = HookRegistry()
    traced: list = []

    hooks.add("all", lambda *args: traced.append(args), accepted_args=2)
    hooks.call("all", "x", "y")

    assert traced == [("x", "y")]
    assert hooks.did("all") == 1


def test_custom_catch_all_hook_name() -> None:
    hooks = HookRegistry(RegistryConfig(catch_all_hook="*"))
    traced: list = []

    hooks.add("*", lambda name: traced.append(name))
    hooks.add("all", lambda: traced.append("plain all"), accepted_args=0)
    hooks.call("save")
    hooks.call("all")

    assert traced == ["save", "all", "plain all"]


def test_registration_during_dispatch_applies_to_next_dispatch() -> None:
    hooks = HookRegistry()
    calls: list[str] = []

    def late():
        calls.append("late")

    def first():
        calls.append("first")
        hooks.add("h", late, 20, 0)

    hooks.add("h", first, 10, 0)
    hooks.call("h")
    assert calls == ["first"]

    hooks.call("h")
    assert calls == ["first", "first", "late"]


def test_current_hook_is_tracked_per_thread() -> None:
    hooks = HookRegistry()
    barrier = threading.Barrier(2, timeout=5)
    seen: dict[str, list] = {"left": [], "right": []}

    def make_callback(name: str):
        def callback():
            barrier.wait()
            seen[name].append(hooks.current())

        return callback

    hooks.add("left", make_callback("left"), accepted_args=0)
    hooks.add("right", make_callback("right"), accepted_args=0)

    threads = [threading.Thread(target=hooks.call, args=(name,)) for name in ("left", "right")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert seen == {"left": ["left"], "right": ["right"]}
    assert hooks.did("left") == 1
    assert hooks.did("right") == 1


def test_concurrent_dispatch_counts_every_call() -> None:
    hooks = HookRegistry()
    hooks.add("tick", lambda: None, accepted_args=0)

    def worker():
        for _ in range(200):
            hooks.call("tick")

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert hooks.did("tick") == 800


def test_dispatch_logging_when_enabled(caplog) -> None:
    hooks = HookRegistry(RegistryConfig(log_dispatch=True))
    hooks.add("save", lambda: None, accepted_args=0)

    with caplog.at_level(logging.DEBUG, logger="hookrelay"):
        hooks.call("save")

    assert any("Dispatching action hook=save callbacks=1" in message for message in caplog.messages)
