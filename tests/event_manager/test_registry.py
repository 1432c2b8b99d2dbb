"""
Event Manager — Subscription Registry Tests
=============================================
Covers:
- Initial state
- Subscribe + target/priority validation
- Priority ordering with FIFO ties
- get_subscribers for one / all events
- Lazy factories: resolved once, never by has_subscribers
- Unsubscribe by target, by factory, by bound method (and its aliases)
- Identity-only matching for plain callables
"""

from dataclasses import dataclass

import pytest

from event_manager import (
    Factory,
    InvalidPriority,
    InvalidTarget,
    Manager,
)

PRE_FOO = "pre.foo"
POST_FOO = "post.foo"
PRE_BAR = "pre.bar"


class Listener:
    def __init__(self, name=None):
        self.name = name
        self.pre_foo_invoked = False

    def pre_foo(self, event, event_name, manager):
        self.pre_foo_invoked = True


class CallableListener:
    def __call__(self, event, event_name, manager):
        pass


@dataclass
class Handler:
    tag: str

    def __call__(self, event, event_name, manager):
        pass


class AliasedListener(Listener):
    on_foo = Listener.pre_foo


class WithManager:
    def __init__(self):
        self.name = None
        self.manager = None

    def foo(self, event, event_name, manager):
        self.name = event_name
        self.manager = manager


@pytest.fixture
def manager():
    return Manager()


@pytest.fixture
def listener():
    return Listener()


# ══════════════════════════════════════════════════════════════
# SUBSCRIBE
# ══════════════════════════════════════════════════════════════

class TestSubscribe:
    def test_initial_state(self, manager):
        assert manager.get_subscribers() == {}
        assert not manager.has_subscribers()
        assert not manager.has_subscribers(PRE_FOO)

    def test_subscribe(self, manager, listener):
        manager.subscribe(PRE_FOO, (listener, "pre_foo"))
        manager.subscribe(POST_FOO, (listener, "post_foo"))
        assert manager.has_subscribers()
        assert manager.has_subscribers(PRE_FOO)
        assert manager.has_subscribers(POST_FOO)
        assert len(manager.get_subscribers(PRE_FOO)) == 1
        assert len(manager.get_subscribers(POST_FOO)) == 1
        assert len(manager.get_subscribers()) == 2

    def test_list_pair_is_stored_as_tuple(self, manager, listener):
        manager.subscribe(PRE_FOO, [listener, "pre_foo"])
        assert manager.get_subscribers(PRE_FOO) == [(listener, "pre_foo")]

    def test_get_subscribers_unknown_event(self, manager):
        assert manager.get_subscribers("nothing") == []

    @pytest.mark.parametrize("target", [
        "not_callable",
        42,
        None,
        (None, "method"),
        ("obj", ""),
        [lambda: None, "a", "b"],
    ])
    def test_invalid_target_rejected(self, manager, target):
        with pytest.raises(InvalidTarget):
            manager.subscribe(PRE_FOO, target)
        assert not manager.has_subscribers(PRE_FOO)

    def test_factory_with_non_callable_producer_rejected(self):
        with pytest.raises(InvalidTarget, match="producer"):
            Factory("not callable", "method")

    def test_factory_with_empty_method_rejected(self):
        with pytest.raises(InvalidTarget, match="method"):
            Factory(lambda manager: object(), "")

    @pytest.mark.parametrize("priority", ["10", 1.5, True, None])
    def test_invalid_priority_rejected(self, manager, listener, priority):
        with pytest.raises(InvalidPriority):
            manager.subscribe(PRE_FOO, (listener, "pre_foo"), priority)


# ══════════════════════════════════════════════════════════════
# ORDERING
# ══════════════════════════════════════════════════════════════

class TestOrdering:
    def test_sorts_by_priority(self, manager):
        one, two, three = Listener("1"), Listener("2"), Listener("3")
        manager.subscribe(PRE_FOO, (one, "pre_foo"), -10)
        manager.subscribe(PRE_FOO, (two, "pre_foo"), 10)
        manager.subscribe(PRE_FOO, (three, "pre_foo"))

        assert manager.get_subscribers(PRE_FOO) == [
            (two, "pre_foo"),
            (three, "pre_foo"),
            (one, "pre_foo"),
        ]

    def test_all_events_sorted_by_priority(self, manager):
        subs = [CallableListener() for _ in range(6)]
        manager.subscribe(PRE_FOO, subs[0], -10)
        manager.subscribe(PRE_FOO, subs[1])
        manager.subscribe(PRE_FOO, subs[2], 10)
        manager.subscribe(POST_FOO, subs[3], -10)
        manager.subscribe(POST_FOO, subs[4])
        manager.subscribe(POST_FOO, subs[5], 10)

        result = manager.get_subscribers()
        assert list(result) == [PRE_FOO, POST_FOO]
        assert result[PRE_FOO] == [subs[2], subs[1], subs[0]]
        assert result[POST_FOO] == [subs[5], subs[4], subs[3]]

    def test_equal_priorities_keep_subscribe_order(self, manager):
        subs = [CallableListener() for _ in range(5)]
        manager.subscribe(PRE_FOO, subs[0], 5)
        manager.subscribe(PRE_FOO, subs[1])
        manager.subscribe(PRE_FOO, subs[2], 5)
        manager.subscribe(PRE_FOO, subs[3])
        manager.subscribe(PRE_FOO, subs[4], 5)

        assert manager.get_subscribers(PRE_FOO) == [
            subs[0], subs[2], subs[4], subs[1], subs[3],
        ]

    def test_view_reflects_later_subscribe(self, manager):
        first, second = CallableListener(), CallableListener()
        manager.subscribe(PRE_FOO, first)
        assert manager.get_subscribers(PRE_FOO) == [first]
        manager.subscribe(PRE_FOO, second, 1)
        assert manager.get_subscribers(PRE_FOO) == [second, first]

    def test_returned_list_is_a_copy(self, manager):
        first = CallableListener()
        manager.subscribe(PRE_FOO, first)
        manager.get_subscribers(PRE_FOO).clear()
        assert manager.get_subscribers(PRE_FOO) == [first]

    def test_get_subscriptions_exposes_entries(self, manager, listener):
        manager.subscribe(PRE_FOO, (listener, "pre_foo"), 3, only_once=True)
        (entry,) = manager.get_subscriptions(PRE_FOO)
        assert entry.target == (listener, "pre_foo")
        assert entry.priority == 3
        assert entry.only_once is True


# ══════════════════════════════════════════════════════════════
# LAZY FACTORIES
# ══════════════════════════════════════════════════════════════

class TestLazyFactories:
    def test_has_subscribers_is_lazy(self, manager):
        calls = []

        def producer(mgr):
            calls.append(mgr)
            return WithManager()

        manager.subscribe("foo", Factory(producer, "foo"))
        assert manager.has_subscribers()
        assert manager.has_subscribers("foo")
        assert calls == []

    def test_factory_resolved_once(self, manager):
        test = WithManager()
        calls = []

        def producer(mgr):
            calls.append(mgr)
            return test

        manager.subscribe("bar", Factory(producer, "foo"), 3)
        assert manager.has_subscribers("bar")
        assert calls == []

        assert manager.get_subscribers("bar") == [(test, "foo")]
        assert len(calls) == 1
        assert manager.get_subscribers("bar") == [(test, "foo")]
        assert len(calls) == 1

    def test_factory_receives_manager(self, manager):
        received = []

        def producer(mgr):
            received.append(mgr)
            return CallableListener()

        manager.subscribe("foo", Factory(producer))
        manager.get_subscribers("foo")
        assert received == [manager]

    def test_invokable_factory(self, manager):
        product = CallableListener()
        manager.subscribe("foo", Factory(lambda mgr: product))
        assert manager.get_subscribers("foo") == [product]

    def test_factory_must_produce_callable_without_method(self, manager):
        manager.subscribe("foo", Factory(lambda mgr: object()))
        with pytest.raises(InvalidTarget, match="not callable"):
            manager.get_subscribers("foo")

    def test_factory_resolution_survives_new_subscription(self, manager):
        calls = []

        def producer(mgr):
            calls.append(1)
            return CallableListener()

        manager.subscribe("foo", Factory(producer))
        manager.get_subscribers("foo")
        manager.subscribe("foo", CallableListener())
        manager.get_subscribers("foo")
        assert len(calls) == 1

    def test_get_all_resolves_lazy_listeners(self, manager):
        test = WithManager()
        factory = Factory(lambda mgr: test, "foo")

        manager.subscribe("foo", factory, 3)
        assert manager.get_subscribers("foo") == [(test, "foo")]

        manager.unsubscribe("foo", (test, "foo"))
        manager.subscribe("bar", factory, 3)
        assert manager.get_subscribers() == {"bar": [(test, "foo")]}

    def test_factory_subscribing_during_resolution(self, manager):
        late = CallableListener()

        def producer(mgr):
            mgr.subscribe("foo", late, -1)
            return CallableListener()

        manager.subscribe("foo", Factory(producer))
        subscribers = manager.get_subscribers("foo")
        assert len(subscribers) == 2
        assert subscribers[1] is late


# ══════════════════════════════════════════════════════════════
# UNSUBSCRIBE
# ══════════════════════════════════════════════════════════════

class TestUnsubscribe:
    def test_unsubscribe(self, manager):
        listener = CallableListener()
        manager.subscribe(PRE_BAR, listener)
        assert manager.has_subscribers(PRE_BAR)
        manager.unsubscribe(PRE_BAR, listener)
        assert not manager.has_subscribers(PRE_BAR)

    def test_unsubscribe_unknown_event_is_noop(self, manager, listener):
        manager.unsubscribe("not_exists", listener)
        assert not manager.has_subscribers()

    def test_unknown_event_never_runs_factory(self, manager):
        calls = []
        manager.unsubscribe("not_exists", Factory(lambda mgr: calls.append(1)))
        assert calls == []

    def test_factory_with_non_callable_product_matches_nothing(self, manager):
        listener = CallableListener()
        manager.subscribe("foo", listener)
        manager.unsubscribe("foo", Factory(lambda mgr: 42))
        assert manager.get_subscribers("foo") == [listener]

    def test_unsubscribe_removes_all_matches(self, manager, listener):
        manager.subscribe(PRE_FOO, (listener, "pre_foo"))
        manager.subscribe(PRE_FOO, (listener, "pre_foo"), 10)
        manager.subscribe(PRE_FOO, (listener, "pre_foo"), -10)
        manager.unsubscribe(PRE_FOO, (listener, "pre_foo"))
        assert not manager.has_subscribers(PRE_FOO)

    def test_unsubscribe_keeps_other_targets(self, manager, listener):
        other = Listener()
        manager.subscribe(PRE_FOO, (listener, "pre_foo"))
        manager.subscribe(PRE_FOO, (other, "pre_foo"))
        manager.unsubscribe(PRE_FOO, (listener, "pre_foo"))
        assert manager.get_subscribers(PRE_FOO) == [(other, "pre_foo")]

    def test_pair_matches_by_object_identity(self, manager):
        manager.subscribe(PRE_FOO, (Listener("a"), "pre_foo"))
        manager.unsubscribe(PRE_FOO, (Listener("a"), "pre_foo"))
        assert manager.has_subscribers(PRE_FOO)

    def test_pair_matches_method_name(self, manager, listener):
        manager.subscribe(PRE_FOO, (listener, "pre_foo"))
        manager.unsubscribe(PRE_FOO, (listener, "post_foo"))
        assert manager.has_subscribers(PRE_FOO)

    def test_bound_method_matches_pair(self, manager, listener):
        manager.subscribe(PRE_FOO, listener.pre_foo)
        manager.unsubscribe(PRE_FOO, (listener, "pre_foo"))
        assert not manager.has_subscribers(PRE_FOO)

        manager.subscribe(PRE_FOO, (listener, "pre_foo"))
        manager.unsubscribe(PRE_FOO, listener.pre_foo)
        assert not manager.has_subscribers(PRE_FOO)

    def test_different_callable_does_not_match(self, manager):
        manager.subscribe("callable", CallableListener())
        manager.unsubscribe("callable", lambda event, name, mgr: None)
        assert manager.has_subscribers("callable")

    def test_equal_instances_do_not_match(self, manager):
        first = Handler("a")
        second = Handler("a")
        assert first == second

        manager.subscribe("foo", first)
        manager.subscribe("foo", second)
        manager.unsubscribe("foo", first)

        subscribers = manager.get_subscribers("foo")
        assert len(subscribers) == 1
        assert subscribers[0] is second

    def test_bound_method_matches_alias_pair(self, manager):
        listener = AliasedListener()
        manager.subscribe(PRE_FOO, listener.pre_foo)
        manager.unsubscribe(PRE_FOO, (listener, "on_foo"))
        assert not manager.has_subscribers(PRE_FOO)

        manager.subscribe(PRE_FOO, (listener, "on_foo"))
        manager.unsubscribe(PRE_FOO, listener.pre_foo)
        assert not manager.has_subscribers(PRE_FOO)

    def test_alias_pairs_do_not_match_each_other(self, manager):
        listener = AliasedListener()
        manager.subscribe(PRE_FOO, (listener, "pre_foo"))
        manager.unsubscribe(PRE_FOO, (listener, "on_foo"))
        assert manager.has_subscribers(PRE_FOO)

    def test_removed_closure_leaves_no_subscribers(self, manager):
        def listener(event, name, mgr):
            pass

        manager.subscribe("foo", listener)
        manager.unsubscribe("foo", listener)
        assert not manager.has_subscribers()
        assert manager.get_subscribers() == {}

    def test_remove_finds_lazy_listeners(self, manager):
        test = WithManager()
        factory = Factory(lambda mgr: test, "foo")

        manager.subscribe("foo", factory)
        assert manager.has_subscribers("foo")
        manager.unsubscribe("foo", (test, "foo"))
        assert not manager.has_subscribers("foo")

        manager.subscribe("foo", (test, "foo"))
        assert manager.has_subscribers("foo")
        manager.unsubscribe("foo", factory)
        assert not manager.has_subscribers("foo")

    def test_unsubscribe_resolves_stored_factories_once(self, manager):
        test = WithManager()
        calls = []

        def producer(mgr):
            calls.append(1)
            return test

        manager.subscribe("foo", Factory(producer, "foo"))
        manager.subscribe("foo", (WithManager(), "foo"))
        manager.unsubscribe("foo", (test, "foo"))
        assert len(calls) == 1
        assert len(manager.get_subscribers("foo")) == 1
        assert len(calls) == 1

    def test_fresh_invokable_from_factory_does_not_match(self, manager):
        factory = Factory(lambda mgr: CallableListener())
        manager.subscribe("foo", factory)
        manager.unsubscribe("foo", factory)
        assert manager.has_subscribers("foo")

    def test_shared_invokable_from_factory_matches(self, manager):
        shared = CallableListener()
        factory = Factory(lambda mgr: shared)
        manager.subscribe("foo", factory)
        manager.unsubscribe("foo", factory)
        assert not manager.has_subscribers("foo")
