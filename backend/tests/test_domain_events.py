"""Tests for the in-process domain event dispatcher."""
from dataclasses import dataclass

import pytest

from ourmap.services.domain_events import DomainEvent, publish, subscribe, unsubscribe


@dataclass(frozen=True)
class Pinged(DomainEvent):
    payload: str


@pytest.fixture
def received():
    seen = []

    @subscribe(Pinged)
    def _record(db, event):
        seen.append(event.payload)

    yield seen
    unsubscribe(Pinged)


class TestDispatcher:

    def test_publish_reaches_subscribers(self, db, received):
        assert publish(db, Pinged(actor_id="a", payload="hello")) == 1
        assert received == ["hello"]

    def test_failing_subscriber_is_isolated(self, db, received):
        @subscribe(Pinged)
        def _explode(db, event):
            raise RuntimeError("boom")

        @subscribe(Pinged)
        def _after(db, event):
            received.append("after")

        assert publish(db, Pinged(actor_id="a", payload="x")) == 2
        assert received == ["x", "after"]

    def test_subscribing_twice_registers_once(self, db, received):
        def _handler(db, event):
            received.append("dup")

        subscribe(Pinged)(_handler)
        subscribe(Pinged)(_handler)
        publish(db, Pinged(actor_id="a", payload="p"))
        assert received == ["p", "dup"]

    def test_no_subscribers(self, db):
        assert publish(db, Pinged(actor_id="a", payload="nobody")) == 0
