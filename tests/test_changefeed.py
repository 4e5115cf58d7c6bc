"""Tests for the change feed listener."""
import logging

import pytest

from shared.changefeed import handle_changes, run_change_listener
from shared.models import Entity
from providers.local.database import MemoryStore


def _messages(caplog):
    return [r.getMessage() for r in caplog.records if r.name == "shared.changefeed"]


@pytest.fixture
def info_logs(caplog):
    caplog.set_level(logging.INFO, logger="shared.changefeed")
    return caplog


class TestHandleChanges:

    def test_batch_logs_count_then_first_id(self, info_logs):
        handle_changes([Entity(id="a1"), Entity(id="b2"), Entity(id="c3")])

        assert _messages(info_logs) == [
            "Event from change feed...",
            "Documents modified 3",
            "First document Id a1",
        ]

    @pytest.mark.parametrize("batch", [[], None])
    def test_empty_or_missing_batch_logs_only_event(self, info_logs, batch):
        handle_changes(batch)

        assert _messages(info_logs) == ["Event from change feed..."]

    def test_logging_failure_propagates(self, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("sink down")

        monkeypatch.setattr("shared.changefeed.logger.info", explode)
        with pytest.raises(RuntimeError):
            handle_changes([Entity(id="a1")])


class TestRunChangeListener:

    def test_consumes_store_batches(self, info_logs):
        store = MemoryStore()
        subscription = iter([[Entity(id="x1")], [Entity(id="y1"), Entity(id="y2")]])
        store.subscribe_to_changes = lambda: subscription

        handled = run_change_listener(store, max_batches=2)

        assert handled == 2
        messages = _messages(info_logs)
        assert "First document Id x1" in messages
        assert "Documents modified 2" in messages

    def test_stops_when_feed_ends(self):
        store = MemoryStore()
        store.subscribe_to_changes = lambda: iter([[Entity(id="only")]])

        assert run_change_listener(store) == 1

    def test_zero_max_batches_does_not_subscribe(self):
        store = MemoryStore()

        def fail():
            raise AssertionError("should not subscribe")

        store.subscribe_to_changes = fail
        assert run_change_listener(store, max_batches=0) == 0
