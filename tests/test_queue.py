"""Tests for batching and the notification queue."""

from specx import Writable, batch, batched, derived, get_pending_count


class TestBatch:
    def test_batch_defers_notifications(self):
        w = Writable(0)
        log = []
        w.subscribe(log.append)
        with batch():
            w.set(1)
            assert log == [0]
            assert get_pending_count() == 1
        assert log == [0, 1]
        assert get_pending_count() == 0

    def test_nested_batches_flush_once(self):
        w = Writable(0)
        log = []
        w.subscribe(log.append)
        with batch():
            with batch():
                w.set(1)
            assert log == [0]
        assert log == [0, 1]

    def test_batched_decorator(self):
        a = Writable(1)
        b = Writable(2)
        total = derived([a, b], lambda values: sum(values))
        log = []
        total.subscribe(log.append)

        @batched
        def move(x, y):
            a.set(x)
            b.set(y)
            return "moved"

        assert move(10, 20) == "moved"
        assert log == [3, 30]

    def test_batch_flushes_on_error(self):
        w = Writable(0)
        log = []
        w.subscribe(log.append)
        try:
            with batch():
                w.set(1)
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert log == [0, 1]
        assert get_pending_count() == 0

    def test_disposed_subscriber_is_skipped(self):
        w = Writable(0)
        log = []
        dispose = w.subscribe(log.append)
        with batch():
            w.set(1)
            dispose()
        assert log == [0]
