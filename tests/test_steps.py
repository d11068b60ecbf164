"""
Tests for the resolution step queue: depth-first ordering, beat
suspension and error cleanup.
"""

import pytest

from packages.swordcore.steps import StepQueue


class TestOrdering:

    def test_children_run_before_siblings(self):
        queue = StepQueue()
        order = []

        def parent():
            order.append("parent")
            queue.schedule("child a", lambda: order.append("child a"))
            queue.schedule("child b", lambda: order.append("child b"))

        queue.schedule("parent", parent)
        queue.schedule("sibling", lambda: order.append("sibling"))
        queue.run()

        assert order == ["parent", "child a", "child b", "sibling"]
        assert not queue.busy

    def test_grandchildren_nest(self):
        queue = StepQueue()
        order = []

        def child():
            order.append("child")
            queue.schedule("grandchild", lambda: order.append("grandchild"))

        queue.schedule("parent", lambda: queue.schedule("child", child))
        queue.schedule("last", lambda: order.append("last"))
        queue.run()

        assert order == ["child", "grandchild", "last"]
        assert queue.steps_run == 4


class TestBeats:

    def test_suspends_on_beat_when_not_auto(self):
        beats = []
        queue = StepQueue(auto_advance=False, on_beat=lambda step: beats.append(step.label))
        done = []
        queue.schedule("hit 1", lambda: done.append(1), beat_ms=250)
        queue.schedule("hit 2", lambda: done.append(2), beat_ms=250)

        queue.run()
        assert done == [1]
        assert queue.busy and queue.suspended

        assert queue.resume()
        assert done == [1, 2]
        assert not queue.busy
        assert beats == ["hit 1", "hit 2"]

    def test_last_beat_does_not_suspend(self):
        queue = StepQueue(auto_advance=False)
        queue.schedule("only", lambda: None, beat_ms=100)
        queue.run()
        assert not queue.busy
        assert not queue.resume()

    def test_drain_ignores_beats(self):
        queue = StepQueue(auto_advance=False)
        done = []
        for i in range(3):
            queue.schedule(f"hit {i}", lambda i=i: done.append(i), beat_ms=100)
        queue.drain()
        assert done == [0, 1, 2]
        assert not queue.auto_advance


class TestErrors:

    def test_exception_clears_queue(self):
        queue = StepQueue()

        def boom():
            raise RuntimeError("boom")

        queue.schedule("boom", boom)
        queue.schedule("never", lambda: pytest.fail("should not run"))
        with pytest.raises(RuntimeError):
            queue.run()
        assert not queue.busy
        assert len(queue) == 0
