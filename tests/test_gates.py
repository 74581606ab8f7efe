"""Tests for the elapsed-time gates."""

import pytest

from gridsketch.gates import ElapsedGate, EditSuppression


@pytest.fixture
def gate():
    return ElapsedGate(0.3)


class TestElapsedGate:
    def test_unmarked(self, gate):
        assert not gate.armed
        assert not gate.within(10.0)
        assert not gate.elapsed(10.0)

    def test_window(self, gate):
        gate.mark(1.0)
        assert gate.within(1.2)
        assert not gate.elapsed(1.2)
        assert not gate.within(1.3)
        assert gate.elapsed(1.3)

    def test_reset(self, gate):
        gate.mark(1.0)
        gate.reset()
        assert not gate.armed
        assert not gate.within(1.1)


class TestEditSuppression:
    def test_initially_released(self):
        assert not EditSuppression(0.1).is_held(0.0)

    def test_held_until_release_scheduled(self):
        s = EditSuppression(0.1)
        s.hold()
        assert s.is_held(100.0)

    def test_deferred_release(self):
        s = EditSuppression(0.1)
        s.hold()
        s.defer_release(2.0)
        assert s.is_held(2.05)
        assert not s.is_held(2.1)
        assert not s.is_held(2.11)

    def test_rehold_cancels_release(self):
        s = EditSuppression(0.1)
        s.hold()
        s.defer_release(2.0)
        s.hold()
        assert s.is_held(5.0)
