"""
Elapsed-time gates.

The interactive loop has three debounce windows: the polyline double-click
window, the delay between the last keystroke and re-parsing the script, and
the delay before the text-change listener is re-armed after the synthesizer
wrote its own output.  None of them needs a timer: each is a comparison of
the current timestamp against the last recorded one.  Callers pass ``now``
explicitly (seconds, any monotonic origin).
"""


class ElapsedGate:
    """Open once ``threshold`` seconds have passed since the last ``mark``."""

    def __init__(self, threshold):
        self.threshold = threshold
        self.last = None

    def mark(self, now):
        self.last = now

    def reset(self):
        self.last = None

    @property
    def armed(self):
        return self.last is not None

    def within(self, now):
        """True while ``now`` is still inside the window opened by ``mark``."""
        return self.last is not None and (now - self.last) < self.threshold

    def elapsed(self, now):
        """True once the window has passed.  An unmarked gate is not elapsed."""
        return self.last is not None and (now - self.last) >= self.threshold


class EditSuppression:
    """Flag held while the synthesizer writes the script.

    ``hold`` raises it; ``defer_release`` schedules it to drop after
    ``delay`` seconds so the text-change event caused by our own write still
    sees it raised.
    """

    def __init__(self, delay):
        self._gate = ElapsedGate(delay)
        self._held = False

    def hold(self):
        self._held = True
        self._gate.reset()

    def defer_release(self, now):
        self._gate.mark(now)

    def is_held(self, now):
        if self._held and self._gate.elapsed(now):
            self._held = False
            self._gate.reset()
        return self._held
