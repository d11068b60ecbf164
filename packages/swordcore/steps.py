"""
Step queue - cooperative scheduling for card and enemy resolutions.

A resolution is a list of discrete steps. Each step mutates game state
synchronously when it runs; a step may ask for a presentation beat
(e.g. the pause between two hits). Steps scheduled from inside a running
step run before anything that was already queued, so nested resolutions
(an enemy action fired by a card's delay tick, a charge paying off) finish
in call order.

With auto_advance the whole queue drains in one call and beats are only
announced. Without it the queue suspends after every beat until resume()
is called. While anything is queued, running or suspended the queue is
busy and the engine refuses new hand, targeting and turn input.

Usage:
    queue = StepQueue(auto_advance=False, on_beat=presenter.play_beat)
    queue.schedule("hit 1", lambda: apply_hit(0), beat_ms=250)
    queue.schedule("hit 2", lambda: apply_hit(1), beat_ms=250)
    queue.run()      # runs hit 1, suspends on its beat
    queue.resume()   # runs hit 2
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional


@dataclass
class Step:
    label: str
    action: Callable[[], None]
    beat_ms: int = 0


class StepQueue:
    def __init__(self, auto_advance: bool = True, on_beat: Optional[Callable[[Step], None]] = None):
        self.auto_advance = auto_advance
        self.on_beat = on_beat
        self._pending: Deque[Step] = deque()
        self._children: Optional[List[Step]] = None
        self._running = False
        self._suspended = False
        self.steps_run = 0

    @property
    def busy(self) -> bool:
        return self._running or self._suspended or bool(self._pending)

    @property
    def suspended(self) -> bool:
        return self._suspended

    def __len__(self) -> int:
        return len(self._pending)

    def schedule(self, label: str, action: Callable[[], None], beat_ms: int = 0) -> Step:
        step = Step(label=label, action=action, beat_ms=beat_ms)
        if self._children is not None:
            self._children.append(step)
        else:
            self._pending.append(step)
        return step

    def run(self) -> None:
        """Drain the queue until it is empty or suspended on a beat."""
        if self._running:
            return
        self._running = True
        try:
            while self._pending and not self._suspended:
                step = self._pending.popleft()
                self._children = []
                try:
                    step.action()
                finally:
                    children, self._children = self._children, None
                self._pending.extendleft(reversed(children))
                self.steps_run += 1
                if step.beat_ms:
                    if self.on_beat is not None:
                        self.on_beat(step)
                    if not self.auto_advance and self._pending:
                        self._suspended = True
        except Exception:
            self._pending.clear()
            self._suspended = False
            raise
        finally:
            self._running = False

    def resume(self) -> bool:
        """Continue after a beat. Returns False if nothing was suspended."""
        if not self._suspended:
            return False
        self._suspended = False
        self.run()
        return True

    def drain(self) -> None:
        """Run everything, ignoring beats (used by headless callers)."""
        self._suspended = False
        auto, self.auto_advance = self.auto_advance, True
        try:
            self.run()
        finally:
            self.auto_advance = auto
