# timeline/scheduler.py
from typing import Iterable, Iterator
from midi.events import NoteEvent

class Timeline:
    """Advances time and yields file events as they come due.
    The App forwards them to the same queue live input uses.
    """
    def __init__(self, events: Iterable[NoteEvent], rate: float = 1.0):
        self.events = sorted(events, key=lambda e: e.time)
        self.rate = rate
        self.i = 0
        self.time = 0.0

    @property
    def finished(self) -> bool:
        return self.i >= len(self.events)

    def step(self, dt: float):
        self.time += dt * self.rate

    def due_events(self, tolerance: float = 0.004) -> Iterator[NoteEvent]:
        t = self.time
        while self.i < len(self.events) and self.events[self.i].time <= t + tolerance:
            yield self.events[self.i]
            self.i += 1

    def rewind(self):
        self.i = 0
        self.time = 0.0
