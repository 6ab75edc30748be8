# midi/events.py
import logging
import queue
from dataclasses import dataclass
from typing import Optional

import mido

from notes.tracker import NoteTracker

SUSTAIN_CC = 64


@dataclass(frozen=True)
class NoteEvent:
    kind: str                 # "note_on" | "note_off" | "sustain"
    note: int = 0
    velocity: float = 0.0     # 0..1
    down: bool = False        # sustain pedal state
    time: float = 0.0         # seconds, only for file playback

    @property
    def octave(self) -> int:
        # scientific numbering, middle C (60) = C4
        return self.note // 12 - 1


def note_on(note: int, velocity: float, time: float = 0.0) -> NoteEvent:
    return NoteEvent("note_on", note=note, velocity=velocity, time=time)


def note_off(note: int, time: float = 0.0) -> NoteEvent:
    return NoteEvent("note_off", note=note, time=time)


def sustain(down: bool, time: float = 0.0) -> NoteEvent:
    return NoteEvent("sustain", down=down, time=time)


def from_message(msg: mido.Message, time: float = 0.0) -> Optional[NoteEvent]:
    """Translate a mido message; anything that is not a note or the sustain pedal gives None."""
    if msg.type == "note_on" and msg.velocity > 0:
        return note_on(msg.note, msg.velocity / 127.0, time)
    if msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
        return note_off(msg.note, time)
    if msg.type == "control_change" and msg.control == SUSTAIN_CC:
        return sustain(msg.value >= 64, time)
    return None


def apply_event(tracker: NoteTracker, ev: NoteEvent):
    if ev.kind == "note_on":
        tracker.note_on(ev.note, ev.octave, ev.velocity)
    elif ev.kind == "note_off":
        tracker.note_off(ev.note)
    elif ev.kind == "sustain":
        tracker.sustain_pedal(ev.down)
    else:
        raise ValueError(f"Unknown event kind: {ev.kind}")


class EventQueue:
    """Producers on any thread put(); the tick loop drains into the tracker."""
    def __init__(self, maxsize: int = 1000):
        self._q: queue.Queue = queue.Queue(maxsize=maxsize)

    def put(self, ev: NoteEvent):
        try:
            self._q.put_nowait(ev)
        except queue.Full:
            logging.warning("Event queue full, dropping %r", ev)

    def drain(self, tracker: NoteTracker) -> int:
        n = 0
        while True:
            try:
                ev = self._q.get_nowait()
            except queue.Empty:
                return n
            apply_event(tracker, ev)
            n += 1
