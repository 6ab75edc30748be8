# ========================= notes/tracker.py =========================
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List

from notes.model import ScientificNote, midi_to_scientific, note_to_midi


@dataclass
class PlayedNote:
    velocity: float          # 0..1, not clamped
    note: ScientificNote
    sustained: bool = False
    age: float = 0.0         # seconds since the last note-on
    started_at: float = 0.0

    @property
    def midi(self) -> int:
        return note_to_midi(self.note)


class NoteTracker:
    """Live notes keyed by the caller's numeric identity.

    A note is Sounding after note_on, Held when note_off arrives while the
    pedal is down, and gone after note_off (pedal up) or sustain release.
    Not thread safe: feed it from the tick loop only (see midi.events.EventQueue).
    """
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._notes: Dict[int, PlayedNote] = {}
        self._sustain_on = False

    @property
    def sustain_on(self) -> bool:
        return self._sustain_on

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, identity: int) -> bool:
        return identity in self._notes

    def note_on(self, identity: int, octave: int, velocity: float):
        now = self._clock()
        self._notes[identity] = PlayedNote(
            velocity=velocity,
            note=midi_to_scientific(identity, octave),
            started_at=now,
        )

    def note_off(self, identity: int):
        n = self._notes.get(identity)
        if n is None:
            logging.debug("note_off for %r ignored: not sounding", identity)
            return
        if self._sustain_on:
            n.sustained = True
        else:
            del self._notes[identity]

    def sustain_engage(self):
        self._sustain_on = True

    def sustain_release(self):
        self._sustain_on = False
        held = [k for k, n in self._notes.items() if n.sustained]
        for k in held:
            del self._notes[k]

    def sustain_pedal(self, down: bool):
        if down:
            self.sustain_engage()
        else:
            self.sustain_release()

    def tick(self):
        now = self._clock()
        for n in self._notes.values():
            n.age = now - n.started_at

    def notes(self) -> List[PlayedNote]:
        # index 0 is the root, the last entry is the top voice
        return [replace(n) for n in sorted(self._notes.values(), key=lambda n: n.midi)]

    def clear(self):
        self._notes.clear()
        self._sustain_on = False
