# midi/parser.py
import mido
from typing import List, Tuple
from midi.events import NoteEvent, from_message

def parse_midi_to_events(path: str) -> Tuple[List[NoteEvent], float]:
    """Note on/off and sustain pedal events of every track, in seconds, time ordered."""
    mid = mido.MidiFile(path)
    tpb = mid.ticks_per_beat
    tempo = 500000  # default 120 bpm
    time_sec = 0.0
    sounding = set()
    events: List[NoteEvent] = []

    for msg in mido.merge_tracks(mid.tracks):
        time_sec += mido.tick2second(msg.time, tpb, tempo)
        if msg.is_meta:
            if msg.type == 'set_tempo':
                tempo = msg.tempo
            continue
        ev = from_message(msg, time_sec)
        if ev is None:
            continue
        if ev.kind == "note_on":
            sounding.add(ev.note)
        elif ev.kind == "note_off":
            sounding.discard(ev.note)
        events.append(ev)

    # close dangling notes and pedal at the end of the file
    for p in sorted(sounding):
        events.append(NoteEvent("note_off", note=p, time=time_sec))
    events.append(NoteEvent("sustain", down=False, time=time_sec))
    return events, time_sec
