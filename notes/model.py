# notes/model.py
from dataclasses import dataclass
from typing import List, Literal, Union

PITCH_CLASSES = ("A", "Bb", "B", "C", "Db", "D", "Eb", "E", "F", "F#", "G", "Ab")

# midi % 12 -> spelled pitch class
CLASS_BY_SEMITONE = ("C", "Db", "D", "Eb", "E", "F", "F#", "G", "Ab", "A", "Bb", "B")
SEMITONE_BY_CLASS = {c: i for i, c in enumerate(CLASS_BY_SEMITONE)}

SOLFEGE_OFFSETS = {
    "do": 0,
    "ra": 1,
    "re": 2,
    "ri": 3, "me": 3,
    "mi": 4,
    "fa": 5,
    "fi": 6, "se": 6,
    "so": 7,
    "si": 8, "le": 8,
    "la": 9,
    "li": 10, "te": 10,
    "ti": 11,
}

NoteComparison = Literal["lesser", "equal", "greater"]


class InvalidSolfegeError(ValueError):
    pass


class NoteCycleError(ValueError):
    pass


@dataclass(frozen=True)
class MidiNote:
    midi: int


@dataclass(frozen=True)
class ScientificNote:
    pitch_class: str
    octave: int

    def __post_init__(self):
        if self.pitch_class not in SEMITONE_BY_CLASS:
            raise ValueError(f"Unknown pitch class: {self.pitch_class}")


@dataclass(frozen=True)
class OctaveSolfege:
    solfege: str
    octave_offset: int = 0


@dataclass(frozen=True)
class SolfegeNote:
    solfege: OctaveSolfege
    tonic: "Note"


Note = Union[MidiNote, ScientificNote, SolfegeNote]


def midi_note(midi: int) -> MidiNote:
    return MidiNote(midi)


def scientific_note(pitch_class: str, octave: int) -> ScientificNote:
    return ScientificNote(pitch_class, octave)


def solfege_note(solfege: OctaveSolfege, tonic: Note) -> SolfegeNote:
    return SolfegeNote(solfege, tonic)


def midi_to_scientific(midi: int, octave: int) -> ScientificNote:
    """Spell `midi` as a pitch class. The octave comes from the caller; it is
    not derived from `midi`, callers keep their own octave numbering."""
    return ScientificNote(CLASS_BY_SEMITONE[midi % 12], octave)


def note_to_midi(note: Note) -> int:
    # walk the tonic chain iteratively so a cycle is reported instead of recursing forever
    offset = 0
    seen = set()
    while isinstance(note, SolfegeNote):
        if id(note) in seen:
            raise NoteCycleError(f"Solfege tonic chain cycles at {note.solfege}")
        seen.add(id(note))
        offset += offset_from_root(note.solfege.solfege) + 12 * note.solfege.octave_offset
        note = note.tonic
    if isinstance(note, MidiNote):
        return offset + note.midi
    if isinstance(note, ScientificNote):
        return offset + 12 * (note.octave + 1) + SEMITONE_BY_CLASS[note.pitch_class]
    raise TypeError(f"Not a note: {note!r}")


def note_to_human_readable(note: Note) -> str:
    m = note_to_midi(note)
    return f"{CLASS_BY_SEMITONE[m % 12]}{m // 12 - 1}"


def compare_notes(n: Note, m: Note) -> NoteComparison:
    x, y = note_to_midi(n), note_to_midi(m)
    return "lesser" if x < y else "greater" if x > y else "equal"


def offset_from_root(solfege: str) -> int:
    try:
        return SOLFEGE_OFFSETS[solfege]
    except KeyError:
        raise InvalidSolfegeError(f"Invalid solfege: {solfege}") from None


def to_solfege(text: str) -> str:
    offset_from_root(text)
    return text


def to_octave_solfege(degrees: List[str]) -> List[OctaveSolfege]:
    """Octave-place scale degrees so the voicing strictly ascends.

    ["do", "so", "mi"] -> do/0, so/0, mi/1. Only meaningful for ascending
    chords; there is no way to ask for a lower note.
    """
    max_so_far = -1
    octave = 0
    out: List[OctaveSolfege] = []
    for d in degrees:
        base = offset_from_root(d)
        while base + 12 * octave <= max_so_far:
            octave += 1
        max_so_far = base + 12 * octave
        out.append(OctaveSolfege(d, octave))
    return out
