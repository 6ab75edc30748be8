import pytest

from notes.model import (
    InvalidSolfegeError,
    MidiNote,
    NoteCycleError,
    OctaveSolfege,
    ScientificNote,
    SolfegeNote,
    compare_notes,
    midi_note,
    midi_to_scientific,
    note_to_human_readable,
    note_to_midi,
    offset_from_root,
    scientific_note,
    solfege_note,
    to_octave_solfege,
    to_solfege,
)


def test_scientific_to_midi():
    assert note_to_midi(scientific_note("C", 4)) == 60
    assert note_to_midi(scientific_note("A", 0)) == 21
    assert note_to_midi(scientific_note("A", 4)) == 69
    assert note_to_midi(scientific_note("F#", 3)) == 54


def test_midi_note_resolves_to_itself():
    assert note_to_midi(midi_note(64)) == 64
    assert note_to_midi(midi_note(200)) == 200


def test_solfege_resolves_through_tonic_chain():
    tonic = scientific_note("D", 4)  # 62
    fifth = solfege_note(OctaveSolfege("so"), tonic)
    assert note_to_midi(fifth) == 69
    up = solfege_note(OctaveSolfege("mi", 1), fifth)
    assert note_to_midi(up) == 69 + 4 + 12


def test_resolution_is_repeatable():
    n = solfege_note(OctaveSolfege("te"), midi_note(60))
    assert note_to_midi(n) == note_to_midi(n) == 70


def test_solfege_cycle_is_rejected():
    a = SolfegeNote(OctaveSolfege("do"), MidiNote(60))
    b = SolfegeNote(OctaveSolfege("re"), a)
    object.__setattr__(a, "tonic", b)
    with pytest.raises(NoteCycleError):
        note_to_midi(b)


def test_compare_notes():
    assert compare_notes(midi_note(60), scientific_note("C", 4)) == "equal"
    assert compare_notes(midi_note(59), scientific_note("C", 4)) == "lesser"
    assert compare_notes(scientific_note("D", 4), midi_note(61)) == "greater"


def test_midi_to_scientific_keeps_caller_octave():
    assert midi_to_scientific(61, 4) == ScientificNote("Db", 4)
    # octave is not derived from the number
    assert midi_to_scientific(61, 7) == ScientificNote("Db", 7)


def test_offsets_with_synonyms():
    assert offset_from_root("do") == 0
    assert offset_from_root("ti") == 11
    for a, b in (("ri", "me"), ("fi", "se"), ("si", "le"), ("li", "te")):
        assert offset_from_root(a) == offset_from_root(b)


def test_invalid_solfege():
    with pytest.raises(InvalidSolfegeError):
        offset_from_root("xx")
    with pytest.raises(ValueError):
        to_solfege("sol")
    assert to_solfege("la") == "la"


def test_octave_solfege_ascends():
    voicing = to_octave_solfege(["do", "so", "mi", "do"])
    assert [(v.solfege, v.octave_offset) for v in voicing] == [
        ("do", 0), ("so", 0), ("mi", 1), ("do", 2)]
    tonic = midi_note(48)
    pitches = [note_to_midi(solfege_note(v, tonic)) for v in voicing]
    assert pitches == sorted(set(pitches))


def test_octave_solfege_repeated_degree():
    assert [v.octave_offset for v in to_octave_solfege(["mi", "mi"])] == [0, 1]


def test_human_readable():
    assert note_to_human_readable(midi_note(60)) == "C4"
    assert note_to_human_readable(scientific_note("Bb", 2)) == "Bb2"


def test_unknown_pitch_class():
    with pytest.raises(ValueError):
        scientific_note("H", 4)
