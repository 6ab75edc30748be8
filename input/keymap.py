# ========================= input/keymap.py =========================
import json
import pygame
from typing import Dict, Optional
from midi.events import NoteEvent, note_off, note_on, sustain
from notes.model import ScientificNote, midi_note, note_to_human_readable, note_to_midi

KEYBOARD_VELOCITY = 0.85
SUSTAIN_KEY = pygame.K_SPACE

# two rows, C4..E5 (can be replaced by a JSON keymap)
DEFAULT_KEYMAP: Dict[int, int] = {
    pygame.K_z: 60,  # C4
    pygame.K_s: 61,
    pygame.K_x: 62,
    pygame.K_d: 63,
    pygame.K_c: 64,
    pygame.K_v: 65,
    pygame.K_g: 66,
    pygame.K_b: 67,
    pygame.K_h: 68,
    pygame.K_n: 69,
    pygame.K_j: 70,
    pygame.K_m: 71,
    pygame.K_COMMA: 72,  # C5
    pygame.K_l: 73,
    pygame.K_PERIOD: 74,
    pygame.K_SEMICOLON: 75,
    pygame.K_SLASH: 76,
}

def key_label(k: int) -> str:
    """Readable label for a keycode; keys pygame can't name are written '#<code>'."""
    return pygame.key.name(k) or f"#{k}"

def parse_key(label: str) -> int:
    if label.startswith("#"):
        return int(label[1:])
    try:
        return pygame.key.key_code(label)
    except (ValueError, pygame.error):
        raise ValueError(f"Unknown key name: {label}") from None

def parse_pitch(value) -> int:
    """MIDI number or scientific name ('C4', 'F#3', 'Bb-1')."""
    if isinstance(value, int):
        pitch = value
    else:
        text = str(value).strip()
        i = 1 if text[1:2] not in ("#", "b") else 2
        try:
            pitch = note_to_midi(ScientificNote(text[:i], int(text[i:])))
        except ValueError:
            raise ValueError(f"Bad pitch in keymap: {value!r}") from None
    if not 0 <= pitch <= 127:
        raise ValueError(f"Pitch out of MIDI range: {value!r}")
    return pitch

def keymap_to_json(kmap: Dict[int, int]) -> dict:
    # pitches are stored by name so the file reads like a keyboard chart
    return {key_label(k): note_to_human_readable(midi_note(p)) for k, p in kmap.items()}

def keymap_from_json(obj: dict) -> Dict[int, int]:
    if not isinstance(obj, dict):
        raise ValueError("Keymap must be an object of key -> pitch")
    return {parse_key(str(label)): parse_pitch(pitch) for label, pitch in obj.items()}

def load_keymap(path: str) -> Dict[int, int]:
    with open(path, "r", encoding="utf-8") as f:
        return keymap_from_json(json.load(f))

def save_keymap(kmap: Dict[int, int], path: str):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(keymap_to_json(kmap), f, ensure_ascii=False, indent=2)

def key_event(kmap: Dict[int, int], key: int, down: bool) -> Optional[NoteEvent]:
    """Keyboard press/release -> note or pedal event, None for unmapped keys."""
    if key == SUSTAIN_KEY:
        return sustain(down)
    if key not in kmap:
        return None
    return note_on(kmap[key], KEYBOARD_VELOCITY) if down else note_off(kmap[key])
