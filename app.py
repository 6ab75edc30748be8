# app.py
import logging
import pygame
from typing import Dict, List, Optional, Sequence
from config import AppConfig
from colors.harmony import weighted_distribution
from colors.hsl import WeightedHSL, hsl_to_hex
from input.keymap import DEFAULT_KEYMAP, key_event, load_keymap
from midi.events import EventQueue
from midi.live import MidiListener
from midi.parser import parse_midi_to_events
from notes.model import note_to_human_readable
from notes.tracker import NoteTracker, PlayedNote
from render.pixelator import RandomPixelator
from render.renderer import Renderer
from timeline.scheduler import Timeline
from utils.logs import log_exception, set_crash_context

class App:
    def __init__(self, cfg: AppConfig, midi_path: Optional[str] = None):
        self.cfg = cfg
        self.renderer = Renderer(cfg.render, cfg.display)
        w, h = self.renderer.canvas_size
        self.pixelator = RandomPixelator(w, h, pool_size=cfg.display.pool_size)

        self.tracker = NoteTracker()
        self.events = EventQueue()
        self.listener = MidiListener(self.events)
        self.timeline: Optional[Timeline] = None

        self.keymap: Dict[int, int] = dict(DEFAULT_KEYMAP)
        if cfg.input.keymap_path:
            try:
                self.keymap = load_keymap(cfg.input.keymap_path)
            except (OSError, ValueError) as e:
                log_exception("load_keymap", e)
                logging.warning("Keymap %s not loaded, using the default", cfg.input.keymap_path)

        if midi_path:
            self.load_midi(midi_path)

    # ---------- Sources ----------
    def load_midi(self, path: str) -> bool:
        try:
            events, total = parse_midi_to_events(path)
        except Exception as e:
            logging.exception("Failed to load MIDI file %s", path)
            log_exception("load_midi", e)
            return False
        self.timeline = Timeline(events)
        logging.info("Loaded %s: %d events, %.1fs", path, len(events), total)
        return True

    def open_midi_input(self):
        if self.cfg.input.use_midi_port:
            self.listener.open(self.cfg.input.midi_port)

    # ---------- Per frame ----------
    def step(self, dt: float):
        """One tick: queued input -> tracker -> colors -> pixels."""
        if self.timeline is not None:
            self.timeline.step(dt)
            for ev in self.timeline.due_events():
                self.events.put(ev)
            if self.timeline.finished and self.cfg.input.loop_midi and self.timeline.events:
                logging.debug("MIDI file ended, looping")
                self.timeline.rewind()
        self.events.drain(self.tracker)
        self.tracker.tick()
        notes = self.tracker.notes()
        distribution = weighted_distribution(notes, self.cfg)
        self.pixelator(distribution, self.renderer.present, self.renderer.try_clear)
        self.renderer.draw_status_bar(self.status_text(notes, distribution))

    def status_text(self, notes: List[PlayedNote], distribution: Sequence[WeightedHSL] = ()) -> str:
        fields = [
            f"TONIC: {self.cfg.circle.tonic}",
            f"SPACE: {self.cfg.color.space}",
            f"SUSTAIN: {'ON' if self.tracker.sustain_on else 'OFF'}",
            f"MIDI IN: {'ON' if self.listener.opened else 'OFF'}",
        ]
        if self.timeline is not None:
            if self.timeline.finished:
                fields.append("FILE: END")
            else:
                fields.append(f"FILE: {self.timeline.time:6.1f}s")
        if distribution:
            top = max(distribution, key=lambda wc: wc.weight)
            fields.append(f"TOP: {hsl_to_hex(top.color)}")
        fields.append("NOTES: " + (" ".join(note_to_human_readable(n.note) for n in notes) or "-"))
        return "  |  ".join(fields)

    # ---------- Main loop ----------
    def run(self):
        set_crash_context(lambda: self.status_text(self.tracker.notes()))
        self.open_midi_input()
        fps = 1000.0 / self.cfg.display.tick_ms
        running = True
        try:
            while running:
                dt = self.renderer.tick(fps)
                for e in pygame.event.get():
                    if e.type == pygame.QUIT:
                        running = False
                    elif e.type in (pygame.KEYDOWN, pygame.KEYUP):
                        if e.type == pygame.KEYDOWN and e.key == pygame.K_ESCAPE:
                            running = False
                            continue
                        ev = key_event(self.keymap, e.key, e.type == pygame.KEYDOWN)
                        if ev is not None:
                            self.events.put(ev)
                if not running:
                    break
                self.step(dt)
                self.renderer.end_frame()
        finally:
            self.listener.close()
            self.tracker.clear()
            self.renderer.close()
            set_crash_context(None)
