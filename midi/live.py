# midi/live.py
import logging
from typing import List, Optional

import mido

from midi.events import EventQueue, from_message


class MidiListener:
    """Opens a MIDI input port; its callback runs on the backend thread and
    only enqueues events."""
    def __init__(self, events: EventQueue):
        self.events = events
        self.port = None

    @property
    def opened(self) -> bool:
        return self.port is not None

    @staticmethod
    def list_ports() -> List[str]:
        return mido.get_input_names()

    def open(self, name: Optional[str] = None) -> bool:
        try:
            ports = self.list_ports()
            if not ports:
                logging.info("No MIDI input ports available")
                return False
            if name is None:
                name = ports[0]
            elif name not in ports:
                logging.warning("MIDI port %r not found, using %r", name, ports[0])
                name = ports[0]
            self.port = mido.open_input(name, callback=self._on_message)
            logging.info("Opened MIDI input: %s", name)
            return True
        except Exception:
            logging.exception("Failed to open MIDI input")
            self.port = None
            return False

    def _on_message(self, msg: mido.Message):
        ev = from_message(msg)
        if ev is not None:
            self.events.put(ev)

    def close(self):
        if self.port is not None:
            self.port.close()
            self.port = None
