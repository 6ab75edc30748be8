# main.py
import sys, os
sys.path.append(os.path.dirname(__file__))

from utils.logs import init_logging, setup_crashlog, log_exception
setup_crashlog()

import argparse
import logging, traceback
from config import AppConfig, COLOR_SPACES, load_config
from notes.model import PITCH_CLASSES

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="MIDI color organ")
    ap.add_argument('--config', help='JSON config file')
    ap.add_argument('--midi', help='play a MIDI file into the organ')
    ap.add_argument('--loop', action='store_true', help='loop the MIDI file')
    ap.add_argument('--port', help='MIDI input port name (default: first port)')
    ap.add_argument('--no-port', action='store_true', help='do not open a MIDI input port')
    ap.add_argument('--keymap', help='JSON keymap for the computer keyboard')
    ap.add_argument('--tonic', choices=PITCH_CLASSES)
    ap.add_argument('--offset', type=float, help='hue rotation in degrees')
    ap.add_argument('--space', choices=COLOR_SPACES)
    ap.add_argument('--overtones', type=int)
    ap.add_argument('--width', type=int)
    ap.add_argument('--height', type=int)
    ap.add_argument('--debug', action='store_true')
    return ap

def apply_args(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.tonic is not None: cfg.circle.tonic = args.tonic
    if args.offset is not None: cfg.circle.degree_offset = args.offset
    if args.space is not None: cfg.color.space = args.space
    if args.overtones is not None: cfg.overtone.number_overtones = args.overtones
    if args.width is not None: cfg.render.window_w = args.width
    if args.height is not None: cfg.render.window_h = args.height
    if args.port is not None: cfg.input.midi_port = args.port
    if args.no_port: cfg.input.use_midi_port = False
    if args.keymap is not None: cfg.input.keymap_path = args.keymap
    if args.loop: cfg.input.loop_midi = True
    cfg.validate()
    return cfg

def main(argv=None):
    args = build_parser().parse_args(argv)
    init_logging(logging.DEBUG if args.debug else logging.INFO)
    logging.info("Starting color organ")

    try:
        cfg = load_config(args.config) if args.config else AppConfig()
        cfg = apply_args(cfg, args)
    except (OSError, ValueError) as e:
        logging.error("Bad configuration: %s", e)
        return 2

    from app import App
    App(cfg, midi_path=args.midi).run()
    return 0

if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as e:
        try:
            log_exception("Top-level exception", e)
        except OSError:
            pass
        logging.error("Uncaught exception: %s", e, exc_info=True)
        print("Something went wrong, see logs/app.log and logs/error-*.txt")
        traceback.print_exc()
        sys.exit(1)
