# utils/logs.py
import os, sys, faulthandler, datetime, logging, traceback, threading
from logging.handlers import RotatingFileHandler
from typing import Callable, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_fault_file = None
_log_dir: Optional[str] = None

def log_dir() -> str:
    d = _log_dir or os.path.join(os.getcwd(), "logs")
    os.makedirs(d, exist_ok=True)
    return d

def _new_log_path(prefix: str = "crash") -> str:
    stamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
    return os.path.join(log_dir(), f"{prefix}-{stamp}.txt")

def init_logging(level: int = logging.INFO, directory: Optional[str] = None):
    """Console + rotating app.log. Does nothing if the root logger is already configured."""
    global _log_dir
    if directory:
        _log_dir = directory
    if logging.getLogger().handlers:
        return

    logging.basicConfig(level=level, format=LOG_FORMAT, encoding="utf-8")
    try:
        fh = RotatingFileHandler(os.path.join(log_dir(), "app.log"),
                                 maxBytes=2*1024*1024, backupCount=3, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(fh)
    except OSError:
        logging.warning("File logging disabled, cannot write to %s", log_dir())

_crash_context: Optional[Callable[[], str]] = None

def set_crash_context(provider: Optional[Callable[[], str]]):
    """Register a callable whose text (e.g. the sounding notes) goes into every report."""
    global _crash_context
    _crash_context = provider

def _write_report(prefix: str, heading: str, exc_type, exc, tb, directory: Optional[str] = None) -> str:
    d = directory or log_dir()
    os.makedirs(d, exist_ok=True)
    path = os.path.join(d, os.path.basename(_new_log_path(prefix)))
    with open(path, "w", encoding="utf-8") as out:
        out.write(heading + "\n")
        if _crash_context is not None:
            try:
                out.write(f"state: {_crash_context()}\n")
            except Exception as e:
                out.write(f"state: unavailable ({type(e).__name__})\n")
        out.write("=" * 60 + "\n")
        out.write("".join(traceback.format_exception(exc_type, exc, tb)))
    return path

def setup_crashlog():
    """faulthandler dump for native crashes; uncaught Python errors (main or
    MIDI callback threads) become crash-*.txt reports and a CRITICAL log line."""
    global _fault_file
    try:
        if _fault_file is None:
            _fault_file = open(_new_log_path("native"), "w", encoding="utf-8")
        faulthandler.enable(_fault_file, all_threads=True)
    except OSError:
        _fault_file = None

    def _hook(exc_type, exc, tb):
        try:
            path = _write_report("crash", "UNCAUGHT EXCEPTION", exc_type, exc, tb)
            logging.critical("Uncaught %s, report in %s", exc_type.__name__, path)
        finally:
            sys.__excepthook__(exc_type, exc, tb)
    sys.excepthook = _hook

    def _thread_hook(args):
        name = args.thread.name if args.thread is not None else "?"
        path = _write_report("crash", f"UNCAUGHT EXCEPTION IN THREAD {name}",
                             args.exc_type, args.exc_value, args.exc_traceback)
        logging.critical("Thread %s died with %s, report in %s", name, args.exc_type.__name__, path)
    threading.excepthook = _thread_hook

def log_exception(title: str, exc: BaseException, directory: Optional[str] = None) -> str:
    """Write an error-*.txt report for a handled failure; returns its path."""
    return _write_report("error", f"[{title}] {type(exc).__name__}: {exc}",
                         type(exc), exc, exc.__traceback__, directory)
