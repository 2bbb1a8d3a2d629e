"""Runtime monitoring and logging helpers for romtracker."""

from __future__ import annotations

import faulthandler
import logging
import os
import sys
import threading
import time
import traceback
from datetime import date
from pathlib import Path
from typing import Callable, Optional

LOGGER_NAME = "romtracker"
LOGS_DIR = Path.home() / ".romtracker" / "logs"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_INITIALIZED = False
_FAULT_HANDLER_FILE = None


def _formatter() -> logging.Formatter:
    return logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)


def get_log_path(logs_dir: Optional[Path] = None) -> Path:
    """Return the runtime log path for today's session."""
    base = Path(logs_dir or LOGS_DIR)
    base.mkdir(parents=True, exist_ok=True)
    return base / f"runtime-{date.today().isoformat()}.log"


def setup_monitoring(log_file: Optional[str] = None, echo: bool = True,
                     level: int = logging.INFO) -> logging.Logger:
    """
    (Re)configure the package logger.

    Existing handlers are replaced, so calling this again with a different
    file redirects the log.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = _formatter()
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    if echo:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


def setup_runtime_monitor(log_file: Optional[str] = None, echo: bool = False) -> logging.Logger:
    """Initialize process-wide logging, crash dumps and exception hooks once."""
    global _INITIALIZED, _FAULT_HANDLER_FILE
    logger = logging.getLogger(LOGGER_NAME)

    if _INITIALIZED:
        return logger

    log_path = Path(log_file) if log_file else get_log_path()
    setup_monitoring(str(log_path), echo=echo)

    # segfaults and fatal signals go to a dedicated file
    crash_log = log_path.with_name("crash.log")
    _FAULT_HANDLER_FILE = crash_log.open("a", encoding="utf-8")
    faulthandler.enable(file=_FAULT_HANDLER_FILE)

    logger.info("Runtime monitor initialized")
    logger.info("Log file: %s", log_path)

    _install_exception_hooks(logger)
    _INITIALIZED = True
    return logger


def _report_crash(logger: logging.Logger, where: str, exc_info) -> None:
    """Log a crash and echo the traceback to the real stderr."""
    logger.critical("Crash in %s", where, exc_info=exc_info)
    stream = sys.__stderr__ or sys.stderr
    if stream is not None:
        stream.write(f"[romtracker] crash in {where}\n")
        traceback.print_exception(*exc_info, file=stream)
        stream.flush()


def _install_exception_hooks(logger: logging.Logger) -> None:
    def on_main_crash(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
        else:
            _report_crash(logger, "main thread", (exc_type, exc_value, exc_tb))

    def on_thread_crash(hook_args):
        where = f"thread {hook_args.thread.name}" if hook_args.thread else "unknown thread"
        _report_crash(logger, where,
                      (hook_args.exc_type, hook_args.exc_value, hook_args.exc_traceback))

    sys.excepthook = on_main_crash
    threading.excepthook = on_thread_crash


def log_event(event: str, message: str = "", level: int = logging.INFO) -> None:
    """Log a named event, e.g. ``log_event('match.finished', '3 platforms')``."""
    logging.getLogger(LOGGER_NAME).log(level, "%s: %s", event, message)


def monitor_action(action: str, *, logger: Optional[logging.Logger] = None) -> None:
    (logger or logging.getLogger(LOGGER_NAME)).info("action: %s", action)


def start_monitored_thread(target: Callable[[], None], *, name: str,
                           logger: Optional[logging.Logger] = None,
                           daemon: bool = True) -> threading.Thread:
    """
    Run ``target`` on a named thread, logging how long it ran.

    Exceptions are logged and re-raised so ``threading.excepthook`` sees them.
    """
    log = logger or logging.getLogger(LOGGER_NAME)

    def run():
        began = time.monotonic()
        log.info("%s started", name)
        try:
            target()
        except Exception:
            log.exception("%s failed after %.2fs", name, time.monotonic() - began)
            raise
        log.info("%s finished in %.2fs", name, time.monotonic() - began)

    thread = threading.Thread(target=run, name=name, daemon=daemon)
    thread.start()
    return thread
