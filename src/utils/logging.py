"""Logging configuration."""

import logging
import sys
from pathlib import Path


class StripNewlinesFilter(logging.Filter):
    """Filter to remove leading/trailing newlines from log messages."""
    def filter(self, record):
        if isinstance(record.msg, str):
            record.msg = record.msg.strip()
        return True


class ImmediateHandler(logging.StreamHandler):
    """Handler that flushes immediately."""
    def emit(self, record):
        super().emit(record)
        self.flush()


def setup_logging(log_dir: str = 'output', log_file: str = 'type5.log',
                  verbose: bool = False):
    """Configure console output and a debug log file for tag sessions.

    The console gets bare messages at INFO (DEBUG with ``verbose``); the file
    in ``log_dir`` gets everything, including APDU traces, with timestamps.
    """
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    logging.root.setLevel(logging.DEBUG)

    console_handler = ImmediateHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(message)s'))

    file_handler = logging.FileHandler(path / log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)s %(module)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    file_handler.addFilter(StripNewlinesFilter())

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    logging.root.addHandler(console_handler)
    logging.root.addHandler(file_handler)

    logging.debug("=" * 80)
    logging.debug("Starting new Type 5 tag session")
