"""
Paths, logging setup, environment toggles, safe_print.
"""

import os
import sys
import logging
from pathlib import Path

from .constants import DEFAULT_BASE_URL


# ─── Paths ───────────────────────────────────────────────────────
# One state directory per user. Holds the saved session and the log.
_FOLDER_NAME = ".aitm-erp"

STATE_DIR = Path(os.environ.get("AITM_ERP_HOME") or (Path.home() / _FOLDER_NAME))

SESSION_FILE = STATE_DIR / "session.json"
LOG_FILE = STATE_DIR / "erp.log"

BASE_URL = (os.environ.get("AITM_ERP_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")


# ─── Safe print (no crash on a closed or non-UTF-8 stdout) ───────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except (OSError, UnicodeEncodeError):
        pass


# ─── Environment toggles ─────────────────────────────────────────

def no_color_requested(argv=None, environ=None):
    """True if color output is disabled via --no-color or NO_COLOR."""
    argv = sys.argv if argv is None else argv
    environ = os.environ if environ is None else environ
    return "--no-color" in argv or bool(environ.get("NO_COLOR"))


def debug_requested(environ=None):
    environ = os.environ if environ is None else environ
    return environ.get("AITM_ERP_DEBUG") == "1"


# ─── Logging ─────────────────────────────────────────────────────

log = logging.getLogger("erp")


def setup_logging(verbose=None):
    """
    File log under the state dir plus a quiet console handler.
    The menu owns the terminal, so the console only shows warnings
    unless AITM_ERP_DEBUG=1.
    """
    if verbose is None:
        verbose = debug_requested()

    log.setLevel(logging.INFO)
    log.propagate = False
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    try:
        STATE_DIR.mkdir(parents=True, exist_ok=True)
        if LOG_FILE.exists() and LOG_FILE.stat().st_size > 1_000_000:
            LOG_FILE.write_text("")
        file_handler = logging.FileHandler(str(LOG_FILE), encoding="utf-8")
        file_handler.setFormatter(fmt)
        log.addHandler(file_handler)
    except OSError as e:
        safe_print(f"Warning: cannot write log file {LOG_FILE}: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    log.addHandler(console_handler)
    return log
