"""
Saved login session: {sessionId, student, savedAt} in STATE_DIR/session.json.

Single user, single process. No locking; last login wins.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from .config import log, SESSION_FILE
from .models import Session, StudentRecord


def load_session(path=None):
    """Load the saved session. Returns Session or None (missing/corrupt file)."""
    path = Path(path or SESSION_FILE)
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return Session.model_validate(json.load(f))
    except (ValueError, OSError, ValidationError) as e:
        log.warning("Ignoring unreadable session file %s: %s", path, e)
        return None


def save_session(session_id, student, path=None):
    """Persist the session, replacing any previous one. Returns the Session."""
    path = Path(path or SESSION_FILE)
    if not isinstance(student, StudentRecord):
        student = StudentRecord.model_validate(student or {})
    session = Session(session_id=session_id, student=student)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(session.to_json_dict(), f, indent=2)
    log.info("Session saved to %s", path)
    return session


def clear_session(path=None):
    """Delete the saved session. Absent file is fine."""
    path = Path(path or SESSION_FILE)
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        log.warning("Could not remove session file %s: %s", path, e)
        return
    log.info("Session cleared")
