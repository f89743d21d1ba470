from __future__ import annotations

from enum import Enum

"""Import session lifecycle states.

State transitions:
    idle -> file_loaded -> previewing -> importing -> completed
    previewing -> idle   (user discards the file or picks another one)
    file_loaded -> idle  (file could not be parsed)

``completed`` is terminal; a new file needs a new session.
"""

__all__ = [
    "SessionState",
    "ALLOWED_TRANSITIONS",
]


class SessionState(Enum):
    """Status of one import session.

    - IDLE: no file loaded yet (or the previous one was discarded)
    - FILE_LOADED: file read into memory, rows being parsed
    - PREVIEWING: parsed set available, waiting for confirmation
    - IMPORTING: batch importer running
    - COMPLETED: batch finished (possibly partially)
    """
    IDLE = "idle"
    FILE_LOADED = "file_loaded"
    PREVIEWING = "previewing"
    IMPORTING = "importing"
    COMPLETED = "completed"


ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.FILE_LOADED}),
    SessionState.FILE_LOADED: frozenset({SessionState.PREVIEWING, SessionState.IDLE}),
    SessionState.PREVIEWING: frozenset({SessionState.IMPORTING, SessionState.IDLE}),
    SessionState.IMPORTING: frozenset({SessionState.COMPLETED}),
    SessionState.COMPLETED: frozenset(),
}
