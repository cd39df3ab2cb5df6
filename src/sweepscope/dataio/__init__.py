"""Session file input/output.

Utility modules here keep disk-level concerns isolated from the pipeline:
- :mod:`session_store` writes and reads the flat session record format.
- :mod:`file_paths` builds timestamped session file names.
"""

from .file_paths import session_file
from .session_store import SessionFileError, SessionStore, read_session, write_session

__all__ = ["SessionFileError", "SessionStore", "read_session", "session_file", "write_session"]
