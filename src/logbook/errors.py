"""Exceptions raised by the session logbook."""


class SessionLogError(Exception):
    """Base exception for session logbook errors."""
    pass


class SessionIOError(SessionLogError, OSError):
    """Session log file could not be created, read or written."""
    pass


class HeaderFormatError(SessionLogError):
    """Start date could not be recovered from the session header."""
    pass


class IllegalSessionStateError(SessionLogError):
    """Operation invoked on a session that is not open."""
    pass
