"""Session logger - header, categorized entries and a duration footer.

A session is opened with ``begin_session``, which writes the header and
returns a ``LogSession`` handle. Entries are appended through the handle and
``end_session`` writes the footer, computing the duration from the start
time recorded in the header.

Each write opens the file in append mode, so lines always land at the end of
the file. Nothing coordinates separate processes writing the same file, and
their lines may interleave.
"""

from datetime import datetime
import os
from enum import Enum
from itertools import islice
from pathlib import Path
from typing import Callable, List, Optional, Union
import logging

import click

from src.logbook.errors import (
    SessionLogError,
    SessionIOError,
    HeaderFormatError,
    IllegalSessionStateError,
)
from src.logbook.templates import (
    HeaderFields,
    FooterFields,
    render_header,
    render_footer,
    render_entry,
    parse_start_time,
    compute_footer,
    has_footer,
)
from src.utils.environment import SessionMetadata

logger = logging.getLogger(__name__)

__all__ = [
    "Category",
    "LogSession",
    "begin_session",
    "log_entry",
    "end_session",
    "SessionLogError",
    "SessionIOError",
    "HeaderFormatError",
    "IllegalSessionStateError",
]

# Lines read from the top of the file when recovering the start time
HEADER_SCAN_LINES = 10
HEADER_COLOR = "cyan"
ENCODING = "utf-8"


class Category(Enum):
    """Entry category with its console colour."""
    INF = "cyan"
    WAR = "yellow"
    ERR = "red"

    @property
    def color(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union["Category", str]) -> "Category":
        """
        Resolve a category from a member or its code.

        Raises:
            ValueError: If the code is not INF, WAR or ERR
        """
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            valid = ", ".join(member.name for member in cls)
            raise ValueError(f"Unknown category '{value}'. Expected one of: {valid}") from None


def _now() -> datetime:
    return datetime.now()


class LogSession:
    """Handle on one open session log file."""

    def __init__(self, log_file: Union[str, Path], clock: Optional[Callable[[], datetime]] = None):
        """
        Create a handle. Use ``begin_session`` or ``attach`` rather than
        calling this directly.

        Args:
            log_file: Path to the session log file
            clock: Callable returning the current time
        """
        self.log_file = Path(log_file)
        self.clock = clock or _now
        self.closed = False

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"LogSession({str(self.log_file)!r}, {state})"

    def __enter__(self) -> "LogSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.closed:
            return
        if exc_type is None:
            self.end_session()
            return
        # Let the exception raised inside the block propagate
        try:
            self.end_session()
        except SessionLogError as e:
            logger.error(f"Could not end session {self.log_file} after {exc_type.__name__}: {e}")

    @classmethod
    def attach(cls, log_file: Union[str, Path], clock: Optional[Callable[[], datetime]] = None) -> "LogSession":
        """
        Re-open a handle on a session file written by an earlier process.

        A file that already has a footer gives a closed handle, so further
        entries or a second footer are rejected.

        Raises:
            SessionIOError: If the file does not exist or cannot be read
        """
        session = cls(log_file, clock=clock)
        if has_footer(session._read_lines()):
            session.closed = True
        logger.debug(f"Attached to session log {session!r}")
        return session

    def _timestamp(self) -> datetime:
        return self.clock().replace(microsecond=0)

    def _ensure_open(self, operation: str) -> None:
        if self.closed:
            raise IllegalSessionStateError(f"Cannot {operation}: session {self.log_file} is not open")

    def _append(self, text: str) -> None:
        # O_APPEND without O_CREAT: a deleted log is not recreated headerless
        try:
            fd = os.open(self.log_file, os.O_WRONLY | os.O_APPEND)
            with os.fdopen(fd, "a", encoding=ENCODING) as f:
                f.write(text)
        except FileNotFoundError as e:
            raise SessionIOError(f"Session log file not found: {self.log_file}") from e
        except OSError as e:
            raise SessionIOError(f"Error writing session log {self.log_file}: {e}") from e

    def _read_lines(self, limit: Optional[int] = None) -> List[str]:
        try:
            with open(self.log_file, "r", encoding=ENCODING) as f:
                return [line.rstrip("\r\n") for line in islice(f, limit)]
        except FileNotFoundError as e:
            raise SessionIOError(f"Session log file not found: {self.log_file}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise SessionIOError(f"Error reading session log {self.log_file}: {e}") from e

    def write_header(self, metadata: SessionMetadata, echo: bool = False) -> HeaderFields:
        """Create or truncate the log file and write the header block."""
        self._ensure_open("write header")
        fields = HeaderFields(
            script_path=metadata.script_path,
            generated_at=self._timestamp(),
            user=metadata.user,
            computer=metadata.host,
            operating_system=metadata.os_description,
            os_architecture=metadata.os_architecture,
        )
        text = render_header(fields)
        try:
            with open(self.log_file, "w", encoding=ENCODING) as f:
                f.write(text)
        except OSError as e:
            raise SessionIOError(f"Cannot create session log {self.log_file}: {e}") from e

        if echo:
            click.secho(text, fg=HEADER_COLOR, nl=False)
        return fields

    def log_entry(self, category: Union[Category, str], message: str, echo: bool = False) -> None:
        """
        Append a timestamped entry line.

        The message is written verbatim; embedded ``;`` or newlines are the
        caller's responsibility.

        Args:
            category: INF, WAR or ERR
            message: Entry text
            echo: Also print the line to the console, coloured by category

        Raises:
            IllegalSessionStateError: If the session has ended
            SessionIOError: If the file is missing or cannot be written
        """
        self._ensure_open("log entry")
        category = Category.parse(category)
        line = render_entry(self._timestamp(), category.name, message)
        self._append(line)

        if echo:
            click.secho(line, fg=category.color, nl=False)

    def end_session(self, echo: bool = False) -> FooterFields:
        """
        Write the footer and close the session.

        The start time is read back from the header on disk. If it cannot be
        recovered nothing is written and the session stays open.

        Args:
            echo: Also print the footer to the console

        Returns:
            The footer values written

        Raises:
            IllegalSessionStateError: If the session has already ended
            HeaderFormatError: If the header start date cannot be recovered
            SessionIOError: If the file cannot be read or written
        """
        self._ensure_open("end session")
        footer = compute_footer(self.start_time(), self.clock())
        footer.end_time = footer.end_time.replace(microsecond=0)
        text = render_footer(footer)
        self._append(text)
        self.closed = True

        logger.info(
            f"Session {self.log_file} ended after {footer.duration_seconds}s"
        )
        if echo:
            click.secho(text, fg=HEADER_COLOR, nl=False)
        return footer

    def start_time(self) -> datetime:
        """Start time recorded in the header on disk."""
        return parse_start_time(self._read_lines(HEADER_SCAN_LINES))

    def elapsed_seconds(self) -> int:
        """Whole seconds since the start time recorded in the header."""
        return compute_footer(self.start_time(), self.clock()).duration_seconds


def begin_session(
    log_file: Union[str, Path],
    metadata: Optional[SessionMetadata] = None,
    echo: bool = False,
    clock: Optional[Callable[[], datetime]] = None
) -> LogSession:
    """
    Start a session by writing a header to a new or truncated log file.

    Args:
        log_file: Destination path; an existing file is overwritten
        metadata: Header metadata; collected from the host when omitted
        echo: Also print the header to the console
        clock: Callable returning the current time

    Returns:
        Open LogSession handle

    Raises:
        SessionIOError: If the file cannot be created or written
    """
    session = LogSession(log_file, clock=clock)
    session.write_header(metadata or SessionMetadata.from_environment(), echo=echo)
    logger.info(f"Session started: {session.log_file}")
    return session


def log_entry(
    session: LogSession,
    category: Union[Category, str],
    message: str,
    echo: bool = False
) -> None:
    """Append an entry to an open session. See ``LogSession.log_entry``."""
    if session is None:
        raise IllegalSessionStateError("Cannot log entry: no session has been started")
    session.log_entry(category, message, echo=echo)


def end_session(session: LogSession, echo: bool = False) -> FooterFields:
    """Write the footer of an open session. See ``LogSession.end_session``."""
    if session is None:
        raise IllegalSessionStateError("Cannot end session: no session has been started")
    return session.end_session(echo=echo)
