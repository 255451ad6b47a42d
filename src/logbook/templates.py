"""Header, footer and entry templates for session log files.

The ``When generated`` header line is read back by ``parse_start_time`` to
compute the session duration, so its label, column and timestamp format
must not change.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from src.logbook.errors import HeaderFormatError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
BORDER = "+" + "-" * 88 + "+"
LABEL_WIDTH = 25

GENERATED_LABEL = "When generated"
END_TIME_LABEL = "End time"
START_TIME_PATTERN = re.compile(
    r"^" + re.escape(f"{GENERATED_LABEL:<{LABEL_WIDTH}}: ")
    + r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
)


@dataclass
class HeaderFields:
    """Values rendered into the session header block."""
    script_path: str
    generated_at: datetime
    user: str
    computer: str
    operating_system: str
    os_architecture: str


@dataclass
class FooterFields:
    """Values rendered into the session footer block."""
    end_time: datetime
    duration_seconds: int
    duration_minutes: float


def format_timestamp(moment: datetime) -> str:
    """Format a datetime at second precision."""
    return moment.strftime(TIMESTAMP_FORMAT)


def _field(label: str, value) -> str:
    return f"{label:<{LABEL_WIDTH}}: {value}"


def render_header(fields: HeaderFields) -> str:
    """
    Render the bordered header block, followed by a blank line.

    Args:
        fields: Header values

    Returns:
        Header text ending with a newline
    """
    lines = [
        BORDER,
        _field("Script fullname", fields.script_path),
        _field(GENERATED_LABEL, format_timestamp(fields.generated_at)),
        _field("Current user", fields.user),
        _field("Current computer", fields.computer),
        _field("Operating System", fields.operating_system),
        _field("OS Architecture", fields.os_architecture),
        BORDER,
        "",
    ]
    return "\n".join(lines) + "\n"


def render_footer(fields: FooterFields) -> str:
    """Render the bordered footer block, preceded by a blank line."""
    lines = [
        "",
        BORDER,
        _field(END_TIME_LABEL, format_timestamp(fields.end_time)),
        _field("Total duration (seconds)", fields.duration_seconds),
        _field("Total duration (minutes)", fields.duration_minutes),
        BORDER,
    ]
    return "\n".join(lines) + "\n"


def render_entry(timestamp: datetime, category_code: str, message: str) -> str:
    """Render a single entry line. The message is written verbatim."""
    return f"{format_timestamp(timestamp)}; {category_code}; {message}\n"


def parse_start_time(lines: Iterable[str]) -> datetime:
    """
    Recover the session start time from header lines.

    Args:
        lines: Lines from the top of a session log file

    Returns:
        Start time parsed from the ``When generated`` line

    Raises:
        HeaderFormatError: If no line matches or the timestamp is invalid
    """
    for line in lines:
        match = START_TIME_PATTERN.match(line)
        if not match:
            continue
        try:
            return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
        except ValueError as e:
            raise HeaderFormatError(f"cannot recover start date from header: {e}") from e

    raise HeaderFormatError("cannot recover start date from header")


def compute_footer(start: datetime, end: datetime) -> FooterFields:
    """Compute footer values for a session running from start to end."""
    total_seconds = (end - start).total_seconds()
    return FooterFields(
        end_time=end,
        duration_seconds=math.floor(total_seconds),
        duration_minutes=round(total_seconds / 60, 2),
    )



def has_footer(lines: Iterable[str]) -> bool:
    """Whether the lines of a session log include a footer block."""
    prefix = f"{END_TIME_LABEL:<{LABEL_WIDTH}}: "
    return any(line.startswith(prefix) for line in lines)
