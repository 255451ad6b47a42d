"""Provenance metadata for session headers, sourced from the running host."""

import getpass
import os
import platform
import socket
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class SessionMetadata:
    """Identity of the caller and host recorded in a session header."""
    script_path: str
    user: str
    host: str
    os_name: str
    os_service_pack: str = ""
    os_architecture: str = ""

    @property
    def os_description(self) -> str:
        """Operating system name followed by its service pack, if any."""
        return f"{self.os_name} {self.os_service_pack}".rstrip()

    @classmethod
    def from_environment(cls, script_path: Optional[str] = None) -> "SessionMetadata":
        """
        Collect metadata from the current process and operating system.

        Args:
            script_path: Caller script path; defaults to the running program

        Returns:
            SessionMetadata for this process
        """
        host = socket.gethostname()
        metadata = cls(
            script_path=script_path or _current_script_path(),
            user=f"{_user_domain(host)}\\{_current_user()}",
            host=host,
            os_name=f"{platform.system()} {platform.release()}".strip(),
            os_service_pack=_service_pack(),
            os_architecture=platform.machine(),
        )
        logger.debug(f"Collected session metadata: {metadata}")
        return metadata


def _current_script_path() -> str:
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0 or argv0 == "-c":
        return "<interactive>"
    return str(Path(argv0).resolve())


def _user_domain(host: str) -> str:
    # USERDOMAIN is only set on Windows; elsewhere the host stands in
    return os.environ.get("USERDOMAIN") or host


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        logger.warning(f"Could not determine current user: {e}")
        return "unknown"


def _service_pack() -> str:
    if platform.system() == "Windows":
        return platform.win32_ver()[2]
    return platform.version()
