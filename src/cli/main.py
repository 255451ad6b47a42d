#!/usr/bin/env python3
"""
Logbook CLI - Main entry point

Writes session log files from the shell. Every command is a separate
process, so the session is identified by its log file path.

Usage:
    python -m src.cli.main --help
    python -m src.cli.main begin logs/nightly.log
    python -m src.cli.main entry logs/nightly.log "disk low" --category WAR
    python -m src.cli.main end logs/nightly.log
"""

import click
import sys
from datetime import datetime
from pathlib import Path
import logging

# Add the project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from src.logbook.session_logger import (
    Category,
    LogSession,
    SessionLogError,
    begin_session,
)
from src.logbook.templates import format_timestamp
from src.utils.environment import SessionMetadata
from src.utils.log_config import ConfigLoader, configure_logging

logger = logging.getLogger(__name__)

CATEGORY_CHOICE = click.Choice([c.name for c in Category], case_sensitive=False)


def _default_log_file(log_dir: Path) -> Path:
    return log_dir / f"session_{datetime.now():%Y%m%d_%H%M%S}.log"


@click.group()
@click.version_option(version="0.1.0")
@click.option('--config', 'config_path', default="config/config.yaml", help='Path to config.yaml')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path: str, verbose: bool):
    """Logbook - session log files with header, entries and duration footer."""
    config = ConfigLoader(config_path).get_config()
    configure_logging("DEBUG" if verbose else config.logging_level)
    logger.debug(f"Loaded configuration from {config_path}")
    ctx.obj = config


@cli.command()
@click.argument('log_file', required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option('--script', help='Script path to record in the header (defaults to this program)')
@click.option('--echo/--no-echo', default=None, help='Print the header to the console')
@click.pass_obj
def begin(config, log_file: Path, script: str, echo: bool):
    """Start a session by writing the header to LOG_FILE."""

    if echo is None:
        echo = config.echo

    try:
        if log_file is None:
            config.log_path.mkdir(parents=True, exist_ok=True)
            log_file = _default_log_file(config.log_path)

        metadata = SessionMetadata.from_environment(script_path=script)
        session = begin_session(log_file, metadata, echo=echo)
        click.echo(str(session.log_file))

    except SessionLogError as e:
        click.echo(f"❌ Could not start session: {e}", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"❌ Could not create log directory: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('log_file', type=click.Path(dir_okay=False, path_type=Path))
@click.argument('message')
@click.option('--category', '-c', type=CATEGORY_CHOICE, default='INF', help='Entry category')
@click.option('--echo/--no-echo', default=None, help='Print the entry to the console')
@click.pass_obj
def entry(config, log_file: Path, message: str, category: str, echo: bool):
    """Append MESSAGE to the session in LOG_FILE."""

    if echo is None:
        echo = config.echo

    try:
        session = LogSession.attach(log_file)
        session.log_entry(category, message, echo=echo)

    except SessionLogError as e:
        click.echo(f"❌ Could not log entry: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('log_file', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--echo/--no-echo', default=None, help='Print the footer to the console')
@click.pass_obj
def end(config, log_file: Path, echo: bool):
    """End the session in LOG_FILE by writing the footer."""

    if echo is None:
        echo = config.echo

    try:
        session = LogSession.attach(log_file)
        footer = session.end_session(echo=echo)
        click.echo(
            f"Session ended after {footer.duration_seconds}s "
            f"({footer.duration_minutes} min)"
        )

    except SessionLogError as e:
        click.echo(f"❌ Could not end session: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('log_file', type=click.Path(dir_okay=False, path_type=Path))
def status(log_file: Path):
    """Show when the session in LOG_FILE started and how long it has run."""

    try:
        session = LogSession.attach(log_file)
        started = session.start_time()
        elapsed = session.elapsed_seconds()

        click.echo("=" * 50)
        click.echo(f"Log file: {session.log_file}")
        click.echo(f"Started:  {format_timestamp(started)}")
        click.echo(f"Elapsed:  {elapsed}s")
        click.echo("=" * 50)

    except SessionLogError as e:
        click.echo(f"❌ Status check failed: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
