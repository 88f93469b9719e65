"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from fakecandy import __version__

from .commands import control_group, probe, serve

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> None:
    """
    Configure logging for the application.

    Console output goes to stderr so stdout stays free for the strand
    display and command output.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, log DEBUG to stderr and to ./fakecandy-debug.log
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)
    """
    if debug or verbose >= 2:
        console_level = logging.DEBUG
    elif verbose == 1:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    # Replace handlers from a previous call (e.g. repeated CLI invocations in one process)
    for handler in [h for h in root_logger.handlers if getattr(h, "_fakecandy", False)]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler._fakecandy = True
    root_logger.addHandler(console_handler)
    root_level = console_level

    if debug and not log_file:
        log_file = Path.cwd() / "fakecandy-debug.log"

    if log_file:
        file_level = logging.DEBUG if debug else getattr(logging, log_level.upper())
        # Keeps last 5 files, max 10MB each
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        file_handler._fakecandy = True
        root_logger.addHandler(file_handler)
        root_level = min(root_level, file_level)

    root_logger.setLevel(root_level)
    logger.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, file={log_file or 'none'}"
    )


@click.group()
@click.version_option(version=__version__, prog_name="fakecandy")
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./fakecandy-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Also log to this file (rotated at 10MB)'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(verbose: int, debug: bool, log_file: Optional[Path], log_level: str):
    """
    fakecandy - a simulated Open Pixel Control smart light.

    \b
    Examples:
      # Run a device on TCP port 7890, discoverable by UDP broadcast
      fakecandy serve --device-id strand1

      # Proxy with two strands, discoverable over mDNS
      fakecandy serve --device-id proxy1 --channel 1 --channel 2 \\
          --discovery-protocol MDNS

      # Find devices on the local network
      fakecandy probe

      # Paint channel 1 magenta
      fakecandy control color ff00ff --channel 1
    """
    setup_logging(verbose, debug, log_file, log_level)


cli.add_command(serve)
cli.add_command(probe)
cli.add_command(control_group)

if __name__ == "__main__":
    cli()
