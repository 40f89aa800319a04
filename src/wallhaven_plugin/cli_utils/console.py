"""
wallhaven-plugin console utilities

This module provides application-wide access to Rich Console objects for writing to stdout
and stderr, plus the run log. Console messages are for the person at the terminal; the run
log (main.log in the app directory) keeps a timestamped record of every run.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.theme import Theme

plugin_theme = Theme(
    {"warning": "orange_red1", "fail": "bold red", "confirm": "", "describe": ""}
)

console = Console(theme=plugin_theme)
error_console = Console(theme=plugin_theme, stderr=True)

LOG_FORMAT = "%(asctime)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


"""
Formatting helpers
"""


def warn(msg: str):
    """
    Format msg and print to stderr.
    """

    error_console.print(
        f":exclamation_mark-emoji: [bold]warning: [/] {msg}", style="warning"
    )


def describe(msg: str, **kwargs):
    """
    Format descriptive msg and print to stdout.
    """

    console.print(f"{msg}", style="describe", **kwargs)


def confirm_success(msg: str, **kwargs):
    """
    Format confirmation msg and print to stdout. Accept any additional kwargs that console.print from
    rich module exposes.
    """

    console.print(f"{msg}", style="confirm", **kwargs)


def fail(msg: str):
    """
    Format failure msg and print to stderr.
    """

    error_console.print(f":x-emoji: failed. {msg}", style="fail")


"""
Run log
"""


def init_logging(app_dir: Path, level=logging.INFO) -> logging.Logger:
    """
    Create the 'wallhaven_plugin' logger writing to app_dir/main.log and return it. Call once
    per process and pass the logger on explicitly. Calling again replaces the file handler.
    """

    logger = logging.getLogger("wallhaven_plugin")
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    try:
        app_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(app_dir / "main.log", encoding="utf-8")

    except OSError as error:
        warn(f"could not open log file in {app_dir}: {error}")
        handler = logging.NullHandler()

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)

    return logger
