"""
wallhaven-plugin

Set a random wallpaper from wallhaven.cc that fits your screen and skips the tags you don't want.

This module defines the entry point to the wallhaven-plugin CLI. The command loads the config
file, sets up the run log, works out the target resolution and hands all three to the run in
wallhaven_plugin.py. Options given on the command line override the config file for this run only.
"""

import dataclasses
from io import StringIO
from pathlib import Path

import click
from rich.markup import escape

from wallhaven_plugin import display
from wallhaven_plugin import wallhaven_plugin
from wallhaven_plugin.config import default_app_dir
from wallhaven_plugin.config import init
from wallhaven_plugin.wallhaven_handler import TargetResolution

from wallhaven_plugin.cli_utils.console import console
from wallhaven_plugin.cli_utils.console import describe
from wallhaven_plugin.cli_utils.console import confirm_success
from wallhaven_plugin.cli_utils.console import init_logging
from wallhaven_plugin.cli_utils.decorators import catch_errors


@click.command(name="wallhaven-plugin")
@click.option(
    "--app-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="WALLHAVEN_PLUGIN_DIR",
    help="Directory holding wallhaven-plugin.json and main.log (default: ~/wallhaven-plugin).",
)
@click.option(
    "--query",
    "-q",
    type=str,
    help="Free text search, overrides 'q' from the config file, e.g. -q 'mountain lake'",
)
@click.option(
    "--exclude",
    "-x",
    multiple=True,
    help="Reject wallpapers with a tag containing this text. Adds to 'exclude_similar_tags'. Can use multiple times.",
)
@click.option(
    "--resolution",
    "-r",
    "dimensions",
    type=(click.IntRange(min=1), click.IntRange(min=1)),
    help="Target resolution, e.g. -r 3840 2160. Default: resolution of the primary display.",
)
@click.option(
    "--exact",
    "resolution_filter",
    flag_value="exact",
    help="Only accept wallpapers with exactly the target resolution.",
)
@click.option(
    "--atleast",
    "resolution_filter",
    flag_value="atleast",
    help="Accept wallpapers at least as large as the target resolution.",
)
@click.option(
    "--persist/--no-persist",
    default=None,
    help="Keep the wallpaper after logout (Windows only). Overrides 'persist' from the config file.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Pick a wallpaper and print it without downloading or setting it.",
)
@click.option(
    "--verbose",
    "verbosity",
    flag_value="verbose",
    default=True,
    help="Print all output to stdout or the terminal",
)
@click.option(
    "--quiet",
    "verbosity",
    flag_value="quiet",
    help="Silence all output printed to the stdout or the terminal.",
)
@click.version_option(package_name="wallhaven-plugin")
@catch_errors
def cli(
    app_dir, query, exclude, dimensions, resolution_filter, persist, dry_run, verbosity
):
    """
    Set a random wallhaven.cc wallpaper matching your screen resolution.

    Examples:

        $ wallhaven-plugin

        $ wallhaven-plugin -q "car" -x neon -x anime

        $ wallhaven-plugin -r 1920 1080 --exact --dry-run
    """

    # if verbosity is set to quiet, capture all std_out to a junk stream.
    if verbosity == "quiet":
        console.file = StringIO()

    app_dir = (app_dir or default_app_dir()).expanduser().resolve()
    logger = init_logging(app_dir)
    config = init(app_dir)

    overrides = {}
    if query is not None:
        overrides["q"] = query
    if exclude:
        overrides["exclude_similar_tags"] = [*config.exclude_similar_tags, *exclude]
    if resolution_filter:
        overrides["resolution_filter"] = resolution_filter
    if persist is not None:
        overrides["persist"] = persist
    config = dataclasses.replace(config, **overrides)

    if dimensions:
        resolution = TargetResolution(*dimensions)
    else:
        resolution = display.primary_resolution()

    describe(
        f":mag-emoji: searching wallhaven for {config.resolution_filter} {resolution}"
        + (f" matching '{escape(config.q)}'" if config.q else "")
        + " ..."
    )

    if dry_run:
        match = wallhaven_plugin.find(config, resolution, logger)
        confirm_success(
            f":white_check_mark-emoji: found {match.wallpaper.url} ({escape(', '.join(match.tags)) or 'no tags'})"
        )
        return

    file = wallhaven_plugin.run(config, resolution, logger)
    confirm_success(f":white_check_mark-emoji: wallpaper updated to {file}")


def main():

    cli()
