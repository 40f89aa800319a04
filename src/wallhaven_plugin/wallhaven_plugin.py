"""
wallhaven-plugin - set a random wallhaven.cc wallpaper that fits your screen

One run: search wallhaven for the target resolution, pick the first wallpaper whose tags clear
the exclusion list, download it and set it as the desktop background. Configuration, logger and
resolution are handed in by the caller; nothing here reads global state. Every error
propagates to the caller unchanged.
"""

import logging
from pathlib import Path
from typing import Optional

from wallhaven_plugin import image_handler
from wallhaven_plugin import wallpaper_handler
from wallhaven_plugin.config import PluginConfig
from wallhaven_plugin.matcher import Found
from wallhaven_plugin.matcher import NoMatchError
from wallhaven_plugin.matcher import select_wallpaper
from wallhaven_plugin.wallhaven_handler import CatalogClient
from wallhaven_plugin.wallhaven_handler import TargetResolution
from wallhaven_plugin.wallhaven_handler import WallhavenClient


def make_client(config: PluginConfig) -> WallhavenClient:
    return WallhavenClient(
        resolution_filter=config.resolution_filter,
        api_key=config.api_key,
        timeout=config.timeout,
    )


def find(
    config: PluginConfig,
    resolution: TargetResolution,
    logger: logging.Logger,
    client: Optional[CatalogClient] = None,
) -> Found:
    """
    Select a wallpaper, raising NoMatchError if the page had nothing admissible.
    """

    client = client or make_client(config)
    result = select_wallpaper(client, config.search_policy(), resolution, logger=logger)

    if not result:
        logger.warning("No matching wallpaper found")
        raise NoMatchError(
            f"No wallpaper at {resolution} passed the exclusion filter"
            f" ({', '.join(sorted(config.exclude_similar_tags)) or 'none'})."
        )

    return result


def run(
    config: PluginConfig,
    resolution: TargetResolution,
    logger: logging.Logger,
    client: Optional[CatalogClient] = None,
    install: bool = True,
) -> Path:
    """
    Select, download and (unless install is False) set the wallpaper. Returns the saved file.
    """

    match = find(config, resolution, logger, client=client)

    file = image_handler.download_wallpaper(
        match.wallpaper, config.wallpaper_dir, timeout=config.timeout
    )
    logger.info("saved %s to %s", match.wallpaper.id, file)

    if install:
        wallpaper_handler.update_wallpaper(file, persist=config.persist)
        logger.info("wallpaper set to %s", file)

    return file
