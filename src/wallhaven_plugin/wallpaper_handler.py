"""
Wallpaper Handler

This module sets the desktop background to a local image file.

Windows: the background is set through SystemParametersInfoW from user32. With persist=True
the change is also written to the user profile (SPIF_UPDATEINIFILE) so it survives logout;
otherwise it only lasts for the current session.

Gnome: settings for desktop backgrounds are defined under the schema org.gnome.desktop.background
and are changed by dropping into the gsettings CLI. More information on this schema can be found at:
https://github.com/GNOME/gsettings-desktop-schemas/blob/master/schemas/org.gnome.desktop.background.gschema.xml.in
gsettings always writes to the user's dconf database, so the persist flag has no effect there.
"""

import ctypes
import subprocess
import sys
from collections import OrderedDict
from pathlib import Path
from urllib.parse import unquote

from wallhaven_plugin.image_handler import InvalidImageError
from wallhaven_plugin.image_handler import validate_image


SPI_SETDESKWALLPAPER = 0x0014
SPIF_UPDATEINIFILE = 0x01
SPIF_SENDCHANGE = 0x02

GNOME_BACKGROUND_KEYS = ("picture-uri", "picture-uri-dark")


class WallpaperUpdateError(Exception):
    """
    Raised when an attempt to update the desktop background fails.
    """

    pass


def _set_windows_wallpaper(wallpaper_location: Path, persist: bool) -> None:

    flags = SPIF_SENDCHANGE
    if persist:
        flags |= SPIF_UPDATEINIFILE

    result = ctypes.windll.user32.SystemParametersInfoW(
        SPI_SETDESKWALLPAPER, 0, str(wallpaper_location), flags
    )
    if not result:
        raise WallpaperUpdateError(
            f"Could not set desktop background: {ctypes.WinError()}"
        )


def _set_gnome_wallpaper(wallpaper_location: Path) -> None:
    """
    subprocess.CalledProcessError is raised by run if a non-zero exit status is returned. This
    is the main way of telling whether gsettings failed. A missing gsettings binary shows up
    as FileNotFoundError.
    """

    for key in GNOME_BACKGROUND_KEYS:

        # ordered dict preserves the sequence of command arguments
        set_desktop_background = OrderedDict(
            [
                ("cmd", "gsettings"),
                ("subcmd", "set"),
                ("schema", "org.gnome.desktop.background"),
                ("key", key),
                ("value", wallpaper_location.as_uri()),
            ]
        )

        try:
            subprocess.run(
                list(set_desktop_background.values()),
                check=True,
                stdin=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdout=subprocess.PIPE,
            )

        except (subprocess.CalledProcessError, FileNotFoundError) as error:
            raise WallpaperUpdateError(f"Could not set desktop background: {error}")


def update_wallpaper(img_path: Path, persist: bool = True) -> None:
    """
    Update the background image to the one at img_path. Raise WallpaperUpdateError if issues
    are encountered during the attempt to update the background.
    """

    # a file: uri is accepted as well as a plain path
    if str(img_path).startswith("file:"):
        img_path = Path(unquote(str(img_path).removeprefix("file://").removeprefix("file:")))

    wallpaper_location = Path(img_path).expanduser().resolve().absolute()

    # the desktop settings are not validated by the OS, so catch bad paths here.
    if not wallpaper_location.exists() or not wallpaper_location.is_file():
        raise WallpaperUpdateError(
            f"Invalid path provided for image location: {img_path} does not exist."
        )

    try:
        validate_image(wallpaper_location)
    except InvalidImageError:
        raise WallpaperUpdateError(
            f"Invalid image type provided. {wallpaper_location.name} is not a valid"
            " image."
        )

    if sys.platform == "win32":
        _set_windows_wallpaper(wallpaper_location, persist)
    else:
        _set_gnome_wallpaper(wallpaper_location)
