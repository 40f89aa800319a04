"""
Image Handler

Download the selected wallpaper and make sure what we saved is actually an image.

Downloading goes straight to the image url of the chosen wallpaper with requests. The bytes are
checked with Pillow (header only, nothing is decoded in full) and written verbatim to a file named
after the wallpaper id. The write goes to a temporary sibling file first and is then moved into
place, so the final path only ever holds a complete image.
"""

import io
import os
from contextlib import suppress
from pathlib import Path
from urllib.parse import urlparse
from typing import Optional

from PIL import Image, UnidentifiedImageError
import requests

from wallhaven_plugin.wallhaven_handler import CandidateSummary
from wallhaven_plugin.wallhaven_handler import DecodeError
from wallhaven_plugin.wallhaven_handler import TransportError


class InvalidImageError(Exception):
    """
    Raised when a provided file is not an image. Wrapper around the PIL
    UnidentifiedImageError for custom error messaging.
    """

    pass


class PersistenceError(Exception):
    """
    Raised when the downloaded image can't be written to the local filesystem.
    """

    pass


def validate_image(input) -> str:
    """
    Determine whether input is a valid image. PIL open accepts a Path object, string, or file object.
    PIL reads the content header to determine file type but doesn't load the pixel data, so this is
    cheap enough to use as a validation method. Returns the image format, e.g. "JPEG".
    """

    try:
        with Image.open(input) as image:

            return image.format

    except UnidentifiedImageError:
        raise InvalidImageError(f"Input {str(input)} does not appear to be an image.")

    except FileNotFoundError:
        raise InvalidImageError(f"Input {str(input)} could not be found.")


def wallpaper_file_name(wallpaper: CandidateSummary, image_format: str) -> str:
    """
    The file is named by the wallpaper id. The extension comes from the download url,
    or from the detected image format if the url has none.
    """

    suffix = Path(urlparse(wallpaper.path).path).suffix
    if not suffix:
        suffix = f".{image_format.lower()}"
    return f"{wallpaper.id}{suffix}"


def download_wallpaper(
    wallpaper: CandidateSummary, dest_dir: Path, timeout: Optional[float] = None
) -> Path:
    """
    Download the image for wallpaper into dest_dir and return the path it was saved at.
    An existing file with the same name is replaced.

    Raises TransportError if the request fails, DecodeError if the response is not an image,
    PersistenceError if the file can't be written.
    """

    url = wallpaper.path

    try:
        r = requests.get(url, timeout=timeout)

    except requests.exceptions.RequestException as error:
        raise TransportError(str(error))

    # successful request but received a bad response from the server.
    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError:
        raise TransportError(
            f"Download error: something went wrong trying to access {url} (status code {r.status_code})",
            status_code=r.status_code,
        )

    # successful request but did not get back image data as the response.
    try:
        image_format = validate_image(io.BytesIO(r.content))
    except InvalidImageError:
        raise DecodeError(
            f"Download error: the target resource at {url} does not appear to be an image."
        )

    dest_dir = Path(dest_dir).expanduser().resolve()
    destination_path = dest_dir / wallpaper_file_name(wallpaper, image_format)
    partial_path = destination_path.with_name(f"{destination_path.name}.part")

    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        partial_path.write_bytes(r.content)
        os.replace(partial_path, destination_path)

    except OSError as error:
        with suppress(OSError):
            partial_path.unlink()
        raise PersistenceError(
            f"Could not save wallpaper to {destination_path}: {error}"
        )

    return destination_path
