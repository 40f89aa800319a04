"""
Display resolution discovery.

Find the pixel dimensions of the primary display. On Windows these come from GetSystemMetrics
(after opting into DPI awareness so scaling doesn't shrink the numbers). Elsewhere we parse the
output of `xrandr --current` and take the output marked "primary", falling back to the first
connected output that has an active mode.
"""

import ctypes
import re
import subprocess
import sys
from contextlib import suppress

from wallhaven_plugin.wallhaven_handler import TargetResolution


SM_CXSCREEN = 0
SM_CYSCREEN = 1

# e.g. "HDMI-1 connected primary 3840x2160+0+0 (normal left inverted ...) 600mm x 340mm"
XRANDR_OUTPUT = re.compile(
    r"^(?P<name>\S+) connected (?P<primary>primary )?(?P<width>\d+)x(?P<height>\d+)\+\d+\+\d+",
    re.MULTILINE,
)


class DisplayError(Exception):
    """Raised when the primary display resolution can't be determined."""

    pass


def parse_xrandr(text: str) -> TargetResolution:

    outputs = list(XRANDR_OUTPUT.finditer(text))
    if not outputs:
        raise DisplayError("xrandr did not report any connected display.")

    primary = next((m for m in outputs if m.group("primary")), outputs[0])
    return TargetResolution(int(primary.group("width")), int(primary.group("height")))


def _windows_resolution() -> TargetResolution:

    user32 = ctypes.windll.user32
    with suppress(AttributeError):
        user32.SetProcessDPIAware()

    width = user32.GetSystemMetrics(SM_CXSCREEN)
    height = user32.GetSystemMetrics(SM_CYSCREEN)
    if not width or not height:
        raise DisplayError("Unable to find monitor.")

    return TargetResolution(int(width), int(height))


def _xrandr_resolution() -> TargetResolution:

    try:
        process = subprocess.run(
            ["xrandr", "--current"],
            text=True,
            check=True,
            stdin=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )

    except (subprocess.CalledProcessError, FileNotFoundError) as error:
        raise DisplayError(
            f"Could not query display resolution with xrandr: {error}. "
            "Pass --resolution WIDTH HEIGHT instead."
        )

    return parse_xrandr(process.stdout)


def primary_resolution() -> TargetResolution:
    """
    Return the resolution of the primary display.
    """

    if sys.platform == "win32":
        return _windows_resolution()

    return _xrandr_resolution()
