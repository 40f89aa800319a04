"""
wallhaven-plugin Decorators

Decorators shared by CLI commands. catch_errors is the single place where errors raised
anywhere in a run are turned into a message and an exit code.
"""

from sys import exit
from functools import wraps

from wallhaven_plugin.cli_utils.console import fail
from wallhaven_plugin.cli_utils.console import warn
from wallhaven_plugin.matcher import NoMatchError


def catch_errors(func):
    """
    Catch and format errors with the "fail" console template and gracefully
    exit the application with an error code. Not finding a matching wallpaper
    is reported as a warning and exits cleanly.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NoMatchError as error:
            warn(str(error))
            exit(0)
        except Exception as error:
            fail(str(error))
            exit(1)

    return wrapper
