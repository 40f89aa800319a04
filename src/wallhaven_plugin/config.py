"""
wallhaven-plugin Configuration Management

This file handles generating and loading the configuration file. PluginConfig should be loaded
once at startup, before any request is made, and passed explicitly to whatever needs it. Raise a
ConfigurationError for any issue that arises in processing or retrieving these variables.

The configuration file is "wallhaven-plugin.json" inside the app directory, ~/wallhaven-plugin by
default. Set WALLHAVEN_PLUGIN_DIR to use another directory. The run log (main.log) lives in the
same place.

Example:

    {
        "q": "mountains",
        "exclude_similar_tags": ["anime", "neon"],
        "resolution_filter": "atleast",
        "persist": true
    }
"""

import json
import os
import tempfile
from dataclasses import dataclass, field, fields
from dataclasses import asdict
from pathlib import Path, PurePath
from typing import Optional

from wallhaven_plugin.matcher import SearchPolicy
from wallhaven_plugin.wallhaven_handler import RESOLUTION_FILTERS


CONFIG_FILE_NAME = "wallhaven-plugin.json"

# accepted for files written for earlier versions of the plugin
KEY_ALIASES = {"excludeSimilarTags": "exclude_similar_tags"}


class ConfigurationError(Exception):
    """Raise when an issue occurs with handling the plugin configuration."""

    pass


class PathEncoder(json.JSONEncoder):
    """
    custom encoder adds support for serializing pathlib objects as strings
    """

    def default(self, o):
        if isinstance(o, PurePath):
            return str(o)

        else:
            return json.JSONEncoder.default(self, o)


def default_app_dir() -> Path:
    try:
        return Path(os.environ["WALLHAVEN_PLUGIN_DIR"]).expanduser().resolve()

    except KeyError:
        return Path("~/wallhaven-plugin").expanduser().resolve()


@dataclass
class PluginConfig:
    """
    Configuration for one run. Created from the flat JSON object in the config file by
    passing its keys as keyword arguments, so application code never touches dictionary keys.
    """

    q: Optional[str] = None
    exclude_similar_tags: list[str] = field(default_factory=list)
    resolution_filter: str = "atleast"
    persist: bool = True
    api_key: Optional[str] = None
    timeout: Optional[float] = 30
    wallpaper_dir: Path = Path(tempfile.gettempdir()) / "wallhaven"

    def __post_init__(self):
        """
        Validate values read from JSON and turn the wallpaper directory string back into a Path.
        """

        if self.q is not None and not isinstance(self.q, str):
            raise ConfigurationError("'q' must be a string or null.")

        if not isinstance(self.exclude_similar_tags, list) or not all(
            isinstance(tag, str) for tag in self.exclude_similar_tags
        ):
            raise ConfigurationError("'exclude_similar_tags' must be a list of strings.")

        if (
            not isinstance(self.resolution_filter, str)
            or self.resolution_filter not in RESOLUTION_FILTERS
        ):
            raise ConfigurationError(
                f"'resolution_filter' must be one of {sorted(RESOLUTION_FILTERS)}, got '{self.resolution_filter}'."
            )

        if not isinstance(self.persist, bool):
            raise ConfigurationError("'persist' must be true or false.")

        if self.api_key is not None and not isinstance(self.api_key, str):
            raise ConfigurationError("'api_key' must be a string or null.")

        if self.timeout is not None and (
            isinstance(self.timeout, bool)
            or not isinstance(self.timeout, (int, float))
            or self.timeout <= 0
        ):
            raise ConfigurationError("'timeout' must be a positive number or null.")

        try:
            self.wallpaper_dir = Path(self.wallpaper_dir).expanduser()
        except TypeError:
            raise ConfigurationError("'wallpaper_dir' must be a path string.")

    @classmethod
    def from_json(cls, from_json) -> "PluginConfig":

        if not isinstance(from_json, dict):
            raise ConfigurationError("The config file must contain a JSON object.")

        values = {}
        for key, value in from_json.items():
            name = KEY_ALIASES.get(key, key)
            if name in values:
                raise ConfigurationError(
                    f"Config key '{key}' duplicates '{name}', use only one of them."
                )
            values[name] = value

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}.")

        return cls(**values)

    def search_policy(self) -> SearchPolicy:
        return SearchPolicy(query=self.q, excluded=frozenset(self.exclude_similar_tags))

    def generate_config_json(self, app_dir: Path) -> Path:
        """
        Write the PluginConfig to file, serializing to JSON. Returns filepath of written
        config file. Overwrites any existing config file.
        """

        try:
            to_json = json.dumps(asdict(self), sort_keys=True, indent=4, cls=PathEncoder)

        except TypeError as error:
            raise ConfigurationError(
                f"There was an error trying to serialize config data to JSON: {error}"
            )

        try:
            app_dir.mkdir(parents=True, exist_ok=True)

            dest_file = app_dir / CONFIG_FILE_NAME
            with open(dest_file, "w", encoding="utf-8") as file:

                file.write(to_json)

        except OSError as error:
            raise ConfigurationError(
                f"There was an error saving the configuration file: {error}."
            )

        return dest_file


def init(app_dir: Path = None) -> PluginConfig:
    """
    Load the config file, or write one with default values if there is none yet.
    """

    app_dir = app_dir or default_app_dir()

    try:
        return load_config(app_dir)

    except FileNotFoundError:

        config = PluginConfig()
        config.generate_config_json(app_dir)
        return config


def load_config(app_dir: Path = None) -> PluginConfig:
    """
    Load wallhaven-plugin.json from app_dir (default: WALLHAVEN_PLUGIN_DIR or ~/wallhaven-plugin).
    FileNotFoundError is passed through so init() can create a default file; every other
    problem is a ConfigurationError.
    """

    config_src = (app_dir or default_app_dir()) / CONFIG_FILE_NAME

    try:
        with config_src.open("r", encoding="utf-8") as file:

            from_json = json.loads(file.read())

    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise ConfigurationError(f"There was an issue reading the config: {error}")

    except FileNotFoundError:
        raise

    except OSError as error:
        raise ConfigurationError(f"There was an issue opening the config: {error}")

    return PluginConfig.from_json(from_json)
