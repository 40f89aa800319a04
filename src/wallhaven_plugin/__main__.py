"""
__main__.py

This file adds support for running wallhaven-plugin as a python module instead of invoking
the "wallhaven-plugin" command line entrypoint:

    $ python -m wallhaven_plugin --dry-run
"""


from wallhaven_plugin.cli import main


if __name__ == "__main__":
    main()
