"""Main entry point when executing flashai as a package.

This allows running the package using python -m flashai.
"""

from flashai.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
