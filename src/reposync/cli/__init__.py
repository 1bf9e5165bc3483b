"""reposync command-line interface.

Functions:
    create_app: Build the cyclopts application.
    main: Console script entry point.
"""

from reposync.cli._app import create_app, main

__all__ = ["create_app", "main"]
