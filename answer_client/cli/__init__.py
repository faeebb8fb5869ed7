"""CLI application setup using Typer.

Provides the command-line interface for asking questions.
"""

from answer_client.cli.main import app

__all__ = ["app"]
