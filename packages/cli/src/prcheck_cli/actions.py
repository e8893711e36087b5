"""GitHub Actions workflow commands: step outputs and log annotations.

Written with click.echo rather than the rich console: the runner parses these
lines verbatim, so they must not be wrapped or styled.
"""

from __future__ import annotations

import hashlib
import os

import click


def set_output(name: str, value) -> None:
    """Set a step output via $GITHUB_OUTPUT, or the legacy ::set-output command outside Actions."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    text = str(value).lower() if isinstance(value, bool) else str(value)
    if output_file:
        delimiter = f"EOF_{hashlib.sha256(f'{name}:{text}'.encode()).hexdigest()[:16]}"
        with open(output_file, "a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n")
            f.write(f"{text}\n")
            f.write(f"{delimiter}\n")
    else:
        escaped = text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        click.echo(f"::set-output name={name}::{escaped}")


def escape_comment(comment: str) -> str:
    """Flatten a Markdown comment to one line, as downstream workflow steps expect it."""
    return comment.replace("\n", "\\n").replace('"', '\\"')


def warning(message: str) -> None:
    click.echo(f"::warning::{message}")


def error(message: str) -> None:
    click.echo(f"::error::{message}")
