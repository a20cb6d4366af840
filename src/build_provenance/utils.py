"""Core utility functions: logging, command execution, command-line display."""

import os
import shlex
import subprocess

from rich.console import Console

from build_provenance.config import LOG_FILE_VAR

# stderr, so `build-provenance env` output can be redirected cleanly.
console = Console(stderr=True)


def _write_log_entry(log_file: str, text: str) -> None:
    """Append text to a log file. Never raises."""
    try:
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(text)
    except Exception:
        pass


def log(message: str, style: str = "") -> None:
    """Write a message to the console (with optional style) and the log file, if one is set."""
    if style:
        console.print(message, style=style, markup=False, highlight=False)
    else:
        console.print(message, markup=False, highlight=False)

    log_file = os.environ.get(LOG_FILE_VAR, "")
    if log_file:
        _write_log_entry(log_file, message + "\n")


def format_cmd_line(args: list[str]) -> str:
    """Render an argument list as a shell-like command line for error messages.

    Pure function. Only called on failure paths.
    """
    return shlex.join(args)


def run_cmd(args: list[str], cwd: str | None = None) -> subprocess.CompletedProcess:
    """Run a command to completion, capturing stdout and stderr as bytes.

    No timeout: the surrounding build owns cancellation. Raises OSError when
    the executable cannot be started.
    """
    return subprocess.run(
        args,
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
