"""Run git against the project workspace and hand its output to a parser.

All git commands run from the workspace directory (the parent of the
nearest pyproject.toml), not the caller's cwd.
"""

import os
from collections.abc import Callable
from functools import cached_property
from typing import TypeVar

from build_provenance.config import PROJECT_MARKER
from build_provenance.errors import (
    CommandFailedError,
    GitSpawnError,
    OutputDecodeError,
    OutputParseError,
    ProjectNotFoundError,
    UnexpectedOutputError,
)
from build_provenance.utils import format_cmd_line, run_cmd

T = TypeVar("T")


def locate_project(start: str) -> str:
    """Find the nearest project root marker at or above start.

    Returns the absolute path of the marker file. Raises ProjectNotFoundError
    if no parent directory has one.
    """
    current = os.path.abspath(start)
    while True:
        candidate = os.path.join(current, PROJECT_MARKER)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            raise ProjectNotFoundError(
                f"Could not find {PROJECT_MARKER} in {os.path.abspath(start)} or any parent directory"
            )
        current = parent


def decode_stdout(args: list[str], returncode: int, stdout: bytes, stderr: bytes) -> str:
    """Turn a finished process into its UTF-8 stdout, or raise a descriptive error.

    The command line is only formatted when something went wrong.
    """
    if returncode != 0:
        raise CommandFailedError(format_cmd_line(args), returncode, stderr)
    try:
        return stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise OutputDecodeError(format_cmd_line(args), stdout, e) from e


class GitRunner:
    """Runs git in one project's workspace.

    The workspace lookup happens once per runner, on first use.
    """

    def __init__(self, project_dir: str, git: str = "git"):
        self.project_dir = project_dir
        self.git = git

    @cached_property
    def workspace_dir(self) -> str:
        return os.path.dirname(locate_project(self.project_dir))

    def command(self, args: list[str]) -> list[str]:
        return [self.git, "-C", self.workspace_dir, *args]

    def run(self, args: list[str], parse: Callable[[str], T]) -> T:
        """Run git with the given arguments and parse its stdout.

        Raises GitSpawnError, CommandFailedError, OutputDecodeError, or
        UnexpectedOutputError (when parse rejects the output).
        """
        cmd = self.command(args)
        try:
            result = run_cmd(cmd)
        except OSError as e:
            raise GitSpawnError(format_cmd_line(cmd), e) from e

        stdout = decode_stdout(cmd, result.returncode, result.stdout, result.stderr)
        try:
            return parse(stdout)
        except OutputParseError as e:
            raise UnexpectedOutputError(format_cmd_line(cmd), e.reason, stdout) from e
