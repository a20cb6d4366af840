"""CLI app definition: compute build metadata and emit it for a build step."""

from typing import Annotated

import typer
from rich.console import Console

from build_provenance.config import read_expected_modified
from build_provenance.errors import ProvenanceError
from build_provenance.metadata import (
    BuildMetadata,
    collect_metadata,
    read_project_version,
    write_module,
)
from build_provenance.patterns import parse_pattern_list
from build_provenance.runner import GitRunner
from build_provenance.status import git_hash
from build_provenance.utils import log
from build_provenance.version import get_version

out = Console()

ProjectOption = Annotated[
    str,
    typer.Option("--project", "-p", help="Directory inside the project (nearest pyproject.toml wins)."),
]
PackageVersionOption = Annotated[
    str,
    typer.Option("--package-version", help="Version to embed. Defaults to [project].version."),
]
FullHashOption = Annotated[
    bool,
    typer.Option("--full-hash", help="Also compute the full commit hash."),
]


def _version_callback(value: bool):
    if value:
        out.print(get_version())
        raise typer.Exit()


def _collect(project: str, package_version: str, full_hash: bool) -> BuildMetadata:
    """Collect metadata, turning provenance errors into a red message and exit code 1."""
    try:
        version = package_version or read_project_version(project)
        return collect_metadata(project, version, full_hash=full_hash)
    except ProvenanceError as e:
        log(str(e), style="red")
        raise typer.Exit(code=1)


app = typer.Typer(
    help="Compute build provenance (version, commit hash, dirty state, timestamp) for a build step.",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit.", callback=_version_callback, is_eager=True),
    ] = False,
) -> None:
    """Build provenance metadata for Python builds."""


# ============================================
# Commands
# ============================================


@app.command()
def show(
    project: ProjectOption = ".",
    package_version: PackageVersionOption = "",
    full_hash: FullHashOption = False,
) -> None:
    """Show the metadata a build would embed."""
    metadata = _collect(project, package_version, full_hash)
    out.print(f"Version:         {metadata.version}", highlight=False)
    out.print(f"Git short hash:  {metadata.git_short_hash}", highlight=False)
    if metadata.git_hash is not None:
        out.print(f"Git hash:        {metadata.git_hash}", highlight=False)
    out.print(f"Build timestamp: {metadata.build_timestamp}", highlight=False)


@app.command()
def env(
    project: ProjectOption = ".",
    package_version: PackageVersionOption = "",
    full_hash: FullHashOption = False,
) -> None:
    """Print KEY=VALUE lines, e.g. for >> "$GITHUB_ENV"."""
    metadata = _collect(project, package_version, full_hash)
    for line in metadata.env_lines():
        typer.echo(line)


@app.command()
def write(
    path: Annotated[str, typer.Argument(help="Python module to generate, e.g. src/pkg/_build_info.py.")],
    project: ProjectOption = ".",
    package_version: PackageVersionOption = "",
    full_hash: FullHashOption = False,
) -> None:
    """Write the metadata as a Python constants module."""
    metadata = _collect(project, package_version, full_hash)
    write_module(metadata, path)
    log(f"Wrote {path}", style="green")


@app.command("hash")
def hash_cmd(
    project: ProjectOption = ".",
    full: Annotated[bool, typer.Option("--full", help="Print the full commit hash.")] = False,
) -> None:
    """Print the commit hash, suffixed with -modified if the tree is dirty."""
    try:
        patterns = parse_pattern_list(read_expected_modified())
        typer.echo(git_hash(GitRunner(project), patterns, full=full))
    except ProvenanceError as e:
        log(str(e), style="red")
        raise typer.Exit(code=1)
