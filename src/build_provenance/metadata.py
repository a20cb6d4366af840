"""Build metadata: version, commit hashes and build timestamp.

Values already present in the environment are reused so that reruns of a
build step (and builds from an sdist, which has no .git) produce the same
constants.
"""

import os
import tomllib
from dataclasses import dataclass
from datetime import datetime, timezone

from build_provenance.config import (
    FULL_HASH_VAR,
    SHORT_HASH_VAR,
    TIMESTAMP_VAR,
    read_expected_modified,
)
from build_provenance.errors import ProvenanceError
from build_provenance.patterns import parse_pattern_list
from build_provenance.runner import GitRunner, locate_project
from build_provenance.status import apply_dirty_suffix, resolve_commit, resolve_status
from build_provenance.utils import log

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class BuildMetadata:
    version: str
    git_short_hash: str
    build_timestamp: str
    git_hash: str | None = None

    def as_env(self) -> dict[str, str]:
        """Environment bindings for the surrounding build."""
        env = {SHORT_HASH_VAR: self.git_short_hash}
        if self.git_hash is not None:
            env[FULL_HASH_VAR] = self.git_hash
        env[TIMESTAMP_VAR] = self.build_timestamp
        return env

    def env_lines(self) -> list[str]:
        return [f"{key}={value}" for key, value in self.as_env().items()]

    def render_module(self) -> str:
        """Python source defining the metadata as module constants."""
        lines = [
            "# Generated by build-provenance. Do not edit.",
            "",
            f"VERSION = {self.version!r}",
            f"GIT_SHORT_HASH = {self.git_short_hash!r}",
        ]
        if self.git_hash is not None:
            lines.append(f"GIT_HASH = {self.git_hash!r}")
        lines.append(f"BUILD_TIMESTAMP = {self.build_timestamp!r}")
        return "\n".join(lines) + "\n"


def build_timestamp(now: datetime | None = None) -> str:
    """Return the build time as an ISO-8601 UTC string like '2026-02-13T08:30:00Z'."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def read_project_version(project_dir: str) -> str:
    """Read [project].version from the nearest pyproject.toml."""
    marker = locate_project(project_dir)
    with open(marker, "rb") as f:
        data = tomllib.load(f)
    project = data.get("project", {})
    version = project.get("version")
    if not version:
        if "version" in project.get("dynamic", []):
            raise ProvenanceError(
                f"{marker} declares a dynamic version; pass the version explicitly"
            )
        raise ProvenanceError(f"{marker} has no [project] version")
    return version


def collect_metadata(
    project_dir: str,
    version: str,
    full_hash: bool = False,
    environ=None,
    runner: GitRunner | None = None,
) -> BuildMetadata:
    """Compute build metadata, reusing any values already set in environ.

    Expected-modified patterns are validated before git is run. git status
    runs at most once even when both hash forms are needed.
    """
    if environ is None:
        environ = os.environ
    patterns = parse_pattern_list(read_expected_modified(environ))
    if runner is None:
        runner = GitRunner(project_dir)

    summary = None

    def _hash(var: str, full: bool) -> str:
        nonlocal summary
        if var in environ:
            log(f"Using {var} from the environment", style="dim")
            return environ[var]
        commit = resolve_commit(runner, full)
        if summary is None:
            summary = resolve_status(runner, patterns)
        return apply_dirty_suffix(commit, summary.dirty)

    short = _hash(SHORT_HASH_VAR, False)
    full = _hash(FULL_HASH_VAR, True) if full_hash else None

    if TIMESTAMP_VAR in environ:
        timestamp = environ[TIMESTAMP_VAR]
    else:
        timestamp = build_timestamp()

    return BuildMetadata(
        version=version,
        git_short_hash=short,
        build_timestamp=timestamp,
        git_hash=full,
    )


def set_metadata_env_vars(project_dir: str, version: str, full_hash: bool = False) -> BuildMetadata:
    """Collect metadata and publish it to this process's environment.

    Child processes of the build (compilers, code generators) inherit the values.
    """
    metadata = collect_metadata(project_dir, version, full_hash=full_hash)
    os.environ.update(metadata.as_env())
    return metadata


def write_module(metadata: BuildMetadata, path: str) -> None:
    """Write the constants module, creating parent directories as needed."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(metadata.render_module())
