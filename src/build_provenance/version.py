"""Version information for build-provenance itself.

From a source checkout (including editable installs) the version also
reports the commit it runs from, using the same hash rules it applies to
other projects.
"""

import os

from build_provenance.config import PROJECT_MARKER
from build_provenance.errors import ProvenanceError
from build_provenance.runner import GitRunner
from build_provenance.status import git_hash

PACKAGE_VERSION = "0.1.0"

_REPO_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _is_source_checkout(repo_dir: str) -> bool:
    return os.path.isfile(os.path.join(repo_dir, PROJECT_MARKER)) and os.path.exists(
        os.path.join(repo_dir, ".git")
    )


def get_version() -> str:
    """Return version string like '0.1.0 (g3a7f2c1d9)' or just '0.1.0' outside a checkout."""
    if not _is_source_checkout(_REPO_DIR):
        return PACKAGE_VERSION
    try:
        commit = git_hash(GitRunner(_REPO_DIR), [])
    except ProvenanceError:
        return PACKAGE_VERSION
    return f"{PACKAGE_VERSION} (g{commit})"
