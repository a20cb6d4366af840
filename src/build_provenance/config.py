"""Configuration constants for build provenance generation.

Environment variable names, the git output contract (hash lengths, the
porcelain status alphabet) and the root marker used to find the workspace.
"""

import os

# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------

# Outputs. A value already present in the environment is reused as-is.
SHORT_HASH_VAR = "PROVENANCE_GIT_SHORT_HASH"
FULL_HASH_VAR = "PROVENANCE_GIT_HASH"
TIMESTAMP_VAR = "PROVENANCE_BUILD_TIMESTAMP"

# Input: colon-separated globs of paths allowed to be modified.
EXPECTED_MODIFIED_VAR = "PROVENANCE_EXPECTED_MODIFIED"

# Optional log file that mirrors console output.
LOG_FILE_VAR = "PROVENANCE_LOG_FILE"


# ---------------------------------------------------------------------------
# Git output contract
# ---------------------------------------------------------------------------

DIRTY_SUFFIX = "-modified"

# At least 9 letters for backward compatibility with older build ids.
SHORT_HASH_LEN = 9

# SHA-1 and SHA-256 object formats.
FULL_HASH_LENGTHS = (40, 64)

HEX_DIGITS = frozenset("0123456789abcdef")

# Index/worktree codes allowed once untracked, ignored and renamed-pair
# records are excluded by the status options.
STATUS_CODES = frozenset(" MTADRCU")

STATUS_ARGS = [
    "status",
    "--untracked=no",           # untracked files (`??`) are not build inputs
    "--ignore-submodules=all",  # submodule changes are tracked by their own build
    "--no-renames",             # one path per record
    "--porcelain",              # machine-readable format
    "-z",                       # NUL-terminated records, paths unquoted
]


# ---------------------------------------------------------------------------
# Project layout
# ---------------------------------------------------------------------------

PROJECT_MARKER = "pyproject.toml"


def read_expected_modified(environ=None) -> str:
    """Return the raw expected-modified pattern list, or '' when unset."""
    if environ is None:
        environ = os.environ
    return environ.get(EXPECTED_MODIFIED_VAR, "")
