"""Commit hash resolution and dirty-tree classification.

The hash gets a '-modified' suffix when `git status` reports any tracked
change whose path is not covered by an expected-modified pattern.
Porcelain v1 format: https://git-scm.com/docs/git-status#_porcelain_format_version_1
"""

from dataclasses import dataclass

from build_provenance.config import (
    DIRTY_SUFFIX,
    FULL_HASH_LENGTHS,
    HEX_DIGITS,
    SHORT_HASH_LEN,
    STATUS_ARGS,
    STATUS_CODES,
)
from build_provenance.errors import OutputParseError
from build_provenance.patterns import IgnorePattern, matching_patterns
from build_provenance.utils import log


@dataclass(frozen=True)
class StatusEntry:
    index: str
    worktree: str
    path: str


@dataclass(frozen=True)
class StatusSummary:
    changed: tuple[StatusEntry, ...]
    expected: tuple[StatusEntry, ...]
    dirty: bool


def rev_parse_args(full: bool) -> list[str]:
    if full:
        return ["rev-parse", "HEAD"]
    return ["rev-parse", f"--short={SHORT_HASH_LEN}", "HEAD"]


def parse_commit_hash(text: str, full: bool = False) -> str:
    """Validate `git rev-parse` output and return the bare hash.

    Pure function. Short hashes need at least SHORT_HASH_LEN characters,
    full hashes must be exactly a SHA-1 or SHA-256 length.
    """
    commit = text.rstrip()
    if full:
        length_ok = len(commit) in FULL_HASH_LENGTHS
    else:
        length_ok = len(commit) >= SHORT_HASH_LEN
    if not length_ok or not all(c in HEX_DIGITS for c in commit):
        raise OutputParseError("bad commit id")
    return commit


def parse_status_record(record: str) -> StatusEntry:
    """Parse one 'XY PATH' porcelain record."""
    if record.startswith("?? "):
        raise OutputParseError("untracked file should have been omitted")
    if record.startswith("!! "):
        raise OutputParseError("ignored file should have been omitted")
    if (
        len(record) < 4
        or record[0] not in STATUS_CODES
        or record[1] not in STATUS_CODES
        or record[2] != " "
    ):
        raise OutputParseError("bad status")
    return StatusEntry(index=record[0], worktree=record[1], path=record[3:])


def parse_status_report(text: str) -> list[StatusEntry]:
    """Parse NUL-terminated `git status --porcelain -z` output.

    Pure function. An empty report yields no entries. Any malformed record
    fails the whole report.
    """
    records = text.split("\0")
    # Every record is NUL-terminated, so the final split item is empty.
    if records and records[-1] == "":
        records.pop()
    return [parse_status_record(record) for record in records]


def classify_status(entries: list[StatusEntry], patterns: list[IgnorePattern]) -> StatusSummary:
    """Split entries into expected and dirty-making changes.

    Entries matching any pattern are reported once and do not make the
    tree dirty; everything else does.
    """
    expected = []
    dirty = False
    for entry in entries:
        matched = matching_patterns(entry.path, patterns)
        if matched:
            expected.append(entry)
            log(
                f"Ignoring expected modification: {entry.path} "
                f"(matched {', '.join(p.pattern for p in matched)})",
                style="dim",
            )
        else:
            dirty = True
    return StatusSummary(changed=tuple(entries), expected=tuple(expected), dirty=dirty)


def apply_dirty_suffix(commit: str, dirty: bool) -> str:
    return commit + DIRTY_SUFFIX if dirty else commit


def resolve_commit(runner, full: bool = False) -> str:
    """Return the bare HEAD commit id from git."""
    return runner.run(rev_parse_args(full), lambda s: parse_commit_hash(s, full))


def resolve_status(runner, patterns: list[IgnorePattern]) -> StatusSummary:
    """Run git status and classify every reported path."""
    entries = runner.run(STATUS_ARGS, parse_status_report)
    return classify_status(entries, patterns)


def git_hash(runner, patterns: list[IgnorePattern], full: bool = False) -> str:
    """Return the HEAD commit id, suffixed with '-modified' if the tree is dirty."""
    commit = resolve_commit(runner, full)
    summary = resolve_status(runner, patterns)
    return apply_dirty_suffix(commit, summary.dirty)
