"""Tests for commit hash validation, porcelain parsing and dirty classification."""

import pytest

from build_provenance.errors import OutputParseError, UnexpectedOutputError
from build_provenance.patterns import parse_pattern_list
from build_provenance.status import (
    StatusEntry,
    apply_dirty_suffix,
    classify_status,
    git_hash,
    parse_commit_hash,
    parse_status_report,
)

FULL_HASH = "3a7f2c1d9e8b7a6f5e4d3c2b1a0f9e8d7c6b5a49"


# --- commit hash validation ---

def test_short_hash_prefix_of_full_hash_is_accepted():
    short = parse_commit_hash(FULL_HASH[:9] + "\n")
    assert short == FULL_HASH[:9]
    assert FULL_HASH.startswith(short)


def test_full_hash_is_returned_exactly():
    assert parse_commit_hash(FULL_HASH + "\n", full=True) == FULL_HASH


def test_sha256_full_hash_is_accepted():
    sha256 = "ab" * 32
    assert parse_commit_hash(sha256, full=True) == sha256


def test_longer_short_hash_is_accepted_unchanged():
    assert parse_commit_hash("abcdef0123456789\n") == "abcdef0123456789"


def test_short_hash_below_minimum_length_is_rejected():
    with pytest.raises(OutputParseError, match="bad commit id"):
        parse_commit_hash("abcdef01")


def test_truncated_full_hash_is_rejected():
    with pytest.raises(OutputParseError):
        parse_commit_hash(FULL_HASH[:39], full=True)


def test_uppercase_hex_is_rejected():
    with pytest.raises(OutputParseError):
        parse_commit_hash("ABCDEF0123")


def test_non_hex_output_is_rejected():
    with pytest.raises(OutputParseError):
        parse_commit_hash("fatal: not a git repository")


def test_empty_output_is_rejected():
    with pytest.raises(OutputParseError):
        parse_commit_hash("")


# --- porcelain parsing ---

def test_empty_report_has_no_entries():
    assert parse_status_report("") == []


def test_records_are_nul_terminated():
    entries = parse_status_report(" M src/lib.rs\0A  new.py\0MM both.txt\0")
    assert entries == [
        StatusEntry(" ", "M", "src/lib.rs"),
        StatusEntry("A", " ", "new.py"),
        StatusEntry("M", "M", "both.txt"),
    ]


def test_paths_with_spaces_and_newlines_are_kept_verbatim():
    entries = parse_status_report(" M dir with space/a\nb.txt\0")
    assert entries[0].path == "dir with space/a\nb.txt"


def test_untracked_record_is_a_contract_violation():
    with pytest.raises(OutputParseError, match="untracked"):
        parse_status_report("?? newfile.txt\0")


def test_ignored_record_is_a_contract_violation():
    with pytest.raises(OutputParseError, match="ignored"):
        parse_status_report("!! build/\0")


def test_code_outside_alphabet_is_rejected():
    with pytest.raises(OutputParseError, match="bad status"):
        parse_status_report("XY file.txt\0")


def test_missing_separator_space_is_rejected():
    with pytest.raises(OutputParseError, match="bad status"):
        parse_status_report(" Mxfile.txt\0")


def test_record_without_path_is_rejected():
    with pytest.raises(OutputParseError, match="bad status"):
        parse_status_report(" M \0")


def test_one_bad_record_fails_the_whole_report():
    with pytest.raises(OutputParseError):
        parse_status_report(" M ok.txt\0Z  bad.txt\0")


# --- classification ---

def test_no_entries_is_clean():
    summary = classify_status([], [])
    assert summary.dirty is False
    assert summary.changed == ()


def test_unignored_entry_is_dirty(monkeypatch):
    monkeypatch.setattr("build_provenance.status.log", lambda *args, **kwargs: None)
    summary = classify_status([StatusEntry(" ", "M", "src/lib.rs")], [])
    assert summary.dirty is True


def test_entries_matching_patterns_are_changed_but_not_dirty(monkeypatch):
    messages = []
    monkeypatch.setattr("build_provenance.status.log", lambda msg, **kwargs: messages.append(msg))
    entries = [StatusEntry(" ", "M", "uv.lock"), StatusEntry("M", " ", "docs/a/b.bak")]
    summary = classify_status(entries, parse_pattern_list("uv.lock:**/*.bak"))
    assert summary.dirty is False
    assert len(summary.changed) == 2
    assert len(summary.expected) == 2
    assert len(messages) == 2
    assert "uv.lock" in messages[0]


def test_entry_matching_several_patterns_is_exempted_once(monkeypatch):
    messages = []
    monkeypatch.setattr("build_provenance.status.log", lambda msg, **kwargs: messages.append(msg))
    entries = [StatusEntry(" ", "M", "uv.lock")]
    summary = classify_status(entries, parse_pattern_list("uv.lock:*.lock:**"))
    assert summary.expected == (entries[0],)
    assert len(messages) == 1


def test_one_unmatched_entry_among_ignored_makes_tree_dirty(monkeypatch):
    monkeypatch.setattr("build_provenance.status.log", lambda *args, **kwargs: None)
    entries = [StatusEntry(" ", "M", "uv.lock"), StatusEntry(" ", "M", "src/app.py")]
    summary = classify_status(entries, parse_pattern_list("uv.lock"))
    assert summary.dirty is True
    assert summary.expected == (entries[0],)


def test_nested_path_is_not_exempted_by_non_recursive_pattern(monkeypatch):
    monkeypatch.setattr("build_provenance.status.log", lambda *args, **kwargs: None)
    summary = classify_status([StatusEntry(" ", "M", "foo/bar.bak")], parse_pattern_list("*.bak"))
    assert summary.dirty is True


def test_dirty_suffix_is_applied_only_when_dirty():
    assert apply_dirty_suffix("abcdef012", False) == "abcdef012"
    assert apply_dirty_suffix("abcdef012", True) == "abcdef012-modified"


# --- git_hash end to end (fake git) ---

def test_clean_tree_returns_bare_hash(fake_git):
    runner, calls = fake_git({
        "rev-parse --short=9 HEAD": "abcdef0123456789\n",
        "status --untracked=no --ignore-submodules=all --no-renames --porcelain -z": "",
    })
    assert git_hash(runner, []) == "abcdef0123456789"
    assert calls == [
        "rev-parse --short=9 HEAD",
        "status --untracked=no --ignore-submodules=all --no-renames --porcelain -z",
    ]


def test_modified_file_appends_suffix_once(fake_git):
    runner, _ = fake_git({
        "rev-parse --short=9 HEAD": "abcdef0123456789\n",
        "status --untracked=no --ignore-submodules=all --no-renames --porcelain -z": " M src/lib.rs\0 M README.md\0",
    })
    assert git_hash(runner, []) == "abcdef0123456789-modified"


def test_full_hash_request_uses_plain_rev_parse(fake_git):
    runner, calls = fake_git({
        "rev-parse HEAD": FULL_HASH + "\n",
        "status --untracked=no --ignore-submodules=all --no-renames --porcelain -z": "",
    })
    assert git_hash(runner, [], full=True) == FULL_HASH
    assert calls[0] == "rev-parse HEAD"


def test_only_expected_modifications_stay_clean(fake_git):
    runner, _ = fake_git({
        "rev-parse --short=9 HEAD": "abcdef012\n",
        "status --untracked=no --ignore-submodules=all --no-renames --porcelain -z": " M uv.lock\0",
    })
    assert git_hash(runner, parse_pattern_list("uv.lock")) == "abcdef012"


def test_untracked_record_aborts_with_command_and_output(fake_git):
    runner, _ = fake_git({
        "rev-parse --short=9 HEAD": "abcdef012\n",
        "status --untracked=no --ignore-submodules=all --no-renames --porcelain -z": "?? newfile.txt\0",
    })
    with pytest.raises(UnexpectedOutputError) as excinfo:
        git_hash(runner, [])
    message = str(excinfo.value)
    assert "git -C" in message
    assert "status --untracked=no" in message
    assert "untracked file should have been omitted" in message
    assert "?? newfile.txt\\x00" in message


def test_bad_commit_id_aborts_before_status(fake_git):
    runner, calls = fake_git({
        "rev-parse --short=9 HEAD": "not-a-hash\n",
    })
    with pytest.raises(UnexpectedOutputError, match="bad commit id"):
        git_hash(runner, [])
    assert calls == ["rev-parse --short=9 HEAD"]


def test_repeated_classification_is_deterministic(fake_git):
    runner, _ = fake_git({
        "rev-parse --short=9 HEAD": "abcdef012\n",
        "status --untracked=no --ignore-submodules=all --no-renames --porcelain -z": " M a.txt\0 M b.lock\0",
    })
    patterns = parse_pattern_list("*.lock")
    assert git_hash(runner, patterns) == git_hash(runner, patterns) == "abcdef012-modified"
