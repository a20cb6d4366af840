"""Expected-modified glob patterns.

Patterns are matched against the full repository-relative path reported by
git status, one path component at a time:

    ?        one character other than '/'
    *        any run of characters other than '/'
    [abc]    one character from the class, '[!abc]' negates; never '/'
    **       as a whole component, zero or more components

So '*.bak' matches 'bar.bak' but not 'foo/bar.bak'; '**/*.bak' matches both.
"""

import re
from dataclasses import dataclass, field

from build_provenance.errors import PatternError

_RECURSIVE = "**"


@dataclass(frozen=True)
class IgnorePattern:
    pattern: str
    regex: re.Pattern = field(repr=False, compare=False)

    def matches(self, path: str) -> bool:
        return self.regex.fullmatch(path) is not None


def _translate_class(body: str, negate: bool) -> str:
    """Translate the inside of a [...] class to a regex class that never matches '/'."""
    out = []
    for i, ch in enumerate(body):
        if ch == "-" and 0 < i < len(body) - 1:
            out.append("-")
        else:
            out.append(re.escape(ch))
    inner = "".join(out)
    if negate:
        return f"[^/{inner}]"
    return f"(?!/)[{inner}]"


def _translate_component(pattern: str, component: str) -> str:
    """Translate one path component (no '/') to a regex fragment."""
    if _RECURSIVE in component:
        raise PatternError(pattern, "recursive wildcards must form a single path component")

    out = []
    i = 0
    n = len(component)
    while i < n:
        ch = component[i]
        if ch == "?":
            out.append("[^/]")
            i += 1
        elif ch == "*":
            out.append("[^/]*")
            i += 1
        elif ch == "[":
            j = i + 1
            negate = j < n and component[j] == "!"
            if negate:
                j += 1
            # A ']' right after the opening bracket is a literal member.
            end = component.find("]", j + 1)
            if j >= n or end == -1:
                raise PatternError(pattern, "unterminated character class")
            out.append(_translate_class(component[j:end], negate))
            i = end + 1
        else:
            out.append(re.escape(ch))
            i += 1
    return "".join(out)


def _check_classes(pattern: str) -> None:
    """Reject character classes that contain '/', before the pattern is split into components."""
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and pattern[j] == "!":
            j += 1
        end = pattern.find("]", j + 1)
        if end == -1:
            # Left for _translate_component to report as unterminated.
            return
        if "/" in pattern[j:end]:
            raise PatternError(pattern, "character class cannot contain '/'")
        i = end + 1


def translate_pattern(pattern: str) -> str:
    """Translate a glob pattern into an (unanchored) regex source string.

    Pure function. Raises PatternError for malformed patterns.
    """
    if not pattern:
        raise PatternError(pattern, "empty pattern")
    _check_classes(pattern)

    components = pattern.split("/")
    last = len(components) - 1
    parts = []
    for index, component in enumerate(components):
        # git status paths are repository-relative: no leading, trailing or doubled '/'.
        if not component:
            raise PatternError(pattern, "empty path component")
        if component == _RECURSIVE:
            # Trailing '**' swallows the rest of the path; elsewhere it
            # stands for zero or more leading directories.
            parts.append(".*" if index == last else "(?:.*/)?")
            continue
        parts.append(_translate_component(pattern, component))
        if index != last:
            parts.append("/")
    return "".join(parts)


def compile_pattern(pattern: str) -> IgnorePattern:
    """Compile a single glob pattern."""
    source = translate_pattern(pattern)
    try:
        regex = re.compile(source, re.DOTALL)
    except re.error as e:
        raise PatternError(pattern, str(e)) from e
    return IgnorePattern(pattern, regex)


def parse_pattern_list(value: str | None) -> list[IgnorePattern]:
    """Compile a colon-separated pattern list.

    An empty or missing value means no patterns. An empty element between
    colons is a configuration error rather than a match-nothing pattern.
    """
    if not value:
        return []
    patterns = []
    for item in value.split(":"):
        if not item:
            raise PatternError(value, "empty pattern in colon-separated list")
        patterns.append(compile_pattern(item))
    return patterns


def matching_patterns(path: str, patterns: list[IgnorePattern]) -> list[IgnorePattern]:
    """Return the patterns that match path, in configuration order."""
    return [p for p in patterns if p.matches(path)]
