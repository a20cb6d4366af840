"""Exceptions for build provenance generation.

Every error here is fatal to metadata generation: there are no retries and
no fallback values. Messages carry the exact command line and the raw
(escaped) output so a failure can be diagnosed without reproducing it.
"""

_NAMED_ESCAPES = {
    0x09: "\\t",
    0x0A: "\\n",
    0x0D: "\\r",
    0x22: '\\"',
    0x27: "\\'",
    0x5C: "\\\\",
}


def escape_bytes(data: bytes) -> str:
    """Render raw bytes as printable ASCII.

    Printable ASCII passes through; tab, newline, carriage return, quotes
    and backslash get their usual escapes; everything else becomes \\xNN.
    """
    parts = []
    for byte in data:
        if byte in _NAMED_ESCAPES:
            parts.append(_NAMED_ESCAPES[byte])
        elif 0x20 <= byte < 0x7F:
            parts.append(chr(byte))
        else:
            parts.append(f"\\x{byte:02x}")
    return "".join(parts)


def describe_returncode(returncode: int) -> str:
    """Describe a process outcome; subprocess reports death by signal N as -N."""
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status: {returncode}"


class ProvenanceError(Exception):
    """Base exception for all build provenance errors."""
    pass


class ConfigError(ProvenanceError):
    """Invalid user-supplied configuration."""
    pass


class PatternError(ConfigError):
    """An expected-modified glob pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")


class ProjectNotFoundError(ProvenanceError):
    """No project root marker above the starting directory."""
    pass


class OutputParseError(ProvenanceError):
    """A parser rejected command output.

    Raised by pure parsing functions that do not know which command produced
    the text; the runner re-raises it as UnexpectedOutputError.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class GitError(ProvenanceError):
    """Running git failed or produced unusable output."""
    pass


class GitSpawnError(GitError):
    """The git process could not be started."""

    def __init__(self, cmd_line: str, cause: OSError):
        self.cmd_line = cmd_line
        super().__init__(f"Failed to run `{cmd_line}`: {cause}")


class CommandFailedError(GitError):
    """git exited with a non-zero status."""

    def __init__(self, cmd_line: str, returncode: int, stderr: bytes):
        self.cmd_line = cmd_line
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"`{cmd_line}` failed: {describe_returncode(returncode)}\n\n{escape_bytes(stderr)}"
        )


class OutputDecodeError(GitError):
    """git wrote standard output that is not valid UTF-8."""

    def __init__(self, cmd_line: str, stdout: bytes, cause: UnicodeDecodeError):
        self.cmd_line = cmd_line
        self.stdout = stdout
        super().__init__(
            f"Unexpected output from `{cmd_line}`: {cause}\n\n{escape_bytes(stdout)}"
        )


class UnexpectedOutputError(GitError):
    """git succeeded but its output did not have the expected shape."""

    def __init__(self, cmd_line: str, reason: str, output: str):
        self.cmd_line = cmd_line
        self.reason = reason
        self.output = output
        super().__init__(
            f"Unexpected output from `{cmd_line}`: {reason}\n\n"
            f"{escape_bytes(output.encode('utf-8'))}"
        )
