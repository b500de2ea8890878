"""Custom exceptions for retypist."""


class RetypistError(Exception):
    """Base exception for all retypist errors."""


class ConfigError(RetypistError):
    """Invalid project root or run configuration."""


class SourceError(RetypistError):
    """A source file could not be read or written."""


class ParseError(RetypistError):
    """A source file is not valid Rust syntax."""


class SpanError(RetypistError):
    """A span does not fit inside the document it was applied to."""


class DiscoveryExhaustedError(RetypistError):
    """Sampling gave up without filling a batch."""


class LaunchError(RetypistError):
    """A collaborator process could not be spawned."""

    def __init__(self, argv: list[str], reason: Exception | str):
        self.argv = list(argv)
        self.reason = reason
        super().__init__(f"failed to spawn {' '.join(self.argv)}: {reason}")


class TerminateError(RetypistError):
    """A child process group could not be terminated."""


class Cancelled(RetypistError):
    """The run was interrupted by the operator."""

    def __init__(self, message: str = "interrupted"):
        super().__init__(message)


class VcsError(RetypistError):
    """The working tree could not be restored to the last commit."""
