"""Package-specific exception types."""

from __future__ import annotations


class DirectivesError(Exception):
    """Base class for md-directives errors."""


class DocumentError(DirectivesError):
    """Raised when a Markdown document cannot be read or written."""


class IncludeError(DirectivesError):
    """Raised when an include directive cannot be satisfied."""


class IncludeDepthError(IncludeError):
    """Raised when nested Markdown inclusion exceeds the configured depth.

    Args:
        limit: Maximum nesting depth permitted.
    """

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Include nesting exceeds the maximum depth of {self.limit}")


class IncludeCycleError(IncludeError):
    """Raised when a Markdown file includes itself, directly or transitively.

    Args:
        chain: Files on the include path, outermost first, ending with the
            file that closes the cycle.
    """

    def __init__(self, chain: tuple[str, ...]):
        self.chain = chain
        super().__init__("Include cycle detected: " + " -> ".join(self.chain))


class CommandTimeoutError(IncludeError):
    """Raised when an included command does not finish in time.

    Args:
        command: The shell command that was run.
        timeout: Timeout in seconds.
    """

    def __init__(self, command: str, timeout: float):
        self.command = command
        self.timeout = timeout
        super().__init__(f"Command timed out after {self.timeout} seconds: {self.command}")


class SectionError(DirectivesError):
    """Raised when a section directive names an unusable target file."""
