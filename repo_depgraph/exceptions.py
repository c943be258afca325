"""Custom exceptions for repo-depgraph."""


class DepGraphError(Exception):
    """Base exception for all dependency-graph errors."""


class InvalidRepositoryError(DepGraphError):
    """Raised when a repository reference cannot be parsed or opened."""

    def __init__(self, reference: str, reason: str = "unrecognized repository reference"):
        self.reference = reference
        self.reason = reason
        super().__init__(f"{reason}: {reference!r}")


class SourceUnavailableError(DepGraphError):
    """Raised when the repository host cannot serve a listing, statistics or a file."""


class RegistryError(DepGraphError):
    """Raised when a registration would shadow or alter a built-in entry."""
