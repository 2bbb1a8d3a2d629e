"""
Exception hierarchy for ROM Tracker.

Everything derives from RomTrackerError so hosts can catch broadly or
specifically depending on context.
"""


class RomTrackerError(Exception):
    """Base class for all ROM Tracker exceptions."""


class CatalogParseError(RomTrackerError, ValueError):
    """
    Raised when a catalog document cannot be turned into entries.

    Attributes
    ----------
    file_name : Name of the offending document, as supplied by the host.
    reason    : Human-readable cause.
    """

    def __init__(self, file_name: str, reason: str) -> None:
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"{file_name}: {reason}")


class EmptyCatalogError(CatalogParseError):
    """Raised when a well-formed document holds no usable game entries."""

    def __init__(self, file_name: str) -> None:
        super().__init__(file_name, "No game or machine entries with a name")


class MatchCancelledError(RomTrackerError):
    """Raised when the outcome of a cancelled or unfinished pass is requested."""
