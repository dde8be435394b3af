"""Exception hierarchy for collaborator failures.

Insufficient data is never an error; calculators return degraded markers
instead. Everything here aborts the enclosing analysis cycle only.
"""

from __future__ import annotations


class MacroAnalysisError(Exception):
    """Base class for failures of an analysis cycle."""


class ConfigurationError(MacroAnalysisError):
    pass


class DataSourceError(MacroAnalysisError):
    """The upstream data service was unreachable or answered with an error."""

    def __init__(self, message: str, *, endpoint: str | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class NarrationError(MacroAnalysisError):
    """The narration model failed or returned unusable output."""


class StorageError(MacroAnalysisError):
    pass
