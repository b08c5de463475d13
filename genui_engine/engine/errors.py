"""Error taxonomy for the generation core."""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for errors raised by genui_engine."""


class ConfigurationError(GenerationError):
    """A provider is unknown or its credential is missing.

    Raised at selection time, before any network call is attempted.
    """


class ToolArgumentsError(GenerationError, ValueError):
    """A tool invocation's argument buffer is not a JSON object."""
