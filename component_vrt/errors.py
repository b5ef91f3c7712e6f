"""Exception types raised by the VRT engine."""

from __future__ import annotations


class VrtError(Exception):
    """Base class for all VRT errors."""


class ConfigurationError(VrtError):
    """Invalid configuration, e.g. two variants mapping to one snapshot file."""


class CaptureError(VrtError):
    """The rendering collaborator could not produce a screenshot."""


class ComparisonError(VrtError):
    """A baseline or current image could not be decoded."""


class LifecycleError(VrtError):
    """A filesystem operation failed during approve, update or clean."""
