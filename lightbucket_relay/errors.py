"""Exception hierarchy for lightbucket-relay."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for relay failures."""


class DecryptionError(RelayError):
    """Raised when a stored secret cannot be decrypted."""


class ThumbnailError(RelayError):
    """Raised when a capture cannot be turned into a preview image."""


class WorkerError(RelayError):
    """Raised when work is submitted to a delivery worker that is not running."""
