"""Adapter modules for external integrations."""

from .lightbucket import (
    DeliveryOutcome,
    DeliveryStatus,
    LightbucketClient,
)
from .thumbnail import ThumbnailEncoder

__all__ = [
    "DeliveryOutcome",
    "DeliveryStatus",
    "LightbucketClient",
    "ThumbnailEncoder",
]
