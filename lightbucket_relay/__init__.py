"""Forward completed light frames from an acquisition host to Lightbucket."""

from .adapters import DeliveryOutcome, DeliveryStatus, LightbucketClient, ThumbnailEncoder
from .app import create_trigger
from .credentials import CredentialStore, Credentials
from .errors import DecryptionError, RelayError, ThumbnailError, WorkerError
from .events import (
    BinningMode,
    CaptureEvent,
    ImageSaveMediator,
    ImageType,
    SequenceItem,
    SequenceStatus,
    TakeExposure,
)
from .payload import (
    DeliveryEnvelope,
    EquipmentInfo,
    ImageInfo,
    PayloadBuilder,
    TargetInfo,
)
from .security import SecretCipher
from .settings import IniSettingsStore
from .trigger import LightbucketTrigger

__all__ = [
    "BinningMode",
    "CaptureEvent",
    "CredentialStore",
    "Credentials",
    "DecryptionError",
    "DeliveryEnvelope",
    "DeliveryOutcome",
    "DeliveryStatus",
    "EquipmentInfo",
    "ImageInfo",
    "ImageSaveMediator",
    "ImageType",
    "IniSettingsStore",
    "LightbucketClient",
    "LightbucketTrigger",
    "PayloadBuilder",
    "RelayError",
    "SecretCipher",
    "SequenceItem",
    "SequenceStatus",
    "TakeExposure",
    "TargetInfo",
    "ThumbnailEncoder",
    "ThumbnailError",
    "WorkerError",
    "create_trigger",
]
