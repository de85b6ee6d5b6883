"""Sequence trigger that reports completed light frames to Lightbucket.

The trigger listens to the host's image-saved events while its sequence
block runs. Each LIGHT frame becomes one delivery, built and sent on the
delivery worker so the host's event thread never waits on the network.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

from . import constants
from .adapters.lightbucket import DeliveryOutcome, LightbucketClient
from .config import DeliveryConfig
from .credentials import CredentialStore
from .errors import WorkerError
from .events import (
    CaptureEvent,
    ImageSavedSource,
    SequenceItem,
    SequenceStatus,
    TakeExposure,
    is_light_frame,
    previous_step_name,
)
from .notifications import Notifier
from .payload import PayloadBuilder
from .security import Decryptor
from .settings import SettingsProvider
from .worker import DeliveryWorker

LOGGER = logging.getLogger(__name__)


class LightbucketTrigger:
    """Forwards every completed light frame to Lightbucket.

    Usage:
        trigger = LightbucketTrigger(mediator, settings, cipher)
        trigger.activate()    # sequence block starts
        ...
        trigger.deactivate()  # sequence block ends

    Each instance owns its credential store, its delivery worker and the
    HTTP session living on that worker; :meth:`clone` produces a fully
    independent copy.
    """

    name = "Send to Lightbucket"
    description = (
        "This trigger will send a notification to Lightbucket any time an "
        "image capture is completed."
    )
    category = constants.TRIGGER_CATEGORY

    def __init__(
        self,
        image_source: ImageSavedSource,
        settings: SettingsProvider,
        decryptor: Decryptor,
        *,
        notifier: Optional[Notifier] = None,
        delivery_config: Optional[DeliveryConfig] = None,
        builder: Optional[PayloadBuilder] = None,
        client: Optional[LightbucketClient] = None,
        worker_factory: Callable[[], DeliveryWorker] = DeliveryWorker,
    ) -> None:
        """Initialize the trigger.

        Args:
            image_source: Host image-saved event stream.
            settings: Host settings holding the Lightbucket account.
            decryptor: Facility decrypting the stored API key.
            notifier: Host notification sink for delivery failures.
            delivery_config: Request and teardown timeouts.
            builder: Payload builder (defaults to a standard one).
            client: Delivery client to use instead of one created per
                activation on the worker's loop.
            worker_factory: Creates the delivery worker on activation.
        """
        self._image_source = image_source
        self._settings = settings
        self._decryptor = decryptor
        self._notifier = notifier
        self._delivery_config = delivery_config or DeliveryConfig()
        self._builder = builder or PayloadBuilder()
        self._injected_client = client
        self._worker_factory = worker_factory

        self._credentials = CredentialStore(settings, decryptor)

        self._lock = threading.Lock()
        self._active = False
        self._worker: Optional[DeliveryWorker] = None
        self._client: Optional[LightbucketClient] = None

    def __str__(self) -> str:
        return f"Category: {self.category}, Item: {type(self).__name__}"

    def __enter__(self) -> "LightbucketTrigger":
        self.activate()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.deactivate()

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def clone(self) -> "LightbucketTrigger":
        return type(self)(
            self._image_source,
            self._settings,
            self._decryptor,
            notifier=self._notifier,
            delivery_config=self._delivery_config,
            builder=self._builder,
            client=self._injected_client,
            worker_factory=self._worker_factory,
        )

    def activate(self) -> None:
        """Start forwarding image-saved events."""
        with self._lock:
            if self._active:
                LOGGER.warning("%s: already active, ignoring activation", self)
                return

            worker = self._worker_factory()
            worker.start()

            client = self._injected_client
            if client is None:
                client = LightbucketClient(
                    notifier=self._notifier,
                    timeout=self._delivery_config.request_timeout_seconds,
                    owner=str(self),
                )
                worker.add_shutdown_hook(client.close)

            self._worker = worker
            self._client = client
            self._active = True

        self._image_source.subscribe(self.on_image_saved)
        LOGGER.debug("%s: subscribed to image saved events", self)

    def deactivate(self) -> None:
        """Stop forwarding. No delivery starts after this returns."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            worker = self._worker
            self._worker = None
            self._client = None

        self._image_source.unsubscribe(self.on_image_saved)
        LOGGER.debug("%s: unsubscribed from image saved events", self)

        if worker is not None:
            worker.stop(timeout=self._delivery_config.drain_timeout_seconds)

    async def execute(self, context: Any = None) -> None:
        """Nothing to do when run by the sequencer; work is event driven."""
        return None

    def should_trigger(
        self, previous_item: Optional[SequenceItem], next_item: Optional[SequenceItem]
    ) -> bool:
        return False

    def should_trigger_after(
        self, previous_item: Optional[SequenceItem], next_item: Optional[SequenceItem]
    ) -> bool:
        """Whether the previous step was a finished light exposure."""
        is_finished_exposure = (
            previous_item is not None
            and previous_item.kind == constants.EXPOSURE_STEP_KIND
            and previous_item.status == SequenceStatus.FINISHED
        )
        if not is_finished_exposure:
            return False

        if not isinstance(previous_item, TakeExposure):
            LOGGER.debug(
                "%s: previous item declares %s but is a %s",
                self,
                constants.EXPOSURE_STEP_KIND,
                previous_step_name(previous_item),
            )
            return False

        return is_light_frame(previous_item.image_type)

    def on_image_saved(self, event: CaptureEvent) -> None:
        """Handle an image-saved event from the host. Never blocks or raises."""
        if not event.is_light:
            return

        with self._lock:
            if not self._active or self._worker is None or self._client is None:
                LOGGER.debug("%s: inactive, dropping image saved event", self)
                return
            try:
                self._worker.submit(self._forward(event, self._client))
            except WorkerError as exc:
                LOGGER.error("%s: unable to schedule delivery: %s", self, exc)

    async def _forward(
        self, event: CaptureEvent, client: LightbucketClient
    ) -> Optional[DeliveryOutcome]:
        try:
            envelope = await asyncio.to_thread(self._builder.build, event)
            return await client.send(envelope, self._credentials.snapshot())
        except Exception as exc:
            message = f"{self}: {exc}"
            LOGGER.error("%s: capture report failed: %s", self, exc, exc_info=True)
            if self._notifier is not None:
                self._notifier.error(message)
            return None
