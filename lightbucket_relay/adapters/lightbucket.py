"""HTTP client delivering capture reports to the Lightbucket API.

Each report is a single ``POST {base}/api/image_capture_complete`` with HTTP
Basic authentication. Failures are reported to the log and to the host's
notification sink; nothing is retried or persisted.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import aiohttp

from ..credentials import Credentials
from ..notifications import Notifier
from ..payload import DeliveryEnvelope

LOGGER = logging.getLogger(__name__)

CONTENT_TYPE = "application/json; charset=utf-8"


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    REJECTED = "rejected"  # Server answered with a non-success status
    FAILED = "failed"  # Request never completed


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    status: DeliveryStatus
    status_code: Optional[int] = None
    message: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status is DeliveryStatus.DELIVERED


class LightbucketClient:
    """Async client for the Lightbucket capture endpoint.

    A single session is shared by all deliveries; concurrent calls to
    :meth:`send` are independent requests.
    """

    def __init__(
        self,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        notifier: Optional[Notifier] = None,
        timeout: float = 30.0,
        owner: str = "LightbucketClient",
    ) -> None:
        """Initialize the delivery client.

        Args:
            session: Optional aiohttp session to use. If None, creates one.
            notifier: Host notification sink for user-visible failures.
            timeout: Total request timeout in seconds.
            owner: Prefix for log and notification messages.
        """
        self._session = session
        self._owns_session = session is None
        self._notifier = notifier
        self._timeout = timeout
        self._owner = owner

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def send(
        self, envelope: DeliveryEnvelope, credentials: Credentials
    ) -> DeliveryOutcome:
        """Deliver one envelope. Never raises for HTTP or transport failures."""
        body = json.dumps(envelope.as_dict(), allow_nan=False)
        url = credentials.endpoint
        LOGGER.debug(
            "%s: Making API request to %s with payload: %s", self._owner, url, body
        )

        headers = {
            "Authorization": credentials.authorization,
            "Content-Type": CONTENT_TYPE,
        }

        session = await self._ensure_session()
        try:
            async with session.post(
                url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as response:
                status = response.status
        except asyncio.TimeoutError:
            return self._report_failure(
                f"Request timed out after {self._timeout:g}s"
            )
        except aiohttp.ClientError as exc:
            return self._report_failure(_failure_message(exc))

        if not 200 <= status < 300:
            message = f"{self._owner}: API request failed with status {status}"
            LOGGER.warning(message)
            if self._notifier is not None:
                self._notifier.warn(message)
            return DeliveryOutcome(
                DeliveryStatus.REJECTED, status_code=status, message=message
            )

        message = f"{self._owner}: API request successful."
        LOGGER.debug(message)
        if self._notifier is not None:
            self._notifier.trace(message)
        return DeliveryOutcome(DeliveryStatus.DELIVERED, status_code=status)

    def _report_failure(self, reason: str) -> DeliveryOutcome:
        message = f"{self._owner}: {reason}"
        LOGGER.error(message)
        if self._notifier is not None:
            self._notifier.error(message)
        return DeliveryOutcome(DeliveryStatus.FAILED, message=message)


def _failure_message(exc: BaseException) -> str:
    """Message of the underlying cause of a transport failure."""
    os_error = getattr(exc, "os_error", None)
    if isinstance(os_error, OSError) and os_error.strerror:
        return os_error.strerror
    return str(exc) or type(exc).__name__
