"""Async HTTP client for the remote selections store."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import ValidationError

from travelsync.adapters.remote.models import SelectionsEnvelope, UpsertSelectionsRequest
from travelsync.core.time_utils import utc_now

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from typing import Self

logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP status codes that should trigger a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY = 0.5  # seconds
DEFAULT_MAX_DELAY = 8.0  # seconds
DEFAULT_JITTER = 0.1  # 10% jitter


class RemoteStoreError(Exception):
    """The remote store could not complete a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _is_retryable_error(exc: Exception) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.ConnectError | httpx.TimeoutException)


def _calculate_delay(attempt: int, base_delay: float, max_delay: float, jitter: float) -> float:
    """Exponential backoff with up to ``jitter`` extra random delay."""
    delay = min(base_delay * (2**attempt), max_delay)
    return delay + delay * jitter * random.random()


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    jitter: float = DEFAULT_JITTER,
    operation_name: str = "operation",
) -> T:
    """Execute an async function with exponential backoff retry.

    Non-retryable errors propagate immediately.

    Raises:
        RemoteStoreError: If all retries are exhausted
    """
    last_exception: Exception | None = None

    for attempt in range(max_retries + 1):
        try:
            return await func()
        except Exception as e:
            last_exception = e

            if not _is_retryable_error(e):
                raise

            if attempt == max_retries:
                logger.error(
                    "remote_retry_exhausted",
                    extra={
                        "operation": operation_name,
                        "attempts": attempt + 1,
                        "error": str(e),
                    },
                )
                status_code = (
                    e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
                )
                msg = f"{operation_name} failed after {attempt + 1} attempts: {e}"
                raise RemoteStoreError(msg, status_code=status_code) from e

            delay = _calculate_delay(attempt, base_delay, max_delay, jitter)
            logger.warning(
                "remote_retry_attempt",
                extra={
                    "operation": operation_name,
                    "attempt": attempt + 1,
                    "max_retries": max_retries,
                    "delay_seconds": round(delay, 2),
                    "error": str(e),
                },
            )
            await asyncio.sleep(delay)

    msg = f"{operation_name} failed"
    raise RemoteStoreError(msg) from last_exception


class RemoteSnapshotClient:
    """Per-user snapshot storage over HTTP.

    Talks to ``GET/PUT/DELETE {api_url}/selections/{user_id}``. A 404 on read
    means the user has no snapshot yet. Every other failure surfaces as
    ``RemoteStoreError`` once transient errors have been retried.

    Example:
        ```python
        async with RemoteSnapshotClient(url, api_key) as remote:
            raw = await remote.fetch_snapshot(user_id)
        ```
    """

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        timeout: float = 15.0,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        retry_max_delay: float = DEFAULT_MAX_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "Client not initialized. Use async context manager."
            raise RemoteStoreError(msg)
        return self._client

    async def _with_retry(self, func: Callable[[], Awaitable[T]], operation_name: str) -> T:
        try:
            return await retry_with_backoff(
                func,
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
                max_delay=self.retry_max_delay,
                operation_name=operation_name,
            )
        except httpx.HTTPStatusError as e:
            msg = f"{operation_name} rejected with HTTP {e.response.status_code}"
            raise RemoteStoreError(msg, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            msg = f"{operation_name} failed: {e}"
            raise RemoteStoreError(msg) from e

    async def fetch_snapshot(self, user_id: str) -> dict[str, Any] | None:
        """Fetch the stored snapshot for ``user_id``.

        Returns:
            The raw selections mapping, or None when the user has no snapshot.

        Raises:
            RemoteStoreError: On transport, auth or server failure, or a
                malformed response body.
        """

        async def _fetch() -> dict[str, Any] | None:
            response = await self.client.get(f"/selections/{user_id}")
            if response.status_code == 404:
                return None
            response.raise_for_status()
            try:
                envelope = SelectionsEnvelope.model_validate(response.json())
            except (ValueError, ValidationError) as e:
                msg = f"Malformed snapshot response: {e}"
                raise RemoteStoreError(msg, status_code=response.status_code) from e
            return envelope.selections

        result = await self._with_retry(_fetch, "fetch_snapshot")
        logger.debug(
            "remote_snapshot_fetched", extra={"user_id": user_id, "found": result is not None}
        )
        return result

    async def upsert_snapshot(self, user_id: str, snapshot: dict[str, Any]) -> None:
        """Replace the stored snapshot for ``user_id``."""
        request = UpsertSelectionsRequest(user_id=user_id, selections=snapshot, updated_at=utc_now())
        body = request.model_dump(mode="json", by_alias=True)

        async def _upsert() -> None:
            response = await self.client.put(f"/selections/{user_id}", json=body)
            response.raise_for_status()

        await self._with_retry(_upsert, "upsert_snapshot")
        logger.info("remote_snapshot_upserted", extra={"user_id": user_id})

    async def delete_snapshot(self, user_id: str) -> None:
        """Delete the stored snapshot; a missing snapshot counts as deleted."""

        async def _delete() -> None:
            response = await self.client.delete(f"/selections/{user_id}")
            if response.status_code == 404:
                return
            response.raise_for_status()

        await self._with_retry(_delete, "delete_snapshot")
        logger.info("remote_snapshot_deleted", extra={"user_id": user_id})
