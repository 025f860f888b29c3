"""Firebase Realtime Database client over the REST and streaming APIs."""

import asyncio
import json
from typing import Any

import httpx

from ..config import FirebaseSettings
from ..logging_config import get_logger
from .store import OnChange, Snapshot, StoreError, Unsubscribe, join_path, normalize_path

logger = get_logger(__name__)

STREAM_EVENTS = {"put", "patch"}
STREAM_CLOSE_EVENTS = {"cancel", "auth_revoked"}

# Every subscription holds a connection for its whole lifetime.
CONNECTION_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=20)


class FirebaseStore:
    """Realtime Database store.

    Writes map to PUT, multi-path updates to PATCH and reads to GET on
    ``<database_url>/<path>.json``. Each subscription is its own
    ``text/event-stream`` request running on a background task.
    No call carries a deadline unless ``timeout`` is given.
    """

    def __init__(
        self,
        settings: FirebaseSettings,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self._settings = settings
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._streams: set[asyncio.Task] = set()

    async def init(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.database_url,
                timeout=self._timeout,
                limits=CONNECTION_LIMITS,
                follow_redirects=True,
            )

    async def close(self) -> None:
        """Cancel open streams and close the client."""
        for task in list(self._streams):
            task.cancel()
        if self._streams:
            await asyncio.gather(*self._streams, return_exceptions=True)
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("Store not initialized")
        return self._client

    @staticmethod
    def _url(path: str) -> str:
        path = normalize_path(path)
        return f"/{path}.json" if path else "/.json"

    def _params(self) -> dict[str, str]:
        if self._settings.auth_token:
            return {"auth": self._settings.auth_token}
        return {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._require_client()
        try:
            response = await client.request(
                method, self._url(path), params=self._params(), **kwargs
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = e.response.text.strip() or e.response.reason_phrase
            raise StoreError(
                f"{method} /{normalize_path(path)} failed with HTTP "
                f"{e.response.status_code}: {detail}"
            ) from e
        except httpx.HTTPError as e:
            detail = str(e) or type(e).__name__
            raise StoreError(f"{method} /{normalize_path(path)} failed: {detail}") from e
        return response

    async def write(self, path: str, value: Any) -> None:
        await self._request("PUT", path, json=value)

    async def update(self, path: str, patch: dict[str, Any]) -> None:
        await self._request("PATCH", path, json=patch)

    async def read(self, path: str) -> Snapshot:
        response = await self._request("GET", path)
        return Snapshot(path=normalize_path(path), value=response.json())

    def subscribe(self, path: str, on_change: OnChange) -> Unsubscribe:
        task = asyncio.create_task(self._stream(normalize_path(path), on_change))
        self._streams.add(task)
        task.add_done_callback(self._streams.discard)

        def unsubscribe() -> None:
            task.cancel()

        return unsubscribe

    async def _stream(self, path: str, on_change: OnChange) -> None:
        """Consume server-sent events until cancelled or closed by the server."""
        client = self._require_client()
        event: str | None = None
        try:
            async with client.stream(
                "GET",
                self._url(path),
                params=self._params(),
                headers={"Accept": "text/event-stream"},
                timeout=httpx.Timeout(self._timeout, read=None),
            ) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if line.startswith("event:"):
                        event = line[len("event:") :].strip()
                    elif line.startswith("data:"):
                        data = line[len("data:") :].strip()
                        if event in STREAM_EVENTS:
                            self._dispatch(path, data, on_change)
                        elif event in STREAM_CLOSE_EVENTS:
                            logger.warning("Stream for /%s closed by server: %s", path, event)
                            return
        except httpx.HTTPError as e:
            logger.error("Subscription to /%s failed: %s", path, str(e) or type(e).__name__)

    @staticmethod
    def _dispatch(path: str, data: str, on_change: OnChange) -> None:
        try:
            payload = json.loads(data)
            snapshot = Snapshot(
                path=join_path(path, payload.get("path", "/")),
                value=payload.get("data"),
            )
            on_change(snapshot)
        except Exception as e:
            logger.error("Error in subscriber for /%s: %s", path, e)
