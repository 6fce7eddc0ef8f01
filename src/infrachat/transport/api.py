"""Backend HTTP client with normalized error mapping."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from ..logging import extract_http_error_context, log_event, sanitize_error_message
from ..timeouts import (
    DEFAULT_REQUEST_TIMEOUT_SEC,
    build_request_timeout,
    build_stream_timeout,
)
from .sse import SSEFrame, iter_sse_frames


class BackendError(Exception):
    """Base exception for backend client failures."""


class BackendHTTPError(BackendError):
    """Raised for non-success HTTP responses from the backend."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Backend API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class BackendTransportError(BackendError):
    """Raised when the request never produced a response."""


class BackendResponseError(BackendError):
    """Raised for undecodable or incomplete response bodies."""


def _read_error_detail(response: httpx.Response) -> str:
    body = response.text
    if not body:
        return response.reason_phrase or "HTTP error"
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return body
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return body


class BackendClient:
    """HTTP adapter for the session, message and decision endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: int | float = DEFAULT_REQUEST_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=build_request_timeout(timeout),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ===================================================================
    # Endpoints
    # ===================================================================

    async def create_session(self) -> str:
        """Call ``POST /sessions`` and return the new session id."""
        data = await self._request_json("POST", "/sessions")
        session_id = data.get("session_id")
        if not isinstance(session_id, str) or not session_id:
            raise BackendResponseError("Session response did not include a session_id")
        return session_id

    async def send_message(self, session_id: str, content: str) -> dict[str, Any]:
        """Call ``POST /sessions/{id}/messages`` with user text."""
        return await self._request_json(
            "POST",
            f"/sessions/{session_id}/messages",
            {"content": content},
        )

    async def send_param_update(
        self,
        session_id: str,
        intent_id: str,
        param_overrides: dict[str, Any],
    ) -> dict[str, Any]:
        """Call ``POST /sessions/{id}/messages`` in ``param_update`` mode."""
        return await self._request_json(
            "POST",
            f"/sessions/{session_id}/messages",
            {
                "mode": "param_update",
                "intent_id": intent_id,
                "param_overrides": param_overrides,
            },
        )

    async def resolve_decision(self, decision_id: str, option_id: str) -> dict[str, Any]:
        """Call ``POST /decisions/{id}/resolve`` with the selected option."""
        return await self._request_json(
            "POST",
            f"/decisions/{decision_id}/resolve",
            {"option_id": option_id},
        )

    @asynccontextmanager
    async def stream_events(self, session_id: str) -> AsyncIterator[AsyncIterator[SSEFrame]]:
        """Open the session's server-push stream.

        Yields:
            Async iterator of SSE frames, valid while the context is open

        Raises:
            BackendHTTPError: If the stream endpoint rejects the request
            httpx.TransportError: If the connection fails or drops
        """
        path = f"/sessions/{session_id}/events"
        async with self._client.stream(
            "GET",
            path,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
            timeout=build_stream_timeout(),
        ) as response:
            if response.status_code >= 400:
                await response.aread()
                raise BackendHTTPError(response.status_code, _read_error_detail(response))
            log_event(
                "stream_open",
                level=logging.INFO,
                session_id=session_id,
                http_status=response.status_code,
            )
            yield iter_sse_frames(response.aiter_lines())

    # ===================================================================
    # Internals
    # ===================================================================

    async def _request_json(
        self,
        method: str,
        path: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Send a JSON request with normalized error handling."""
        started = time.perf_counter()
        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.TransportError as e:
            fields = extract_http_error_context(e)
            fields.update(
                http_method=method,
                path=path,
                error_type=type(e).__name__,
                error=sanitize_error_message(str(e)),
            )
            log_event("api_error", level=logging.ERROR, **fields)
            raise BackendTransportError(f"Backend request failed: {e}") from e

        log_event(
            "api_request",
            level=logging.INFO,
            http_method=method,
            path=path,
            http_status=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )

        if response.status_code >= 400:
            raise BackendHTTPError(response.status_code, _read_error_detail(response))

        if not response.content:
            return {}
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise BackendResponseError(f"Backend returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise BackendResponseError("Backend returned a non-object JSON body")
        return data
