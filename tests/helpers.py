"""Shared builders for backend events and mock transports."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Optional

import httpx

from infrachat.transport.api import BackendClient


BASE_URL = "http://backend.test"
DECISION_ID = "3f2b8c1e-6d4a-4b7e-9c2f-1a2b3c4d5e6f"


def token_event(text: str) -> dict[str, Any]:
    return {"type": "token", "payload": {"text": text}}


def log_line_event(text: str, role: str = "assistant") -> dict[str, Any]:
    return {"type": "log", "payload": {"level": "info", "role": role, "text": text}}


def intent_event(
    action: str = "create",
    resource: str = "vm",
    intent_id: Optional[str] = "intent-1",
    kind: str = "intent",
    params: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "intent": {
            "action": action,
            "resource": resource,
            "provider": "aws",
            "params": params or {"size": "small"},
        }
    }
    if intent_id is not None:
        data["intent_id"] = intent_id
    return {"type": "artifact", "payload": {"kind": kind, "data": data}}


def infra_result_event(result: str, stdout: str = "") -> dict[str, Any]:
    return {
        "type": "artifact",
        "payload": {"kind": "infra_result", "data": {"result": result, "stdout": stdout}},
    }


def operation_event(status: str, kind: str, detail: Optional[str] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"status": status, "kind": kind}
    if detail is not None:
        payload["detail"] = detail
    return {"type": "operation_update", "payload": payload}


def decision_event(
    decision_id: Optional[str] = DECISION_ID,
    prompt: str = "Proceed?",
    intent_id: Optional[str] = "intent-1",
    action: str = "create",
    resource: str = "vm",
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "kind": "confirm_execution",
        "prompt": prompt,
        "options": [
            {"id": "run", "label": "Run"},
            {"id": "cancel", "label": "Cancel"},
        ],
        "metadata": {
            "intent_id": intent_id,
            "intent": {"action": action, "resource": resource, "params": {}},
        },
    }
    if decision_id is not None:
        payload["decision_id"] = decision_id
    return {"type": "decision", "payload": payload}


def json_response(status_code: int, body: Any) -> httpx.Response:
    return httpx.Response(status_code, json=body)


def sse_response(*frames: str) -> httpx.Response:
    """Finite event-stream response; the stream ends after the frames."""
    body = "".join(frames).encode("utf-8")
    return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=body)


def blocking_sse_response(*frames: str) -> httpx.Response:
    """Event-stream response that stays open after sending its frames."""

    async def _body():
        for frame in frames:
            yield frame.encode("utf-8")
        await asyncio.Event().wait()

    return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=_body())


def sse_data(payload: Any) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def make_client(handler: Callable[[httpx.Request], Any]) -> BackendClient:
    return BackendClient(BASE_URL, transport=httpx.MockTransport(handler))


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)
