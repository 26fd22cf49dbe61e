# workforce/middleware/request_context.py
"""Request context middleware

Assigns every request an id (forwarding a safe client-provided X-Request-ID)
and keeps a bounded copy of the request body in scope state so the error
handler can log it after the endpoint has consumed the stream. Raw ASGI.
"""

import re
import uuid
from typing import Callable, Optional

from workforce.config import SecurityConfig

REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")


def _get_header(scope: dict, name: str) -> Optional[str]:
    want = name.lower().encode()
    for key, value in scope.get("headers", []):
        if key.lower() == want:
            return value.decode("utf-8", errors="replace")
    return None


def _request_id(raw: Optional[str]) -> str:
    if raw and REQUEST_ID_PATTERN.match(raw.strip()):
        return raw.strip()
    return uuid.uuid4().hex


def RequestContextMiddleware(app: Callable, max_body_bytes: int = SecurityConfig.MAX_LOGGED_BODY_BYTES) -> Callable:
    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        request_id = _request_id(_get_header(scope, REQUEST_ID_HEADER))
        body = bytearray()
        state = scope.setdefault("state", {})
        state["request_id"] = request_id
        state["request_body"] = body

        async def receive_wrapper() -> dict:
            message = await receive()
            if message["type"] == "http.request":
                room = max_body_bytes - len(body)
                if room > 0:
                    body.extend(message.get("body", b"")[:room])
            return message

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER.encode(), request_id.encode()))
                message["headers"] = headers
            await send(message)

        await app(scope, receive_wrapper, send_wrapper)

    return asgi_app
