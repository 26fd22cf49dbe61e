# workforce/middleware/security_headers.py
from typing import Callable, Dict, Optional

from workforce.config import SecurityConfig


def SecurityHeadersMiddleware(app: Callable, headers: Optional[Dict[str, str]] = None) -> Callable:
    """Add SecurityConfig.SECURITY_HEADERS to every HTTP response unless the app already set them"""
    resolved = headers if headers is not None else SecurityConfig.SECURITY_HEADERS
    header_list = [(name.lower().encode(), value.encode()) for name, value in resolved.items()]

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                existing = list(message.get("headers", []))
                seen = {name.lower() for name, _ in existing}
                existing.extend(item for item in header_list if item[0] not in seen)
                message["headers"] = existing
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
