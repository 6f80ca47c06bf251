from datetime import datetime

from fastapi import Request
from fastapi.routing import APIRoute
from starlette.routing import Match


def client_ip(request: Request) -> str:
    """Caller address as seen after the proxy-headers middleware."""
    return request.client.host if request.client else "unknown"


def local_timestamp() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def route_label(request: Request) -> str:
    """
    Human label for the matched route, used in access logs.

    API routes report their OpenAPI summary ("Create post"); mounts and
    unmatched paths fall back to ``METHOD /path``.
    """
    for route in request.app.routes:
        if isinstance(route, APIRoute) and route.matches(request.scope)[0] == Match.FULL:
            return route.summary or route.name
    return f"{request.method} {request.url.path}"
