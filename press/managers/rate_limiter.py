"""Per-author and per-IP request limits (slowapi)."""

from logging import getLogger
from typing import cast

from fastapi import Request
from fastapi.responses import ORJSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from press.configs import LimiterConfig, file_logger
from press.managers.token_manager import decode_access_token
from press.utils.helpers import client_ip

logger = file_logger(getLogger(__name__))

AUTHOR_KEY_PREFIX = "author:"


def get_identifier(request: Request) -> str:
    """
    Bucket requests by author when they carry a valid access token.

    Invalid or missing tokens are bucketed by client IP, so rotating
    garbage tokens does not buy a fresh allowance.
    """
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        token = decode_access_token(credentials)
        if token is not None:
            return f"{AUTHOR_KEY_PREFIX}{token.user_id}"

    return f"ip:{get_remote_address(request)}"


def author_limit(for_authors: str, for_others: str):  # noqa: ANN201
    """Dynamic limit for admin routes: `for_authors` once the caller is identified."""
    return lambda key: for_authors if key.startswith(AUTHOR_KEY_PREFIX) else for_others


limiter = Limiter(**LimiterConfig().model_dump(), key_func=get_identifier)


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> ORJSONResponse:
    limit_exc = cast(RateLimitExceeded, exc)
    retry_after = _rate_limit_exceeded_handler(request, limit_exc).headers.get("retry-after", "60")
    logger.warning(f"Rate limit {limit_exc.detail} hit at {request.url.path} from {client_ip(request)}")
    return ORJSONResponse(
        status_code=HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": "Rate limit exceeded",
            "allowed_requests": limit_exc.detail,
            "retry_after": f"{retry_after} seconds",
        },
        headers={"Retry-After": retry_after},
    )
