from press.managers.rate_limiter import (
    author_limit,
    get_identifier,
    limiter,
    rate_limit_exceeded_handler,
)
from press.managers.token_manager import create_access_token, decode_access_token

__all__ = [
    "author_limit",
    "create_access_token",
    "decode_access_token",
    "get_identifier",
    "limiter",
    "rate_limit_exceeded_handler",
]
