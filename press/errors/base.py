from collections.abc import Awaitable, Callable
from logging import Logger
from typing import Any

from fastapi import Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from press.configs import DEFAULT_ERROR_MESSAGE
from press.utils.helpers import client_ip

Handler = Callable[[Request, Exception], Awaitable[ORJSONResponse]]


class BaseAppError(Exception):
    """
    Root of every error the API turns into a JSON response.

    Attributes set by subclasses (``slug``, ``retryable``, ``errors``...)
    are added to the body next to ``detail``.
    """

    def __init__(
        self,
        detail: str = "Internal Server Error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __str__(self) -> str:
        return self.detail

    def payload(self) -> dict[str, Any]:
        extras = {k: v for k, v in vars(self).items() if k not in ("detail", "status_code")}
        return {"detail": self.detail, **extras}


def create_exception_handler(logger: Logger) -> Handler:
    """Build a handler that renders `BaseAppError` subclasses with their status code."""

    async def handler(request: Request, exc: Exception) -> ORJSONResponse:
        if not isinstance(exc, BaseAppError):
            exc = BaseAppError()

        where = f"{request.url.path} from {client_ip(request)}"
        if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(f"{exc.status_code} {exc.detail} at {where}")
        else:
            logger.warning(f"{exc.status_code} {exc.detail} at {where}")

        return ORJSONResponse(content=exc.payload(), status_code=exc.status_code)

    return handler


def create_fallback_handler(logger: Logger) -> Handler:
    """Last-resort handler: log the traceback, answer with a generic 500."""

    async def handler(request: Request, exc: Exception) -> ORJSONResponse:
        logger.error(
            f"Unhandled {type(exc).__name__} at {request.url.path} from {client_ip(request)}",
            exc_info=exc,
        )
        return ORJSONResponse(
            content={"detail": DEFAULT_ERROR_MESSAGE},
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return handler
