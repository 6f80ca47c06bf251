"""Per-field validation errors, from pydantic and from the pipeline alike."""

from logging import getLogger
from typing import Any, cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_422_UNPROCESSABLE_CONTENT

from press.configs import file_logger
from press.errors.base import BaseAppError, create_exception_handler
from press.utils.helpers import client_ip

logger = file_logger(getLogger(__name__))


class ValidationError(BaseAppError):
    """
    A request the pipeline refuses before touching storage.

    ``errors`` uses the same ``{field, message, type}`` items as the
    RequestValidationError handler, so clients parse one shape.
    """

    def __init__(
        self,
        detail: str = "Validation failed",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(detail=detail, status_code=HTTP_422_UNPROCESSABLE_CONTENT)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str, error_type: str = "missing") -> "ValidationError":
        return cls(errors=[{"field": field, "message": message, "type": error_type}])


def field_error(error: dict[str, Any]) -> dict[str, Any]:
    """Flatten one pydantic error; the leading location part (``body``, ``query``) is dropped."""
    item = {
        "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
        "message": error.get("msg", "Invalid value"),
        "type": error.get("type", "validation_error"),
    }
    if ctx := error.get("ctx"):
        item["context"] = {k: str(v) if isinstance(v, Exception) else v for k, v in ctx.items()}
    return item


async def validation_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    errors = [field_error(e) for e in cast(RequestValidationError, exc).errors()]
    fields = ", ".join(sorted({e["field"] or "request" for e in errors}))
    logger.warning(f"Invalid {fields} at {request.url.path} from {client_ip(request)}")

    return ORJSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_CONTENT,
        content={"detail": "Validation failed", "errors": errors},
    )


app_validation_exception_handler = create_exception_handler(logger)
