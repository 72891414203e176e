"""Error shaping for the HTTP layer.

Domain errors map to their status codes with caller-facing detail.
Everything else is logged with full detail and returned as an opaque
"Failed to <action>" message.
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from market_pulse.infrastructure.observability import get_api_logger
from market_pulse.shared.errors import ConflictError, NotFoundError, ValidationError

log = get_api_logger("error-handler")

T = TypeVar("T")


class OperationFailed(Exception):
    """An operation failed for a reason the caller must not see."""

    def __init__(self, action: str):
        super().__init__(f"Failed to {action}")
        self.action = action


async def guarded(action: str, operation: Awaitable[T]) -> T:
    """Await `operation`; re-raise caller errors, hide everything else."""
    try:
        return await operation
    except (ValidationError, NotFoundError, ConflictError):
        raise
    except Exception as e:
        log.error("operation_failed", action=action, error=str(e), exc_info=True)
        raise OperationFailed(action) from e


def error_body(message: str, **extra: Any) -> dict[str, Any]:
    return {"error": message, **extra}


async def handle_validation(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_body(exc.message, details=[v.to_dict() for v in exc.violations]),
    )


async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_body(exc.message))


async def handle_conflict(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content=error_body(exc.message))


async def handle_failure(request: Request, exc: OperationFailed) -> JSONResponse:
    return JSONResponse(status_code=500, content=error_body(str(exc)))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, handle_validation)
    app.add_exception_handler(NotFoundError, handle_not_found)
    app.add_exception_handler(ConflictError, handle_conflict)
    app.add_exception_handler(OperationFailed, handle_failure)
