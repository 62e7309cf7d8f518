import logging
from typing import Any, ClassVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    context: dict[str, Any] | None = None


class AppError(Exception):
    """Base application exception."""

    kind: ClassVar[str | None] = None

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    @property
    def error_kind(self) -> str:
        """Name reported to clients in the ``error`` field."""
        return self.kind or type(self).__name__


# ---------------------------------------------------------------------------
# Leave validation (400)
# ---------------------------------------------------------------------------


class LeaveValidationError(AppError):
    """A leave application failed a business rule."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, context=context)


class InvalidRangeError(LeaveValidationError):
    kind = "InvalidRange"


class PastDateError(LeaveValidationError):
    kind = "PastDate"


class CrossYearNotAllowedError(LeaveValidationError):
    kind = "CrossYearNotAllowed"


class NoWorkingDaysError(LeaveValidationError):
    kind = "NoWorkingDays"


class InsufficientBalanceError(LeaveValidationError):
    """Requested days exceed the remaining balance for the leave type."""

    kind = "InsufficientBalance"

    def __init__(self, leave_type: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient {leave_type} leave balance. Available: {available}, Requested: {requested}",
            context={"leave_type": leave_type, "available": available, "requested": requested},
        )


class ExceedsConsecutiveLimitError(LeaveValidationError):
    kind = "ExceedsConsecutiveLimit"

    def __init__(self, leave_type: str, max_days: int, requested: int) -> None:
        super().__init__(
            f"Maximum {max_days} consecutive working days allowed for {leave_type} leave "
            f"per department policy. Requested: {requested}",
            context={"leave_type": leave_type, "max_consecutive_days": max_days, "requested": requested},
        )


# ---------------------------------------------------------------------------
# Authorization (403)
# ---------------------------------------------------------------------------


class ForbiddenError(AppError):
    kind = "Forbidden"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class SelfApprovalForbiddenError(ForbiddenError):
    kind = "SelfApprovalForbidden"


class OutOfScopeError(ForbiddenError):
    kind = "OutOfScope"


# ---------------------------------------------------------------------------
# Lookup (404)
# ---------------------------------------------------------------------------


class NotFoundError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class LeaveNotFoundError(NotFoundError):
    kind = "LeaveNotFound"


class EmployeeNotFoundError(NotFoundError):
    kind = "EmployeeNotFound"


class HolidayNotFoundError(NotFoundError):
    kind = "HolidayNotFound"


# ---------------------------------------------------------------------------
# State conflicts (409)
# ---------------------------------------------------------------------------


class ConflictError(AppError):
    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, context=context)


class OverlapConflictError(ConflictError):
    kind = "OverlapConflict"


class AlreadyProcessedError(ConflictError):
    kind = "AlreadyProcessed"


class AlreadyCancelledError(ConflictError):
    kind = "AlreadyCancelled"


class LedgerInvariantViolationError(ConflictError):
    """A ledger mutation would break ``remaining >= 0`` or over-refund ``taken``."""

    kind = "LedgerInvariantViolation"


class HolidayConflictError(ConflictError):
    kind = "HolidayConflict"


# ---------------------------------------------------------------------------
# Operational (500)
# ---------------------------------------------------------------------------


class LeaveOperationFailedError(AppError):
    """Persistence failed mid-transition; nothing was applied."""

    kind = "LeaveOperationFailed"

    def __init__(self, message: str = "Leave operation failed; no changes were applied") -> None:
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.error_kind)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error_kind,
            detail=exc.message,
            status_code=exc.status_code,
            context=exc.context,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
