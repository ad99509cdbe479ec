"""Application errors rendered as {"error": message} responses"""

from fastapi import Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base error carrying an HTTP status and a caller-safe message"""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(AppError):
    """Missing or malformed client input"""

    status_code = 400


class StorageNotConfiguredError(AppError):
    """Analytics storage is disabled"""

    status_code = 503

    def __init__(self, message: str = "Analytics storage not configured"):
        super().__init__(message)


class StorageError(AppError):
    """Graph store call failed"""

    status_code = 500


class PaymentProviderError(AppError):
    """Stripe call failed; the provider message is passed through"""

    status_code = 500


class CompanionServiceError(AppError):
    """Companion webhook returned a failure"""

    status_code = 502

    def __init__(self, message: str = "Companion service error"):
        super().__init__(message)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
