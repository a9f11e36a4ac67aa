# app/core/exceptions.py

from fastapi import Request, status
from fastapi.responses import JSONResponse


class FormError(Exception):
    """Base error for the form pipeline. Rendered as `{error: message}`."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": self.message}


class FieldValidationError(FormError):
    """One or more fields failed their rule. Rendered as `{errors: [...]}`."""

    def __init__(self, errors: list):
        super().__init__("Validation failed")
        self.errors = errors

    def to_payload(self) -> dict:
        return {"errors": [e.model_dump() for e in self.errors]}


class MissingAttachmentError(FormError):
    def __init__(self, message: str = "ID proof file is required"):
        super().__init__(message)


class AttachmentTooLargeError(FormError):
    def __init__(self, max_size: int):
        super().__init__(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB.")


class InvalidBodyError(FormError):
    def __init__(self, message: str = "Invalid JSON body"):
        super().__init__(message)


class StoreError(FormError):
    # Internal details go to the log, never to the caller
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Server error"):
        super().__init__(message)


class RateLimitedError(FormError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str = "Too many submissions. Please try again later."):
        super().__init__(message)


async def form_error_handler(request: Request, exc: FormError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
