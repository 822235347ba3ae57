# totp_api/app/core/errors.py
"""
Domain errors for the TOTP endpoints.

Each error carries the HTTP status and the message the client sees.
Authentication and role failures are not here: they are raised as
HTTPException by the auth dependency before any TOTP logic runs.
"""
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class TOTPError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Invalid request"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidRequest(TOTPError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class InvalidSecret(TOTPError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid secret"


class CredentialConflict(TOTPError):
    status_code = status.HTTP_409_CONFLICT
    message = "TOTP credential already exists"


class CredentialNotFound(TOTPError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "TOTP credential not found"


class CodeMismatch(TOTPError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid TOTP code"


class CredentialCreationFailed(TOTPError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Failed to create TOTP credential"


async def totp_error_handler(request: Request, exc: TOTPError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})
