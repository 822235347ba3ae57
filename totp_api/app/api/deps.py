# totp_api/app/api/deps.py
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from totp_api.app.core.config import settings
from totp_api.app.credential.provider import OTPCredentialProvider, OTPPolicy
from totp_api.app.credential.store import CredentialStore
from totp_api.app.db.base import get_db
from totp_api.app.models.user import User
from totp_api.app.schemas.token import TokenPayload
from totp_api.app.security import jwt

# auto_error=False: a missing header gets the same answer as a bad token
reusable_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_credential_store(db: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_otp_provider() -> OTPCredentialProvider:
    return OTPCredentialProvider(OTPPolicy.from_settings(settings))


async def get_current_service_account(
        store: CredentialStore = Depends(get_credential_store),
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(reusable_bearer),
) -> User:
    """The calling service account, holding the TOTP management role."""
    if credentials is None:
        raise _unauthorized("Token not valid")

    try:
        token_data = TokenPayload(**jwt.decode_access_token(credentials.credentials))
    except (JWTError, ValidationError):
        raise _unauthorized("Token not valid")

    caller = await store.get_user_by_id(token_data.sub)
    if caller is None or not caller.enabled:
        raise _unauthorized("Token not valid")

    if not caller.is_service_account:
        raise _unauthorized("User is not a service account")

    if not token_data.has_realm_role(settings.MANAGE_TOTP_ROLE):
        raise _unauthorized("User is not an admin")

    return caller


async def get_managed_user(
        user_id: str,
        store: CredentialStore = Depends(get_credential_store),
        caller: User = Depends(get_current_service_account),
) -> User:
    """The user named in the path, once the caller is allowed to manage it."""
    user = await store.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if user.is_service_account:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot manage service account")

    return user
