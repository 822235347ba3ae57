# totp_api/app/api/v1/endpoints/totp.py
"""
TOTP credential management for a user, on behalf of a service account.

- GET  /{user_id}/generate  - fresh secret + QR code (nothing is stored)
- POST /{user_id}/register  - store the secret as a salted OTP credential
- POST /{user_id}/verify    - check a code against a named credential
"""
import logging

from fastapi import APIRouter, Depends, status

from totp_api.app.api import deps
from totp_api.app.core.config import settings
from totp_api.app.core.errors import CodeMismatch, CredentialNotFound, InvalidRequest
from totp_api.app.credential.provider import OTPCredentialModel, OTPCredentialProvider
from totp_api.app.credential.registration import parse_raw_secret, register_otp_credential
from totp_api.app.credential.store import CredentialStore
from totp_api.app.credential.verification import verify_otp_credential
from totp_api.app.models.user import User
from totp_api.app.schemas.totp import (
    CommonApiResponse,
    GenerateTOTPResponse,
    RegisterTOTPCredentialRequest,
    VerifyTOTPRequest,
)
from totp_api.app.security import totp as totp_security

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{user_id}/generate", response_model=GenerateTOTPResponse)
async def generate_totp(
    user: User = Depends(deps.get_managed_user),
    provider: OTPCredentialProvider = Depends(deps.get_otp_provider),
):
    policy = provider.policy
    secret = totp_security.generate_secret(settings.TOTP_SECRET_LENGTH)
    totp = totp_security.build_totp(secret, policy.algorithm, policy.digits, policy.period)
    uri = totp_security.get_totp_uri(totp, user.username, settings.OTP_ISSUER)

    return GenerateTOTPResponse(
        encoded_secret=totp_security.encode_secret(secret),
        qr_code=totp_security.generate_qr_code_base64(uri),
    )


@router.post(
    "/{user_id}/register",
    response_model=CommonApiResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_totp(
    request: RegisterTOTPCredentialRequest,
    user: User = Depends(deps.get_managed_user),
    store: CredentialStore = Depends(deps.get_credential_store),
    provider: OTPCredentialProvider = Depends(deps.get_otp_provider),
):
    if not request.is_complete():
        raise InvalidRequest()

    raw_secret = parse_raw_secret(request.encoded_secret, settings.TOTP_SECRET_LENGTH)

    await register_otp_credential(
        store,
        provider,
        user,
        raw_secret,
        device_name=request.device_name,
        initial_code=request.initial_code,
        overwrite=request.overwrite,
        salt_length=settings.TOTP_SALT_LENGTH,
    )

    return CommonApiResponse(message="TOTP credential registered")


@router.post("/{user_id}/verify", response_model=CommonApiResponse)
async def verify_totp(
    request: VerifyTOTPRequest,
    user: User = Depends(deps.get_managed_user),
    store: CredentialStore = Depends(deps.get_credential_store),
    provider: OTPCredentialProvider = Depends(deps.get_otp_provider),
):
    if not request.is_complete():
        raise InvalidRequest()

    stored = await store.get_stored_credential_by_name_and_type(
        user, request.device_name, OTPCredentialModel.TYPE
    )
    if stored is None:
        logger.info("No OTP credential %r for user %s", request.device_name, user.id)
        raise CredentialNotFound()

    credential = OTPCredentialModel.create_from_credential(stored)
    if not verify_otp_credential(provider, credential, request.code.strip()):
        raise CodeMismatch()

    return CommonApiResponse(message="TOTP code is valid")
