# totp_api/app/credential/registration.py
import binascii
import logging
import secrets

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from totp_api.app.core.errors import (
    CredentialConflict,
    CredentialCreationFailed,
    InvalidSecret,
)
from totp_api.app.credential.provider import OTPCredentialModel, OTPCredentialProvider
from totp_api.app.credential.store import CredentialStore
from totp_api.app.models.credential import Credential
from totp_api.app.models.user import User
from totp_api.app.security import salted_secret
from totp_api.app.security.totp import decode_secret, secret_from_bytes

logger = logging.getLogger(__name__)


def parse_raw_secret(encoded_secret: str, secret_length: int) -> str:
    """
    Turn the client's Base32 secret back into a raw secret.

    Raises InvalidSecret unless it decodes to exactly `secret_length`
    bytes that can be stored in salted form.
    """
    try:
        secret_bytes = decode_secret(encoded_secret)
    except (binascii.Error, ValueError):
        raise InvalidSecret()

    if len(secret_bytes) != secret_length:
        raise InvalidSecret()

    raw_secret = secret_from_bytes(secret_bytes)
    if not salted_secret.can_salt(raw_secret):
        raise InvalidSecret()

    return raw_secret


async def register_otp_credential(
    store: CredentialStore,
    provider: OTPCredentialProvider,
    user: User,
    raw_secret: str,
    device_name: str,
    initial_code: str,
    overwrite: bool = False,
    salt_length: int = 16,
) -> Credential:
    """
    Register a salted OTP credential in one transaction.

    The stored secret is "<raw>|salt:<b64>" from the start; the initial
    code is checked against the raw secret. With `overwrite`, an existing
    credential under the same device name is replaced in the same
    transaction, so a failure leaves the old one in place.
    """
    existing = await store.get_stored_credential_by_name_and_type(
        user, device_name, OTPCredentialModel.TYPE
    )
    if existing is not None and not overwrite:
        raise CredentialConflict()

    salt = secrets.token_bytes(salt_length)
    credential = OTPCredentialModel.create_from_policy(
        provider.policy,
        salted_secret.encode(raw_secret, salt),
        device_name,
    )

    user_id = user.id
    try:
        if existing is not None:
            await store.remove_credential(existing)
        created = await provider.create_otp_credential(store, user, initial_code, raw_secret, credential)
        if created is None:
            await store.rollback()
            raise CredentialCreationFailed()
        await store.commit()
    except IntegrityError:
        # Another registration stored the same device name first
        await store.rollback()
        logger.info("OTP credential %r for user %s was registered concurrently", device_name, user_id)
        raise CredentialConflict()
    except SQLAlchemyError:
        await store.rollback()
        logger.exception("Storing OTP credential %r for user %s failed", device_name, user_id)
        raise CredentialCreationFailed()

    if existing is not None:
        logger.info("Replaced OTP credential %r for user %s", device_name, user_id)
    else:
        logger.info("Registered OTP credential %r for user %s", device_name, user_id)
    return created
