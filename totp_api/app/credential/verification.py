# totp_api/app/credential/verification.py
import logging
from typing import Optional

from totp_api.app.credential.provider import OTPCredentialModel, OTPCredentialProvider
from totp_api.app.security import salted_secret

logger = logging.getLogger(__name__)


def verify_otp_credential(
    provider: OTPCredentialProvider,
    credential: Optional[OTPCredentialModel],
    code: str,
) -> bool:
    """
    Check `code` against a stored OTP credential, salted or not.

    The provider only knows raw secrets. For a salted credential it is
    handed a transient copy whose secret is the decoded raw secret; the
    stored credential itself is never modified, so concurrent readers
    always see the persisted value.

    Missing credential or empty code is simply invalid.
    """
    if credential is None or not code:
        return False

    stored = salted_secret.decode(credential.secret_data)

    if isinstance(stored, salted_secret.DecodedSecret):
        logger.debug("Verifying salted OTP credential %s", credential.id)
        candidate = credential.with_secret(stored.raw_secret)
    else:
        logger.debug("Verifying unsalted OTP credential %s", credential.id)
        candidate = credential

    is_valid = provider.is_valid(candidate, code)
    logger.debug("OTP credential %s verification %s", credential.id, "succeeded" if is_valid else "failed")
    return is_valid
