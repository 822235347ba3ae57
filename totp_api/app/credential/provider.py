# totp_api/app/credential/provider.py
"""
The OTP credential provider: the identity provider's stock OTP type.

It only understands raw secrets. It knows nothing about salting; the
callers in verification.py and registration.py hand it credentials
whose secret_data is already the raw secret.
"""
import logging
from dataclasses import dataclass, replace
from typing import ClassVar, Optional

from totp_api.app.core.config import Settings, settings
from totp_api.app.credential.store import CredentialStore
from totp_api.app.models.credential import Credential
from totp_api.app.models.user import User
from totp_api.app.security.totp import build_totp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OTPPolicy:
    algorithm: str = "HmacSHA1"
    digits: int = 6
    period: int = 30
    look_around: int = 1

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "OTPPolicy":
        return cls(
            algorithm=config.OTP_POLICY_ALGORITHM,
            digits=config.OTP_POLICY_DIGITS,
            period=config.OTP_POLICY_PERIOD,
            look_around=config.OTP_POLICY_LOOK_AROUND,
        )


@dataclass(frozen=True)
class OTPCredentialModel:
    """
    Immutable view of an OTP credential.

    Built from a stored row or from the realm policy; never written back.
    with_secret() gives a transient copy carrying a different secret.
    """
    TYPE: ClassVar[str] = "otp"

    user_label: str
    secret_data: str
    algorithm: str
    digits: int
    period: int
    id: Optional[str] = None

    @classmethod
    def create_from_policy(cls, policy: OTPPolicy, secret_data: str, user_label: str) -> "OTPCredentialModel":
        return cls(
            user_label=user_label,
            secret_data=secret_data,
            algorithm=policy.algorithm,
            digits=policy.digits,
            period=policy.period,
        )

    @classmethod
    def create_from_credential(cls, credential: Credential) -> "OTPCredentialModel":
        return cls(
            id=credential.id,
            user_label=credential.user_label,
            secret_data=credential.secret_data,
            algorithm=credential.algorithm,
            digits=credential.digits,
            period=credential.period,
        )

    def with_secret(self, secret_data: str) -> "OTPCredentialModel":
        return replace(self, secret_data=secret_data)


class OTPCredentialProvider:
    type = OTPCredentialModel.TYPE

    def __init__(self, policy: OTPPolicy):
        self.policy = policy

    def is_valid(self, credential: OTPCredentialModel, code: str) -> bool:
        """Match a submitted code against the credential's secret, within the policy's look-around window."""
        if not code:
            return False

        try:
            totp = build_totp(
                credential.secret_data,
                credential.algorithm,
                credential.digits,
                credential.period,
            )
        except (UnicodeEncodeError, KeyError):
            logger.warning("OTP credential %s has an unusable secret or algorithm", credential.id)
            return False

        return totp.verify(code, valid_window=self.policy.look_around)

    async def create_otp_credential(
        self,
        store: CredentialStore,
        user: User,
        initial_code: str,
        raw_secret: str,
        credential: OTPCredentialModel,
    ) -> Optional[Credential]:
        """
        Create `credential` for `user` once `initial_code` checks out.

        The initial code is matched against `raw_secret`, not against
        credential.secret_data, which may be the salted persisted form.
        Returns None without touching the store when the code is wrong.
        """
        if not self.is_valid(credential.with_secret(raw_secret), initial_code):
            logger.warning("Initial code rejected for OTP credential %r of user %s", credential.user_label, user.id)
            return None

        return await store.create_credential(user, credential)
