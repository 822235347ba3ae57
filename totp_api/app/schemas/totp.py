# totp_api/app/schemas/totp.py
"""
Request and response bodies of the TOTP endpoints.

JSON field names are camelCase (encodedSecret, deviceName, ...);
snake_case is accepted on input too.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class GenerateTOTPResponse(ApiModel):
    # Base32 of the raw secret, what the user types into an authenticator app
    encoded_secret: str
    # Base64 PNG of the otpauth:// provisioning URI
    qr_code: str


class RegisterTOTPCredentialRequest(ApiModel):
    encoded_secret: Optional[str] = None
    device_name: Optional[str] = None
    initial_code: Optional[str] = None
    overwrite: bool = False

    def is_complete(self) -> bool:
        return not (
            _is_blank(self.encoded_secret)
            or _is_blank(self.device_name)
            or _is_blank(self.initial_code)
        )


class VerifyTOTPRequest(ApiModel):
    device_name: Optional[str] = None
    code: Optional[str] = None

    def is_complete(self) -> bool:
        return not (_is_blank(self.device_name) or _is_blank(self.code))


class CommonApiResponse(BaseModel):
    message: str
