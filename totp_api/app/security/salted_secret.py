# totp_api/app/security/salted_secret.py
"""
Persisted form of OTP secrets.

A salted secret is stored in the credential's single secret field as

    <raw secret>|salt:<base64 salt>

Credentials created before salting (or directly by the OTP provider)
hold the raw secret alone. decode() accepts both and never raises, so
any stored string can be read back.

The salt is not mixed into code derivation: codes are always computed
from the raw secret, which is what authenticator apps hold.
"""
import base64
from dataclasses import dataclass
from typing import Union

SALT_DELIMITER = "|salt:"


@dataclass(frozen=True)
class DecodedSecret:
    raw_secret: str
    salt: bytes

    is_salted = True


@dataclass(frozen=True)
class Legacy:
    raw_secret: str

    is_salted = False


StoredSecret = Union[DecodedSecret, Legacy]


def can_salt(raw_secret: str) -> bool:
    """A raw secret can be salted when it is non-empty and free of the delimiter."""
    return bool(raw_secret) and SALT_DELIMITER not in raw_secret


def encode(raw_secret: str, salt: bytes) -> str:
    if not raw_secret:
        raise ValueError("raw secret must not be empty")
    # decode() splits on the first delimiter, so one inside the secret would be ambiguous
    if SALT_DELIMITER in raw_secret:
        raise ValueError("raw secret must not contain the salt delimiter")
    return raw_secret + SALT_DELIMITER + base64.b64encode(salt).decode("ascii")


def decode(persisted: str) -> StoredSecret:
    raw_secret, delimiter, salt_text = persisted.partition(SALT_DELIMITER)
    if not delimiter:
        return Legacy(persisted)

    # Non-alphabet characters such as MIME line breaks are skipped. A salt
    # that still won't decode is kept as its text; it plays no part in codes.
    try:
        salt = base64.b64decode(salt_text)
    except ValueError:
        salt = salt_text.encode("utf-8")

    return DecodedSecret(raw_secret=raw_secret, salt=salt)
