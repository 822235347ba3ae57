# totp_api/app/security/totp.py
"""
TOTP helpers around pyotp (RFC 6238 lives there, not here).

Raw secrets are kept as text: each character is one key byte, so the
latin-1 encoding of the string is exactly the HMAC key. Clients only
ever see the Base32 form of those bytes.
"""
import base64
import hashlib
import io
import secrets
import string

import pyotp
import qrcode

SECRET_ALPHABET = string.ascii_letters + string.digits
SECRET_CHARSET = "latin-1"

OTP_DIGESTS = {
    "HmacSHA1": hashlib.sha1,
    "HmacSHA256": hashlib.sha256,
    "HmacSHA512": hashlib.sha512,
}


def generate_secret(length: int) -> str:
    """
    Generate a new random raw secret of `length` alphanumeric characters.

    The alphabet never contains the salt delimiter characters, so a
    generated secret is always safe to salt.
    """
    return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))


def secret_to_bytes(raw_secret: str) -> bytes:
    return raw_secret.encode(SECRET_CHARSET)


def secret_from_bytes(secret_bytes: bytes) -> str:
    return secret_bytes.decode(SECRET_CHARSET)


def encode_secret(raw_secret: str) -> str:
    """Base32 form of a raw secret, as shown to users and authenticator apps."""
    return base64.b32encode(secret_to_bytes(raw_secret)).decode("ascii").rstrip("=")


def decode_secret(encoded_secret: str) -> bytes:
    """
    Decode a user-supplied Base32 secret.

    Whitespace and case are forgiven and missing padding is restored.
    Raises ValueError (binascii.Error) for anything that isn't Base32.
    """
    cleaned = "".join(encoded_secret.split()).upper().rstrip("=")
    cleaned += "=" * (-len(cleaned) % 8)
    return base64.b32decode(cleaned)


def build_totp(raw_secret: str, algorithm: str = "HmacSHA1", digits: int = 6, period: int = 30) -> pyotp.TOTP:
    return pyotp.TOTP(
        encode_secret(raw_secret),
        digits=digits,
        digest=OTP_DIGESTS[algorithm],
        interval=period,
    )


def get_totp_uri(totp: pyotp.TOTP, username: str, issuer: str) -> str:
    """
    Generate the otpauth:// URI for QR code encoding.

    Format: otpauth://totp/{issuer}:{username}?secret={secret}&issuer={issuer}
    """
    return totp.provisioning_uri(name=username, issuer_name=issuer)


def generate_qr_code_base64(uri: str) -> str:
    """
    Render an otpauth:// URI as a Base64-encoded PNG QR code.

    Frontend can display this directly using: <img src="data:image/png;base64,{result}">
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    buffer.seek(0)

    return base64.b64encode(buffer.read()).decode("utf-8")


def get_current_totp(raw_secret: str, algorithm: str = "HmacSHA1", digits: int = 6, period: int = 30) -> str:
    """
    Get the current TOTP code for a raw secret.
    Useful for testing only - never expose this in production!
    """
    return build_totp(raw_secret, algorithm, digits, period).now()
