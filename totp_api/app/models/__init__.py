from totp_api.app.models.user import User
from totp_api.app.models.credential import Credential

__all__ = ["User", "Credential"]
