# totp_api/app/models/credential.py
import uuid

from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from totp_api.app.db.base import Base


class Credential(Base):
    """
    A user's stored credential, as the identity provider keeps it.

    For OTP credentials secret_data holds the persisted secret string:
    either "<raw secret>|salt:<base64 salt>" or, for credentials created
    before salting, the raw secret alone.
    """
    __tablename__ = "credentials"
    __table_args__ = (
        UniqueConstraint("user_id", "type", "user_label", name="uq_credential_label"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Credential type tag, "otp" for everything this service touches
    type = Column(String(32), nullable=False)

    # Device name chosen at registration, unique per user and type
    user_label = Column(String(255), nullable=False)

    secret_data = Column(Text, nullable=False)

    # OTP policy snapshot taken when the credential was created
    algorithm = Column(String(32), nullable=False, default="HmacSHA1")
    digits = Column(Integer, nullable=False, default=6)
    period = Column(Integer, nullable=False, default=30)

    created_date = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="credentials")
