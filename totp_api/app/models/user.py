# totp_api/app/models/user.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from totp_api.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(255), unique=True, index=True, nullable=False)

    # Client id this user is the service account of, None for people.
    # Only service accounts may call the TOTP API, and they can't be its target.
    service_account_client_id = Column(String(255), nullable=True)

    enabled = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    credentials = relationship(
        "Credential",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="raise",
    )

    @property
    def is_service_account(self) -> bool:
        return self.service_account_client_id is not None
