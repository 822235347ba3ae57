# totp_api/app/credential/store.py
"""
User and credential store, the identity provider's persistence seen
through the handful of operations the TOTP API needs.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from totp_api.app.models.credential import Credential
from totp_api.app.models.user import User


class CredentialStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        return await self.db.get(User, user_id)

    async def get_stored_credential_by_name_and_type(
        self, user: User, name: str, credential_type: str
    ) -> Optional[Credential]:
        result = await self.db.execute(
            select(Credential).where(
                Credential.user_id == user.id,
                Credential.type == credential_type,
                Credential.user_label == name,
            )
        )
        return result.scalars().first()

    async def create_credential(self, user: User, model) -> Credential:
        """Stage a new credential row built from an OTPCredentialModel. The caller commits."""
        credential = Credential(
            user_id=user.id,
            type=model.TYPE,
            user_label=model.user_label,
            secret_data=model.secret_data,
            algorithm=model.algorithm,
            digits=model.digits,
            period=model.period,
        )
        self.db.add(credential)
        await self.db.flush()
        return credential

    async def remove_credential(self, credential: Credential) -> None:
        await self.db.delete(credential)
        await self.db.flush()

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
