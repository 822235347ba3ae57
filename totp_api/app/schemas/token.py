# totp_api/app/schemas/token.py
from typing import List, Optional

from pydantic import BaseModel, Field


class RealmAccess(BaseModel):
    roles: List[str] = Field(default_factory=list)


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    realm_access: Optional[RealmAccess] = None

    def has_realm_role(self, role: str) -> bool:
        return self.realm_access is not None and role in self.realm_access.roles
