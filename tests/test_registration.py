"""
Tests for registration when the database write itself fails.
"""
import pytest
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from totp_api.app.api import deps
from totp_api.app.core.errors import CredentialConflict, CredentialCreationFailed
from totp_api.app.credential.provider import OTPCredentialProvider, OTPPolicy
from totp_api.app.credential.registration import register_otp_credential
from totp_api.app.credential.store import CredentialStore
from totp_api.app.db.base import get_db
from totp_api.app.models import Credential
from totp_api.app.security import salted_secret
from totp_api.app.security.totp import encode_secret, get_current_totp
from totp_api.main import app

from tests.conftest import KNOWN_SECRET, OTHER_SECRET


class RacingStore(CredentialStore):
    """Misses existing credentials, as a request racing another one would."""

    async def get_stored_credential_by_name_and_type(self, user, name, credential_type):
        return None


class BrokenStore(CredentialStore):
    async def create_credential(self, user, model):
        raise OperationalError("INSERT INTO credentials", {}, Exception("disk I/O error"))


async def add_credential(session_factory, user_id, secret=KNOWN_SECRET, label="phone"):
    async with session_factory() as session:
        session.add(Credential(
            user_id=user_id,
            type="otp",
            user_label=label,
            secret_data=salted_secret.encode(secret, b"\x00" * 16),
        ))
        await session.commit()


async def labels_and_secrets(session_factory, user_id):
    async with session_factory() as session:
        result = await session.execute(select(Credential).where(Credential.user_id == user_id))
        return [(c.user_label, salted_secret.decode(c.secret_data).raw_secret) for c in result.scalars()]


class TestRegisterOTPCredential:

    def setup_method(self):
        self.provider = OTPCredentialProvider(OTPPolicy())

    async def test_duplicate_insert_is_a_conflict(self, db, session_factory, end_user):
        """A unique-constraint violation at flush answers like an existing device name."""
        user_id = end_user.id
        await add_credential(session_factory, user_id)

        with pytest.raises(CredentialConflict):
            await register_otp_credential(
                RacingStore(db),
                self.provider,
                end_user,
                OTHER_SECRET,
                device_name="phone",
                initial_code=get_current_totp(OTHER_SECRET),
            )

        assert await labels_and_secrets(session_factory, user_id) == [("phone", KNOWN_SECRET)]

    async def test_session_usable_after_conflict(self, db, session_factory, end_user):
        """The failed transaction is rolled back, so the same session can register again."""
        user_id = end_user.id
        await add_credential(session_factory, user_id)
        store = RacingStore(db)

        with pytest.raises(CredentialConflict):
            await register_otp_credential(
                store, self.provider, end_user, OTHER_SECRET,
                device_name="phone", initial_code=get_current_totp(OTHER_SECRET),
            )
        # rollback expired the loaded user
        await db.refresh(end_user)
        await register_otp_credential(
            store, self.provider, end_user, OTHER_SECRET,
            device_name="tablet", initial_code=get_current_totp(OTHER_SECRET),
        )

        assert sorted(await labels_and_secrets(session_factory, user_id)) == [
            ("phone", KNOWN_SECRET),
            ("tablet", OTHER_SECRET),
        ]

    async def test_write_failure_is_creation_failure(self, db, session_factory, end_user):
        user_id = end_user.id

        with pytest.raises(CredentialCreationFailed):
            await register_otp_credential(
                BrokenStore(db), self.provider, end_user, KNOWN_SECRET,
                device_name="phone", initial_code=get_current_totp(KNOWN_SECRET),
            )

        assert await labels_and_secrets(session_factory, user_id) == []


class TestRegisterEndpointWriteFailures:

    @pytest.fixture
    def use_store(self):
        def install(store_class):
            def get_store(db=Depends(get_db)):
                return store_class(db)
            app.dependency_overrides[deps.get_credential_store] = get_store
        yield install
        app.dependency_overrides.pop(deps.get_credential_store, None)

    def body(self, secret):
        return {
            "encodedSecret": encode_secret(secret),
            "deviceName": "phone",
            "initialCode": get_current_totp(secret),
        }

    async def test_concurrent_duplicate_returns_409(self, client, session_factory, end_user, auth_headers, use_store):
        user_id = end_user.id
        await add_credential(session_factory, user_id)
        use_store(RacingStore)

        response = await client.post(f"/api/v1/totp/{user_id}/register", json=self.body(OTHER_SECRET), headers=auth_headers)

        assert response.status_code == 409
        assert response.json() == {"message": "TOTP credential already exists"}

    async def test_write_failure_returns_500(self, client, end_user, auth_headers, use_store):
        use_store(BrokenStore)

        response = await client.post(f"/api/v1/totp/{end_user.id}/register", json=self.body(KNOWN_SECRET), headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to create TOTP credential"}
