"""
_User 写入：注册、唯一性、authData 登录/关联、密码与邮箱
"""

import pytest

from cloudstore.application import rest
from cloudstore.application.write import RestWrite, run_write
from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.domain.auth import nobody
from cloudstore.domain.password import verify_password_sync


async def _signup(config, **data):
    return await run_write(config, nobody(config), "_User", None, data)


@pytest.mark.asyncio
async def test_signup_creates_user_and_login_session(config, database):
    result = await _signup(config, username="alice", password="pw")

    assert result.status == 201
    user_id = result.response["objectId"]
    assert len(user_id) == 10
    assert result.response["createdAt"]
    assert result.response["sessionToken"].startswith("r:")
    assert result.location == f"{config.mount}/users/{user_id}"

    sessions = database.objects("_Session")
    assert len(sessions) == 1
    session = sessions[0]
    assert session["sessionToken"] == result.response["sessionToken"]
    assert session["user"] == {"__type": "Pointer", "className": "_User", "objectId": user_id}
    assert session["createdWith"] == {"action": "login", "authProvider": "password"}
    assert session["restricted"] is False
    assert session["expiresAt"]["__type"] == "Date"


@pytest.mark.asyncio
async def test_stored_user_has_hashed_password_and_default_acl(config, database):
    result = await _signup(config, username="bob", password="secret")
    row = database.objects("_User")[0]

    assert "password" not in row
    assert verify_password_sync("secret", row["_hashed_password"])
    user_id = result.response["objectId"]
    assert row["ACL"] == {user_id: {"read": True, "write": True}, "*": {"read": True, "write": False}}
    assert row["createdAt"] == row["updatedAt"] == result.response["createdAt"]


@pytest.mark.asyncio
async def test_missing_username_and_password(config):
    with pytest.raises(CloudStoreError) as exc:
        await _signup(config, password="pw")
    assert exc.value.code == ErrorCode.USERNAME_MISSING

    with pytest.raises(CloudStoreError) as exc:
        await _signup(config, username="carol")
    assert exc.value.code == ErrorCode.PASSWORD_MISSING


@pytest.mark.asyncio
async def test_username_taken(config):
    await _signup(config, username="dave", password="pw")
    with pytest.raises(CloudStoreError) as exc:
        await _signup(config, username="dave", password="pw2")
    assert exc.value.code == ErrorCode.USERNAME_TAKEN


@pytest.mark.asyncio
async def test_email_validation_and_uniqueness(config):
    with pytest.raises(CloudStoreError) as exc:
        await _signup(config, username="erin", password="pw", email="not-an-email")
    assert exc.value.code == ErrorCode.INVALID_EMAIL_ADDRESS

    await _signup(config, username="erin", password="pw", email="erin@example.com")
    with pytest.raises(CloudStoreError) as exc:
        await _signup(config, username="erin2", password="pw", email="erin@example.com")
    assert exc.value.code == ErrorCode.EMAIL_TAKEN


@pytest.mark.asyncio
async def test_email_with_trailing_newline_rejected(config, database):
    with pytest.raises(CloudStoreError) as exc:
        await _signup(config, username="fay", password="pw", email="a@b\n")
    assert exc.value.code == ErrorCode.INVALID_EMAIL_ADDRESS
    assert database.objects("_User") == []


@pytest.mark.asyncio
async def test_client_object_id_rejected_on_create(config):
    with pytest.raises(CloudStoreError) as exc:
        RestWrite(config, nobody(config), "_User", None, {"objectId": "x", "username": "u", "password": "p"})
    assert exc.value.code == ErrorCode.INVALID_KEY_NAME


@pytest.mark.asyncio
async def test_update_requires_own_session(config, user_auth_for):
    alice = await _signup(config, username="alice", password="pw")
    bob = await _signup(config, username="bob", password="pw")
    alice_id = alice.response["objectId"]

    with pytest.raises(CloudStoreError) as exc:
        await rest.update(config, nobody(config), "_User", alice_id, {"nickname": "x"})
    assert exc.value.code == ErrorCode.SESSION_MISSING

    bob_auth = await user_auth_for(bob.response["objectId"])
    with pytest.raises(CloudStoreError) as exc:
        await rest.update(config, bob_auth, "_User", alice_id, {"nickname": "x"})
    assert exc.value.code == ErrorCode.SESSION_MISSING

    alice_auth = await user_auth_for(alice_id)
    result = await rest.update(config, alice_auth, "_User", alice_id, {"nickname": "al"})
    assert result.status_code == 200
    assert "updatedAt" in result.response


@pytest.mark.asyncio
async def test_password_change_by_user_clears_sessions(config, database, user_auth_for):
    alice = await _signup(config, username="alice", password="pw")
    alice_id = alice.response["objectId"]
    assert len(database.objects("_Session")) == 1

    alice_auth = await user_auth_for(alice_id)
    await rest.update(config, alice_auth, "_User", alice_id, {"password": "new-pw"})
    await config.background.drain()

    assert database.objects("_Session") == []
    row = database.objects("_User")[0]
    assert verify_password_sync("new-pw", row["_hashed_password"])


@pytest.mark.asyncio
async def test_password_change_by_master_keeps_sessions(config, database, master_auth):
    alice = await _signup(config, username="alice", password="pw")
    await rest.update(config, master_auth, "_User", alice.response["objectId"], {"password": "new-pw"})
    await config.background.drain()
    assert len(database.objects("_Session")) == 1


class TestAuthData:
    @pytest.mark.asyncio
    async def test_anonymous_signup_gets_random_username(self, config, database):
        result = await _signup(config, authData={"anonymous": {"id": "device-1"}})
        assert result.status == 201

        row = database.objects("_User")[0]
        assert len(row["username"]) == 32
        session = database.objects("_Session")[0]
        assert session["createdWith"] == {"action": "login", "authProvider": "anonymous"}

    @pytest.mark.asyncio
    async def test_existing_auth_data_logs_in(self, config, database):
        first = await _signup(config, authData={"anonymous": {"id": "device-1"}})
        again = await _signup(config, authData={"anonymous": {"id": "device-1"}})

        assert again.status is None
        assert again.status_code == 200
        assert again.response["objectId"] == first.response["objectId"]
        assert again.response["sessionToken"].startswith("r:")
        assert again.response["sessionToken"] != first.response["sessionToken"]
        assert "_hashed_password" not in again.response
        assert again.location == f"{config.mount}/users/{first.response['objectId']}"
        # no second user, but a second session
        assert len(database.objects("_User")) == 1
        assert len(database.objects("_Session")) == 2

    @pytest.mark.asyncio
    async def test_provider_entry_without_id(self, config):
        with pytest.raises(CloudStoreError) as exc:
            await _signup(config, authData={"anonymous": {"token": "x"}})
        assert exc.value.code == ErrorCode.UNSUPPORTED_SERVICE

    @pytest.mark.asyncio
    async def test_unknown_provider(self, config):
        with pytest.raises(CloudStoreError) as exc:
            await _signup(config, authData={"myspace": {"id": "x"}})
        assert exc.value.code == ErrorCode.UNSUPPORTED_SERVICE

    @pytest.mark.asyncio
    async def test_custom_validator_rejection(self, config):
        config.auth_data_manager.register("acme", lambda data: data.get("token") == "good")
        await _signup(config, authData={"acme": {"id": "a1", "token": "good"}})
        with pytest.raises(CloudStoreError) as exc:
            await _signup(config, authData={"acme": {"id": "a2", "token": "bad"}})
        assert exc.value.code == ErrorCode.UNSUPPORTED_SERVICE

    @pytest.mark.asyncio
    async def test_linking_to_another_user_fails(self, config, master_auth):
        first = await _signup(config, authData={"anonymous": {"id": "device-1"}})
        other = await _signup(config, username="other", password="pw")

        with pytest.raises(CloudStoreError) as exc:
            await rest.update(
                config, master_auth, "_User", other.response["objectId"], {"authData": {"anonymous": {"id": "device-1"}}}
            )
        assert exc.value.code == ErrorCode.ACCOUNT_ALREADY_LINKED

        # re-linking the owner is fine
        result = await rest.update(
            config, master_auth, "_User", first.response["objectId"], {"authData": {"anonymous": {"id": "device-1"}}}
        )
        assert "updatedAt" in result.response

    @pytest.mark.asyncio
    async def test_ambiguous_auth_data_fails(self, config, database):
        config.auth_data_manager.register("acme", lambda data: True)
        await _signup(config, authData={"anonymous": {"id": "d1"}})
        await _signup(config, authData={"acme": {"id": "a1"}})
        with pytest.raises(CloudStoreError) as exc:
            await _signup(config, authData={"anonymous": {"id": "d1"}, "acme": {"id": "a1"}})
        assert exc.value.code == ErrorCode.ACCOUNT_ALREADY_LINKED


class TestEmailVerification:
    @pytest.fixture
    def app_options(self, app_options):
        return app_options.model_copy(update={"verify_user_emails": True})

    @pytest.mark.asyncio
    async def test_signup_with_email_sends_verification(self, config, database, email_adapter):
        await _signup(config, username="vera", password="pw", email="vera@example.com")
        await config.background.drain()

        row = database.objects("_User")[0]
        assert row["emailVerified"] is False
        assert row["_email_verify_token"]
        assert len(email_adapter.sent) == 1
        to, subject, text = email_adapter.sent[0]
        assert to == "vera@example.com"
        assert "Test App" in subject
        assert f"{config.verify_email_url}?token={row['_email_verify_token']}" in text
