"""
_Installation 写入：归一化、去重、合并与清理
"""

import pytest

from cloudstore.application.write import run_write
from cloudstore.core.errors import CloudStoreError, ErrorCode

IOS_TOKEN = "AB" * 32


async def _install(config, auth, **data):
    return await run_write(config, auth, "_Installation", None, data)


@pytest.mark.asyncio
async def test_requires_id_field_and_device_type(config, anon_auth):
    with pytest.raises(CloudStoreError) as exc:
        await _install(config, anon_auth, deviceType="ios")
    assert exc.value.code == ErrorCode.MISSING_REQUIRED_FIELD

    with pytest.raises(CloudStoreError) as exc:
        await _install(config, anon_auth, installationId="abc")
    assert exc.value.code == ErrorCode.MISSING_REQUIRED_FIELD


@pytest.mark.asyncio
async def test_normalizes_ids(config, database, anon_auth):
    await _install(config, anon_auth, installationId="ABC-123", deviceToken=IOS_TOKEN, deviceType="ios")
    row = database.objects("_Installation")[0]
    assert row["installationId"] == "abc-123"
    assert row["deviceToken"] == IOS_TOKEN.lower()


@pytest.mark.asyncio
async def test_same_installation_id_becomes_update(config, database, anon_auth):
    first = await _install(config, anon_auth, installationId="abc", deviceType="android")
    second = await _install(config, anon_auth, installationId="ABC", deviceType="android", badge=3)

    assert first.status == 201
    assert second.status is None
    assert "updatedAt" in second.response
    rows = database.objects("_Installation")
    assert len(rows) == 1
    assert rows[0]["badge"] == 3
    assert rows[0]["objectId"] == first.response["objectId"]


@pytest.mark.asyncio
async def test_merges_installation_into_token_row(config, database, anon_auth):
    token_row = await _install(config, anon_auth, deviceToken="tok", deviceType="ios")
    await _install(config, anon_auth, installationId="inst", deviceType="ios")
    assert len(database.objects("_Installation")) == 2

    await _install(config, anon_auth, installationId="inst", deviceToken="tok", deviceType="ios")

    rows = database.objects("_Installation")
    assert len(rows) == 1
    assert rows[0]["objectId"] == token_row.response["objectId"]
    assert rows[0]["installationId"] == "inst"


@pytest.mark.asyncio
async def test_ambiguous_token_needs_installation_id(config, database, anon_auth):
    await database.create("_Installation", {"objectId": "a", "deviceToken": "tok", "deviceType": "ios"})
    await database.create("_Installation", {"objectId": "b", "deviceToken": "tok", "deviceType": "ios"})

    with pytest.raises(CloudStoreError) as exc:
        await _install(config, anon_auth, deviceToken="tok", deviceType="ios")
    assert exc.value.code == ErrorCode.INVALID_INSTALLATION_ID


@pytest.mark.asyncio
async def test_stale_token_rows_cleaned_in_background(config, database, anon_auth):
    await database.create(
        "_Installation", {"objectId": "old", "deviceToken": "tok", "installationId": "old-inst", "deviceType": "ios"}
    )

    result = await _install(config, anon_auth, installationId="new-inst", deviceToken="tok", deviceType="ios")
    assert result.status == 201
    await config.background.drain()

    rows = database.objects("_Installation")
    assert [r["installationId"] for r in rows] == ["new-inst"]


@pytest.mark.asyncio
async def test_update_cannot_change_immutable_fields(config, anon_auth):
    created = await _install(config, anon_auth, installationId="abc", deviceType="ios")
    object_id = created.response["objectId"]

    with pytest.raises(CloudStoreError) as exc:
        await run_write(config, anon_auth, "_Installation", {"objectId": object_id}, {"deviceType": "android"})
    assert exc.value.code == ErrorCode.CHANGED_IMMUTABLE_FIELD

    with pytest.raises(CloudStoreError) as exc:
        await run_write(config, anon_auth, "_Installation", {"objectId": object_id}, {"installationId": "other"})
    assert exc.value.code == ErrorCode.CHANGED_IMMUTABLE_FIELD


@pytest.mark.asyncio
async def test_update_missing_object(config, anon_auth):
    with pytest.raises(CloudStoreError) as exc:
        await run_write(config, anon_auth, "_Installation", {"objectId": "nope"}, {"badge": 1})
    assert exc.value.code == ErrorCode.OBJECT_NOT_FOUND


@pytest.mark.asyncio
async def test_same_device_token_becomes_update(config, database, anon_auth):
    token = "T" * 64
    first = await _install(config, anon_auth, deviceToken=token, deviceType="ios")
    second = await _install(config, anon_auth, deviceToken=token, deviceType="ios")

    assert first.status == 201
    assert second.status is None
    rows = database.objects("_Installation")
    assert len(rows) == 1
    assert rows[0]["objectId"] == first.response["objectId"]
    assert rows[0]["deviceToken"] == "t" * 64
