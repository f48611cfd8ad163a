import re

import pytest

from cloudstore.domain.crypto_utils import new_object_id, new_session_token, new_token, random_hex_string, random_string
from cloudstore.domain.encoding import one_year_from, parse_iso, to_iso, utcnow
from cloudstore.domain.password import hash_password, hash_password_sync, verify_password, verify_password_sync


def test_object_id_shape():
    ids = {new_object_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(re.fullmatch(r"[A-Za-z0-9]{10}", i) for i in ids)


def test_tokens():
    assert re.fullmatch(r"[0-9a-f]{32}", new_token())
    assert re.fullmatch(r"r:[0-9a-f]{32}", new_session_token())
    assert len(random_hex_string(8)) == 8
    assert len(random_string(25)) == 25


def test_random_string_rejects_bad_size():
    with pytest.raises(ValueError):
        random_string(0)
    with pytest.raises(ValueError):
        random_hex_string(3)


def test_password_roundtrip_sync():
    hashed = hash_password_sync("s3cret")
    assert hashed != "s3cret"
    assert verify_password_sync("s3cret", hashed)
    assert not verify_password_sync("wrong", hashed)
    assert not verify_password_sync("s3cret", None)
    assert not verify_password_sync("s3cret", "not-a-hash")


@pytest.mark.asyncio
async def test_password_async():
    hashed = await hash_password("pw")
    assert await verify_password("pw", hashed)


def test_iso_timestamps():
    now = utcnow()
    iso = to_iso(now)
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", iso)
    assert abs((parse_iso(iso) - now).total_seconds()) < 0.001


def test_one_year_from_leap_day():
    from datetime import datetime, timezone

    leap = datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert one_year_from(leap) == datetime(2025, 2, 28, tzinfo=timezone.utc)
