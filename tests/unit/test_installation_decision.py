"""
_Installation 去重决策表：每一行一个用例
"""

import pytest

from cloudstore.application.write.installations import InstallationFacts, resolve_installation
from cloudstore.core.errors import CloudStoreError, ErrorCode


def _facts(id_match=None, matches=(), installation_id=None, device_token=None, app_identifier=None):
    return InstallationFacts(
        id_match=id_match,
        device_token_matches=list(matches),
        installation_id=installation_id,
        device_token=device_token,
        app_identifier=app_identifier,
    )


class TestNoIdMatch:
    def test_no_token_matches_is_plain_create(self):
        decision = resolve_installation(_facts(installation_id="i1", device_token="t"))
        assert decision.object_id is None
        assert decision.cleanup == []
        assert decision.merge_delete is None

    def test_single_token_match_without_installation_id_is_adopted(self):
        decision = resolve_installation(
            _facts(matches=[{"objectId": "m1", "deviceToken": "t"}], installation_id="i1", device_token="t")
        )
        assert decision.object_id == "m1"

    def test_single_token_match_adopted_when_request_lacks_installation_id(self):
        decision = resolve_installation(
            _facts(matches=[{"objectId": "m1", "installationId": "other"}], device_token="t")
        )
        assert decision.object_id == "m1"

    def test_multiple_token_matches_need_installation_id(self):
        with pytest.raises(CloudStoreError) as exc:
            resolve_installation(_facts(matches=[{"objectId": "a"}, {"objectId": "b"}], device_token="t"))
        assert exc.value.code == ErrorCode.INVALID_INSTALLATION_ID

    def test_conflicting_token_matches_are_cleaned_then_created(self):
        decision = resolve_installation(
            _facts(
                matches=[{"objectId": "a", "installationId": "old"}],
                installation_id="new",
                device_token="t",
                app_identifier="com.example",
            )
        )
        assert decision.object_id is None
        assert decision.cleanup == [
            {"deviceToken": "t", "installationId": {"$ne": "new"}, "appIdentifier": "com.example"}
        ]


class TestIdMatch:
    def test_merge_into_token_match_without_installation_id(self):
        decision = resolve_installation(
            _facts(
                id_match={"objectId": "idrow", "installationId": "i1"},
                matches=[{"objectId": "tokrow", "deviceToken": "t"}],
                installation_id="i1",
                device_token="t",
            )
        )
        assert decision.object_id == "tokrow"
        assert decision.merge_delete == {"objectId": "idrow"}
        assert decision.cleanup == []

    def test_token_change_adopts_id_match_and_cleans(self):
        decision = resolve_installation(
            _facts(
                id_match={"objectId": "idrow", "installationId": "i1", "deviceToken": "old"},
                matches=[{"objectId": "x", "installationId": "i2"}],
                installation_id="i1",
                device_token="new",
            )
        )
        assert decision.object_id == "idrow"
        assert decision.merge_delete is None
        assert decision.cleanup == [{"deviceToken": "new", "installationId": {"$ne": "i1"}}]

    def test_same_token_adopts_id_match_without_cleanup(self):
        decision = resolve_installation(
            _facts(
                id_match={"objectId": "idrow", "installationId": "i1", "deviceToken": "t"},
                matches=[{"objectId": "idrow", "installationId": "i1", "deviceToken": "t"}],
                installation_id="i1",
                device_token="t",
            )
        )
        assert decision.object_id == "idrow"
        assert decision.cleanup == []

    def test_no_token_in_request_adopts_id_match(self):
        decision = resolve_installation(_facts(id_match={"objectId": "idrow"}, installation_id="i1"))
        assert decision.object_id == "idrow"
        assert decision.cleanup == []
