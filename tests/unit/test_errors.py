"""
错误类型单元测试
"""

from cloudstore.core.errors import (
    CloudStoreError,
    ConfigurationError,
    ErrorCode,
    account_already_linked,
    invalid_key_name,
    object_not_found,
    session_token_required,
    unsupported_service,
)


class TestCloudStoreError:
    def test_str_includes_code(self):
        err = CloudStoreError(ErrorCode.USERNAME_TAKEN, "taken")
        assert str(err) == "[202] taken"

    def test_to_dict_is_wire_shape(self):
        err = CloudStoreError(ErrorCode.INVALID_ACL, "Invalid ACL.")
        assert err.to_dict() == {"code": 123, "error": "Invalid ACL."}

    def test_is_exception(self):
        try:
            raise object_not_found()
        except CloudStoreError as e:
            assert e.code == ErrorCode.OBJECT_NOT_FOUND


class TestHelpers:
    def test_helper_codes(self):
        assert invalid_key_name("x").code == 105
        assert unsupported_service().code == 252
        assert account_already_linked().code == 208
        assert session_token_required().code == 209
        assert session_token_required().message == "Session token required."


def test_error_code_values():
    assert ErrorCode.INTERNAL_SERVER_ERROR == 1
    assert ErrorCode.SCRIPT_FAILED == 141
    assert ErrorCode.SESSION_MISSING == 206
    assert ErrorCode.INVALID_INSTALLATION_ID == 132


def test_configuration_error_message():
    err = ConfigurationError("bad")
    assert err.message == "bad"
