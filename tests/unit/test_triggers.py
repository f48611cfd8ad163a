"""
触发器注册表单元测试
"""

import pytest

from cloudstore.application.triggers import TriggerRegistry, TriggerType, inflate
from cloudstore.core.errors import CloudStoreError, ErrorCode
from cloudstore.domain.auth import Auth
from cloudstore.domain.cloud_object import CloudObject


class TestRegistry:
    def test_exists_is_scoped_by_app(self):
        registry = TriggerRegistry()
        registry.add(TriggerType.before_save, "Post", lambda req: None, "app-a")
        assert registry.trigger_exists("Post", TriggerType.before_save, "app-a")
        assert not registry.trigger_exists("Post", TriggerType.before_save, "app-b")
        assert not registry.trigger_exists("Post", TriggerType.after_save, "app-a")
        assert not registry.trigger_exists("Post", TriggerType.before_save, None)

    def test_clear_by_app(self):
        registry = TriggerRegistry()
        registry.add(TriggerType.after_save, "Post", lambda req: None, "a")
        registry.add(TriggerType.after_save, "Post", lambda req: None, "b")
        registry.clear("a")
        assert not registry.trigger_exists("Post", TriggerType.after_save, "a")
        assert registry.trigger_exists("Post", TriggerType.after_save, "b")

    def test_accepts_string_kind(self):
        registry = TriggerRegistry()
        registry.add("beforeSave", "Post", lambda req: None, "a")
        assert registry.trigger_exists("Post", TriggerType.before_save, "a")


class TestMaybeRunTrigger:
    @pytest.mark.asyncio
    async def test_no_hook_returns_none(self):
        registry = TriggerRegistry()
        obj = CloudObject("Post")
        assert await registry.maybe_run_trigger(TriggerType.before_save, Auth(), obj, None, "a") is None

    @pytest.mark.asyncio
    async def test_before_save_returning_object_replaces_data(self):
        registry = TriggerRegistry()

        def hook(request):
            request.object.set("title", request.object.get("title").upper())
            return request.object

        registry.add(TriggerType.before_save, "Post", hook, "a")
        obj = CloudObject("Post", "abc", {"title": "hi"})
        result = await registry.maybe_run_trigger(TriggerType.before_save, Auth(), obj, None, "a")
        assert result == {"title": "HI", "objectId": "abc"}

    @pytest.mark.asyncio
    async def test_async_hook_and_mapping_result(self):
        registry = TriggerRegistry()

        async def hook(request):
            return {"title": "replaced"}

        registry.add(TriggerType.before_save, "Post", hook, "a")
        result = await registry.maybe_run_trigger(TriggerType.before_save, Auth(), CloudObject("Post"), None, "a")
        assert result == {"title": "replaced"}

    @pytest.mark.asyncio
    async def test_request_carries_auth(self):
        registry = TriggerRegistry()
        seen = {}

        def hook(request):
            seen["master"] = request.master
            seen["user"] = request.user
            seen["name"] = request.trigger_name

        registry.add(TriggerType.after_save, "Post", hook, "a")
        auth = Auth(user={"objectId": "u1"})
        assert await registry.maybe_run_trigger(TriggerType.after_save, auth, CloudObject("Post"), None, "a") is None
        assert seen == {"master": False, "user": {"objectId": "u1"}, "name": TriggerType.after_save}

    @pytest.mark.asyncio
    async def test_plain_exception_becomes_script_failed(self):
        registry = TriggerRegistry()

        def hook(request):
            raise ValueError("nope")

        registry.add(TriggerType.before_save, "Post", hook, "a")
        with pytest.raises(CloudStoreError) as exc:
            await registry.maybe_run_trigger(TriggerType.before_save, Auth(), CloudObject("Post"), None, "a")
        assert exc.value.code == ErrorCode.SCRIPT_FAILED
        assert exc.value.message == "nope"

    @pytest.mark.asyncio
    async def test_typed_error_passes_through(self):
        registry = TriggerRegistry()

        def hook(request):
            raise CloudStoreError(ErrorCode.DUPLICATE_VALUE, "dup")

        registry.add(TriggerType.before_save, "Post", hook, "a")
        with pytest.raises(CloudStoreError) as exc:
            await registry.maybe_run_trigger(TriggerType.before_save, Auth(), CloudObject("Post"), None, "a")
        assert exc.value.code == ErrorCode.DUPLICATE_VALUE


def test_inflate_builds_object():
    obj = inflate({"className": "Post", "objectId": "x1"}, {"title": "t", "className": "ignored"})
    assert obj.class_name == "Post"
    assert obj.object_id == "x1"
    assert obj.get("title") == "t"
    assert not obj.has("className")


def test_cloud_object_save_response():
    obj = CloudObject("Post")
    obj.set({"title": "a", "className": "ignored"})
    assert obj.dirty_keys() == {"title"}
    obj.handle_save_response({"objectId": "new", "createdAt": "2020-01-01T00:00:00.000Z"}, 201)
    assert obj.object_id == "new"
    assert obj.get("createdAt") == "2020-01-01T00:00:00.000Z"
    assert obj.status == 201
    assert obj.dirty_keys() == set()
