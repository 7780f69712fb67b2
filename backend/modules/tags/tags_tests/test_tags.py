# -*- coding: utf-8 -*-
"""
标签模块测试
测试标签的创建、读取、更新、删除以及记录方案
"""

import pytest
from sqlalchemy import select

from modules.documents.documents_models import DocumentTagMap
from modules.tags.tags_models import Tag, RecordScheme
from modules.tags.tags_schemas import TagCreate, TagUpdate, RecordSchemeCreate, RecordSchemeUpdate
from core.errors import UnprocessableException, UnsupportedMediaException, ValidationException


async def _create(client, **body):
    response = await client.post("/api/tags", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestTagsModels:
    """测试标签数据模型"""

    def test_table_names(self):
        assert Tag.__tablename__ == "tags"
        assert RecordScheme.__tablename__ == "free_record_schemes"


class TestTagsSchemas:
    """测试标签请求体解析"""

    def test_create_defaults(self):
        data = TagCreate.model_validate({"name": "work"})

        assert data.theme_color == "ecf0f1"
        assert data.parent_id is None
        assert data.pinned is False

    def test_create_requires_name(self):
        with pytest.raises(ValidationException):
            TagCreate.model_validate({"theme_color": "fff"})

    @pytest.mark.parametrize("body", [
        {"name": "a", "theme_color": "zzz"},
        {"name": "a", "theme_color": "#ffffff"},
        {"name": "a", "parent_id": "abc"},
        {"name": "a", "parent_id": 1.5},
    ])
    def test_create_rejects_bad_values(self, body):
        with pytest.raises(UnprocessableException):
            TagCreate.model_validate(body)

    def test_update_coerces_values(self):
        changes = TagUpdate.model_validate({"order": "3", "pinned": 1, "hidden": False, "parent_id": None}).changes()
        assert changes == {"order": 3, "pinned": True, "hidden": False, "parent_id": None}

    @pytest.mark.parametrize("body", [
        {"pinned": "yes"},
        {"order": 1.5},
        {"name": 12},
        {"theme_color": "12"},
    ])
    def test_update_rejects_bad_values(self, body):
        with pytest.raises(UnprocessableException):
            TagUpdate.model_validate(body)

    def test_record_scheme_graph_type(self):
        assert RecordSchemeCreate.model_validate({"name": "w"}).default_graph_type == "flat"
        assert RecordSchemeCreate.model_validate({"name": "w", "default_graph_type": "SUM"}).default_graph_type == "sum"

        with pytest.raises(UnsupportedMediaException):
            RecordSchemeCreate.model_validate({"name": "w", "default_graph_type": "bar"})

    def test_text_fields_use_json_literals(self):
        """非字符串的名称按 JSON 字面量保存"""
        assert TagCreate.model_validate({"name": None}).name == "null"
        assert TagCreate.model_validate({"name": 7}).name == "7"

        scheme = RecordSchemeCreate.model_validate({"name": True, "unit_name": None})
        assert scheme.name == "true"
        assert scheme.unit_name == "null"

    def test_record_scheme_update(self):
        changes = RecordSchemeUpdate.model_validate({"name": False, "unit_name": None}).changes()
        assert changes == {"name": "false", "unit_name": None}

        with pytest.raises(UnprocessableException) as exc_info:
            RecordSchemeUpdate.model_validate({"tag_id": 3})
        assert exc_info.value.message == "Unprocessable entity (tag_id)"


class TestTagsApi:
    """测试标签接口"""

    @pytest.mark.asyncio
    async def test_create_and_read_default_tag(self, auth_client, login_user):
        """默认值创建后读取一致，且没有 sub_tags"""
        created = await auth_client.post("/api/tags", json={"name": "work"})

        assert created.status_code == 201
        body = created.json()
        assert created.headers["location"] == f"/api/tags/{body['id']}"
        assert body == {
            "id": body["id"],
            "name": "work",
            "theme_color": "ecf0f1",
            "user_id": login_user.id,
            "pinned": False,
        }

        response = await auth_client.get(f"/api/tags/{body['id']}")
        assert response.status_code == 200
        assert response.json() == {
            "id": body["id"],
            "name": "work",
            "theme_color": "ecf0f1",
            "parent_id": None,
            "pinned": False,
            "order": 0,
            "hidden": False,
        }

    @pytest.mark.asyncio
    async def test_create_child_tag(self, auth_client):
        parent = await _create(auth_client, name="parent", theme_color="abc", pinned=True)
        child = await _create(auth_client, name="child", parent_id=parent["id"])

        assert child["parent_id"] == parent["id"]
        assert parent["pinned"] is True

        response = await auth_client.get(f"/api/tags/{parent['id']}")
        sub_tags = response.json()["sub_tags"]
        assert sub_tags == [{
            "id": child["id"],
            "name": "child",
            "theme_color": "ecf0f1",
            "pinned": False,
            "order": 0,
            "hidden": False,
        }]

    @pytest.mark.asyncio
    async def test_create_with_unknown_parent(self, auth_client, db):
        response = await auth_client.post("/api/tags", json={"name": "child", "parent_id": 999})

        assert response.status_code == 404
        assert response.json()["message"] == "Tag not found (id: 999)"
        assert (await db.execute(select(Tag))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_create_with_invalid_color(self, auth_client):
        response = await auth_client.post("/api/tags", json={"name": "a", "theme_color": "red"})

        assert response.status_code == 422
        assert response.json()["message"] == "Unprocessable entity (theme_color)"

    @pytest.mark.asyncio
    async def test_create_missing_name(self, auth_client):
        response = await auth_client.post("/api/tags", json={"theme_color": "fff"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_read_unknown_tag(self, auth_client):
        response = await auth_client.get("/api/tags/999")

        assert response.status_code == 404
        assert response.json()["message"] == "Tag not found"

    @pytest.mark.asyncio
    async def test_read_non_numeric_id(self, auth_client):
        response = await auth_client.get("/api/tags/abc")

        assert response.status_code == 404
        assert response.json()["message"] == "Page not found"

    @pytest.mark.asyncio
    async def test_read_other_users_tag(self, auth_client, db, other_user):
        foreign = Tag(user_id=other_user.id, name="foreign")
        db.add(foreign)
        await db.commit()

        response = await auth_client.get(f"/api/tags/{foreign.id}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_tree(self, auth_client):
        """列表中 tags 始终存在，子标签只出现在父标签下"""
        parent = await _create(auth_client, name="parent")
        lonely = await _create(auth_client, name="lonely")
        child = await _create(auth_client, name="child", parent_id=parent["id"])

        response = await auth_client.get("/api/tags")
        assert response.status_code == 200

        tree = {node["id"]: node for node in response.json()}
        assert set(tree) == {parent["id"], lonely["id"]}
        assert tree[lonely["id"]]["tags"] == []
        assert [t["id"] for t in tree[parent["id"]]["tags"]] == [child["id"]]
        assert tree[parent["id"]]["tags"][0]["parent_id"] == parent["id"]

    @pytest.mark.asyncio
    async def test_list_hides_hidden_tags(self, auth_client):
        visible = await _create(auth_client, name="visible")
        hidden = await _create(auth_client, name="hidden")
        hidden_child = await _create(auth_client, name="hidden child", parent_id=visible["id"])
        await auth_client.patch(f"/api/tags/{hidden['id']}", json={"hidden": True})
        await auth_client.patch(f"/api/tags/{hidden_child['id']}", json={"hidden": True})

        everything = (await auth_client.get("/api/tags")).json()
        assert len(everything) == 2

        response = await auth_client.get("/api/tags", params={"show_hidden": "false"})
        tree = response.json()
        assert [node["id"] for node in tree] == [visible["id"]]
        assert tree[0]["tags"] == []

    @pytest.mark.asyncio
    async def test_list_empty(self, auth_client):
        response = await auth_client.get("/api/tags")
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_patch_tag(self, auth_client):
        tag = await _create(auth_client, name="before")

        response = await auth_client.patch(f"/api/tags/{tag['id']}", json={
            "name": "after",
            "theme_color": "000000",
            "pinned": True,
            "order": 5
        })
        assert response.status_code == 200
        assert response.json() == {"message": "Updated"}

        detail = (await auth_client.get(f"/api/tags/{tag['id']}")).json()
        assert detail["name"] == "after"
        assert detail["theme_color"] == "000000"
        assert detail["pinned"] is True
        assert detail["order"] == 5

    @pytest.mark.asyncio
    async def test_patch_with_identical_values(self, auth_client):
        """值未变化也视为更新成功"""
        tag = await _create(auth_client, name="same")

        for _ in range(2):
            response = await auth_client.patch(f"/api/tags/{tag['id']}", json={"name": "same"})
            assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_patch_unknown_keys(self, auth_client):
        tag = await _create(auth_client, name="a")
        response = await auth_client.patch(f"/api/tags/{tag['id']}", json={"user_id": 2, "name": "b"})

        assert response.status_code == 422
        assert response.json()["message"] == "Unprocessable entity (user_id)"

    @pytest.mark.asyncio
    async def test_patch_empty_body(self, auth_client):
        tag = await _create(auth_client, name="a")
        response = await auth_client.patch(f"/api/tags/{tag['id']}", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_patch_self_parent(self, auth_client):
        tag = await _create(auth_client, name="a")
        response = await auth_client.patch(f"/api/tags/{tag['id']}", json={"parent_id": tag["id"]})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_patch_unknown_tag(self, auth_client):
        response = await auth_client.patch("/api/tags/999", json={"name": "x"})

        assert response.status_code == 404
        assert response.json()["message"] == "Tag not found"

    @pytest.mark.asyncio
    async def test_patch_requires_json(self, auth_client):
        tag = await _create(auth_client, name="a")
        response = await auth_client.patch(f"/api/tags/{tag['id']}", content=b"name=b")
        assert response.status_code == 415

    @pytest.mark.asyncio
    async def test_delete_tag(self, auth_client, db):
        """删除标签时清理关联记录与记录方案，子标签提升为顶层"""
        parent = await _create(auth_client, name="parent")
        child = await _create(auth_client, name="child", parent_id=parent["id"])
        await auth_client.post(f"/api/tags/{parent['id']}/record_schemes", json={"name": "weight"})
        document = await auth_client.post("/api/documents", json={
            "title": "doc", "url": "https://example.com", "tag_ids": [parent["id"]]
        })
        assert document.status_code == 201

        response = await auth_client.delete(f"/api/tags/{parent['id']}")
        assert response.status_code == 204
        assert response.content == b""

        assert (await auth_client.get(f"/api/tags/{parent['id']}")).status_code == 404
        detached = (await auth_client.get(f"/api/tags/{child['id']}")).json()
        assert detached["parent_id"] is None

        maps = await db.execute(select(DocumentTagMap).where(DocumentTagMap.tag_id == parent["id"]))
        assert maps.scalars().all() == []
        schemes = await db.execute(select(RecordScheme).where(RecordScheme.tag_id == parent["id"]))
        assert schemes.scalars().all() == []

    @pytest.mark.asyncio
    async def test_delete_unknown_tag(self, auth_client):
        response = await auth_client.delete("/api/tags/999")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_survives_later_not_found(self, auth_client, db):
        """更新在同一会话中后续请求返回 404 时不会被回滚"""
        tag = await _create(auth_client, name="before")

        response = await auth_client.patch(f"/api/tags/{tag['id']}", json={"name": "after"})
        assert response.status_code == 200
        assert (await auth_client.get("/api/tags/999")).status_code == 404

        stored = await db.get(Tag, tag["id"])
        await db.refresh(stored)
        assert stored.name == "after"

    @pytest.mark.asyncio
    async def test_non_string_name_stored_as_json_literal(self, auth_client):
        created = await _create(auth_client, name=None)
        assert created["name"] == "null"

        response = await auth_client.post(
            f"/api/tags/{created['id']}/record_schemes",
            json={"name": True, "unit_name": None}
        )
        assert response.status_code == 201
        assert response.json()["name"] == "true"
        assert response.json()["unit_name"] == "null"


class TestRecordSchemesApi:
    """测试记录方案接口"""

    @pytest.mark.asyncio
    async def test_record_scheme_lifecycle(self, auth_client):
        tag = await _create(auth_client, name="health")
        base = f"/api/tags/{tag['id']}/record_schemes"

        created = await auth_client.post(base, json={
            "name": "weight", "unit_name": "kg", "default_graph_type": "Sum"
        })
        assert created.status_code == 201
        scheme = created.json()
        assert created.headers["location"] == f"{base}/{scheme['id']}"
        assert scheme["unit_name"] == "kg"
        assert scheme["default_graph_type"] == "sum"
        assert scheme["tag"]["id"] == tag["id"]

        listed = (await auth_client.get(base)).json()
        assert [s["id"] for s in listed] == [scheme["id"]]

        updated = await auth_client.patch(f"{base}/{scheme['id']}", json={"unit_name": None})
        assert updated.status_code == 200
        detail = (await auth_client.get(f"{base}/{scheme['id']}")).json()
        assert detail["unit_name"] is None

        deleted = await auth_client.delete(f"{base}/{scheme['id']}")
        assert deleted.status_code == 204
        missing = await auth_client.get(f"{base}/{scheme['id']}")
        assert missing.status_code == 404
        assert missing.json()["message"] == "RecordScheme not found"

    @pytest.mark.asyncio
    async def test_record_scheme_defaults(self, auth_client):
        tag = await _create(auth_client, name="steps")
        response = await auth_client.post(f"/api/tags/{tag['id']}/record_schemes", json={"name": "count"})

        assert response.status_code == 201
        assert response.json()["unit_name"] is None
        assert response.json()["default_graph_type"] == "flat"

    @pytest.mark.asyncio
    async def test_record_scheme_invalid_graph_type(self, auth_client):
        tag = await _create(auth_client, name="steps")
        response = await auth_client.post(
            f"/api/tags/{tag['id']}/record_schemes",
            json={"name": "count", "default_graph_type": "pie"}
        )
        assert response.status_code == 415

    @pytest.mark.asyncio
    async def test_record_scheme_unknown_tag(self, auth_client):
        response = await auth_client.post("/api/tags/999/record_schemes", json={"name": "count"})

        assert response.status_code == 404
        assert response.json()["message"] == "Tag not found"

    @pytest.mark.asyncio
    async def test_record_scheme_patch_unknown_key(self, auth_client):
        tag = await _create(auth_client, name="steps")
        created = (await auth_client.post(
            f"/api/tags/{tag['id']}/record_schemes", json={"name": "count"}
        )).json()

        response = await auth_client.patch(
            f"/api/tags/{tag['id']}/record_schemes/{created['id']}",
            json={"tag_id": 5}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_record_scheme_patch_unknown_scheme(self, auth_client):
        tag = await _create(auth_client, name="steps")
        response = await auth_client.patch(
            f"/api/tags/{tag['id']}/record_schemes/999",
            json={"name": "x"}
        )
        assert response.status_code == 404
