"""Tests for the blob-backed record store."""

import json
import uuid
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from api.errors import RecordNotFoundError, StoreError
from api.services.record_store import (
    ContainerNotFoundError,
    RecordStore,
    get_blog_store,
    get_project_store,
    tag_filter,
    validate_blob_path_segment,
)


def _post(record_id="blog_1", **fields):
    return {
        "id": record_id,
        "title": "Hello",
        "slug": "hello",
        "status": "draft",
        **fields,
    }


class TestCreateAndGet:
    async def test_create_stamps_timestamps(self, blog_container):
        store = get_blog_store()
        stored = await store.create(_post())
        assert stored["createdAt"] == stored["updatedAt"]
        assert stored["createdAt"].endswith("Z")

        saved = json.loads(blog_container.blobs["blog_1.json"])
        assert saved == stored

    async def test_create_assigns_blog_id(self, blog_container):
        stored = await get_blog_store().create(
            {"title": "Hello", "slug": "hello", "status": "draft"}
        )
        assert stored["id"].startswith("blog_")
        assert f"{stored['id']}.json" in blog_container.blobs

    async def test_create_assigns_uuid_project_id(self, project_container):
        first = await get_project_store().create({"status": "ongoing"})
        second = await get_project_store().create({"status": "ongoing"})
        assert str(uuid.UUID(first["id"])) == first["id"]
        assert first["id"] != second["id"]

    async def test_create_keeps_supplied_id(self, blog_container):
        stored = await get_blog_store().create(_post("blog_imported"))
        assert stored["id"] == "blog_imported"

    async def test_create_drops_none_fields(self, blog_container):
        stored = await get_blog_store().create(_post(coverImage=None))
        assert "coverImage" not in stored

    async def test_indexed_fields_become_tags(self, blog_container):
        await get_blog_store().create(_post(status="published"))
        assert blog_container.tags["blog_1.json"] == {
            "status": "published",
            "slug": "hello",
        }

    async def test_project_store_indexes_status_only(self, project_container):
        await get_project_store().create({"id": "p1", "status": "ongoing"})
        assert project_container.tags["p1.json"] == {"status": "ongoing"}

    async def test_get_by_id(self, blog_container):
        store = get_blog_store()
        await store.create(_post())
        record = await store.get_by_id("blog_1")
        assert record["title"] == "Hello"

    async def test_get_missing_returns_none(self, blog_container):
        assert await get_blog_store().get_by_id("nope") is None

    @pytest.mark.parametrize("record_id", ["../secrets", "a/b", "", ".hidden"])
    async def test_get_unsafe_id_returns_none(self, blog_container, record_id):
        assert await get_blog_store().get_by_id(record_id) is None

    async def test_get_by_index_returns_all_matches(self, blog_container):
        store = get_blog_store()
        await store.create(_post("blog_1"))
        await store.create(_post("blog_2"))
        await store.create(_post("blog_3", slug="other"))

        matches = await store.get_by_index("slug", "hello")
        assert sorted(r["id"] for r in matches) == ["blog_1", "blog_2"]

    async def test_get_by_index_unsupported_value(self, blog_container):
        assert await get_blog_store().get_by_index("slug", "it's") == []

    async def test_get_by_unindexed_field(self, blog_container):
        with pytest.raises(ValueError):
            await get_blog_store().get_by_index("title", "Hello")


class TestUpdate:
    async def test_merges_fields(self, blog_container):
        store = get_blog_store()
        created = await store.create(_post())
        updated = await store.update("blog_1", {"title": "Changed"})

        assert updated["title"] == "Changed"
        assert updated["slug"] == "hello"
        assert updated["createdAt"] == created["createdAt"]
        assert updated["updatedAt"] >= updated["createdAt"]

    async def test_cannot_change_id_or_created_at(self, blog_container):
        store = get_blog_store()
        created = await store.create(_post())
        updated = await store.update(
            "blog_1", {"id": "blog_9", "createdAt": "1999-01-01T00:00:00Z"}
        )
        assert updated["id"] == "blog_1"
        assert updated["createdAt"] == created["createdAt"]
        assert "blog_9.json" not in blog_container.blobs

    async def test_none_removes_field(self, blog_container):
        store = get_blog_store()
        await store.create(_post(coverImage="https://example.com/a.jpg"))
        updated = await store.update("blog_1", {"coverImage": None})
        assert "coverImage" not in updated
        assert "coverImage" not in json.loads(blog_container.blobs["blog_1.json"])

    async def test_retags_on_status_change(self, blog_container):
        store = get_blog_store()
        await store.create(_post())
        await store.update("blog_1", {"status": "published"})
        assert blog_container.tags["blog_1.json"]["status"] == "published"

    async def test_missing_record(self, blog_container):
        with pytest.raises(RecordNotFoundError) as exc_info:
            await get_blog_store().update("nope", {"title": "x"})
        assert exc_info.value.key == "nope"
        assert blog_container.blobs == {}


class TestDelete:
    async def test_delete(self, blog_container):
        store = get_blog_store()
        await store.create(_post())
        await store.delete("blog_1")
        assert await store.get_by_id("blog_1") is None
        assert "blog_1.json" not in blog_container.tags

    async def test_delete_is_idempotent(self, blog_container):
        store = get_blog_store()
        await store.delete("never-existed")
        await store.delete("../escape")


class TestListing:
    async def test_scan_reads_everything(self, project_container):
        store = get_project_store()
        for i in range(3):
            await store.create({"id": f"p{i}", "status": "ongoing"})
        records = await store.scan()
        assert sorted(r["id"] for r in records) == ["p0", "p1", "p2"]

    async def test_missing_container(self, project_container):
        project_container.exists = False
        store = get_project_store()
        with pytest.raises(ContainerNotFoundError):
            await store.scan()
        with pytest.raises(ContainerNotFoundError):
            await store.query_page(limit=5)

    def test_container_not_found_is_a_store_error(self):
        assert issubclass(ContainerNotFoundError, StoreError)

    async def test_ensure_container(self, blog_container):
        store = get_blog_store()
        assert store.ensure_container() is False
        blog_container.exists = False
        assert store.ensure_container() is True
        assert blog_container.exists is True


class TestAzureFailures:
    def _store(self):
        client = MagicMock()
        return client, RecordStore(client, kind="blog post", indexed_fields=("status",))

    async def test_write_failure(self):
        client, store = self._store()
        client.get_blob_client.return_value.upload_blob.side_effect = (
            HttpResponseError(message="Server busy")
        )
        with pytest.raises(StoreError, match="Failed to create blog post"):
            await store.create(_post())

    async def test_read_failure(self):
        client, store = self._store()
        client.get_blob_client.return_value.download_blob.side_effect = (
            HttpResponseError(message="Server busy")
        )
        with pytest.raises(StoreError):
            await store.get_by_id("blog_1")

    async def test_read_not_found_is_none(self):
        client, store = self._store()
        client.get_blob_client.return_value.download_blob.side_effect = (
            ResourceNotFoundError("missing")
        )
        assert await store.get_by_id("blog_1") is None

    async def test_listing_failure(self):
        client, store = self._store()
        client.list_blobs.side_effect = HttpResponseError(message="Forbidden")
        with pytest.raises(StoreError) as exc_info:
            await store.query_page(limit=10)
        assert not isinstance(exc_info.value, ContainerNotFoundError)

    async def test_delete_failure(self):
        client, store = self._store()
        client.get_blob_client.return_value.delete_blob.side_effect = (
            HttpResponseError(message="Server busy")
        )
        with pytest.raises(StoreError):
            await store.delete("blog_1")


class TestHelpers:
    def test_tag_filter(self):
        assert tag_filter({"status": "published"}) == "\"status\" = 'published'"
        assert tag_filter({"status": "draft", "slug": "a-b"}) == (
            "\"slug\" = 'a-b' AND \"status\" = 'draft'"
        )

    @pytest.mark.parametrize("value", ["it's", "x" * 257, "semi;colon"])
    def test_tag_filter_rejects_unsupported_values(self, value):
        with pytest.raises(ValueError):
            tag_filter({"slug": value})

    @pytest.mark.parametrize("segment", ["blog_abc", "3f2a-11", "a.b"])
    def test_safe_segments(self, segment):
        assert validate_blob_path_segment(segment) == segment

    @pytest.mark.parametrize("segment", ["", "..", "a/b", "a\\b", "-x", "a b"])
    def test_unsafe_segments(self, segment):
        with pytest.raises(ValueError):
            validate_blob_path_segment(segment)
