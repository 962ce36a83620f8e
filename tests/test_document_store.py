"""Tests for the in-memory document store."""
import pytest

from storage.document_store import DocumentStore, parse_path
from storage.errors import InvalidPath


class TestParsePath:
    def test_valid_path(self):
        assert parse_path("users/abc") == ("users", "abc")

    @pytest.mark.parametrize("path", ["users", "users/", "/abc", "", "a/b/c"])
    def test_malformed_paths(self, path):
        with pytest.raises(InvalidPath):
            parse_path(path)


class TestDocumentStore:
    @pytest.mark.asyncio
    async def test_get_missing_returns_not_found(self, store):
        doc = await store.get_doc("users/nobody")
        assert doc.exists is False
        assert doc.data() is None

    @pytest.mark.asyncio
    async def test_set_merges_fields(self, store):
        await store.set_doc("things/p", {"a": 1})
        await store.set_doc("things/p", {"b": 2})

        doc = await store.get_doc("things/p")
        assert doc.exists
        assert doc.id == "p"
        assert doc.data() == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_set_overwrites_only_given_fields(self, store):
        await store.set_doc("things/p", {"a": 1, "b": 1})
        await store.set_doc("things/p", {"b": 2})
        assert (await store.get_doc("things/p")).data() == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_returned_data_is_a_copy(self, store):
        await store.set_doc("things/p", {"tags": ["x"]})
        data = (await store.get_doc("things/p")).data()
        data["tags"].append("y")
        assert (await store.get_doc("things/p")).data() == {"tags": ["x"]}

    @pytest.mark.asyncio
    async def test_malformed_path_is_noop(self, store):
        await store.set_doc("users", {"a": 1})
        assert await store.list_docs("users") == []
        doc = await store.get_doc("users")
        assert doc.exists is False

    @pytest.mark.asyncio
    async def test_malformed_path_is_logged(self, store, caplog):
        with caplog.at_level("WARNING"):
            await store.set_doc("no-id-here", {"a": 1})
        assert "Malformed document path" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("collection", ["", "users/abc"])
    async def test_add_to_malformed_collection_is_logged_noop(self, store, caplog, collection):
        with caplog.at_level("WARNING"):
            doc = await store.add_doc(collection, {"a": 1})

        assert doc.exists is False
        assert doc.id is None
        assert "Malformed collection name" in caplog.text
        assert await store.list_docs("users") == []

    @pytest.mark.asyncio
    async def test_add_list_delete(self, store):
        first = await store.add_doc("appointments", {"n": 1})
        second = await store.add_doc("appointments", {"n": 2})
        assert first.id != second.id

        listed = await store.list_docs("appointments")
        assert [d.data()["n"] for d in listed] == [1, 2]

        assert await store.delete_doc(f"appointments/{first.id}") is True
        assert await store.delete_doc(f"appointments/{first.id}") is False
        assert [d.id for d in await store.list_docs("appointments")] == [second.id]

    @pytest.mark.asyncio
    async def test_write_listener_sees_merged_document(self, store):
        seen = []
        remove = store.add_write_listener("users", lambda doc_id, data: seen.append((doc_id, data)))

        await store.set_doc("users/u1", {"a": 1})
        await store.set_doc("users/u1", {"b": 2})
        await store.set_doc("other/u1", {"c": 3})
        remove()
        await store.set_doc("users/u1", {"d": 4})

        assert seen == [("u1", {"a": 1}), ("u1", {"a": 1, "b": 2})]

    @pytest.mark.asyncio
    async def test_latency_does_not_change_results(self):
        slow = DocumentStore(latency_ms=1)
        await slow.set_doc("users/x", {"a": 1})
        assert (await slow.get_doc("users/x")).data() == {"a": 1}
