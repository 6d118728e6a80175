"""Tests for document store access and serialization."""

from datetime import UTC, date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from docstore_qa.config import MongoSettings
from docstore_qa.documents.serializer import DocumentSerializer
from docstore_qa.documents.store import MongoDocumentStore
from docstore_qa.exceptions import DocumentStoreError


class Unprintable:
    """Value whose string form fails."""

    def __str__(self) -> str:
        raise RuntimeError("no string form")


class TestDocumentSerializer:
    """Tests for DocumentSerializer."""

    def test_serialize_layout(self) -> None:
        """Output names the collection and then the fields."""
        serializer = DocumentSerializer()
        text = serializer.serialize("employees", {"_id": "emp-1", "name": "John Doe"})
        assert text == "Collection: employees\nDocument: _id: emp-1, name: John Doe"

    def test_field_order_preserved(self) -> None:
        """Fields appear in the record's own order."""
        serializer = DocumentSerializer()
        record = {"zeta": 1, "alpha": 2, "mid": 3}
        assert serializer.format_record(record) == "zeta: 1, alpha: 2, mid: 3"

    def test_object_id_rendered_as_string(self) -> None:
        """Driver identifiers use their string form."""
        oid = ObjectId("65f1a2b3c4d5e6f708192a3b")
        serializer = DocumentSerializer()
        assert serializer.render_field("_id", oid) == "65f1a2b3c4d5e6f708192a3b"

    def test_custom_id_field(self) -> None:
        """The identifier field is configurable."""
        serializer = DocumentSerializer(id_field="key")
        assert serializer.render_field("key", {"a": 1}) == "{'a': 1}"

    def test_list_rendering(self) -> None:
        """Sequences become bracketed comma-separated lists."""
        serializer = DocumentSerializer()
        text = serializer.format_record({"skills": ["JavaScript", "Node.js"]})
        assert text == "skills: [JavaScript, Node.js]"

    def test_empty_list_rendering(self) -> None:
        """Empty sequences render as []."""
        serializer = DocumentSerializer()
        assert serializer.format_record({"skills": []}) == "skills: []"

    def test_tuple_rendering(self) -> None:
        """Tuples are sequences too."""
        serializer = DocumentSerializer()
        assert serializer.render_value((1, 2)) == "[1, 2]"

    def test_set_rendering_is_sorted(self) -> None:
        """Sets render in sorted order."""
        serializer = DocumentSerializer()
        assert serializer.render_value({"Node.js", "Go", "JavaScript"}) == (
            "[Go, JavaScript, Node.js]"
        )
        assert serializer.render_value(frozenset({3, 1, 2})) == "[1, 2, 3]"

    def test_set_inside_mapping_is_sorted(self) -> None:
        """Sets nested in mappings and lists become sorted JSON arrays."""
        serializer = DocumentSerializer()
        value = {"tags": {"c", "a", "b"}}
        assert serializer.render_value(value) == '{"tags":["a","b","c"]}'
        assert serializer.render_value([{"z", "y"}]) == '[["y","z"]]'

    def test_date_rendering(self) -> None:
        """Timestamps keep only the calendar date."""
        serializer = DocumentSerializer()
        assert serializer.render_value(datetime(2024, 3, 15, 10, 30)) == "2024-03-15"
        assert serializer.render_value(date(2023, 12, 1)) == "2023-12-01"

    def test_aware_datetime_uses_utc_date(self) -> None:
        """Aware timestamps are converted to UTC before taking the date."""
        serializer = DocumentSerializer()
        value = datetime(2024, 3, 15, 2, 0, tzinfo=timezone(timedelta(hours=5)))
        assert serializer.render_value(value) == "2024-03-14"
        assert serializer.render_value(datetime(2024, 3, 15, tzinfo=UTC)) == "2024-03-15"

    def test_nested_mapping_is_compact_json(self) -> None:
        """Nested mappings render as JSON without whitespace."""
        serializer = DocumentSerializer()
        value = {"city": "Paris", "zip": "75001", "tags": ["a", "b"]}
        assert serializer.render_value(value) == '{"city":"Paris","zip":"75001","tags":["a","b"]}'

    def test_nested_mapping_with_non_json_values(self) -> None:
        """Values JSON cannot encode fall back to their string form."""
        serializer = DocumentSerializer()
        oid = ObjectId("65f1a2b3c4d5e6f708192a3b")
        value = {"ref": oid, "since": date(2024, 1, 1)}
        assert (
            serializer.render_value(value)
            == '{"ref":"65f1a2b3c4d5e6f708192a3b","since":"2024-01-01"}'
        )

    def test_list_of_mappings(self) -> None:
        """Mappings inside lists are JSON too."""
        serializer = DocumentSerializer()
        assert serializer.render_value([{"a": 1}, {"b": 2}]) == '[{"a":1}, {"b":2}]'

    def test_non_ascii_preserved(self) -> None:
        """Nested JSON keeps non-ASCII text readable."""
        serializer = DocumentSerializer()
        assert serializer.render_value({"city": "Zürich"}) == '{"city":"Zürich"}'

    def test_scalars(self) -> None:
        """Scalars render in their plain form."""
        serializer = DocumentSerializer()
        assert serializer.render_value(42) == "42"
        assert serializer.render_value(3.5) == "3.5"
        assert serializer.render_value(None) == "null"
        assert serializer.render_value(True) == "true"
        assert serializer.render_value(False) == "false"

    def test_unrenderable_value_does_not_raise(self) -> None:
        """A value that cannot be rendered still produces text."""
        serializer = DocumentSerializer()
        text = serializer.format_record({"name": "x", "bad": Unprintable()})
        assert text.startswith("name: x, bad: <")
        assert "Unprintable" in text

    def test_empty_record(self) -> None:
        """A record without fields yields an empty field list."""
        serializer = DocumentSerializer()
        assert serializer.serialize("things", {}) == "Collection: things\nDocument: "


def _mock_mongo() -> tuple[MagicMock, MagicMock, MagicMock]:
    client = MagicMock()
    database = MagicMock()
    collection = MagicMock()
    client.__getitem__.return_value = database
    database.__getitem__.return_value = collection
    client.close = AsyncMock()
    return client, database, collection


class TestMongoDocumentStore:
    """Tests for MongoDocumentStore."""

    def _settings(self) -> MongoSettings:
        return MongoSettings(database="testdb")

    def test_system_prefix_from_settings(self) -> None:
        """Reserved prefix comes from configuration."""
        store = MongoDocumentStore(settings=self._settings(), client=MagicMock())
        assert store.system_prefix == "system."
        assert store.is_system_collection("system.indexes")
        assert not store.is_system_collection("employees")

    @pytest.mark.asyncio
    async def test_list_collection_names_skips_system(self) -> None:
        """System collections are never listed."""
        client, database, _ = _mock_mongo()
        database.list_collection_names = AsyncMock(
            return_value=["employees", "system.views", "orders"]
        )

        store = MongoDocumentStore(settings=self._settings(), client=client)
        names = await store.list_collection_names()

        assert names == ["employees", "orders"]
        client.__getitem__.assert_called_with("testdb")

    @pytest.mark.asyncio
    async def test_list_collection_names_error(self) -> None:
        """Driver errors are wrapped."""
        client, database, _ = _mock_mongo()
        database.list_collection_names = AsyncMock(
            side_effect=ServerSelectionTimeoutError("no servers")
        )

        store = MongoDocumentStore(settings=self._settings(), client=client)

        with pytest.raises(DocumentStoreError):
            await store.list_collection_names()

    @pytest.mark.asyncio
    async def test_find_all(self) -> None:
        """All records are fetched with an empty filter."""
        client, _, collection = _mock_mongo()
        records = [{"_id": 1, "name": "a"}, {"_id": 2, "name": "b"}]
        collection.find.return_value.to_list = AsyncMock(return_value=records)

        store = MongoDocumentStore(settings=self._settings(), client=client)
        result = await store.find_all("employees")

        assert result == records
        collection.find.assert_called_once_with({})

    @pytest.mark.asyncio
    async def test_find_all_error(self) -> None:
        """Read failures are wrapped."""
        client, _, collection = _mock_mongo()
        collection.find.return_value.to_list = AsyncMock(side_effect=PyMongoError("boom"))

        store = MongoDocumentStore(settings=self._settings(), client=client)

        with pytest.raises(DocumentStoreError) as exc_info:
            await store.find_all("employees")
        assert exc_info.value.details["collection"] == "employees"

    @pytest.mark.asyncio
    async def test_count(self) -> None:
        """Counting uses an empty filter."""
        client, _, collection = _mock_mongo()
        collection.count_documents = AsyncMock(return_value=7)

        store = MongoDocumentStore(settings=self._settings(), client=client)

        assert await store.count("employees") == 7
        collection.count_documents.assert_called_once_with({})

    @pytest.mark.asyncio
    async def test_ping(self) -> None:
        """Ping reports server reachability."""
        client, _, _ = _mock_mongo()
        client.admin.command = AsyncMock(return_value={"ok": 1})
        store = MongoDocumentStore(settings=self._settings(), client=client)
        assert await store.ping() is True

        client.admin.command = AsyncMock(side_effect=PyMongoError("down"))
        assert await store.ping() is False

    @pytest.mark.asyncio
    async def test_close_injected_client_left_open(self) -> None:
        """Injected clients are not closed."""
        client, _, _ = _mock_mongo()
        store = MongoDocumentStore(settings=self._settings(), client=client)

        await store.close()

        client.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_close_owned_client(self) -> None:
        """Owned clients are closed."""
        client, _, _ = _mock_mongo()
        store = MongoDocumentStore(settings=self._settings(), client=client)
        store._owns_client = True

        await store.close()

        client.close.assert_called_once()
