"""Tests for json_store module."""
import json
import pytest

from chat_search.json_store import JsonConversationStore, load_json_object
from chat_search.search import SearchEngine

from conftest import make_conversation


class TestLoadJsonObject:
    def test_missing_file_is_empty(self, tmp_path):
        assert load_json_object(tmp_path / "missing.json") == {}

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            load_json_object(path)

    def test_non_object_is_empty(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        assert load_json_object(path) == {}


class TestJsonConversationStore:
    def test_loads_conversations(self, data_dir):
        store = JsonConversationStore(data_dir).load()
        ids = sorted(c.id for c in store.get_all_conversations())
        assert ids == ["c1", "c2", "c3"]

    def test_messages_sorted_by_creation(self, data_dir):
        store = JsonConversationStore(data_dir).load()
        messages = store.get_messages_for_conversation("c2")
        assert [m.id for m in messages] == ["m3", "m4"]
        assert messages[1].role == "assistant"

    def test_empty_directory(self, tmp_path):
        store = JsonConversationStore(tmp_path).load()
        assert store.get_all_conversations() == []
        assert store.get_messages_for_conversation("c1") == []

    def test_skips_invalid_conversations(self, data_dir):
        conversations = json.loads((data_dir / "conversations.json").read_text())
        conversations["broken"] = {"id": "broken", "title": ""}
        (data_dir / "conversations.json").write_text(json.dumps(conversations))

        store = JsonConversationStore(data_dir).load()
        assert "broken" not in [c.id for c in store.get_all_conversations()]
        assert store.get_conversation("broken") is not None

    def test_get_conversation(self, data_dir):
        store = JsonConversationStore(data_dir).load()
        assert store.get_conversation("c1").title == "Trip Planning"
        assert store.get_conversation("missing") is None

    def test_message_count(self, data_dir):
        store = JsonConversationStore(data_dir).load()
        assert store.get_conversation_message_count("c1") == 2
        assert store.get_conversation_message_count("c3") == 0

    def test_recent_conversations(self, tmp_path):
        conversations = [
            make_conversation("old", "Old", minutes=0),
            make_conversation("new", "New", minutes=10),
            make_conversation("pinned", "Pinned", minutes=-10, pinned=True),
            make_conversation("archived", "Archived", minutes=20, archived=True),
            make_conversation("trash", "Trash", minutes=30, deleted=True),
        ]
        (tmp_path / "conversations.json").write_text(json.dumps({c.id: c.to_dict() for c in conversations}))

        store = JsonConversationStore(tmp_path).load()
        assert [c.id for c in store.get_recent_conversations()] == ["pinned", "new", "old"]
        assert [c.id for c in store.get_recent_conversations(limit=1)] == ["pinned"]

    def test_reload_sees_new_data(self, data_dir):
        store = JsonConversationStore(data_dir).load()
        (data_dir / "messages.json").write_text("{}")
        store.load()
        assert store.get_messages_for_conversation("c1") == []

    def test_search_over_store(self, data_dir):
        engine = SearchEngine(JsonConversationStore(data_dir).load())
        assert {r.message_id for r in engine.search_messages("paris")} == {"m1", "m2"}
        assert engine.get_search_suggestions("pr") == ["process", "project"]

    def test_mixed_utc_and_naive_timestamps(self, data_dir):
        messages = {
            "utc": {"id": "utc", "conversationId": "c1", "text": "Paris in spring",
                    "createdAt": "2024-05-01T12:00:00Z"},
            "local": {"id": "local", "conversationId": "c1", "text": "Paris in spring",
                      "createdAt": "2024-05-01T12:05:00"},
        }
        (data_dir / "messages.json").write_text(json.dumps(messages))

        store = JsonConversationStore(data_dir).load()
        assert [m.id for m in store.get_messages_for_conversation("c1")] == ["utc", "local"]

        results = SearchEngine(store).search_messages("paris")
        assert [r.message_id for r in results] == ["local", "utc"]
