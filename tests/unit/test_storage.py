"""
Unit tests for client storage.
"""

import json

import pytest

from speakly.utils.storage import FileStorage, MemoryStorage, read_json_item
from speakly.utils.validation import load_validator


class TestMemoryStorage:
    def test_set_get_remove(self):
        storage = MemoryStorage()
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"
        assert storage.keys() == ["k"]
        storage.remove_item("k")
        assert storage.get_item("k") is None
        storage.remove_item("k")

    def test_set_json(self):
        storage = MemoryStorage()
        storage.set_json("k", {"name": "Mañana"})
        assert json.loads(storage.get_item("k")) == {"name": "Mañana"}


class TestFileStorage:
    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "client.json"
        FileStorage(path).set_item("theme", "dark")
        assert FileStorage(path).get_item("theme") == "dark"

    def test_missing_file_is_empty(self, tmp_path):
        assert FileStorage(tmp_path / "nope.json").get_item("theme") is None

    def test_corrupt_file_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "client.json"
        path.write_text("{broken", encoding="utf-8")
        storage = FileStorage(path)
        assert storage.get_item("theme") is None
        storage.set_item("theme", "dark")
        assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}

    def test_non_string_values_are_dropped(self, tmp_path):
        path = tmp_path / "client.json"
        path.write_text(json.dumps({"a": "x", "b": 3}), encoding="utf-8")
        storage = FileStorage(path)
        assert storage.get_item("a") == "x"
        assert storage.get_item("b") is None

    def test_remove_item(self, tmp_path):
        storage = FileStorage(tmp_path / "sub" / "client.json")
        storage.set_item("a", "x")
        storage.remove_item("a")
        assert storage.get_item("a") is None


class TestReadJsonItem:
    def test_missing_key(self):
        assert read_json_item(MemoryStorage(), "k") is None

    def test_decodes_value(self):
        storage = MemoryStorage({"k": '{"a": 1}'})
        assert read_json_item(storage, "k") == {"a": 1}

    def test_unparsable_value_is_removed(self):
        storage = MemoryStorage({"k": "{oops"})
        assert read_json_item(storage, "k") is None
        assert storage.get_item("k") is None

    @pytest.mark.parametrize("payload", [{"name": "Mario"}, {"id": "", "name": "M", "email": "e"}])
    def test_schema_invalid_value_is_removed(self, payload):
        storage = MemoryStorage({"k": json.dumps(payload)})
        assert read_json_item(storage, "k", load_validator("user_session")) is None
        assert storage.get_item("k") is None
