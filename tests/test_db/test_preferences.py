"""Tests for filter preference persistence."""

import json
from unittest.mock import MagicMock

from redis import RedisError

from src.db.preferences import (
    JsonFilePreferenceStore,
    MemoryPreferenceStore,
    RedisPreferenceStore,
    create_preference_store,
    parse_criteria,
)
from src.models.criteria import FilterCriteria, SortDirection, SortField


class TestParseCriteria:
    def test_empty_values(self) -> None:
        assert parse_criteria(None) is None
        assert parse_criteria("") is None

    def test_not_json(self) -> None:
        assert parse_criteria("{broken") is None

    def test_not_an_object(self) -> None:
        assert parse_criteria("[1, 2, 3]") is None

    def test_invalid_field_types(self) -> None:
        assert parse_criteria('{"maxRecords": "many"}') is None

    def test_bytes_payload(self) -> None:
        criteria = parse_criteria(b'{"showOnlySafe": true}')
        assert criteria is not None
        assert criteria.show_only_safe is True


class TestMemoryStore:
    def test_save_then_load(self) -> None:
        store = MemoryPreferenceStore()
        assert store.load() is None
        store.save(FilterCriteria(min_liquidity=5000))
        assert store.load() == FilterCriteria(min_liquidity=5000)


class TestJsonFileStore:
    def test_missing_file(self, tmp_path) -> None:
        assert JsonFilePreferenceStore(tmp_path / "none.json").load() is None

    def test_round_trip_creates_parent_dirs(self, tmp_path) -> None:
        path = tmp_path / "nested" / "filters.json"
        store = JsonFilePreferenceStore(path)
        criteria = FilterCriteria(hide_honeypots=True, sort="safetyScore_asc", search_query="pepe")

        store.save(criteria)

        assert path.exists()
        stored = json.loads(path.read_text())
        assert stored["sortBy"] == {"field": "safetyScore", "direction": "asc"}
        assert stored["searchQuery"] == "pepe"
        assert store.load() == criteria

    def test_corrupt_file(self, tmp_path) -> None:
        path = tmp_path / "filters.json"
        path.write_text("not-json")
        assert JsonFilePreferenceStore(path).load() is None

    def test_undecodable_file(self, tmp_path) -> None:
        path = tmp_path / "filters.json"
        path.write_bytes(b"\xff\xfe{bad")
        assert JsonFilePreferenceStore(path).load() is None

        path.write_bytes(b"\x80\x81\x82")
        assert JsonFilePreferenceStore(path).load() is None

    def test_unwritable_location_is_not_fatal(self, tmp_path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonFilePreferenceStore(blocker / "filters.json")
        store.save(FilterCriteria())  # logs, does not raise
        assert store.load() is None


class TestRedisStore:
    def test_load(self) -> None:
        client = MagicMock()
        client.get.return_value = '{"sortBy": "holders_asc", "minHolders": 30}'
        criteria = RedisPreferenceStore(client, "prefs").load()
        assert criteria is not None
        assert criteria.sort.field == SortField.HOLDERS
        assert criteria.sort.direction == SortDirection.ASC
        assert criteria.min_holders == 30
        client.get.assert_called_once_with("prefs")

    def test_load_missing_key(self) -> None:
        client = MagicMock()
        client.get.return_value = None
        assert RedisPreferenceStore(client, "prefs").load() is None

    def test_load_connection_error(self) -> None:
        client = MagicMock()
        client.get.side_effect = RedisError("connection refused")
        assert RedisPreferenceStore(client, "prefs").load() is None

    def test_save(self) -> None:
        client = MagicMock()
        RedisPreferenceStore(client, "prefs").save(FilterCriteria(max_records=25))
        key, raw = client.set.call_args.args
        assert key == "prefs"
        assert json.loads(raw)["maxRecords"] == 25

    def test_save_error_is_swallowed(self) -> None:
        client = MagicMock()
        client.set.side_effect = RedisError("read only replica")
        RedisPreferenceStore(client, "prefs").save(FilterCriteria())


def test_factory_defaults_to_file(tmp_path) -> None:
    store = create_preference_store("sqlite", path=str(tmp_path / "f.json"), redis_key="k")
    assert isinstance(store, JsonFilePreferenceStore)
