"""Persistence for the scan list's filter criteria.

``load()`` never raises: a missing, unreadable or malformed payload is logged
and reported as "no saved criteria" so the list falls back to defaults.
``save()`` failures are logged and dropped; losing a preference write must not
interrupt the list.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Protocol

from loguru import logger
from pydantic import ValidationError
from redis import Redis, RedisError

from src.models.criteria import FilterCriteria


class PreferenceStore(Protocol):
    def load(self) -> FilterCriteria | None: ...

    def save(self, criteria: FilterCriteria) -> None: ...


def parse_criteria(raw: str | bytes | None) -> FilterCriteria | None:
    """Decode a stored JSON payload, ``None`` if absent or malformed."""
    if raw is None or raw == "" or raw == b"":
        return None
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as e:
        logger.warning(f"[PREFS] Stored criteria is not valid JSON, using defaults: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"[PREFS] Stored criteria is {type(data).__name__}, expected object")
        return None
    try:
        return FilterCriteria.model_validate(data)
    except ValidationError as e:
        logger.warning(f"[PREFS] Stored criteria failed validation, using defaults: {e.error_count()} errors")
        return None


def dump_criteria(criteria: FilterCriteria) -> str:
    return json.dumps(criteria.to_payload(), separators=(",", ":"))


class MemoryPreferenceStore:
    """Keeps the last saved payload in memory (headless runs, tests)."""

    def __init__(self, raw: str | None = None) -> None:
        self.raw = raw
        self.saves = 0

    def load(self) -> FilterCriteria | None:
        return parse_criteria(self.raw)

    def save(self, criteria: FilterCriteria) -> None:
        self.raw = dump_criteria(criteria)
        self.saves += 1


class JsonFilePreferenceStore:
    """Criteria stored as a JSON file, written atomically via rename."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> FilterCriteria | None:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"[PREFS] Cannot read {self.path}: {e}")
            return None
        return parse_criteria(raw)

    def save(self, criteria: FilterCriteria) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(dump_criteria(criteria), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning(f"[PREFS] Cannot write {self.path}: {e}")


class RedisPreferenceStore:
    """Criteria stored as a JSON string under a single Redis key."""

    def __init__(self, client: Redis, key: str) -> None:
        self._client = client
        self._key = key

    def load(self) -> FilterCriteria | None:
        try:
            raw = self._client.get(self._key)
        except RedisError as e:
            logger.warning(f"[PREFS] Redis read failed for {self._key}: {e}")
            return None
        return parse_criteria(raw)

    def save(self, criteria: FilterCriteria) -> None:
        try:
            self._client.set(self._key, dump_criteria(criteria))
        except RedisError as e:
            logger.warning(f"[PREFS] Redis write failed for {self._key}: {e}")


def create_preference_store(backend: str, *, path: str, redis_key: str) -> PreferenceStore:
    """Build the store named by ``backend`` ("file" or "redis")."""
    if backend == "redis":
        from src.db.redis import get_redis

        return RedisPreferenceStore(get_redis(), redis_key)
    if backend != "file":
        logger.warning(f"[PREFS] Unknown preferences backend {backend!r}, using file")
    return JsonFilePreferenceStore(path)
