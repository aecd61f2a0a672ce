"""
Per-viewer key/value storage for job snapshots and notification lists.

Interface: get(user_id) -> value | None, put(user_id, value). Values are
JSON-encoded by every backend, so whatever goes in must be JSON-serializable.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from opscentral.core.config import settings as core_settings
from opscentral.repositories.errors import RecordNotFoundError
from opscentral.repositories.table_client import TableClient

logger = logging.getLogger(__name__)

VIEWER_STATE_TABLE = "viewer_state"


class KeyedStore(Protocol):
    def get(self, user_id: str) -> Any | None: ...

    def put(self, user_id: str, value: Any) -> None: ...


class MemoryKeyedStore:
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, user_id: str) -> Any | None:
        raw = self._values.get(user_id)
        return json.loads(raw) if raw is not None else None

    def put(self, user_id: str, value: Any) -> None:
        self._values[user_id] = json.dumps(value)


class JsonFileKeyedStore:
    def __init__(self, base_dir: str | Path, namespace: str) -> None:
        self.base_dir = Path(base_dir)
        self.namespace = namespace

    def _path(self, user_id: str) -> Path:
        safe_id = re.sub(r"[^A-Za-z0-9_.-]", "_", user_id)
        return self.base_dir / f"{self.namespace}_{safe_id}.json"

    def get(self, user_id: str) -> Any | None:
        path = self._path(user_id)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("keyed_store: unreadable %s (%s), treating as empty", path, exc)
            return None

    def put(self, user_id: str, value: Any) -> None:
        path = self._path(user_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(value), encoding="utf-8")
        tmp_path.replace(path)


class DatabaseKeyedStore:
    def __init__(self, client: TableClient, namespace: str) -> None:
        self.client = client
        self.namespace = namespace

    def _key(self, user_id: str) -> str:
        return f"{self.namespace}:{user_id}"

    def get(self, user_id: str) -> Any | None:
        row = self.client.select_one(VIEWER_STATE_TABLE, {"key": self._key(user_id)})
        if row is None:
            return None
        return json.loads(row["payload"])

    def put(self, user_id: str, value: Any) -> None:
        payload = json.dumps(value)
        key = self._key(user_id)
        try:
            self.client.update(VIEWER_STATE_TABLE, {"payload": payload}, {"key": key})
        except RecordNotFoundError:
            self.client.insert(VIEWER_STATE_TABLE, [{"key": key, "payload": payload}])


def build_keyed_store(namespace: str, client: TableClient, backend: str | None = None) -> KeyedStore:
    backend = (backend or core_settings.VIEWER_STATE_BACKEND or "database").strip().lower()
    if backend == "file":
        return JsonFileKeyedStore(core_settings.VIEWER_STATE_DIR, namespace)
    if backend == "memory":
        return MemoryKeyedStore()
    if backend != "database":
        logger.warning("keyed_store: unknown backend %r, using database", backend)
    return DatabaseKeyedStore(client, namespace)
