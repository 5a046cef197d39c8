"""Key-value persistence for gamification side-state (last write wins per key)."""
import json
import httpx
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from socratix.api.supabase_client import SupabaseClient
from socratix.errors import StorageError


class KeyValueStore(ABC):

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        ...


class InMemoryKeyValueStore(KeyValueStore):

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        # Stored serialized so callers never share mutable values with the store
        self._data[key] = json.dumps(value)


class JsonFileKeyValueStore(KeyValueStore):
    """Keeps every key in a single JSON document on disk."""

    def __init__(self, path: str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise StorageError("read rewards file", e) from e

    async def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    async def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)


class SupabaseKeyValueStore(KeyValueStore):
    """Networked store over a `user_kv (key text primary key, value jsonb)` table."""

    table = "user_kv"

    def __init__(self, client: Optional[SupabaseClient] = None):
        self.client = client or SupabaseClient()

    async def get(self, key: str) -> Optional[Any]:
        try:
            rows = await self.client.select(self.table, {"key": f"eq.{key}"}, columns="value")
        except httpx.HTTPError as e:
            raise StorageError("kv get", e) from e
        return rows[0]["value"] if rows else None

    async def set(self, key: str, value: Any) -> None:
        try:
            await self.client.upsert(self.table, {"key": key, "value": value})
        except httpx.HTTPError as e:
            raise StorageError("kv set", e) from e
