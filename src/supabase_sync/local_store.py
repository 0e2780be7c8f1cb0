"""
File-backed fallback store used when Supabase cannot be reached.

Records are kept per collection in a single JSON document. Services write
here instead of failing, and `sync-local` later replays the records into
Supabase.
"""
import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..utils.logger import get_logger
from config.settings import app_config


class LocalStore:
    """JSON document of named record collections."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or app_config.local_store_path)
        self.logger = get_logger("local_store")
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, OSError) as e:
            self.logger.error("Local store is unreadable, starting empty", path=str(self.path), error=str(e))
            return {}

    def _save(self, data: Dict[str, List[Dict[str, Any]]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2, default=str)
        os.replace(tmp_path, self.path)

    @staticmethod
    def _matches(record: Dict[str, Any], criteria: Dict[str, Any]) -> bool:
        return all(record.get(k) == v for k, v in criteria.items())

    def all(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._load().get(collection, []))

    def find(self, collection: str, **criteria: Any) -> List[Dict[str, Any]]:
        return [r for r in self.all(collection) if self._matches(r, criteria)]

    def find_one(self, collection: str, **criteria: Any) -> Optional[Dict[str, Any]]:
        matches = self.find(collection, **criteria)
        return matches[0] if matches else None

    def upsert(self, collection: str, record: Dict[str, Any], key: str = "id") -> Dict[str, Any]:
        """Insert the record, or replace the one sharing its `key` value."""
        with self._lock:
            data = self._load()
            records = data.setdefault(collection, [])
            for index, existing in enumerate(records):
                if existing.get(key) == record.get(key):
                    records[index] = record
                    break
            else:
                records.append(record)
            self._save(data)
        self.logger.info("Local record saved", collection=collection, key=key, value=record.get(key))
        return record

    def update(self, collection: str, key: str, value: Any, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge updates into the first record where record[key] == value."""
        with self._lock:
            data = self._load()
            for record in data.get(collection, []):
                if record.get(key) == value:
                    record.update(updates)
                    self._save(data)
                    return record
        return None

    def remove(self, collection: str, key: str, value: Any) -> bool:
        with self._lock:
            data = self._load()
            records = data.get(collection, [])
            kept = [r for r in records if r.get(key) != value]
            if len(kept) == len(records):
                return False
            data[collection] = kept
            self._save(data)
            return True

    def clear(self, collection: Optional[str] = None) -> None:
        with self._lock:
            data = self._load()
            if collection is None:
                data = {}
            else:
                data.pop(collection, None)
            self._save(data)
