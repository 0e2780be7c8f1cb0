"""
Supabase client helper shared by all marketplace services.
"""
from datetime import datetime, date
from enum import Enum
from typing import Optional, Dict, Any, List, Iterable, Callable

from supabase import create_client

from ..utils.errors import RemoteServiceError
from ..utils.logger import get_logger
from config.settings import supabase_config


class SupabaseClient:
    """Thin wrapper over the Supabase SDK for table and storage access."""

    def __init__(self):
        self.logger = get_logger("supabase_client")
        self.client = None
        self.initialized = False

    def initialize(self) -> bool:
        """Initialize Supabase client from environment configuration."""
        try:
            if self.initialized:
                return True

            auth_key = supabase_config.get_auth_key()
            if not supabase_config.url or not auth_key:
                self.logger.error("Supabase configuration missing", url=bool(supabase_config.url))
                return False

            self.client = create_client(supabase_config.url, auth_key)
            self.initialized = True
            self.logger.info("Supabase client initialized successfully", url=supabase_config.url)
            return True
        except Exception as e:
            self.logger.error("Failed to initialize Supabase client", error=str(e))
            self.initialized = False
            return False

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively convert dates, enums and other unsupported types to JSON-serializable values."""

        def serialize_value(value):
            if isinstance(value, (datetime, date)):
                return value.isoformat()
            if isinstance(value, Enum):
                return value.value
            if isinstance(value, dict):
                return {k: serialize_value(v) for k, v in value.items()}
            if isinstance(value, (list, tuple)):
                return [serialize_value(v) for v in value]
            return value

        return {k: serialize_value(v) for k, v in payload.items()}

    @staticmethod
    def _rows(res) -> List[Dict[str, Any]]:
        """Safely extract rows (handle both supabase-py response shapes)."""
        if hasattr(res, "data"):
            return res.data or []
        if hasattr(res, "json") and callable(res.json):
            return res.json().get("data", []) or []
        return []

    def _execute(self, operation: str, table: str, build: Callable[[], Any]):
        if not self.initialized and not self.initialize():
            raise RemoteServiceError("Supabase client not initialized", table=table)
        try:
            return build().execute()
        except Exception as e:
            pg_code = getattr(e, "code", None)
            self.logger.error(
                "Supabase operation failed",
                operation=operation,
                table=table,
                pg_code=pg_code,
                error=str(e),
            )
            raise RemoteServiceError(str(e), pg_code=pg_code, table=table) from e

    @staticmethod
    def _apply_filters(query, filters: Optional[Dict[str, Any]]):
        for column, value in (filters or {}).items():
            if isinstance(value, Enum):
                value = value.value
            query = query.eq(column, value)
        return query

    # CRUD operations
    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        columns: str = "*",
        order: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        in_filters: Optional[Dict[str, Iterable[Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """Select rows matching equality (and optional IN) filters."""

        def build():
            query = self._apply_filters(self.client.table(table).select(columns), filters)
            for column, values in (in_filters or {}).items():
                query = query.in_(column, [v.value if isinstance(v, Enum) else v for v in values])
            if order:
                query = query.order(order, desc=desc)
            if limit:
                if offset is not None:
                    query = query.range(offset, offset + limit - 1)
                else:
                    query = query.limit(limit)
            return query

        return self._rows(self._execute("select", table, build))

    def select_one(self, table: str, filters: Dict[str, Any], columns: str = "*") -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters, columns=columns, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        serialized = self._serialize_payload(payload)
        res = self._execute("insert", table, lambda: self.client.table(table).insert(serialized))
        rows = self._rows(res)
        self.logger.info("Row inserted", table=table, id=(rows[0] if rows else serialized).get("id"))
        return rows[0] if rows else serialized

    def update(self, table: str, updates: Dict[str, Any], filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Update rows matching filters; returns the updated rows."""
        serialized = self._serialize_payload(updates)
        res = self._execute(
            "update", table,
            lambda: self._apply_filters(self.client.table(table).update(serialized), filters),
        )
        return self._rows(res)

    def delete(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Delete rows matching filters; returns the deleted rows."""
        res = self._execute(
            "delete", table,
            lambda: self._apply_filters(self.client.table(table).delete(), filters),
        )
        return self._rows(res)

    def count(self, table: str, filters: Optional[Dict[str, Any]] = None) -> int:
        """Exact row count for the filters."""
        res = self._execute(
            "count", table,
            lambda: self._apply_filters(self.client.table(table).select("id", count="exact"), filters),
        )
        total = getattr(res, "count", None)
        if total is None:
            total = len(self._rows(res))
        return int(total)

    # Storage
    def upload_file(self, bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Upload bytes to a storage bucket; returns the stored object path."""
        if not self.initialized and not self.initialize():
            raise RemoteServiceError("Supabase client not initialized", bucket=bucket)
        try:
            options = {"content-type": content_type} if content_type else None
            res = self.client.storage.from_(bucket).upload(path, content, options)
            stored = getattr(res, "path", None) or path
            self.logger.info("File uploaded", bucket=bucket, path=stored)
            return stored
        except Exception as e:
            self.logger.error("File upload failed", bucket=bucket, path=path, error=str(e))
            raise RemoteServiceError(str(e), bucket=bucket, path=path) from e

    def public_url(self, bucket: str, path: str) -> str:
        """Public URL of a stored object."""
        res = self.client.storage.from_(bucket).get_public_url(path)
        if isinstance(res, dict):
            return res.get("publicUrl") or res.get("publicURL") or ""
        return str(res).rstrip("?")

    # Context manager helpers
    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass
