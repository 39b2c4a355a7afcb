# This module handles the persistence of MCP connection records in a JSON file.
# Date: 2025-07-03
# Version: 0.1.0

import json
import os
import tempfile
import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from mcp_chat.core.errors import (
    ConnectionNotFoundError,
    DuplicateURLError,
    InputValidationError,
    StorageError,
)
from mcp_chat.models.mcp import Connection
from mcp_chat.utils.logger import console

MUTABLE_FIELDS = ("name", "description", "url")


def normalize_url(url: str) -> str:
    """Trims whitespace and the trailing slash so the URL can be used as a base endpoint."""
    return (url or "").strip().rstrip("/")


def validate_url(url: str) -> str:
    normalized = normalize_url(url)
    if not normalized:
        raise InputValidationError("Name and URL are required")
    parsed = urlparse(normalized)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputValidationError(f"Invalid URL format: {url}")
    return normalized


def new_connection_id() -> str:
    return f"mcp_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class ConnectionStore:
    """
    Owns the registered MCP connections and keeps them in a JSON file.

    Every mutation writes the whole snapshot (atomically, via a temporary file
    and os.replace) before it returns, so a successful call is always durable.
    A failed write rolls the in-memory state back and raises StorageError.
    """

    def __init__(self, storage_file: str, backup_dir: Optional[str] = None):
        self._storage_file = Path(storage_file)
        self._backup_dir = Path(backup_dir) if backup_dir else self._storage_file.parent
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.RLock()
        self.reload()

    @property
    def storage_file(self) -> Path:
        return self._storage_file

    # --- persistence ---

    def _read_snapshot(self, path: Path) -> Dict[str, Connection]:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError("snapshot is not a JSON array")
        connections = {}
        for record in raw:
            connection = Connection.model_validate(record)
            connections[connection.id] = connection
        return connections

    def _write_snapshot(self, path: Path, connections: Dict[str, Connection]):
        data = json.dumps([c.to_record() for c in connections.values()], indent=2, ensure_ascii=False)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _save(self):
        try:
            self._write_snapshot(self._storage_file, self._connections)
        except OSError as e:
            console.error(f"Failed to save MCP connections to '{self._storage_file}': {e}")
            raise StorageError(f"Failed to save MCP connections: {e}") from e
        console.info(f"Saved {len(self._connections)} MCP connection(s) to '{self._storage_file}'.")

    def _commit(self, previous: Dict[str, Connection]):
        """Persists the current state, restoring `previous` if the write fails."""
        try:
            self._save()
        except StorageError:
            self._connections = previous
            raise

    def reload(self):
        """Discards the in-memory state and reads the storage file again."""
        with self._lock:
            self._connections = {}
            if not self._storage_file.exists():
                self._save()
                console.info(f"Created new MCP connection storage file '{self._storage_file}'.")
                return
            try:
                self._connections = self._read_snapshot(self._storage_file)
            except (OSError, ValueError, ValidationError) as e:
                # json.JSONDecodeError is a ValueError
                console.error(f"Could not read MCP connection storage '{self._storage_file}', starting empty: {e}")
                self._connections = {}
                return
            console.success(f"Loaded {len(self._connections)} MCP connection(s).")

    # --- queries ---

    def list(self) -> List[Connection]:
        with self._lock:
            return list(self._connections.values())

    def get(self, connection_id: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(connection_id)

    def find_by_url(self, url: str) -> Optional[Connection]:
        target = normalize_url(url)
        with self._lock:
            for connection in self._connections.values():
                if connection.url == target:
                    return connection
        return None

    # --- mutations ---

    def add(self, name: str, description: str, url: str) -> Connection:
        if not name or not name.strip():
            raise InputValidationError("Name and URL are required")
        url = validate_url(url)

        with self._lock:
            existing = self.find_by_url(url)
            if existing:
                raise DuplicateURLError(url, existing.name)

            connection = Connection(
                id=new_connection_id(),
                name=name.strip(),
                description=description or "",
                url=url,
            )
            previous = dict(self._connections)
            self._connections[connection.id] = connection
            self._commit(previous)

        console.success(f"Added MCP connection: {connection.name} ({connection.id})")
        return connection

    def update(self, connection_id: str, **fields) -> Connection:
        """Merges name / description / url onto an existing record. None values are ignored."""
        updates = {key: value for key, value in fields.items() if key in MUTABLE_FIELDS and value is not None}

        with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None:
                raise ConnectionNotFoundError(connection_id)

            if "url" in updates:
                updates["url"] = validate_url(updates["url"])
                existing = self.find_by_url(updates["url"])
                if existing and existing.id != connection_id:
                    raise DuplicateURLError(updates["url"], existing.name)
            if "name" in updates:
                if not updates["name"].strip():
                    raise InputValidationError("Name must not be empty")
                updates["name"] = updates["name"].strip()

            updated = connection.model_copy(update=updates)
            previous = dict(self._connections)
            self._connections[connection_id] = updated
            self._commit(previous)

        console.success(f"Updated MCP connection: {updated.name} ({connection_id})")
        return updated

    def remove(self, connection_id: str) -> bool:
        with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None:
                return False
            previous = dict(self._connections)
            del self._connections[connection_id]
            self._commit(previous)

        console.success(f"Removed MCP connection: {connection.name} ({connection_id})")
        return True

    def clear(self):
        with self._lock:
            previous = dict(self._connections)
            self._connections = {}
            self._commit(previous)
        console.warning("Cleared all MCP connections.")

    # --- maintenance ---

    def backup(self, path: Optional[str] = None) -> str:
        """Writes a copy of the current snapshot. Live state is not touched."""
        target = Path(path) if path else self._backup_dir / f"mcp-connections-backup-{int(time.time() * 1000)}.json"
        with self._lock:
            try:
                self._write_snapshot(target, self._connections)
            except OSError as e:
                raise StorageError(f"Failed to create backup: {e}") from e
            count = len(self._connections)
        console.success(f"Backed up {count} MCP connection(s) to '{target}'.")
        return str(target)

    def restore(self, path: str) -> int:
        """Replaces the store with a backup snapshot and persists it."""
        try:
            restored = self._read_snapshot(Path(path))
        except (OSError, ValueError, ValidationError) as e:
            console.error(f"Failed to restore from backup '{path}': {e}")
            raise StorageError(f"Failed to restore from backup: {e}") from e

        with self._lock:
            previous = self._connections
            self._connections = restored
            self._commit(previous)
        console.success(f"Restored {len(restored)} MCP connection(s) from '{path}'.")
        return len(restored)

    def stats(self) -> dict:
        with self._lock:
            connections = list(self._connections.values())
        last_modified = None
        if self._storage_file.exists():
            mtime = self._storage_file.stat().st_mtime
            last_modified = datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()
        return {
            "totalConnections": len(connections),
            "storageFile": str(self._storage_file),
            "lastModified": last_modified,
            "connections": [
                {"id": c.id, "name": c.name, "url": c.url, "createdAt": c.created_at}
                for c in connections
            ],
        }
