"""Key-value stores for persisted credentials."""

import asyncio
import json
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken

from gym_companion.config import PLATFORM_WEB, Settings, parse_platform
from gym_companion.errors import StorageError


class KeyValueStore(Protocol):
    """Interface for asynchronous string key-value persistence."""

    async def save(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""

    async def get(self, key: str) -> str | None:
        """Return the value for a key, if present."""

    async def delete(self, key: str) -> None:
        """Remove a key; removing an absent key is a no-op."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for ephemeral sessions."""

    values: dict[str, str] = field(default_factory=dict)

    async def save(self, key: str, value: str) -> None:
        self.values[key] = value

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class FileKeyValueStore(KeyValueStore):
    """Plain JSON file store, the web counterpart of browser local storage."""

    path: Path

    async def save(self, key: str, value: str) -> None:
        """Write a value to the JSON file."""
        await asyncio.to_thread(self._update, key, value)

    async def get(self, key: str) -> str | None:
        """Read a value from the JSON file."""
        values = await asyncio.to_thread(self._read_all)
        value = values.get(key)
        return value if isinstance(value, str) else None

    async def delete(self, key: str) -> None:
        """Remove a value from the JSON file."""
        await asyncio.to_thread(self._update, key, None)

    def _read_all(self) -> dict[str, object]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageError(f"Failed to read {self.path}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt store file {self.path}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt store file {self.path}")
        return data

    def _update(self, key: str, value: str | None) -> None:
        values = self._read_all()
        if value is None:
            if key not in values:
                return
            values.pop(key)
        else:
            values[key] = value
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(values), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.path}") from exc


@dataclass
class EncryptedKeyValueStore(KeyValueStore):
    """Sqlite store with Fernet-encrypted values for native targets."""

    path: Path
    fernet: Fernet

    @classmethod
    def create(cls, path: Path, key: str) -> "EncryptedKeyValueStore":
        """Create a store from a urlsafe base64 Fernet key."""
        try:
            fernet = Fernet(key)
        except (ValueError, TypeError) as exc:
            raise StorageError("Invalid storage encryption key") from exc
        return cls(path=path, fernet=fernet)

    async def save(self, key: str, value: str) -> None:
        """Encrypt and store a value."""
        encrypted = self.fernet.encrypt(value.encode("utf-8"))
        await asyncio.to_thread(
            self._execute,
            "REPLACE INTO secure_items(key, value) VALUES (?, ?)",
            (key, encrypted),
        )

    async def get(self, key: str) -> str | None:
        """Read and decrypt a value."""
        rows = await asyncio.to_thread(
            self._execute, "SELECT value FROM secure_items WHERE key = ?", (key,)
        )
        if not rows:
            return None
        try:
            return self.fernet.decrypt(rows[0][0]).decode("utf-8")
        except (InvalidToken, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to decrypt value for {key}") from exc

    async def delete(self, key: str) -> None:
        """Remove a value."""
        await asyncio.to_thread(
            self._execute, "DELETE FROM secure_items WHERE key = ?", (key,)
        )

    def _execute(self, sql: str, params: tuple[object, ...]) -> list[tuple]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Failed to open {self.path}") from exc
        try:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS secure_items ("
                "key TEXT PRIMARY KEY, value BLOB NOT NULL)"
            )
            rows = conn.execute(sql, params).fetchall()
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Store query failed on {self.path}") from exc
        finally:
            conn.close()
        return rows


def select_store(settings: Settings) -> KeyValueStore:
    """Pick the store backend for the configured platform."""
    path = Path(settings.storage_path).expanduser()
    if parse_platform(settings.platform) == PLATFORM_WEB:
        return FileKeyValueStore(path.with_suffix(".json"))
    if not settings.storage_encryption_key:
        raise StorageError("storage_encryption_key is required on native platforms")
    return EncryptedKeyValueStore.create(path, settings.storage_encryption_key)
