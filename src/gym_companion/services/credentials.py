"""Persisted credential set on top of the key-value store."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from gym_companion.adapters.api_client import ACCESS_TOKEN_KEY
from gym_companion.adapters.storage import KeyValueStore
from gym_companion.domain.auth import PersistedCredential, User
from gym_companion.errors import StorageError

ID_TOKEN_KEY = "auth0_id_token"
USER_DATA_KEY = "user_data"
PENDING_MARKER_KEY = "auth0_credentials_pending"
CREDENTIAL_KEYS = (ID_TOKEN_KEY, ACCESS_TOKEN_KEY, USER_DATA_KEY)

_logger = logging.getLogger(__name__)


@dataclass
class CredentialStore:
    """Reads, writes and clears the three-key credential set.

    The store has no transactions, so a write is bracketed by a pending
    marker: marker, then the three keys, then the marker is removed. A
    marker still present at load time means the previous write was torn.
    """

    store: KeyValueStore

    async def load(self) -> PersistedCredential | None:
        """Return the stored credential, or None when absent or unusable."""
        if await self._read(PENDING_MARKER_KEY) is not None:
            _logger.warning("Found an incomplete credential write; clearing it")
            await self._clear_quietly()
            return None

        access_token = await self._read(ACCESS_TOKEN_KEY)
        user_json = await self._read(USER_DATA_KEY)
        if not access_token or not user_json:
            if access_token or user_json:
                _logger.warning("Stored credential is incomplete; clearing it")
                await self._clear_quietly()
            return None
        try:
            user = User.model_validate_json(user_json)
        except ValidationError:
            _logger.warning("Stored user data is malformed; clearing credentials")
            await self._clear_quietly()
            return None
        id_token = await self._read(ID_TOKEN_KEY)
        return PersistedCredential(
            access_token=access_token, user=user, id_token=id_token
        )

    async def save(self, credential: PersistedCredential) -> None:
        """Write the credential set, rolling back on failure."""
        await self.store.save(PENDING_MARKER_KEY, "1")
        try:
            if credential.id_token:
                await self.store.save(ID_TOKEN_KEY, credential.id_token)
            else:
                await self.store.delete(ID_TOKEN_KEY)
            await self.store.save(ACCESS_TOKEN_KEY, credential.access_token)
            await self.store.save(USER_DATA_KEY, credential.user.model_dump_json())
            await self.store.delete(PENDING_MARKER_KEY)
        except StorageError:
            _logger.exception("Credential write failed; rolling back")
            await self._clear_quietly()
            raise

    async def clear(self) -> list[str]:
        """Attempt to delete every credential key and return the ones that failed."""
        failed: list[str] = []
        for key in CREDENTIAL_KEYS:
            try:
                await self.store.delete(key)
            except StorageError:
                _logger.exception("Failed to delete %s", key)
                failed.append(key)
        # Leftover keys are flagged so the next load discards them.
        if failed:
            try:
                await self.store.save(PENDING_MARKER_KEY, "1")
            except StorageError:
                _logger.warning("Could not flag leftover credential keys")
            return failed
        try:
            await self.store.delete(PENDING_MARKER_KEY)
        except StorageError:
            _logger.exception("Failed to delete %s", PENDING_MARKER_KEY)
            failed.append(PENDING_MARKER_KEY)
        return failed

    async def _read(self, key: str) -> str | None:
        try:
            return await self.store.get(key)
        except StorageError:
            _logger.warning("Failed to read %s; treating it as absent", key)
            return None

    async def _clear_quietly(self) -> None:
        failed = await self.clear()
        if failed:
            _logger.warning("Credential keys left behind: %s", ", ".join(failed))
