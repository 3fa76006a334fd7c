"""Tests for the credential store."""

import asyncio

import pytest

from gym_companion.adapters.api_client import ACCESS_TOKEN_KEY
from gym_companion.domain.auth import PersistedCredential, User
from gym_companion.errors import StorageError
from gym_companion.services.credentials import (
    ID_TOKEN_KEY,
    PENDING_MARKER_KEY,
    USER_DATA_KEY,
    CredentialStore,
)
from tests.conftest import USER_JSON, RecordingStore

USER = User(user_id=1, email="a@b.com")


def test_save_writes_marker_first_and_removes_it_last() -> None:
    store = RecordingStore()
    credentials = CredentialStore(store)

    asyncio.run(
        credentials.save(
            PersistedCredential(access_token="abc", user=USER, id_token="id-1")
        )
    )

    assert store.saves == [
        PENDING_MARKER_KEY,
        ID_TOKEN_KEY,
        ACCESS_TOKEN_KEY,
        USER_DATA_KEY,
    ]
    assert store.deletes[-1] == PENDING_MARKER_KEY
    assert set(store.values) == {ID_TOKEN_KEY, ACCESS_TOKEN_KEY, USER_DATA_KEY}
    assert asyncio.run(credentials.load()) == PersistedCredential(
        access_token="abc", user=USER, id_token="id-1"
    )


def test_save_without_id_token_replaces_stale_one() -> None:
    store = RecordingStore(values={ID_TOKEN_KEY: "old"})
    credentials = CredentialStore(store)

    asyncio.run(credentials.save(PersistedCredential(access_token="abc", user=USER)))

    assert ID_TOKEN_KEY not in store.values
    loaded = asyncio.run(credentials.load())
    assert loaded is not None
    assert loaded.id_token is None


def test_save_failure_rolls_back() -> None:
    store = RecordingStore(fail_saves={ACCESS_TOKEN_KEY})
    credentials = CredentialStore(store)

    with pytest.raises(StorageError):
        asyncio.run(
            credentials.save(
                PersistedCredential(access_token="abc", user=USER, id_token="id-1")
            )
        )

    assert store.values == {}


def test_save_rolls_back_when_marker_cannot_be_removed() -> None:
    store = RecordingStore(fail_deletes={PENDING_MARKER_KEY})
    credentials = CredentialStore(store)

    with pytest.raises(StorageError):
        asyncio.run(
            credentials.save(
                PersistedCredential(access_token="abc", user=USER, id_token="id-1")
            )
        )

    assert store.values == {PENDING_MARKER_KEY: "1"}


@pytest.mark.parametrize(
    "values",
    [
        {ACCESS_TOKEN_KEY: "stale"},
        {ACCESS_TOKEN_KEY: "stale", ID_TOKEN_KEY: "id-0"},
        {USER_DATA_KEY: USER_JSON},
    ],
)
def test_load_discards_incomplete_credential(values: dict[str, str]) -> None:
    store = RecordingStore(values=dict(values))

    assert asyncio.run(CredentialStore(store).load()) is None
    assert store.values == {}


def test_load_of_empty_store_writes_nothing() -> None:
    store = RecordingStore()

    assert asyncio.run(CredentialStore(store).load()) is None
    assert store.saves == []
    assert store.deletes == []


def test_load_discards_malformed_user_blob() -> None:
    store = RecordingStore(values={ACCESS_TOKEN_KEY: "abc", USER_DATA_KEY: "{oops"})

    assert asyncio.run(CredentialStore(store).load()) is None
    assert store.values == {}


def test_clear_attempts_every_key() -> None:
    store = RecordingStore(
        values={ID_TOKEN_KEY: "i", ACCESS_TOKEN_KEY: "a", USER_DATA_KEY: USER_JSON},
        fail_deletes={ACCESS_TOKEN_KEY},
    )

    failed = asyncio.run(CredentialStore(store).clear())

    assert failed == [ACCESS_TOKEN_KEY]
    assert store.deletes == [ID_TOKEN_KEY, ACCESS_TOKEN_KEY, USER_DATA_KEY]
    assert store.values == {ACCESS_TOKEN_KEY: "a", PENDING_MARKER_KEY: "1"}


def test_leftover_keys_are_discarded_on_next_load() -> None:
    store = RecordingStore(
        values={ACCESS_TOKEN_KEY: "a", USER_DATA_KEY: USER_JSON},
        fail_deletes={ACCESS_TOKEN_KEY},
    )
    credentials = CredentialStore(store)
    asyncio.run(credentials.clear())
    store.fail_deletes = set()

    assert asyncio.run(credentials.load()) is None
    assert store.values == {}
