"""Error taxonomy for the client core."""


class GymCompanionError(Exception):
    """Base class for client errors."""


class StorageError(GymCompanionError):
    """Read, write or delete failure on the local key-value store."""


class NetworkError(GymCompanionError):
    """HTTP or identity provider call failure."""


class ProviderCancelled(GymCompanionError):
    """The user dismissed the hosted authorization flow."""


class InvalidResponseShape(GymCompanionError):
    """The API returned a payload without the expected shape."""
