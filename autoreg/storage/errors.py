"""Error types for the storage module."""


class StorageUnavailableError(RuntimeError):
    """Raised when the key-value backend cannot serve a read or write.

    Persistence is best-effort: callers catch this, log it and keep the
    in-memory state authoritative.
    """
