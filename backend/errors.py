"""Error types shared by the storage backends, the store and the API."""


class StorageError(OSError):
    """The underlying key-value layer could not be read or written."""
    def __init__(self, message: str, code: str = "storage_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class StorageQuotaError(StorageError):
    """A write would exceed the configured storage quota."""
    def __init__(self, message: str, code: str = "storage_quota_exceeded"):
        super().__init__(message, code=code)


class InvalidBackupError(ValueError):
    """An import payload is not a valid backup bundle."""
    def __init__(self, message: str, code: str = "invalid_backup"):
        self.message = message
        self.code = code
        super().__init__(message)
