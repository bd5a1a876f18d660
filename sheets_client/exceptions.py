"""Remote store errors."""


class StoreError(Exception):
    """Base error for remote store operations."""

    def __init__(self, message: str = "Remote store error"):
        self.message = message
        super().__init__(self.message)


class AuthenticationRequired(StoreError):
    """No access token available. Never retried."""

    def __init__(self, message: str = "Not authenticated - access token missing"):
        super().__init__(message)


class RemoteClientError(StoreError):
    """Malformed request or schema mismatch (4xx other than 429). Never retried."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class RateLimited(StoreError):
    """HTTP 429. Retried with backoff, honoring Retry-After when present."""

    def __init__(self, message: str = "Quota exceeded", retry_after: float | None = None):
        self.retry_after = retry_after
        self.status = 429
        super().__init__(message)


class RemoteServerError(StoreError):
    """HTTP 5xx or network failure (status is None). Retried with backoff."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class RowDecodeError(RemoteClientError):
    """A stored row does not match its table schema."""

    def __init__(self, table: str, offset: int | None, detail: str):
        self.table = table
        self.offset = offset
        super().__init__(f"Cannot decode {table} row {offset}: {detail}")
