"""Catalog domain exceptions."""

from bingers.core.domain.exceptions import DomainException


class CatalogError(DomainException):
    """Base error for catalog requests."""

    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        if url:
            message = f"{message} [{url}]"
        super().__init__(message)


class CatalogTransportError(CatalogError):
    """Raised when a request cannot be sent or its response cannot be read."""

    error_code = "CATALOG_TRANSPORT_ERROR"


class CatalogHttpStatusError(CatalogError):
    """Raised when the catalog answers with a non-2xx status."""

    error_code = "CATALOG_HTTP_STATUS"

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        super().__init__(f"HTTP error: received status code {status_code}", url)


class CatalogRateLimitError(CatalogHttpStatusError):
    """Raised on HTTP 429, the only retryable failure."""

    error_code = "CATALOG_RATE_LIMITED"

    def __init__(self, url: str):
        super().__init__(429, url)


class CatalogDecodeError(CatalogError):
    """Raised when a response body is not the JSON document we expect."""

    error_code = "CATALOG_DECODE_ERROR"


class CatalogBatchTimeoutError(CatalogError):
    """Raised when a whole batch did not settle within its time budget."""

    error_code = "CATALOG_BATCH_TIMEOUT"

    def __init__(self, operation: str, timeout_sec: float):
        self.operation = operation
        self.timeout_sec = timeout_sec
        super().__init__(f"{operation} did not complete within {timeout_sec}s")
