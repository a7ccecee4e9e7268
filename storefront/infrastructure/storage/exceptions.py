"""
Storefront Infrastructure Exceptions

Domain-specific exceptions for durable storage, backend reads and order
writes. Storage and fetch errors are recovered inside the cache and the
data-access facade; order write errors always reach the caller.
"""

from typing import Any, Dict, Optional


class StorefrontException(Exception):
    """Base exception for storefront infrastructure errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        if original_error is not None:
            self.details.setdefault("original_error", str(original_error))
            self.details.setdefault(
                "original_error_type", type(original_error).__name__
            )
        super().__init__(self.message)
        # Preserve exception context for debugging (exception chaining)
        if original_error is not None:
            self.__cause__ = original_error


class StorageError(StorefrontException):
    """Raised when the durable store cannot complete an operation."""

    def __init__(
        self,
        message: str = "Durable storage operation failed",
        key: Optional[str] = None,
        error_code: str = "STORAGE_ERROR",
        original_error: Optional[BaseException] = None,
    ):
        details = {"key": key} if key else {}
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            original_error=original_error,
        )


class StorageUnavailableError(StorageError):
    """Raised when the durable store is absent or unreachable."""

    def __init__(
        self,
        message: str = "Durable storage is unavailable",
        key: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message=message,
            key=key,
            error_code="STORAGE_UNAVAILABLE",
            original_error=original_error,
        )


class StorageQuotaExceededError(StorageError):
    """Raised when a write would exceed the durable store quota."""

    def __init__(
        self,
        key: Optional[str] = None,
        usage: Optional[int] = None,
        limit: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message="Durable storage quota exceeded",
            key=key,
            error_code="STORAGE_QUOTA_EXCEEDED",
            original_error=original_error,
        )
        if usage is not None:
            self.details["usage"] = usage
        if limit is not None:
            self.details["limit"] = limit


class StorageSerializationError(StorageError):
    """Raised when a cache envelope cannot be encoded for storage."""

    def __init__(
        self, key: Optional[str] = None, original_error: Optional[BaseException] = None
    ):
        super().__init__(
            message="Cache entry could not be serialized",
            key=key,
            error_code="STORAGE_SERIALIZATION_ERROR",
            original_error=original_error,
        )


class FetchError(StorefrontException):
    """Raised when a backend read fails."""

    def __init__(
        self,
        resource: str,
        status_code: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        details: Dict[str, Any] = {"resource": resource}
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=f"Failed to fetch {resource} from backend",
            error_code="BACKEND_FETCH_ERROR",
            details=details,
            original_error=original_error,
        )
        self.resource = resource
        self.status_code = status_code


class OrderWriteError(StorefrontException):
    """Raised when an order could not be created."""

    def __init__(
        self,
        message: str = "Failed to create order",
        error_code: str = "ORDER_WRITE_ERROR",
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            original_error=original_error,
        )


class PartialOrderWriteError(OrderWriteError):
    """Raised when the order row exists but its item rows were not written.

    The orphan order is left in the backend for manual reconciliation.
    """

    def __init__(
        self,
        order_id: str,
        item_count: int,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message=f"Order {order_id} created but its items were not saved",
            error_code="ORDER_PARTIAL_WRITE",
            details={"order_id": order_id, "item_count": item_count},
            original_error=original_error,
        )
        self.order_id = order_id


class BackendConfigurationError(StorefrontException):
    """Raised when backend configuration is missing or invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(
            message=message, error_code="BACKEND_CONFIGURATION_ERROR", details=details
        )
