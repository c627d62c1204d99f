"""Exception hierarchy for ucdstore.

Every error raised on purpose by the library derives from UCDStoreError so
callers (the CLI in particular) can handle them in one place. Per-file
failures during reconciliation are never raised; they are folded into the
operation's result instead.
"""

from collections.abc import Iterable
from typing import Any


class UCDStoreError(Exception):
    """Base exception for store-related errors."""

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary for JSON output.

        Returns:
            Dictionary with the error type, message and any context fields.
        """
        return {"type": type(self).__name__, "message": str(self), **self._context()}

    def _context(self) -> dict[str, Any]:
        return {}


class VersionNotFoundError(UCDStoreError):
    """Raised when a requested version is not part of the store."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Version '{version}' does not exist in the store.")

    def _context(self) -> dict[str, Any]:
        return {"version": self.version}


class UnsupportedOperationError(UCDStoreError):
    """Raised when a bridge is asked for a capability it does not declare."""

    def __init__(
        self,
        operation: str,
        required: Iterable[str],
        available: Iterable[str],
    ) -> None:
        self.operation = operation
        self.required = sorted(required)
        self.available = sorted(available)
        available_text = ", ".join(self.available) or "none"
        super().__init__(
            f"Operation '{operation}' is not supported by this bridge "
            f"(required: {', '.join(self.required)}; available: {available_text})"
        )

    def _context(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "required": self.required,
            "available": self.available,
        }


class InvalidArgumentError(UCDStoreError, ValueError):
    """Raised when an operation receives an invalid argument."""


class PathFilteredError(UCDStoreError):
    """Raised when a requested path is excluded by the store's filters."""

    def __init__(self, version: str, path: str) -> None:
        self.version = version
        self.path = path
        super().__init__(f"File '{path}' of version '{version}' is excluded by the store filters.")

    def _context(self) -> dict[str, Any]:
        return {"version": self.version, "path": self.path}


class GenericStoreError(UCDStoreError):
    """Raised for resolver or network failures, carrying version context."""

    def __init__(
        self,
        message: str,
        version: str | None = None,
        status: int | None = None,
    ) -> None:
        self.version = version
        self.status = status
        super().__init__(message)

    def _context(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.version is not None:
            data["version"] = self.version
        if self.status is not None:
            data["status"] = self.status
        return data


class InvalidManifestError(UCDStoreError):
    """Raised when the persisted store manifest cannot be used."""

    def __init__(self, manifest_path: str, message: str) -> None:
        self.manifest_path = manifest_path
        super().__init__(f"Invalid manifest at '{manifest_path}': {message}")

    def _context(self) -> dict[str, Any]:
        return {"manifest_path": self.manifest_path}


class BridgeFileNotFoundError(UCDStoreError, FileNotFoundError):
    """Raised when a bridge is asked to read a path that does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")

    def __str__(self) -> str:
        return f"File not found: {self.path}"

    def _context(self) -> dict[str, Any]:
        return {"path": self.path}


class BridgeIsADirectoryError(UCDStoreError, IsADirectoryError):
    """Raised when a bridge is asked to read a directory as a file."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path is a directory: {path}")

    def __str__(self) -> str:
        return f"Path is a directory: {self.path}"

    def _context(self) -> dict[str, Any]:
        return {"path": self.path}


class PathTraversalError(UCDStoreError):
    """Raised when a path resolves outside the bridge's base directory."""

    def __init__(self, base_path: str, path: str) -> None:
        self.base_path = base_path
        self.path = path
        super().__init__(f"Path traversal detected: '{path}' escapes '{base_path}'")

    def _context(self) -> dict[str, Any]:
        return {"base_path": self.base_path, "path": self.path}


class ApiError(UCDStoreError):
    """Base exception for remote API failures."""


class ApiNotFoundError(ApiError):
    """Raised when the API answers 404 for a resource."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        self.status = 404
        super().__init__(f"Resource not found: {resource}")


class ApiResponseError(ApiError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, resource: str, status: int | None, message: str = "") -> None:
        self.resource = resource
        self.status = status
        detail = f": {message}" if message else ""
        super().__init__(f"Request for {resource} failed with status {status}{detail}")

    def _context(self) -> dict[str, Any]:
        return {"status": self.status}


class MalformedPayloadError(ApiError):
    """Raised when an API payload does not have the expected shape."""
