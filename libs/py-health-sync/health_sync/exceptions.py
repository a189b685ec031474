"""Exceptions raised by the health sync bridge."""

from enum import Enum


class HealthSyncError(Exception):
    """Base exception for all health sync errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert exception to API error response format."""
        return {
            "error": {
                "code": self.__class__.__name__.replace("Error", "").lower(),
                "message": self.message,
            }
        }


class SyncErrorKind(str, Enum):
    """Why an upload failed."""

    NETWORK = "network"
    UPLOAD_FAILED = "upload failed"


class SyncError(HealthSyncError):
    """Upload of the sync payload failed. Not retried."""

    def __init__(
        self,
        message: str,
        kind: SyncErrorKind,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["error"]["kind"] = self.kind.value
        data["error"]["status_code"] = self.status_code
        return data


class HealthSourceError(HealthSyncError):
    """Health-store records could not be read."""


class ConfigError(HealthSyncError):
    """Missing or invalid configuration."""
