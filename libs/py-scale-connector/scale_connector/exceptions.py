"""Custom exceptions for the scale connector library."""


class ConnectorError(Exception):
    """Base exception for all scale connector errors."""

    def __init__(self, message: str, vendor: str | None = None, trace_id: str | None = None):
        self.message = message
        self.vendor = vendor
        self.trace_id = trace_id
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert exception to API error response format."""
        return {
            "error": {
                "code": self.__class__.__name__.replace("Error", "").lower(),
                "message": self.message,
                "vendor": self.vendor,
                "trace_id": self.trace_id,
            }
        }


class AuthError(ConnectorError):
    """Sign-in rejected by every strategy, or transport failure during sign-in."""

    def __init__(
        self,
        message: str,
        vendor: str | None = None,
        trace_id: str | None = None,
        status_code: str | None = None,
        status_message: str | None = None,
        attempts: int = 0,
    ):
        super().__init__(message, vendor, trace_id)
        self.status_code = status_code
        self.status_message = status_message
        self.attempts = attempts

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["error"]["status_code"] = self.status_code
        data["error"]["attempts"] = self.attempts
        return data


class FetchError(ConnectorError):
    """Measurement fetch failed (recorded, never raised to callers)."""

    def __init__(
        self,
        message: str,
        vendor: str | None = None,
        trace_id: str | None = None,
        status_code: str | None = None,
    ):
        super().__init__(message, vendor, trace_id)
        self.status_code = status_code


class EncryptionError(ConnectorError):
    """Password could not be encrypted with the vendor public key."""


class VendorAPIError(ConnectorError):
    """Vendor API errors (non-JSON bodies, 5xx, timeouts, etc.)."""

    def __init__(
        self,
        message: str,
        vendor: str | None = None,
        trace_id: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, vendor, trace_id)
        self.status_code = status_code
