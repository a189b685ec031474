"""Renpho cloud client: sign-in, measurement fetch, and normalization."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .crypto import encrypt_password
from .exceptions import AuthError, EncryptionError, FetchError, VendorAPIError
from .normalize import normalize_measurements
from .vendor_types import (
    SUCCESS_STATUS,
    AuthRequest,
    AuthResponse,
    AuthStrategy,
    Credential,
    Measurement,
    MeasurementsResponse,
    Session,
    VendorConfig,
)

logger = logging.getLogger(__name__)


class RenphoClient:
    """
    Client for the Renpho body-composition cloud API.

    Sign-in tries a plaintext password first and an RSA-encrypted password
    second; which one an account accepts is decided server-side.

    Session state lives on the instance. Do not share one instance between
    concurrent syncs.
    """

    def __init__(
        self,
        credential: Credential,
        config: VendorConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.credential = credential
        self.config = config or VendorConfig()

        self.http_client = http_client or httpx.AsyncClient(timeout=self.config.timeout)

        self._session: Session | None = None
        self.last_fetch_error: FetchError | None = None

    @property
    def vendor(self) -> str:
        return self.config.vendor.value

    @property
    def session(self) -> Session | None:
        """Current session, None until authenticate() succeeds."""
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def _headers(self, json_body: bool = False) -> dict[str, str]:
        headers = {"User-Agent": self.config.user_agent}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        """Parse a vendor response body into a JSON object."""
        try:
            data = response.json()
        except ValueError as e:
            raise VendorAPIError(
                f"Non-JSON response (HTTP {response.status_code})",
                vendor=self.vendor,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise VendorAPIError(
                f"Unexpected response shape (HTTP {response.status_code})",
                vendor=self.vendor,
                status_code=response.status_code,
            )
        return data

    def _password_for(self, strategy: AuthStrategy) -> str:
        password = self.credential.password.get_secret_value()
        if strategy is AuthStrategy.PLAINTEXT:
            return password

        try:
            return encrypt_password(password, self.config.public_key)
        except EncryptionError as e:
            # The endpoint reports success or failure on its own.
            logger.warning("Password encryption failed, sending plaintext: %s", e.message)
            return password

    async def _sign_in(self, strategy: AuthStrategy) -> AuthResponse:
        """
        Issue one sign-in request.

        Raises:
            AuthError: On transport failure (connection error, timeout)
        """
        body = AuthRequest(
            secure_flag=strategy,
            email=self.credential.email,
            password=self._password_for(strategy),
        )

        try:
            response = await self.http_client.post(
                self.config.sign_in_url,
                json=body.model_dump(mode="json"),
                headers=self._headers(json_body=True),
            )
        except httpx.RequestError as e:
            raise AuthError(
                f"Network error during sign-in: {e}",
                vendor=self.vendor,
            ) from e

        try:
            return AuthResponse.model_validate(self._decode(response))
        except VendorAPIError as e:
            return AuthResponse(status_message=e.message)
        except ValidationError as e:
            return AuthResponse(status_message=f"Malformed sign-in response: {e.error_count()} errors")

    async def authenticate(self) -> Session:
        """
        Sign in and store the session.

        Strategies run in order (plaintext, then encrypted) and stop at the
        first recognized success. At most two requests are made.

        Returns:
            The new Session

        Raises:
            AuthError: If both strategies are rejected, or on transport
                failure at either attempt
        """
        last: AuthResponse | None = None
        attempts = 0

        for strategy in AuthStrategy:
            attempts += 1
            try:
                last = await self._sign_in(strategy)
            except AuthError as e:
                e.attempts = attempts
                logger.warning("Sign-in attempt %d failed: %s", attempts, e.message)
                raise

            if last.is_success():
                self._session = Session(session_key=last.session_key, user_id=last.id)
                logger.info(
                    "Signed in to %s (user %s, secure_flag=%s)",
                    self.vendor,
                    last.id,
                    strategy.value,
                )
                return self._session

            logger.debug(
                "Sign-in with secure_flag=%s rejected: %s %s",
                strategy.value,
                last.status_code,
                last.status_message,
            )

        raise AuthError(
            f"Sign-in rejected: {last.status_message or last.status_code or 'unknown error'}",
            vendor=self.vendor,
            status_code=last.status_code,
            status_message=last.status_message,
            attempts=attempts,
        )

    def _record_fetch_error(self, error: FetchError) -> list[Measurement]:
        self.last_fetch_error = error
        logger.warning("Measurement fetch failed: %s", error.message)
        return []

    async def fetch_measurements(self) -> list[Measurement]:
        """
        Fetch all measurement history for the signed-in user.

        Returns an empty list when there is no session yet, or when the fetch
        fails for any reason. The failure is kept in last_fetch_error.
        """
        self.last_fetch_error = None

        if self._session is None:
            logger.debug("No session; skipping measurement fetch")
            return []

        params = {
            "user_id": self._session.user_id,
            "last_at": self.config.history_start,
            "locale": self.config.locale,
            "app_id": self.config.app_id,
            "terminal_user_session_key": self._session.session_key,
        }

        try:
            response = await self.http_client.get(
                self.config.measurements_url,
                params=params,
                headers=self._headers(),
            )
            envelope = MeasurementsResponse.model_validate(self._decode(response))
        except httpx.RequestError as e:
            return self._record_fetch_error(
                FetchError(f"Network error during fetch: {e}", vendor=self.vendor)
            )
        except VendorAPIError as e:
            return self._record_fetch_error(FetchError(e.message, vendor=self.vendor))
        except ValidationError as e:
            return self._record_fetch_error(
                FetchError(f"Malformed measurement response: {e.error_count()} errors", vendor=self.vendor)
            )

        if envelope.status_code != SUCCESS_STATUS:
            return self._record_fetch_error(
                FetchError(
                    f"Fetch rejected: {envelope.status_message or envelope.status_code}",
                    vendor=self.vendor,
                    status_code=envelope.status_code,
                )
            )

        measurements = []
        for index, item in enumerate(envelope.last_ary or []):
            try:
                measurements.append(Measurement.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping unreadable measurement #%d: %s", index, e.error_count())

        logger.info("Fetched %d measurements from %s", len(measurements), self.vendor)
        return measurements

    @staticmethod
    def normalize(measurements: list[Measurement]) -> list[dict[str, Any]]:
        """Flatten measurements into sync records (pure, order-preserving)."""
        return normalize_measurements(measurements)

    async def sync_measurements(self) -> list[dict[str, Any]]:
        """
        Authenticate, fetch, and normalize in one call.

        Raises:
            AuthError: If sign-in fails
        """
        await self.authenticate()
        measurements = await self.fetch_measurements()
        return self.normalize(measurements)

    async def close(self) -> None:
        """Close HTTP client."""
        await self.http_client.aclose()

    async def __aenter__(self) -> "RenphoClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Context manager exit."""
        await self.close()
