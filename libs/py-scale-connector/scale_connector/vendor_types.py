"""Type definitions, enums, and Pydantic models for the scale connector."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

SUCCESS_STATUS = "20000"

# Lower bound for measurement history (1998-01-01T00:00:00Z): "everything".
HISTORY_START_EPOCH = 883612800

RENPHO_PUBLIC_KEY = """
MIGfMA0GCSqGSIb3DQEBAQUAA4GNADCBiQKBgQC+25I2upukpfQ7rIaaTZtVE744
u2zV+HaagrUhDOTq2fMraicFq0tnWyBa4DnqOqRkMJKbcMZs2DkEQ8hQl95FOwdn
BjCkLH17m0n3RCnHRIg2wQk4RFKasdzynx2eON7cBuCUhWexShlBMtjRYdNXRlDP
CsHqpKaDBOvbdUMf1QIDAQAB
"""


def _to_str(value: Any) -> Any:
    # The vendor returns ids and status codes as either strings or numbers.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class VendorType(str, Enum):
    """Supported scale vendors."""

    RENPHO = "renpho"


class AuthStrategy(str, Enum):
    """Sign-in strategies, tried in declaration order."""

    PLAINTEXT = "0"
    ENCRYPTED = "1"


class Credential(BaseModel):
    """Vendor account credential."""

    model_config = ConfigDict(frozen=True)

    email: str
    password: SecretStr


class Session(BaseModel):
    """Opaque session tokens returned by a successful sign-in."""

    model_config = ConfigDict(frozen=True)

    session_key: str
    user_id: str


class AuthRequest(BaseModel):
    """Sign-in request body."""

    secure_flag: AuthStrategy
    email: str
    password: str


class AuthResponse(BaseModel):
    """Sign-in response body."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status_code: str | None = None
    status_message: str | None = None
    session_key: str | None = Field(None, alias="terminal_user_session_key")
    id: str | None = None

    @field_validator("status_code", "id", mode="before")
    @classmethod
    def coerce_str(cls, value: Any) -> Any:
        return _to_str(value)

    def is_success(self) -> bool:
        """Recognized success: vendor status code plus both session tokens."""
        return (
            self.status_code == SUCCESS_STATUS
            and self.session_key is not None
            and self.id is not None
        )


class Measurement(BaseModel):
    """
    One body-composition reading as returned by the vendor.

    Every metric is optional; the scale omits whatever it could not measure.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int | str | None = None
    time_stamp: int | None = None
    weight: float | None = None
    bmi: float | None = None
    bodyfat: float | None = None
    muscle: float | None = None
    water: float | None = None
    bone: float | None = None
    visfat: int | float | None = None
    bmr: int | float | None = None
    protein: float | None = None
    bodyage: int | None = None


class MeasurementsResponse(BaseModel):
    """Measurement list response envelope."""

    model_config = ConfigDict(extra="ignore")

    status_code: str | None = None
    status_message: str | None = None
    last_ary: list[Any] | None = None

    @field_validator("status_code", mode="before")
    @classmethod
    def coerce_str(cls, value: Any) -> Any:
        return _to_str(value)


class VendorConfig(BaseModel):
    """Vendor endpoints and constants."""

    vendor: VendorType = VendorType.RENPHO
    base_url: str = "https://renpho.qnclouds.com"
    sign_in_path: str = "/api/v3/users/sign_in.json?app_id=Renpho"
    measurements_path: str = "/api/v2/measurements/list.json"
    app_id: str = "Renpho"
    locale: str = "en"
    user_agent: str = "Renpho/4.9.0 (Android)"
    public_key: str = RENPHO_PUBLIC_KEY
    history_start: int = HISTORY_START_EPOCH
    timeout: float = 30.0

    @property
    def sign_in_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.sign_in_path}"

    @property
    def measurements_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.measurements_path}"
