"""
Sync settings loaded from environment variables.

Nothing secret is hard-coded; the CLI loads a .env file first when present.

Usage:
    settings = SyncSettings.from_env()
    credential = settings.vendor_credential()  # None when not configured
"""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from scale_connector import Credential, VendorConfig

from .exceptions import ConfigError

ENV_VARS = {
    "server_url": "HEALTHSYNC_SERVER_URL",
    "upload_user": "HEALTHSYNC_UPLOAD_USER",
    "upload_password": "HEALTHSYNC_UPLOAD_PASSWORD",
    "vendor_email": "RENPHO_EMAIL",
    "vendor_password": "RENPHO_PASSWORD",
    "vendor_public_key": "RENPHO_PUBLIC_KEY",
    "vendor_base_url": "RENPHO_BASE_URL",
    "lookback_days": "HEALTHSYNC_LOOKBACK_DAYS",
    "steps_lookback_days": "HEALTHSYNC_STEPS_LOOKBACK_DAYS",
    "export_path": "HEALTHSYNC_EXPORT_PATH",
    "source_tag": "HEALTHSYNC_SOURCE_TAG",
    "timeout": "HEALTHSYNC_TIMEOUT",
    "log_level": "LOG_LEVEL",
}

SECRET_FIELDS = {"upload_password", "vendor_password"}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SyncSettings(BaseModel):
    """Health sync bridge configuration."""

    # Upload endpoint
    server_url: str | None = None
    upload_user: str | None = None
    upload_password: SecretStr | None = None

    # Vendor account
    vendor_email: str | None = None
    vendor_password: SecretStr | None = None
    vendor_public_key: str | None = None
    vendor_base_url: str | None = None

    # Read windows
    lookback_days: int = Field(30, gt=0)
    steps_lookback_days: int = Field(1, gt=0)

    export_path: str | None = None
    source_tag: str = "health_connect_app"
    timeout: float = Field(30.0, gt=0)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SyncSettings":
        """
        Build settings from environment variables.

        Empty variables count as unset.

        Raises:
            ConfigError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ

        values: dict[str, Any] = {}
        for field_name, var in ENV_VARS.items():
            raw = environ.get(var)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()

        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{ENV_VARS.get(str(err['loc'][0]), err['loc'][0])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from e

    def vendor_credential(self) -> Credential | None:
        """Vendor credential, or None when the vendor leg is not configured."""
        if not self.vendor_email or self.vendor_password is None:
            return None
        return Credential(email=self.vendor_email, password=self.vendor_password)

    def vendor_config(self) -> VendorConfig:
        """Vendor endpoints, with any overrides from the environment."""
        overrides: dict[str, Any] = {"timeout": self.timeout}
        if self.vendor_public_key:
            overrides["public_key"] = self.vendor_public_key
        if self.vendor_base_url:
            overrides["base_url"] = self.vendor_base_url
        return VendorConfig(**overrides)

    def require_upload(self) -> tuple[str, str, str]:
        """
        Upload URL and basic-auth credential.

        Raises:
            ConfigError: If any of them is missing
        """
        missing = [
            ENV_VARS[name]
            for name in ("server_url", "upload_user", "upload_password")
            if getattr(self, name) is None
        ]
        if missing:
            raise ConfigError(f"Upload not configured, set: {', '.join(missing)}")
        return self.server_url, self.upload_user, self.upload_password.get_secret_value()

    def redacted(self) -> dict[str, Any]:
        """Settings for display, secrets masked."""
        data = self.model_dump()
        for name in SECRET_FIELDS:
            data[name] = "********" if data[name] is not None else None
        if data["vendor_public_key"]:
            data["vendor_public_key"] = "(custom)"
        return data
