"""
Sync orchestration.

One sync reads the health store, pulls vendor measurements, merges both into
a SyncPayload and uploads it. Steps run one after another; the vendor leg may
fail without failing the sync, the health-store reads and the upload may not.

Usage:
    orchestrator = SyncOrchestrator(source, uploader, vendor_client=client)
    result = await orchestrator.run_sync()
    print(result.vendor_status)
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from health_normalize import DEFAULT_SOURCE, DataNormalizer, RecordKind, SyncPayload
from scale_connector import AuthError, RenphoClient

from .config import SyncSettings
from .exceptions import ConfigError
from .source import HealthDataSource, JsonExportSource
from .uploader import PayloadUploader

logger = logging.getLogger(__name__)

NOT_CONNECTED = "Not connected"


@dataclass(frozen=True)
class SyncWindow:
    """Lookback windows, in days, ending at the sync time."""

    lookback_days: int = 30
    steps_lookback_days: int = 1


@dataclass
class SyncResult:
    """Outcome of a completed sync."""

    payload: SyncPayload
    vendor_status: str
    upload_status_code: int | None = None

    @property
    def uploaded(self) -> bool:
        return self.upload_status_code is not None


@dataclass
class SyncSummary:
    """Human-oriented digest of a payload."""

    sleep_sessions: int
    latest_sleep_hours: float | None
    weight_records: int
    latest_weight_kg: float | None
    steps: int
    vendor_status: str
    vendor_records: int
    latest_vendor_body_fat: float | None

    def as_rows(self) -> list[tuple[str, str]]:
        def fmt(value: float | None, pattern: str) -> str:
            return pattern.format(value) if value is not None else "N/A"

        return [
            ("Sleep", f"{fmt(self.latest_sleep_hours, '{:.1f}h')} ({self.sleep_sessions} sessions)"),
            ("Weight", f"{fmt(self.latest_weight_kg, '{:.1f} kg')} ({self.weight_records} records)"),
            ("Steps", str(self.steps)),
            ("Vendor", self.vendor_status),
            ("Body fat", fmt(self.latest_vendor_body_fat, "{:.1f}%")),
        ]


def summarize(payload: SyncPayload, vendor_status: str) -> SyncSummary:
    """Latest sleep and weight, step total, and the last vendor body-fat reading."""
    latest_sleep = max(payload.sleep, key=lambda s: s.start_time, default=None)
    latest_weight = max(payload.weight, key=lambda w: w.time, default=None)
    last_vendor = payload.vendor[-1] if payload.vendor else {}

    return SyncSummary(
        sleep_sessions=len(payload.sleep),
        latest_sleep_hours=latest_sleep.duration_minutes / 60 if latest_sleep else None,
        weight_records=len(payload.weight),
        latest_weight_kg=latest_weight.weight_kg if latest_weight else None,
        steps=payload.steps,
        vendor_status=vendor_status,
        vendor_records=len(payload.vendor),
        latest_vendor_body_fat=last_vendor.get("bodyFat"),
    )


class SyncOrchestrator:
    """Pulls both sources, merges, and uploads."""

    def __init__(
        self,
        source: HealthDataSource,
        uploader: PayloadUploader | None = None,
        vendor_client: RenphoClient | None = None,
        window: SyncWindow | None = None,
        source_tag: str = DEFAULT_SOURCE,
    ):
        self.source = source
        self.uploader = uploader
        self.vendor_client = vendor_client
        self.window = window or SyncWindow()
        self.source_tag = source_tag

    @classmethod
    def from_settings(
        cls,
        settings: SyncSettings,
        source: HealthDataSource | None = None,
        upload: bool = True,
    ) -> "SyncOrchestrator":
        """
        Wire an orchestrator from settings.

        Raises:
            ConfigError: If no health source is available, or upload is
                requested but not configured
        """
        if source is None:
            if not settings.export_path:
                raise ConfigError("No health source configured, set: HEALTHSYNC_EXPORT_PATH")
            source = JsonExportSource(settings.export_path)

        uploader = None
        if upload:
            url, user, password = settings.require_upload()
            uploader = PayloadUploader(url, user, password, timeout=settings.timeout)

        credential = settings.vendor_credential()
        vendor_client = (
            RenphoClient(credential, config=settings.vendor_config()) if credential else None
        )

        return cls(
            source,
            uploader=uploader,
            vendor_client=vendor_client,
            window=SyncWindow(settings.lookback_days, settings.steps_lookback_days),
            source_tag=settings.source_tag,
        )

    async def collect_vendor(self) -> tuple[list[dict[str, Any]], str]:
        """
        Run the vendor leg: authenticate, fetch, normalize.

        Never raises; failures come back as an empty list plus a status.
        """
        if self.vendor_client is None:
            return [], NOT_CONNECTED

        try:
            await self.vendor_client.authenticate()
            measurements = await self.vendor_client.fetch_measurements()
            records = self.vendor_client.normalize(measurements)
        except AuthError as e:
            logger.warning("Vendor sign-in failed after %d attempts: %s", e.attempts, e.message)
            return [], f"Auth failed: {e.message}"
        except Exception as e:
            # Vendor trouble must not block uploading the health-store data.
            logger.exception("Vendor leg failed")
            return [], f"Error: {str(e)[:30]}"

        fetch_error = self.vendor_client.last_fetch_error
        if fetch_error is not None:
            return records, f"Fetch failed: {fetch_error.message}"
        return records, f"{len(records)} records"

    async def build_payload(
        self,
        window: SyncWindow | None = None,
        now: datetime | None = None,
    ) -> tuple[SyncPayload, str]:
        """
        Read both sources and assemble the payload without uploading.

        Health-store read errors propagate unchanged. A naive `now` is taken
        to be UTC.

        Returns:
            (payload, vendor status string)
        """
        window = window or self.window
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        since = now - timedelta(days=window.lookback_days)
        steps_since = now - timedelta(days=window.steps_lookback_days)

        sleep = await self.source.read_records(RecordKind.SLEEP, since, now)
        weight = await self.source.read_records(RecordKind.WEIGHT, since, now)
        steps = await self.source.read_records(RecordKind.STEPS, steps_since, now)
        body_fat = await self.source.read_records(RecordKind.BODY_FAT, since, now)

        vendor_records, vendor_status = await self.collect_vendor()
        logger.info("Vendor status: %s", vendor_status)

        payload = DataNormalizer.build_payload(
            sleep=sleep,
            weight=weight,
            steps=steps,
            body_fat=body_fat,
            vendor=vendor_records,
            source=self.source_tag,
            generated_at=now,
        )
        return payload, vendor_status

    async def run_sync(
        self,
        window: SyncWindow | None = None,
        now: datetime | None = None,
    ) -> SyncResult:
        """
        Run one full sync and upload the result.

        Raises:
            ConfigError: If no uploader is configured
            SyncError: If the upload fails (not retried)
        """
        if self.uploader is None:
            raise ConfigError("Upload not configured")

        payload, vendor_status = await self.build_payload(window, now)
        status_code = await self.uploader.upload(payload)

        logger.info(
            "Sync complete: %d sleep, %d weight, %d steps, %d body fat, %d vendor",
            len(payload.sleep),
            len(payload.weight),
            payload.steps,
            len(payload.body_fat),
            len(payload.vendor),
        )
        return SyncResult(payload=payload, vendor_status=vendor_status, upload_status_code=status_code)

    async def close(self) -> None:
        """Close HTTP connections."""
        if self.uploader is not None:
            await self.uploader.close()
        if self.vendor_client is not None:
            await self.vendor_client.close()

    async def __aenter__(self) -> "SyncOrchestrator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
