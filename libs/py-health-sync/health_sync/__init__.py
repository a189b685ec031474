"""Health Sync - merges health-store and scale vendor data and uploads it."""

from .config import SyncSettings
from .exceptions import (
    ConfigError,
    HealthSourceError,
    HealthSyncError,
    SyncError,
    SyncErrorKind,
)
from .orchestrator import (
    SyncOrchestrator,
    SyncResult,
    SyncSummary,
    SyncWindow,
    summarize,
)
from .scheduler import run_daily, seconds_until
from .source import HealthDataSource, JsonExportSource
from .uploader import PayloadUploader

__version__ = "0.1.0"

__all__ = [
    "SyncSettings",
    "HealthSyncError",
    "SyncError",
    "SyncErrorKind",
    "HealthSourceError",
    "ConfigError",
    "SyncOrchestrator",
    "SyncResult",
    "SyncSummary",
    "SyncWindow",
    "summarize",
    "run_daily",
    "seconds_until",
    "HealthDataSource",
    "JsonExportSource",
    "PayloadUploader",
]
