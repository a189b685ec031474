"""Upload payload schema."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_SOURCE = "health_connect_app"


class PayloadModel(BaseModel):
    """Base for payload models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SleepStageEntry(PayloadModel):
    stage: int | str
    start_time: str
    end_time: str


class SleepEntry(PayloadModel):
    """One sleep session."""

    date: str
    start_time: str
    end_time: str
    duration_minutes: int
    stages: list[SleepStageEntry] = Field(default_factory=list)


class WeightEntry(PayloadModel):
    """One weight reading from the health store."""

    date: str
    time: str
    weight_kg: float


class BodyFatEntry(PayloadModel):
    """One body-fat reading from the health store."""

    date: str
    percentage: float


class SyncPayload(PayloadModel):
    """
    Merged health-store and vendor data, as uploaded.

    Vendor records are already flat dicts (see scale_connector.normalize) and
    pass through untouched, in vendor order.
    """

    timestamp: str = Field(..., description="Generation time, ISO-8601 UTC instant")
    source: str = Field(DEFAULT_SOURCE, description="Literal tag for the uploading app")
    sleep: list[SleepEntry] = Field(default_factory=list)
    weight: list[WeightEntry] = Field(default_factory=list)
    steps: int = 0
    body_fat: list[BodyFatEntry] = Field(default_factory=list)
    vendor: list[dict[str, Any]] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
