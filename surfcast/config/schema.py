"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"


class SourceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = FIRESTORE_BASE_URL
    project_id: str = "dosurf"
    database: str = "(default)"
    api_key: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0.0)


class PipelineConfig(BaseModel):
    model_config = {"extra": "forbid"}

    days_back: int = Field(default=2, ge=1, le=14)
    record_limit: int = Field(default=20, ge=1, le=500)
    display_timezone: str = "Asia/Seoul"


class BeachConfig(BaseModel):
    model_config = {"extra": "forbid"}

    beach_id: str
    region: str
    name: str = ""
    enabled: bool = True


class SurfcastConfig(BaseModel):
    model_config = {"extra": "forbid"}

    source: SourceConfig = SourceConfig()
    pipeline: PipelineConfig = PipelineConfig()
    beaches: list[BeachConfig] = []

    def beach_keys(self, region: str | None = None) -> list[tuple[str, str]]:
        """(beach_id, region) pairs of enabled beaches, optionally for one region."""
        return [
            (b.beach_id, b.region)
            for b in self.beaches
            if b.enabled and (region is None or b.region == region)
        ]
