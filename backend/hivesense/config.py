"""Application configuration via pydantic-settings."""

from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode

from hivesense.schemas import Credentials
from hivesense.services.windows import PERIOD_DURATIONS_MS


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # ThingSpeak channel (absent -> demo data)
    THINGSPEAK_CHANNEL_ID: str | None = None
    THINGSPEAK_READ_API_KEY: str | None = None
    THINGSPEAK_BASE_URL: str = "https://api.thingspeak.com"

    # Placeholder credentials shipped with the demo login
    DEMO_CHANNEL_ID: str = "123456"
    DEMO_API_KEY: str = "demo_api_key"

    # Fetching
    FETCH_TIMEOUT_SEC: float = 10.0
    FETCH_RESULTS: int = 100
    DEFAULT_PERIOD: str = "30days"

    # Hives evaluated by the monitor loop
    HIVES: Annotated[list[str], NoDecode] = []

    # Observability
    LOG_LEVEL: str = "INFO"
    METRICS_PORT: int | None = None

    @field_validator("HIVES", mode="before")
    @classmethod
    def parse_hives(cls, v: object) -> object:
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @field_validator("FETCH_RESULTS")
    @classmethod
    def validate_fetch_results(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"FETCH_RESULTS must be >= 0, got {v}")
        return v

    @field_validator("FETCH_TIMEOUT_SEC")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"FETCH_TIMEOUT_SEC must be positive, got {v}")
        return v

    @model_validator(mode="after")
    def validate_default_period(self) -> "Settings":
        if self.DEFAULT_PERIOD not in PERIOD_DURATIONS_MS:
            raise ValueError(
                f"DEFAULT_PERIOD must be one of {', '.join(PERIOD_DURATIONS_MS)}, "
                f"got '{self.DEFAULT_PERIOD}'"
            )
        return self

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            channel_id=self.THINGSPEAK_CHANNEL_ID,
            read_api_key=self.THINGSPEAK_READ_API_KEY,
        )
