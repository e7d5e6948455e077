"""Application settings and configuration management."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    FIRST_SUGGESTION_SECONDS: float = Field(default=15.0, ge=0)
    SUGGESTION_MIN_SECONDS: float = Field(default=60.0, gt=0)
    SUGGESTION_MAX_SECONDS: float = Field(default=90.0, gt=0)
    SUGGESTION_SEED: Optional[int] = None
    SUGGESTION_TARGET_GAPS: bool = False

    MONOLOGUE_SEGMENT_THRESHOLD: int = Field(default=10, ge=0)

    MERGE_POLICY: Literal["last_write_wins", "highest_confidence"] = "last_write_wins"
    DEFAULT_TAG_CONFIDENCE: float = Field(default=0.85, ge=0.0, le=1.0)

    DEFAULT_FRAMEWORK_ID: str = "meddpicc"
    CATALOG_PATH: Optional[str] = None

    MOCK_FIRST_SEGMENT_SECONDS: float = Field(default=2.0, ge=0)
    MOCK_SEGMENT_MIN_SECONDS: float = Field(default=4.0, gt=0)
    MOCK_SEGMENT_MAX_SECONDS: float = Field(default=7.0, gt=0)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        if self.SUGGESTION_MIN_SECONDS > self.SUGGESTION_MAX_SECONDS:
            raise ValueError("SUGGESTION_MIN_SECONDS must not exceed SUGGESTION_MAX_SECONDS")
        if self.MOCK_SEGMENT_MIN_SECONDS > self.MOCK_SEGMENT_MAX_SECONDS:
            raise ValueError("MOCK_SEGMENT_MIN_SECONDS must not exceed MOCK_SEGMENT_MAX_SECONDS")
        return self


settings = Settings()
