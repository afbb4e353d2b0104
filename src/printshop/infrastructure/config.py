"""Application settings, loaded from ``PRINTSHOP_*`` environment variables."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="PRINTSHOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="JSON store directory, relative to the working directory unless absolute",
    )
    default_iva: Decimal = Field(default=Decimal("16"), ge=0, le=100)
    placeholder_marker: str = Field(
        default="__draft_placeholder__",
        description="Written into a placeholder client's category and observations",
    )
    verify_drafts: bool = Field(
        default=True,
        description="Read a draft order back right after creating it",
    )
    log_level: str = "WARNING"

    @field_validator("placeholder_marker")
    @classmethod
    def _marker_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("placeholder_marker cannot be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
