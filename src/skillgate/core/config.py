"""Configuration management for the skill activation engine."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator

# Ensure .env values are loaded before settings initialisation.
load_dotenv()

DEFAULT_LITELLM_API_BASE: HttpUrl = cast(HttpUrl, "http://litellm:4000")


class Settings(BaseModel):
    """Engine settings loaded from environment variables."""

    ENV_PREFIX: ClassVar[str] = "SKILLGATE_"

    model_config = ConfigDict(extra="ignore")

    catalog_path: Path = Field(
        default=Path(".skills/skill-rules.json"),
        description="Path to the skill catalog (JSON, or YAML by file suffix).",
    )
    skills_dir: Path = Field(
        default=Path(".skills"),
        description="Directory holding one content payload per skill name.",
    )
    state_dir: Path = Field(
        default=Path(".skills/state"),
        description="Directory where per-conversation session ledgers are stored.",
    )

    cache_dir: Path = Field(
        default=Path(".skills/cache"),
        description="Directory for memoized scoring results.",
    )
    cache_enabled: bool = Field(default=True, description="Whether scoring results are cached.")
    cache_ttl_seconds: float = Field(
        default=3600.0,
        ge=0,
        description="Time-to-live of a cached scoring result.",
    )
    cache_sweep_interval_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Minimum delay between two expiry sweeps of the score cache.",
    )

    high_threshold: float = Field(
        default=0.65,
        ge=0.0,
        le=1.0,
        description="Confidence strictly above this value lands in the admit tier.",
    )
    low_threshold: float = Field(
        default=0.50,
        ge=0.0,
        le=1.0,
        description="Confidence at or above this value (up to the high threshold) lands in the consider tier.",
    )
    max_admit: int = Field(default=2, ge=0, description="Size cap of the admit tier.")
    max_consider: int = Field(default=2, ge=0, description="Size cap of the consider tier.")
    capacity: int = Field(
        default=2,
        ge=0,
        description="Conversation-scoped number of directly admitted skills per turn.",
    )
    default_priority: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Priority used for catalog entries without an explicit injectionOrder.",
    )
    ordering: Literal["priority", "topological"] = Field(
        default="priority",
        description=(
            "Final ordering mode. 'priority' sorts the whole resolved set by priority; "
            "'topological' only reorders by priority where dependency edges allow it."
        ),
    )

    scorer: Literal["auto", "llm", "keyword"] = Field(
        default="auto",
        description="Scoring backend. 'auto' tries the LLM scorer and falls back to keywords.",
    )
    litellm_api_base: HttpUrl = Field(
        default=DEFAULT_LITELLM_API_BASE,
        description="Base URL for the LiteLLM gateway used by the LLM scorer.",
    )
    litellm_api_key: str | None = Field(default=None, description="Optional LiteLLM API key.")
    litellm_model: str = Field(
        default="skill-router",
        description="Model identifier used for skill scoring.",
    )
    litellm_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for one scoring request.",
    )

    log_level: str = Field(default="WARNING", description="Python logging level.")
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log record format written to stderr.",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file that receives a copy of every log record.",
    )

    def __init__(self, **data: Any) -> None:  # noqa: D401 - inherited docstring
        env_values = type(self)._load_environment_values()
        env_values.update(data)
        super().__init__(**env_values)

    @classmethod
    def _load_environment_values(cls) -> dict[str, Any]:
        """Return field values sourced from the current environment."""

        values: dict[str, Any] = {}
        for field_name in cls.model_fields:
            env_key = f"{cls.ENV_PREFIX}{field_name.upper()}"
            if env_key in os.environ:
                values[field_name] = os.environ[env_key]
        return values

    @model_validator(mode="after")
    def _check_thresholds(self) -> Settings:
        if self.high_threshold <= self.low_threshold:
            raise ValueError(
                f"high_threshold ({self.high_threshold}) must be greater than "
                f"low_threshold ({self.low_threshold})"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a singleton instance of :class:`Settings`."""

    return Settings()


__all__ = ["Settings", "get_settings"]
