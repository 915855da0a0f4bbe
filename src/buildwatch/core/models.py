"""buildwatch data models — Pydantic v2.

This module is a leaf: no internal project imports.
All Enum and Model definitions live here.
"""

from __future__ import annotations

from contextvars import ContextVar
from enum import StrEnum
from pathlib import Path  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Node name Jenkins reports as "" when a build ran on the controller.
DEFAULT_NODE_NAME = "master"

# ============================================================
# Enums
# ============================================================


class ResultKind(StrEnum):
    """Terminal outcome of a build."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ABORTED = "ABORTED"
    UNSTABLE = "UNSTABLE"
    NOT_BUILT = "NOT_BUILT"


# ============================================================
# Config Models
# ============================================================


class JenkinsConfig(BaseModel):
    """Jenkins server connection configuration."""

    url: str = Field(default="", description="Jenkins root URL")
    user: str = Field(default="", description="User name for basic auth")
    api_token: str = Field(default="", description="API token (env: BUILDWATCH_JENKINS__API_TOKEN)")
    verify_tls: bool = Field(default=True)
    request_timeout_s: float = Field(default=30.0, ge=1.0, le=300.0)


class WaitConfig(BaseModel):
    """Poll loop configuration."""

    poll_interval_ms: int = Field(default=1000, ge=10, le=60000)
    start_timeout_s: float | None = Field(
        default=None,
        gt=0,
        description="None waits for the build to start without a deadline",
    )
    finish_timeout_s: float = Field(default=120.0, gt=0)
    result_settle_polls: int = Field(default=3, ge=1, le=100)


# Set by load_config for the duration of one Config construction.
CONFIG_FILE: ContextVar[Path | None] = ContextVar("buildwatch_config_file", default=None)


class Config(BaseSettings):
    """Project configuration.

    Source priority (later wins): defaults < YAML file < env vars < init kwargs.
    The YAML file is whatever ``CONFIG_FILE`` points at when the model is built.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUILDWATCH_",
        env_nested_delimiter="__",
    )

    jenkins: JenkinsConfig = Field(default_factory=JenkinsConfig)
    wait: WaitConfig = Field(default_factory=WaitConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=CONFIG_FILE.get()),
        )


# ============================================================
# Build Models
# ============================================================


class BuildRef(BaseModel):
    """Reference to one build: a job URL plus a number or permalink.

    The build URL always ends with ``/`` so relative paths
    (``console``, ``api/json``, ``artifact/...``) can be appended.
    """

    model_config = ConfigDict(frozen=True)

    build_url: str = Field(..., min_length=1)

    @field_validator("build_url")
    @classmethod
    def _ensure_trailing_slash(cls, v: str) -> str:
        return v if v.endswith("/") else f"{v}/"

    @classmethod
    def of(cls, job_url: str, build: int | str) -> BuildRef:
        """Build reference from a job URL and a build number or permalink."""
        if isinstance(build, int) and build < 1:
            msg = f"Build number must be positive, got {build}"
            raise ValueError(msg)
        if isinstance(build, str) and not build.strip("/"):
            msg = "Permalink must not be empty"
            raise ValueError(msg)
        job = job_url if job_url.endswith("/") else f"{job_url}/"
        return cls(build_url=f"{job}{str(build).strip('/')}/")

    @classmethod
    def from_url(cls, url: str) -> BuildRef:
        return cls(build_url=url)

    def url(self, path: str = "") -> str:
        """Absolute URL of ``path`` below this build."""
        return f"{self.build_url}{path.lstrip('/')}"

    @property
    def api_url(self) -> str:
        return self.url("api/json")

    @property
    def console_url(self) -> str:
        return self.url("console")

    def artifact_url(self, name: str) -> str:
        return self.url(f"artifact/{name}")


class BuildStatusSnapshot(BaseModel):
    """Point-in-time read of a build's status fields (``api/json``)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    building: bool = False
    result: ResultKind | None = None
    built_on: str = Field(default="", alias="builtOn")
    number: int | None = None
    url: str | None = None
    duration_ms: int | None = Field(default=None, alias="duration")
    timestamp_ms: int | None = Field(default=None, alias="timestamp")

    @model_validator(mode="before")
    @classmethod
    def _null_built_on(cls, data: object) -> object:
        # Jenkins sends builtOn: null on some versions
        if isinstance(data, dict) and data.get("builtOn", "") is None:
            data = {**data, "builtOn": ""}
        return data

    @property
    def node(self) -> str:
        """Execution node, ``master`` when the build ran on the controller."""
        return self.built_on or DEFAULT_NODE_NAME

    @property
    def settling(self) -> bool:
        """Not building but no result yet: the flag cleared before the result landed."""
        return not self.building and self.result is None
