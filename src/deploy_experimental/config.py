"""Configuration for deploy-experimental.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Values from the process environment take precedence over the `.env` file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from deploy_experimental.errors import ConfigError
from deploy_experimental.logging import parse_level

REQUIRED_VARIABLES: tuple[tuple[str, str], ...] = (
    ("github_token", "GITHUB_TOKEN"),
    ("github_org", "GITHUB_ORG"),
    ("github_repo", "GITHUB_REPO"),
)


class Settings(BaseSettings):
    """Settings for a single deploy run.

    Environment variables:
    - GITHUB_TOKEN                     (required)
    - GITHUB_ORG                       (required)
    - GITHUB_REPO                      (required)
    - DEPLOY_EXPERIMENTAL_WORKFLOW_ID  (optional)
    - GITHUB_BASE_URL                  (optional)
    - LOG_LEVEL                        (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `Settings(_env_file=path_to_env)`.
    """

    # Required values default to empty so the validator below can report the
    # first missing variable by its environment name.
    github_token: str = Field(
        default="",
        validation_alias="GITHUB_TOKEN",
        description="GitHub personal access token used for API authentication",
    )
    github_org: str = Field(
        default="",
        validation_alias="GITHUB_ORG",
        description="Organization or user that owns the repository",
    )
    github_repo: str = Field(
        default="",
        validation_alias="GITHUB_REPO",
        description="Repository name",
    )
    workflow_id: str | None = Field(
        default=None,
        validation_alias="DEPLOY_EXPERIMENTAL_WORKFLOW_ID",
        description="Workflow id or file name; when unset the workflow is chosen interactively",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        return parse_level(value)

    @model_validator(mode="after")
    def _require_github_settings(self) -> Settings:
        for field_name, variable in REQUIRED_VARIABLES:
            if not getattr(self, field_name).strip():
                raise ValueError(f"{variable} is required")
        return self

    @property
    def repository(self) -> str:
        """Return the target repository as "org/repo"."""

        return f"{self.github_org.strip()}/{self.github_repo.strip()}"

    @property
    def default_workflow_id(self) -> str | None:
        if self.workflow_id is None or not self.workflow_id.strip():
            return None
        return self.workflow_id.strip()


def _describe(error: PydanticValidationError) -> str:
    messages = [str(detail.get("msg", "")) for detail in error.errors()]
    for message in messages:
        for _, variable in REQUIRED_VARIABLES:
            if variable in message:
                return f"{variable} not found in environment"
    if messages:
        return messages[0].removeprefix("Value error, ")
    return str(error)


def load_settings(env_file: Path | str | None = ".env") -> Settings:
    """Load settings, failing fast on the first missing or invalid variable.

    Raises:
        ConfigError: if a required variable is absent or blank, or LOG_LEVEL
            is not a logging level name.
    """

    try:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    except PydanticValidationError as e:
        raise ConfigError(_describe(e), step="load configuration") from e

