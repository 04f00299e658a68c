"""Configuration management using Pydantic Settings."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitLabSettings(BaseSettings):
    """GitLab reader settings from environment variables (GITLAB_ prefix)."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GITLAB_",
        extra="ignore",
    )

    url: str = Field(
        default="https://gitlab.com/api/v4",
        description="Full path to the GitLab API root",
    )
    token: SecretStr = Field(
        default=SecretStr(""),
        description="GitLab private token",
    )
    timeout: float = Field(
        default=30,
        description="GitLab API request timeout in seconds",
    )
    log_level: str = Field(default="INFO", description="Logging level")
