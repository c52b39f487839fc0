# agentstack/core/config.py
"""
Central configuration for the contract runtime.

Environment variables override defaults. AWS credentials are deliberately
not part of :class:`Settings`; they are read fresh on every signing call
through :class:`agentstack.core.auth.credentials.EnvironmentCredentials`.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_json: bool = True

    # Endpoint catalog files (glob patterns)
    endpoints_config_paths: list[str] = Field(
        default_factory=lambda: ["config/endpoints.yaml"]
    )

    # Signing
    aws_default_region: str = Field(
        default="us-east-1",
        description="Region the execute-api signature is scoped to",
    )
    aws_profile: str | None = Field(
        default=None,
        description="Profile used for SSO credential resolution",
    )
    aws_lambda_function_name: str = Field(
        default="",
        description="Caller identity sent as the sourceFn header",
    )

    # Backing resources (injected by the provisioning layer)
    table_name: str | None = None

    http_timeout: float | None = Field(
        default=None,
        description="Outbound HTTP timeout in seconds (None disables it)",
    )


settings = Settings()
