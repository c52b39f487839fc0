# agentstack/core/auth/credentials.py
"""
Credential resolution for request signing.

Resolution order: static credentials from the environment, then a
federated (SSO) profile. Nothing is cached between calls; every signing
operation resolves again.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import boto3
from botocore.exceptions import BotoCoreError
from pydantic_settings import BaseSettings, SettingsConfigDict

from agentstack.core.config import settings
from agentstack.core.errors import CredentialsUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialSet:
    access_key: str
    secret_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)


class EnvironmentCredentials(BaseSettings):
    """Standard AWS environment variables, read at instantiation time."""

    model_config = SettingsConfigDict(extra="ignore")

    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None
    aws_profile: str | None = None


class CredentialsProvider(ABC):
    @abstractmethod
    async def get_credentials(self) -> CredentialSet | None:
        """
        Return credentials, or ``None`` when this source has nothing to offer.
        Implementations raise :class:`CredentialsUnavailableError` on hard failure.
        """
        ...


class StaticCredentialsProvider(CredentialsProvider):
    def __init__(self, credentials: CredentialSet) -> None:
        self._credentials = credentials

    async def get_credentials(self) -> CredentialSet:
        return self._credentials


class EnvironmentCredentialsProvider(CredentialsProvider):
    async def get_credentials(self) -> CredentialSet | None:
        env = EnvironmentCredentials()
        if not env.aws_access_key_id or not env.aws_secret_access_key:
            return None
        return CredentialSet(
            access_key=env.aws_access_key_id,
            secret_key=env.aws_secret_access_key,
            session_token=env.aws_session_token or None,
        )


class SsoCredentialsProvider(CredentialsProvider):
    """
    Resolves credentials for a named profile through boto3, which handles
    SSO token caches and role assumption. ``profile=None`` reads
    ``AWS_PROFILE`` at call time, falling back to ``settings.aws_profile``
    (which also picks up ``.env``).
    """

    def __init__(self, profile: str | None = None) -> None:
        self._profile = profile

    async def get_credentials(self) -> CredentialSet:
        profile = self._profile or EnvironmentCredentials().aws_profile or settings.aws_profile
        if not profile:
            message = "AWS_PROFILE is not set, possibly not using SSO or not logged in"
            logger.error(message)
            raise CredentialsUnavailableError(message)

        return await asyncio.to_thread(self._load, profile)

    @staticmethod
    def _load(profile: str) -> CredentialSet:
        try:
            creds = boto3.Session(profile_name=profile).get_credentials()
            frozen = creds.get_frozen_credentials() if creds is not None else None
        except BotoCoreError as exc:
            logger.error("Credential resolution failed for profile '%s': %s", profile, exc)
            raise CredentialsUnavailableError(
                f"Could not resolve credentials for profile '{profile}': {exc}"
            ) from exc

        if frozen is None or not frozen.access_key or not frozen.secret_key:
            raise CredentialsUnavailableError(
                f"No credentials available for profile '{profile}'"
            )
        return CredentialSet(
            access_key=frozen.access_key,
            secret_key=frozen.secret_key,
            session_token=frozen.token,
        )


class DefaultCredentialsChain(CredentialsProvider):
    """Environment first, then SSO; raises if neither yields credentials."""

    def __init__(self, providers: list[CredentialsProvider] | None = None) -> None:
        self._providers = providers or [
            EnvironmentCredentialsProvider(),
            SsoCredentialsProvider(),
        ]

    async def get_credentials(self) -> CredentialSet:
        for provider in self._providers:
            creds = await provider.get_credentials()
            if creds is not None:
                return creds
        raise CredentialsUnavailableError("No credentials available from any provider")
