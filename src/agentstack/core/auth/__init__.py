"""Credential resolution and request signing."""

from agentstack.core.auth.credentials import (
    CredentialSet,
    CredentialsProvider,
    DefaultCredentialsChain,
    EnvironmentCredentialsProvider,
    SsoCredentialsProvider,
    StaticCredentialsProvider,
)
from agentstack.core.auth.signer import (
    RequestSigner,
    SignedRequest,
    UnsignedRequest,
    verify_signature,
)

__all__ = [
    "CredentialSet",
    "CredentialsProvider",
    "DefaultCredentialsChain",
    "EnvironmentCredentialsProvider",
    "RequestSigner",
    "SignedRequest",
    "SsoCredentialsProvider",
    "StaticCredentialsProvider",
    "UnsignedRequest",
    "verify_signature",
]
