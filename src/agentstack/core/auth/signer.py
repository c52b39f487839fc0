# agentstack/core/auth/signer.py
"""
SigV4 request signing for ``execute-api`` backends.

Signatures are bound to the exact request bytes and to the
``X-Amz-Date`` timestamp, so a :class:`SignedRequest` is good for one send.
"""
from __future__ import annotations

import hmac
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from botocore.auth import SIGV4_TIMESTAMP, SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from agentstack.core.auth.credentials import (
    CredentialSet,
    CredentialsProvider,
    DefaultCredentialsChain,
)
from agentstack.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "execute-api"
DEFAULT_REGION = "us-east-1"

_SIGNATURE_RE = re.compile(r"Signature=([0-9a-f]{64})")


@dataclass(frozen=True)
class UnsignedRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass
class SignedRequest:
    """An :class:`UnsignedRequest` plus its authentication headers."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None = None
    _consumed: bool = field(default=False, repr=False, compare=False)

    def consume(self) -> None:
        """Mark the request as sent; a second send is a programming error."""
        if self._consumed:
            raise RuntimeError("SignedRequest already sent; sign a new request")
        self._consumed = True


def _to_botocore(credentials: CredentialSet) -> Credentials:
    return Credentials(
        access_key=credentials.access_key,
        secret_key=credentials.secret_key,
        token=credentials.session_token,
    )


class RequestSigner:
    """
    Signs requests with AWS Signature Version 4.

    Args:
        service: Service name in the credential scope
        region: Region in the credential scope; defaults to the configured
            ``AWS_DEFAULT_REGION`` or ``us-east-1``
        credentials_provider: Source of credentials, resolved on every call
    """

    def __init__(
        self,
        *,
        service: str = DEFAULT_SERVICE,
        region: str | None = None,
        credentials_provider: CredentialsProvider | None = None,
    ) -> None:
        self.service = service
        self.region = region or settings.aws_default_region or DEFAULT_REGION
        self._credentials_provider = credentials_provider or DefaultCredentialsChain()

    async def sign(self, request: UnsignedRequest) -> SignedRequest:
        credentials = await self._credentials_provider.get_credentials()

        aws_request = AWSRequest(
            method=request.method,
            url=request.url,
            data=request.body,
            headers=dict(request.headers),
        )
        SigV4Auth(_to_botocore(credentials), self.service, self.region).add_auth(aws_request)

        return SignedRequest(
            method=request.method,
            url=request.url,
            headers=dict(aws_request.headers.items()),
            body=request.body,
        )


def _header(headers: dict[str, str], name: str) -> str | None:
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def verify_signature(
    signed: SignedRequest,
    credentials: CredentialSet,
    *,
    service: str = DEFAULT_SERVICE,
    region: str = DEFAULT_REGION,
    max_skew: timedelta | None = None,
    now: datetime | None = None,
) -> bool:
    """
    Recompute the SigV4 signature of ``signed`` and compare it.

    With ``max_skew`` set, requests whose ``X-Amz-Date`` is further than
    that from ``now`` are rejected.
    """
    authorization = _header(signed.headers, "Authorization")
    amz_date = _header(signed.headers, "X-Amz-Date")
    if not authorization or not amz_date:
        return False

    match = _SIGNATURE_RE.search(authorization)
    if match is None:
        return False

    if max_skew is not None:
        stamped = datetime.strptime(amz_date, SIGV4_TIMESTAMP).replace(tzinfo=timezone.utc)
        current = now or datetime.now(timezone.utc)
        if abs(current - stamped) > max_skew:
            logger.debug("Signature timestamp %s outside allowed skew", amz_date)
            return False

    unsigned_headers = {
        k: v for k, v in signed.headers.items() if k.lower() != "authorization"
    }
    aws_request = AWSRequest(
        method=signed.method,
        url=signed.url,
        data=signed.body,
        headers=unsigned_headers,
    )
    aws_request.context["timestamp"] = amz_date

    auth = SigV4Auth(_to_botocore(credentials), service, region)
    canonical = auth.canonical_request(aws_request)
    string_to_sign = auth.string_to_sign(aws_request, canonical)
    expected = auth.signature(string_to_sign, aws_request)
    return hmac.compare_digest(expected, match.group(1))
