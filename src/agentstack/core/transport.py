# agentstack/core/transport.py
"""
Signed HTTP transport ("IAM requests").

Builds the outbound request, signs it through :class:`RequestSigner` and
sends it with httpx. Non-2xx responses raise unless their status is in the
per-call allow-list (default: 404 only).
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence
from urllib.parse import quote, urlsplit

import httpx

from agentstack.core.auth.signer import RequestSigner, SignedRequest, UnsignedRequest
from agentstack.core.config import settings
from agentstack.core.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_STATUS_CODES: tuple[int, ...] = (404,)

QueryValue = str | Sequence[str] | None

_UNRESERVED = "-_.~"


def _clean_domain(domain: str) -> tuple[str, str]:
    """Split ``https://host/stage/`` into ``("host", "/stage")``."""
    if "://" not in domain:
        domain = f"https://{domain}"
    parts = urlsplit(domain)
    return parts.netloc, parts.path.rstrip("/")


def _query_string(query: Mapping[str, QueryValue] | None) -> str:
    """RFC 3986 encoding (space as ``%20``), matching the SigV4 canonical query."""
    if not query:
        return ""
    pairs: list[tuple[str, str]] = []
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, str):
            pairs.append((key, value))
        else:
            pairs.extend((key, str(v)) for v in value)
    return "&".join(
        f"{quote(k, safe=_UNRESERVED)}={quote(v, safe=_UNRESERVED)}" for k, v in pairs
    )


class IamTransport:
    """
    Sends signed requests.

    Args:
        signer: Request signer (credentials are resolved per request)
        source_fn: Caller identity for the ``sourceFn`` header; defaults to
            ``AWS_LAMBDA_FUNCTION_NAME``
        allowed_status_codes: Non-2xx codes returned instead of raised
        timeout: httpx timeout; ``None`` leaves timing to the caller
        transport: Optional httpx transport (mock transports in tests)
    """

    def __init__(
        self,
        *,
        signer: RequestSigner | None = None,
        source_fn: str | None = None,
        allowed_status_codes: Iterable[int] = DEFAULT_ALLOWED_STATUS_CODES,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.signer = signer or RequestSigner()
        self.source_fn = source_fn if source_fn is not None else settings.aws_lambda_function_name
        self.allowed_status_codes = tuple(allowed_status_codes)
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._transport = transport

    def build_request(
        self,
        *,
        domain: str,
        path: str,
        method: str = "GET",
        body: str | bytes | None = None,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, QueryValue] | None = None,
    ) -> UnsignedRequest:
        if not domain:
            raise ValueError("No domain provided")
        if not path:
            raise ValueError("No path provided")

        host, base_path = _clean_domain(domain)
        full_path = f"{base_path}/{path.lstrip('/')}"
        url = f"https://{host}{full_path}"
        qs = _query_string(query)
        if qs:
            url = f"{url}?{qs}"

        payload = body.encode("utf-8") if isinstance(body, str) else body

        request_headers: dict[str, str] = {"host": host}
        if payload:
            request_headers["Content-Type"] = "application/json"
        request_headers["sourceFn"] = self.source_fn or ""
        request_headers.update(headers or {})

        return UnsignedRequest(
            method=method.upper(),
            url=url,
            headers=request_headers,
            body=payload or None,
        )

    async def request(
        self,
        *,
        domain: str,
        path: str,
        method: str = "GET",
        body: str | bytes | None = None,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, QueryValue] | None = None,
        allowed_status_codes: Iterable[int] | None = None,
    ) -> httpx.Response:
        """Build, sign and send one request."""
        args = {
            "domain": domain,
            "path": path,
            "method": method,
            "headers": dict(headers or {}),
            "query": dict(query or {}),
            "has_body": body is not None,
        }
        try:
            logger.info("makeIAMRequest args", extra={"call_args": args})
            unsigned = self.build_request(
                domain=domain,
                path=path,
                method=method,
                body=body,
                headers=headers,
                query=query,
            )
            logger.info(
                "makeIAMRequest request",
                extra={"request": {"method": unsigned.method, "url": unsigned.url}},
            )
            signed = await self.signer.sign(unsigned)
            return await self.send(signed, allowed_status_codes=allowed_status_codes)
        except Exception:
            logger.exception("Error making IAM request", extra={"call_args": args})
            raise

    async def send(
        self,
        signed: SignedRequest,
        *,
        allowed_status_codes: Iterable[int] | None = None,
    ) -> httpx.Response:
        """
        Send a signed request.

        Raises:
            TransportError: On a non-2xx status outside the allow-list
        """
        allowed = (
            tuple(allowed_status_codes)
            if allowed_status_codes is not None
            else self.allowed_status_codes
        )
        signed.consume()

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.request(
                signed.method,
                signed.url,
                headers=signed.headers,
                content=signed.body,
            )

        if not response.is_success and response.status_code not in allowed:
            raise TransportError(
                status_code=response.status_code,
                status_text=response.reason_phrase,
                body=response.text,
            )
        return response
