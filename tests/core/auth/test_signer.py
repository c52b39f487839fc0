# tests/core/auth/test_signer.py
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from botocore.auth import SIGV4_TIMESTAMP

from agentstack.core.auth.credentials import CredentialSet, StaticCredentialsProvider
from agentstack.core.auth.signer import RequestSigner, UnsignedRequest, verify_signature

URL = "https://abc123.execute-api.us-east-1.amazonaws.com/prod/heroes"


def unsigned(body: bytes | None = b'{"name":"superman"}') -> UnsignedRequest:
    headers = {"host": "abc123.execute-api.us-east-1.amazonaws.com", "sourceFn": "test-fn"}
    if body:
        headers["Content-Type"] = "application/json"
    return UnsignedRequest(method="POST", url=URL, headers=headers, body=body)


class TestRequestSigner:
    @pytest.mark.asyncio
    async def test_adds_authorization_and_date(self, signer, credentials):
        signed = await signer.sign(unsigned())

        auth = signed.headers["Authorization"]
        assert auth.startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
        assert "/us-east-1/execute-api/aws4_request" in auth
        assert "X-Amz-Date" in signed.headers
        assert signed.body == b'{"name":"superman"}'
        assert signed.headers["sourceFn"] == "test-fn"

    @pytest.mark.asyncio
    async def test_signature_verifies(self, signer, credentials):
        signed = await signer.sign(unsigned())

        assert verify_signature(signed, credentials) is True

    @pytest.mark.asyncio
    async def test_bodyless_request_verifies(self, signer, credentials):
        signed = await signer.sign(unsigned(body=None))

        assert "Content-Type" not in signed.headers
        assert verify_signature(signed, credentials) is True

    @pytest.mark.asyncio
    async def test_tampered_body_fails(self, signer, credentials):
        signed = await signer.sign(unsigned())

        assert verify_signature(replace(signed, body=b'{"name":"batman"}'), credentials) is False

    @pytest.mark.asyncio
    async def test_tampered_url_fails(self, signer, credentials):
        signed = await signer.sign(unsigned())

        assert verify_signature(replace(signed, url=URL + "/other"), credentials) is False

    @pytest.mark.asyncio
    async def test_wrong_credentials_fail(self, signer):
        signed = await signer.sign(unsigned())

        assert verify_signature(signed, CredentialSet("AKIDEXAMPLE", "other-secret")) is False

    @pytest.mark.asyncio
    async def test_wrong_region_fails(self, signer, credentials):
        signed = await signer.sign(unsigned())

        assert verify_signature(signed, credentials, region="eu-west-1") is False

    @pytest.mark.asyncio
    async def test_signing_twice_gives_two_valid_requests(self, signer, credentials):
        request = unsigned()

        first = await signer.sign(request)
        second = await signer.sign(request)

        assert first is not second
        assert verify_signature(first, credentials)
        assert verify_signature(second, credentials)
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_session_token_is_signed(self, credentials):
        temp = CredentialSet("ASIAEXAMPLE", "temp-secret", "session-token")
        signer = RequestSigner(region="us-east-1", credentials_provider=StaticCredentialsProvider(temp))

        signed = await signer.sign(unsigned())

        assert signed.headers["X-Amz-Security-Token"] == "session-token"
        assert "x-amz-security-token" in signed.headers["Authorization"]
        assert verify_signature(signed, temp)

    @pytest.mark.asyncio
    async def test_max_skew(self, signer, credentials):
        signed = await signer.sign(unsigned())
        stamped = datetime.strptime(signed.headers["X-Amz-Date"], SIGV4_TIMESTAMP).replace(
            tzinfo=timezone.utc
        )

        assert verify_signature(
            signed, credentials, max_skew=timedelta(minutes=5), now=stamped + timedelta(minutes=1)
        )
        assert not verify_signature(
            signed, credentials, max_skew=timedelta(minutes=5), now=stamped + timedelta(minutes=10)
        )

    def test_unsigned_headers_fail(self, credentials):
        from agentstack.core.auth.signer import SignedRequest

        assert verify_signature(SignedRequest("GET", URL, {}), credentials) is False

    def test_region_defaults_to_settings(self, monkeypatch):
        from agentstack.core.config import settings

        monkeypatch.setattr(settings, "aws_default_region", "eu-central-1")

        signer = RequestSigner(credentials_provider=StaticCredentialsProvider(CredentialSet("A", "B")))

        assert signer.region == "eu-central-1"
        assert signer.service == "execute-api"
