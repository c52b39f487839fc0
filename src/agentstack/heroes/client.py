# agentstack/heroes/client.py
from __future__ import annotations

from agentstack.core.auth.signer import RequestSigner
from agentstack.core.client import ApiClient, build_client
from agentstack.core.config import settings
from agentstack.core.transport import IamTransport
from agentstack.heroes.endpoints import endpoints


def hero_client(
    api_id: str,
    *,
    region: str | None = None,
    stage: str = "prod",
    transport: IamTransport | None = None,
) -> ApiClient:
    """Client for a deployed hero API; requests are signed for ``region``."""
    region = region or settings.aws_default_region
    transport = transport or IamTransport(signer=RequestSigner(region=region))
    return build_client(
        endpoints,
        f"https://{api_id}.execute-api.{region}.amazonaws.com/{stage}",
        transport=transport,
    )
