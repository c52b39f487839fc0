# agentstack/core/endpoints/registry.py
"""
Registry for endpoint contracts.
"""
from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping

from agentstack.contracts.endpoint import EndpointContract

logger = logging.getLogger(__name__)


class EndpointRegistry:
    """
    Named catalog of endpoint contracts, the single source of truth for the
    generated client and the server routes.

    Name uniqueness is the caller's responsibility: registering a name that
    already exists replaces the previous contract (last write wins) and logs
    a warning.
    """

    def __init__(self, endpoints: Mapping[str, EndpointContract] | None = None) -> None:
        self._endpoints: dict[str, EndpointContract] = {}
        for name, endpoint in (endpoints or {}).items():
            self.register(name, endpoint)

    def register(self, name: str, endpoint: EndpointContract) -> EndpointContract:
        """
        Register ``endpoint`` under ``name``.

        Returns:
            The stored contract, with its ``name`` set to the registry key
        """
        if name in self._endpoints:
            logger.warning("Endpoint '%s' re-registered, replacing previous definition", name)

        stored = endpoint.named(name)
        self._endpoints[name] = stored
        logger.debug("Registered endpoint: %s %s %s", name, stored.method, stored.path)
        return stored

    def get(self, name: str) -> EndpointContract:
        try:
            return self._endpoints[name]
        except KeyError:
            raise KeyError(
                f"Endpoint '{name}' not found. Available: {list(self._endpoints)}"
            ) from None

    def has(self, name: str) -> bool:
        return name in self._endpoints

    def list(self) -> list[str]:
        return list(self._endpoints.keys())

    def items(self) -> Iterator[tuple[str, EndpointContract]]:
        yield from self._endpoints.items()

    def describe(self, name: str) -> dict[str, Any]:
        ep = self.get(name)
        return {
            "name": name,
            "path": ep.path,
            "method": ep.method,
            "description": ep.description,
            "path_parameters": list(ep.path_parameter_names),
            "request_schema": ep.request_schema.json_schema() if ep.request_schema else None,
            "response_schema": ep.response_schema.json_schema() if ep.response_schema else None,
        }

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)
