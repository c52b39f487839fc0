# agentstack/core/client.py
"""
Client generation from an endpoint catalog.

:func:`build_client` turns every contract of a registry into a
:class:`ClientFunction`: an async callable that validates the request body,
substitutes path parameters, sends a signed request and (leniently)
validates the response. Each function also carries an
:class:`EndpointDescriptor`, so tool generators can enumerate the whole
catalog from the client alone.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

import httpx
from pydantic import BaseModel

from agentstack.contracts.endpoint import EndpointContract
from agentstack.core.endpoints.registry import EndpointRegistry
from agentstack.core.schema import Schema, to_jsonable
from agentstack.core.transport import IamTransport, QueryValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointDescriptor:
    """Introspectable metadata of one client function."""

    name: str
    method: str
    path: str
    description: str | None
    request_schema: Schema | None
    response_schema: Schema | None
    path_parameter_names: tuple[str, ...]
    path_parameters_schema: type[BaseModel]

    @classmethod
    def from_endpoint(cls, name: str, endpoint: EndpointContract) -> EndpointDescriptor:
        return cls(
            name=name,
            method=endpoint.method,
            path=endpoint.path,
            description=endpoint.description,
            request_schema=endpoint.request_schema,
            response_schema=endpoint.response_schema,
            path_parameter_names=endpoint.path_parameter_names,
            path_parameters_schema=endpoint.path_parameters_schema,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "method": self.method,
            "path": self.path,
            "description": self.description,
            "request_schema": self.request_schema.json_schema() if self.request_schema else None,
            "response_schema": self.response_schema.json_schema() if self.response_schema else None,
            "path_parameters": list(self.path_parameter_names),
            "path_parameters_schema": self.path_parameters_schema.model_json_schema(),
        }


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ClientFunction:
    """Async callable bound to one endpoint contract."""

    def __init__(
        self,
        name: str,
        endpoint: EndpointContract,
        *,
        domain: str,
        transport: IamTransport,
    ) -> None:
        self.endpoint = endpoint
        self.domain = domain
        self.transport = transport
        self.descriptor = EndpointDescriptor.from_endpoint(name, endpoint)

        self.endpoint_name = name
        self.description = endpoint.description
        self.request_schema = endpoint.request_schema
        self.response_schema = endpoint.response_schema
        self.path_parameters_schema = endpoint.path_parameters_schema

    async def __call__(
        self,
        *,
        body: Any = None,
        path_parameters: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, QueryValue] | None = None,
        allowed_status_codes: Iterable[int] | None = None,
    ) -> Any:
        name = self.endpoint_name
        endpoint = self.endpoint

        if endpoint.request_schema is not None and body is not None:
            result = endpoint.request_schema.validate(body)
            if not result.ok:
                logger.error(
                    "Validation error in apiClient.%s",
                    name,
                    extra={
                        "errors": [str(e) for e in result.errors],
                        "body": to_jsonable(body),
                    },
                )
                result.unwrap(f"apiClient.{name}")

        path = endpoint.resolve_path(path_parameters)
        payload = (
            json.dumps(to_jsonable(body))
            if endpoint.sends_body and body is not None
            else None
        )

        start = time.perf_counter()
        response = await self.transport.request(
            domain=self.domain,
            path=path,
            method=endpoint.method,
            body=payload,
            headers=headers,
            query=query,
            allowed_status_codes=allowed_status_codes,
        )
        data = _decode(response)

        if endpoint.response_schema is not None:
            result = endpoint.response_schema.validate(data)
            if not result.ok:
                # Lenient by contract: an unexpected shape is logged, not raised.
                logger.warning(
                    "Response validation error in apiClient.%s",
                    name,
                    extra={
                        "errors": [str(e) for e in result.errors],
                        "status_code": response.status_code,
                    },
                )

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "apiClient.%s",
            name,
            extra={
                "duration_ms": duration_ms,
                "method": endpoint.method,
                "url": f"{self.domain.rstrip('/')}{path}",
            },
        )
        return data

    def __repr__(self) -> str:
        return f"<ClientFunction {self.endpoint_name} {self.endpoint.method} {self.endpoint.path}>"


class ApiClient(Mapping[str, ClientFunction]):
    """
    Read-only mapping of endpoint name to :class:`ClientFunction`.

    Functions are also reachable as attributes (``client.add_hero``), so
    endpoint names may not collide with the mapping API (``get``, ``items``,
    ``keys``, ``values``, ``call``, ``describe``, ``base_url``).
    """

    def __init__(self, functions: Mapping[str, ClientFunction], base_url: str) -> None:
        shadowed = sorted(set(functions) & _reserved_names())
        if shadowed:
            raise ValueError(
                f"Endpoint name(s) {shadowed} collide with ApiClient attributes; rename them"
            )
        self._functions = dict(functions)
        self.base_url = base_url

    def __getitem__(self, name: str) -> ClientFunction:
        try:
            return self._functions[name]
        except KeyError:
            raise KeyError(
                f"Endpoint '{name}' not found. Available: {list(self._functions)}"
            ) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __getattr__(self, name: str) -> ClientFunction:
        functions = self.__dict__.get("_functions", {})
        if name in functions:
            return functions[name]
        raise AttributeError(name)

    async def call(self, name: str, **params: Any) -> Any:
        """Uniform ``(name, params)`` entry point."""
        return await self[name](**params)

    def describe(self) -> list[EndpointDescriptor]:
        return [fn.descriptor for fn in self._functions.values()]


def _reserved_names() -> frozenset[str]:
    return frozenset(n for n in dir(ApiClient) if not n.startswith("_")) | {"base_url"}


def build_client(
    endpoints: EndpointRegistry | Mapping[str, EndpointContract],
    base_url: str,
    *,
    transport: IamTransport | None = None,
) -> ApiClient:
    """
    Create a client with one function per endpoint.

    Args:
        endpoints: Registry (or plain mapping) of contracts
        base_url: Deployment base URL, e.g. ``https://abc.execute-api.us-east-1.amazonaws.com/prod``
        transport: Signed transport; a default :class:`IamTransport` when omitted
    """
    transport = transport or IamTransport()
    functions = {
        name: ClientFunction(name, endpoint, domain=base_url, transport=transport)
        for name, endpoint in endpoints.items()
    }
    logger.debug("Built API client for %s with %d endpoint(s)", base_url, len(functions))
    return ApiClient(functions, base_url)
