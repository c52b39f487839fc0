# agentstack/core/routing.py
"""
Route table: endpoint contracts bound to wrapped handlers and the backing
resources each handler needs.

The provisioning layer reads :meth:`RouteTable.manifest` to create routes
and grants; :meth:`RouteTable.dispatch` routes proxy events in-process
(local runs, tests), filling ``pathParameters`` from template matching.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping

from agentstack.contracts.endpoint import EndpointContract, EndpointWithHandler
from agentstack.core.handler import WrappedHandler, wrap

logger = logging.getLogger(__name__)

NOT_FOUND = {"statusCode": 404, "body": "Not found"}


class Access(str, Enum):
    READ = "read"
    WRITE = "write"
    READ_WRITE = "read-write"

    @classmethod
    def parse(cls, value: str | Access) -> Access:
        if isinstance(value, Access):
            return value
        aliases = {"r": cls.READ, "w": cls.WRITE, "rw": cls.READ_WRITE}
        key = str(value).strip().lower()
        if key in aliases:
            return aliases[key]
        return cls(key)

    @property
    def can_read(self) -> bool:
        return self in (Access.READ, Access.READ_WRITE)

    @property
    def can_write(self) -> bool:
        return self in (Access.WRITE, Access.READ_WRITE)


@dataclass(frozen=True)
class ResourceGrant:
    """Capability on one backing resource (e.g. a table name or ARN)."""

    resource: str
    access: Access

    def __post_init__(self) -> None:
        object.__setattr__(self, "access", Access.parse(self.access))


@dataclass(frozen=True)
class Route:
    """
    Attributes:
        endpoint: The contract served by this route
        handler: Transport-level function produced by :func:`wrap`
        resources: Environment variable name -> grant; the provisioning
            layer injects the resource address under that name
    """

    endpoint: EndpointContract
    handler: WrappedHandler
    resources: Mapping[str, ResourceGrant] = field(default_factory=dict)

    @classmethod
    def from_handler(
        cls,
        bound: EndpointWithHandler,
        resources: Mapping[str, ResourceGrant] | None = None,
    ) -> Route:
        return cls(
            endpoint=bound.endpoint,
            handler=wrap(bound.endpoint, bound.handler),
            resources=dict(resources or {}),
        )

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.endpoint.name,
            "path": self.endpoint.path,
            "method": self.endpoint.method,
            "resources": {
                env: {"resource": g.resource, "access": g.access.value}
                for env, g in self.resources.items()
            },
        }


class RouteTable:
    def __init__(self, routes: list[Route] | None = None) -> None:
        self._routes: list[Route] = []
        for route in routes or []:
            self.add(route)

    def add(self, route: Route) -> None:
        for existing in self._routes:
            if (existing.endpoint.method, existing.endpoint.path) == (
                route.endpoint.method,
                route.endpoint.path,
            ):
                raise ValueError(
                    f"Route {route.endpoint.method} {route.endpoint.path} already registered"
                )
        self._routes.append(route)
        logger.info(
            "Registered route: %s %s", route.endpoint.method, route.endpoint.path
        )

    def routes(self) -> list[Route]:
        return list(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def match(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        """
        Find the route for ``method`` and concrete ``path``.

        Templates with fewer placeholders win, so literal segments take
        precedence over ``{param}`` segments.
        """
        method = method.upper()
        candidates = sorted(
            (r for r in self._routes if r.endpoint.method == method),
            key=lambda r: len(r.endpoint.path_parameter_names),
        )
        for route in candidates:
            params = route.endpoint.match_path(path)
            if params is not None:
                return route, params
        return None

    def manifest(self) -> list[dict[str, Any]]:
        return [route.describe() for route in self._routes]

    async def dispatch(self, event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
        method = str(event.get("httpMethod") or "GET")
        path = str(event.get("path") or "/")

        found = self.match(method, path)
        if found is None:
            logger.warning("No route for %s %s", method, path)
            return dict(NOT_FOUND)

        route, params = found
        routed = dict(event)
        routed["pathParameters"] = {**params, **(event.get("pathParameters") or {})}
        return await route.handler(routed, context)
