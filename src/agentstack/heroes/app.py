# agentstack/heroes/app.py
"""
Lambda entry point for the hero service.

The service context and route table are built once per process, on the
first invocation, and reused by every later one.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from agentstack.core.config import settings
from agentstack.core.context import ServiceContext
from agentstack.core.logging import configure_logging
from agentstack.core.resources import LazyResource
from agentstack.core.routing import RouteTable
from agentstack.heroes.routes import hero_routes

logger = logging.getLogger(__name__)


def _build_routes() -> RouteTable:
    configure_logging(settings.log_level, json=settings.log_json)
    return hero_routes(ServiceContext())


routes: LazyResource[RouteTable] = LazyResource(_build_routes, name="hero_routes")


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    return asyncio.run(routes.get().dispatch(event, context))
