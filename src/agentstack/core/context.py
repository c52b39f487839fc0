# agentstack/core/context.py
"""
ServiceContext – application-scoped services injected into handlers.

Built once at process start; holds the lazily created downstream
connections so handlers never reach for module globals.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import boto3

from agentstack.core.config import settings
from agentstack.core.resources import LazyResource

logger = logging.getLogger(__name__)


def _dynamodb_factory() -> Any:
    return boto3.resource("dynamodb", region_name=settings.aws_default_region)


@dataclass
class ServiceContext:
    """
    Attributes:
        table_name: Backing table address, injected by the provisioning
            layer as ``TABLE_NAME``
        dynamodb_factory: Builds the DynamoDB service resource on first use
    """

    table_name: str | None = field(default_factory=lambda: settings.table_name)
    dynamodb_factory: Callable[[], Any] = _dynamodb_factory
    _dynamodb: LazyResource[Any] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._dynamodb = LazyResource(self.dynamodb_factory, name="dynamodb")

    @property
    def dynamodb(self) -> Any:
        return self._dynamodb.get()

    def table(self) -> Any:
        """The boto3 ``Table`` named by ``table_name``."""
        if not self.table_name:
            raise RuntimeError("TABLE_NAME is not configured for this handler")
        return self.dynamodb.Table(self.table_name)
