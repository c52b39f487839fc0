# agentstack/heroes/handlers.py
"""
Hero service handlers.

Single-table layout:

    pk="HERO"    sk=<hero name>                 hero record
    pk="RESCUE"  sk="HERO#<hero name>#<uuid>"   rescue record

Writes are conditional so clients can retry POSTs safely.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from agentstack.contracts.endpoint import EndpointWithHandler
from agentstack.contracts.handler import HandlerRequest, HandlerResponse
from agentstack.core.context import ServiceContext
from agentstack.heroes.endpoints import endpoints
from agentstack.heroes.schemas import (
    AddHeroRequest,
    Hero,
    Rescue,
    SearchHeroesRequest,
)

logger = logging.getLogger(__name__)

_RECORD_KEYS = ("pk", "sk", "createdAt", "updatedAt")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _strip_keys(item: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in item.items() if k not in _RECORD_KEYS}


def _is_conditional_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def _valid(model: type[Hero] | type[Rescue], items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    out = []
    for item in items:
        record = _strip_keys(item)
        try:
            model.model_validate(record)
        except ValueError:
            logger.warning("Skipping malformed %s record", model.__name__, extra={"record": str(record)})
            continue
        out.append(record)
    return out


class HeroHandlers:
    """Handlers bound to a :class:`ServiceContext`."""

    def __init__(self, context: ServiceContext) -> None:
        self.context = context

    async def add_hero(self, request: HandlerRequest[AddHeroRequest]) -> HandlerResponse:
        body = request.body
        table = self.context.table()
        item = {
            "pk": "HERO",
            "sk": body.name,
            **body.model_dump(),
            "rescues": 0,
            "createdAt": _now(),
        }
        try:
            await asyncio.to_thread(
                table.put_item,
                Item=item,
                ConditionExpression=Attr("pk").not_exists() & Attr("sk").not_exists(),
            )
        except ClientError as exc:
            if not _is_conditional_failure(exc):
                raise
            return HandlerResponse(
                status_code=400,
                data={
                    "hero": body.model_dump(),
                    "success": False,
                    "error": str(exc),
                    "message": "Hero already exists",
                },
            )

        return HandlerResponse(
            status_code=200,
            data={
                "hero": _strip_keys(item),
                "success": True,
                "message": "Hero created successfully",
            },
        )

    async def add_rescue(self, request: HandlerRequest[Rescue]) -> HandlerResponse:
        rescue = request.body
        hero_name = request.path_parameters.get("hero") or rescue.hero
        table = self.context.table()
        rescue_data = rescue.model_dump(exclude_none=True)

        try:
            await asyncio.to_thread(
                table.put_item,
                Item={
                    "pk": "RESCUE",
                    "sk": f"HERO#{hero_name}#{uuid.uuid4()}",
                    **rescue_data,
                    "hero": hero_name,
                    "createdAt": _now(),
                },
                ConditionExpression=Attr("pk").not_exists() & Attr("sk").not_exists(),
            )
            # Counter update could also be driven by a change-data-capture stream.
            result = await asyncio.to_thread(
                table.update_item,
                Key={"pk": "HERO", "sk": hero_name},
                UpdateExpression=(
                    "SET rescues = if_not_exists(rescues, :zero) + :one, "
                    "updatedAt = :updatedAt"
                ),
                ExpressionAttributeValues={":one": 1, ":zero": 0, ":updatedAt": _now()},
                ConditionExpression=Attr("pk").exists() & Attr("sk").exists(),
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if not _is_conditional_failure(exc):
                raise
            return HandlerResponse(
                status_code=400,
                data={
                    "rescue": rescue_data,
                    "success": False,
                    "error": str(exc),
                    "message": f"Hero '{hero_name}' does not exist",
                },
            )

        return HandlerResponse(
            status_code=200,
            data={
                "rescue": {**rescue_data, "hero": hero_name},
                "hero": _strip_keys(result.get("Attributes", {})),
                "success": True,
                "message": "Rescue created successfully",
            },
        )

    async def list_hero_rescues(self, request: HandlerRequest[Any]) -> HandlerResponse:
        hero = request.path_parameters.get("hero")
        if not hero:
            return HandlerResponse(status_code=400, data={"message": "Hero ID is required"})

        table = self.context.table()
        result = await asyncio.to_thread(
            table.query,
            KeyConditionExpression=Key("pk").eq("RESCUE") & Key("sk").begins_with(f"HERO#{hero}#"),
        )
        return HandlerResponse(
            status_code=200,
            data={"rescues": _valid(Rescue, result.get("Items", []))},
        )

    async def search_heroes(self, request: HandlerRequest[SearchHeroesRequest | dict]) -> HandlerResponse:
        body = request.body
        filters = (
            body.model_dump(exclude_none=True)
            if isinstance(body, SearchHeroesRequest)
            else dict(body or {})
        )

        query: dict[str, Any] = {"KeyConditionExpression": Key("pk").eq("HERO")}
        condition = None
        for key, value in filters.items():
            clause = Attr(key).eq(value)
            condition = clause if condition is None else condition & clause
        if condition is not None:
            query["FilterExpression"] = condition

        table = self.context.table()
        result = await asyncio.to_thread(table.query, **query)
        return HandlerResponse(
            status_code=200,
            data={"heroes": _valid(Hero, result.get("Items", []))},
        )


def hero_handlers(context: ServiceContext) -> dict[str, EndpointWithHandler]:
    handlers = HeroHandlers(context)
    return {
        "add_hero": endpoints.get("add_hero").with_handler(handlers.add_hero),
        "add_rescue": endpoints.get("add_rescue").with_handler(handlers.add_rescue),
        "list_hero_rescues": endpoints.get("list_hero_rescues").with_handler(handlers.list_hero_rescues),
        "search_heroes": endpoints.get("search_heroes").with_handler(handlers.search_heroes),
    }
