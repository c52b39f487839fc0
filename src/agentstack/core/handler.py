# agentstack/core/handler.py
"""
Server-side handler wrapper.

:func:`wrap` turns a business handler into a transport-level function that
takes an API-Gateway-style proxy event and returns a response envelope::

    event    = {"body": str?, "headers": {...}?, "httpMethod": str, "path": str,
                "pathParameters": {...}?, "queryStringParameters": {...}?}
    response = {"body": str, "headers": {...}?, "statusCode": int}

The wrapper never lets an exception escape to the transport layer.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Mapping

from agentstack.contracts.endpoint import EndpointContract
from agentstack.contracts.handler import ApiHandler, HandlerRequest, HandlerResponse
from agentstack.core.errors import PayloadParseError
from agentstack.core.schema import Schema, to_jsonable

logger = logging.getLogger(__name__)

WrappedHandler = Callable[..., Awaitable[dict[str, Any]]]

INTERNAL_SERVER_ERROR = {"statusCode": 500, "body": "Internal server error"}
UNKNOWN_ERROR = {"statusCode": 500, "body": "Unknown error"}


def _string_map(value: Mapping[str, Any] | None) -> dict[str, str]:
    if not value:
        return {}
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


def _parse_body(raw: str | None) -> Any:
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise PayloadParseError(f"Request body is not valid JSON: {exc}") from exc


def _serialize(data: Any) -> str:
    if isinstance(data, str):
        return data
    return json.dumps(to_jsonable(data))


def init_api_handler(
    api_handler: ApiHandler,
    *,
    input_schema: Any = None,
    output_schema: Any = None,
    name: str | None = None,
) -> WrappedHandler:
    """
    Wrap ``api_handler`` with parsing, validation and response envelope logic.

    Args:
        api_handler: Business handler receiving a :class:`HandlerRequest`
        input_schema: Validates the request body, only when a body is present
        output_schema: Validates ``data`` unless it is already a string
        name: Label used in log records

    Returns:
        ``async (event, context=None) -> dict`` suitable for a proxy integration
    """
    input_schema = Schema.coerce(input_schema)
    output_schema = Schema.coerce(output_schema)
    label = name or getattr(api_handler, "__name__", "handler")

    async def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
        output: HandlerResponse | None = None
        try:
            raw_body = event.get("body")
            body = _parse_body(raw_body)

            if input_schema is not None and raw_body:
                body = input_schema.require(body, context=label)

            output = await api_handler(
                HandlerRequest(
                    body=body,
                    event=event,
                    headers=_string_map(event.get("headers")),
                    method=str(event.get("httpMethod") or ""),
                    path=str(event.get("path") or ""),
                    path_parameters=_string_map(event.get("pathParameters")),
                    query_string_parameters=_string_map(event.get("queryStringParameters")),
                )
            )

            if output_schema is not None and output is not None and not isinstance(output.data, str):
                result = output_schema.validate(output.data)
                if not result.ok:
                    logger.error(
                        "Response validation failed in %s",
                        label,
                        extra={"errors": [str(e) for e in result.errors]},
                    )
                    return dict(INTERNAL_SERVER_ERROR)
                output.data = output_schema.dump(result.value)

            if output is None:
                return dict(UNKNOWN_ERROR)

            response: dict[str, Any] = {
                "body": _serialize(output.data),
                "statusCode": output.status_code or 200,
            }
            if output.headers is not None:
                response["headers"] = dict(output.headers)
            return response
        except Exception:
            logger.exception("Error in API handler %s", label)
            return dict(UNKNOWN_ERROR)

    handler.__name__ = f"wrapped_{label}"
    return handler


def wrap(endpoint: EndpointContract, api_handler: ApiHandler) -> WrappedHandler:
    """Wrap a handler with the schemas of ``endpoint``."""
    return init_api_handler(
        api_handler,
        input_schema=endpoint.request_schema,
        output_schema=endpoint.response_schema,
        name=endpoint.name or f"{endpoint.method} {endpoint.path}",
    )
