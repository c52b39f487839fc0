"""Endpoint contract definitions shared by clients and handlers."""

from agentstack.contracts.endpoint import (
    BODYLESS_METHODS,
    HTTP_METHODS,
    EndpointContract,
    EndpointWithHandler,
    HttpMethod,
    define_endpoint,
    parse_path_template,
    path_parameters_model,
)
from agentstack.contracts.handler import ApiHandler, HandlerRequest, HandlerResponse

__all__ = [
    "ApiHandler",
    "BODYLESS_METHODS",
    "EndpointContract",
    "EndpointWithHandler",
    "HTTP_METHODS",
    "HandlerRequest",
    "HandlerResponse",
    "HttpMethod",
    "define_endpoint",
    "parse_path_template",
    "path_parameters_model",
]
