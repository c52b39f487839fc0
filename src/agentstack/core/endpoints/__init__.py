"""Endpoint catalog: registry and YAML loading."""

from agentstack.core.endpoints.config import load_endpoints_config
from agentstack.core.endpoints.registry import EndpointRegistry

__all__ = ["EndpointRegistry", "load_endpoints_config"]
