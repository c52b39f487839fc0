# agentstack/core/endpoints/config.py
"""
Loading endpoint catalogs from YAML.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from jsonschema.exceptions import SchemaError

from agentstack.contracts.endpoint import define_endpoint
from agentstack.core.config import settings
from agentstack.core.endpoints.registry import EndpointRegistry
from agentstack.core.loader import import_attr, load_yaml_files, substitute_env_vars

logger = logging.getLogger(__name__)


def _resolve_schema(endpoint_name: str, raw: Any) -> Any:
    """Import path ``'module:Attr'`` or inline JSON Schema ``dict``."""
    if raw is None or isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        return import_attr(raw)
    raise ValueError(
        f"Endpoint '{endpoint_name}' schema must be an import path or a mapping, "
        f"got {type(raw).__name__}"
    )


def load_endpoints_config(
    patterns: Iterable[str] | None = None,
    registry: EndpointRegistry | None = None,
) -> EndpointRegistry:
    """
    Load endpoint contracts from YAML files into a registry.

    Expected YAML structure:
    ```yaml
    endpoints:
      add_hero:
        path: /heroes
        method: POST
        request: agentstack.heroes.schemas:AddHeroRequest
        response:
          type: object
          required: [hero]
        description: "Add a new hero to the system."
    ```

    ``patterns`` defaults to ``settings.endpoints_config_paths``.
    ``${VAR}`` / ``${VAR:-default}`` are substituted in every value. When the
    same endpoint name appears in several files the later file wins.

    Raises:
        ValueError: If an entry misses ``path``/``method`` or is otherwise invalid
    """
    registry = registry if registry is not None else EndpointRegistry()

    if patterns is None:
        patterns = settings.endpoints_config_paths

    entries: dict[str, tuple[Path, dict[str, Any]]] = {}
    for doc in load_yaml_files(patterns):
        for name, raw in (doc.data.get("endpoints") or {}).items():
            if name in entries:
                logger.info(
                    "Endpoint '%s' from %s overrides %s", name, doc.path, entries[name][0]
                )
            entries[name] = (doc.path, raw or {})

    for name, (source, raw) in entries.items():
        raw = substitute_env_vars(raw)
        missing = [key for key in ("path", "method") if key not in raw]
        if missing:
            raise ValueError(
                f"Endpoint '{name}' missing required field(s): {missing} ({source})"
            )

        try:
            endpoint = define_endpoint(
                raw["path"],
                raw["method"],
                request=_resolve_schema(name, raw.get("request")),
                response=_resolve_schema(name, raw.get("response")),
                description=raw.get("description"),
            )
        except (ValueError, SchemaError) as exc:
            raise ValueError(f"Endpoint '{name}' config error: {exc} ({source})") from exc

        registry.register(name, endpoint)

    logger.info("Loaded %d endpoint(s): %s", len(entries), list(entries))
    return registry
