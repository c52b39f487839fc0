# agentstack/core/loader.py
"""
Declarative catalog helpers: ``module:attr`` imports, ``${VAR}``
substitution and YAML document discovery.
"""
from __future__ import annotations

import importlib
import logging
import os
import re
from dataclasses import dataclass
from glob import glob
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

logger = logging.getLogger(__name__)

# ${NAME} or ${NAME:-fallback}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


@dataclass(frozen=True)
class YamlDocument:
    """One parsed file; ``data`` is ``{}`` for an empty file."""

    path: Path
    data: dict[str, Any]


def import_attr(path: str) -> Any:
    """
    Resolve ``'package.module:attribute'`` to the attribute itself.

    Raises:
        ValueError: If the path has no ``:`` separator
        ImportError: If the module cannot be imported
        AttributeError: If the module has no such attribute
    """
    mod_name, sep, attr = path.partition(":")
    if not sep or not mod_name or not attr:
        raise ValueError(f"Invalid import path '{path}', expected 'module:attr'")

    try:
        mod = importlib.import_module(mod_name)
    except ImportError as exc:
        logger.error("Failed to import module '%s'", mod_name)
        raise ImportError(f"Cannot import module '{mod_name}'") from exc

    if not hasattr(mod, attr):
        logger.error("Module '%s' has no attribute '%s'", mod_name, attr)
        raise AttributeError(f"Module '{mod_name}' has no attribute '{attr}'")
    return getattr(mod, attr)


def substitute_env_vars(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """
    Replace ``${NAME}`` / ``${NAME:-fallback}`` in every string of a nested
    dict/list structure. Non-string leaves are returned untouched.

    Raises:
        ValueError: If ``NAME`` is unset and no fallback is given
    """
    env = os.environ if environ is None else environ

    def walk(node: Any) -> Any:
        if isinstance(node, str):
            return ENV_VAR_PATTERN.sub(lambda m: _lookup(m, env), node)
        if isinstance(node, dict):
            return {k: walk(v) for k, v in node.items()}
        if isinstance(node, list):
            return [walk(item) for item in node]
        return node

    return walk(value)


def _lookup(match: re.Match, env: Mapping[str, str]) -> str:
    name, fallback = match.group(1), match.group(2)
    if name in env:
        return env[name]
    if fallback is not None:
        return fallback
    raise ValueError(
        f"Environment variable '{name}' is not set and no default provided"
    )


def load_yaml_files(patterns: Iterable[str]) -> list[YamlDocument]:
    """
    Parse every file matched by ``patterns``, each file once, in sorted path
    order. Callers merge the documents so later files win.

    Raises:
        ValueError: If a file is not valid YAML or its top level is not a mapping
    """
    patterns = list(patterns)
    matched = sorted({Path(m).resolve() for pattern in patterns for m in glob(pattern)})

    if not matched:
        logger.warning("No config files found matching patterns: %s", patterns)
        return []

    logger.info("Loading config files: %s", [str(p) for p in matched])

    documents: list[YamlDocument] = []
    for path in matched:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            logger.error("Failed to load YAML file '%s': %s", path, exc)
            raise ValueError(f"Invalid YAML in '{path}': {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(
                f"Top level of '{path}' must be a mapping, got {type(data).__name__}"
            )
        documents.append(YamlDocument(path=path, data=data))

    return documents
