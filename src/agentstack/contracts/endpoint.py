# agentstack/contracts/endpoint.py
"""
Endpoint contracts.

An :class:`EndpointContract` binds a path template, an HTTP method and
optional request/response schemas into one immutable unit shared by the
generated client and the server-side handler wrapper. The path-parameter
shape is derived from the template text alone::

    >>> ep = define_endpoint("/heroes/{hero}/rescues", "GET")
    >>> ep.path_parameter_names
    ('hero',)
    >>> ep.resolve_path({"hero": "Wonder Woman"})
    '/heroes/Wonder%20Woman/rescues'
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import TYPE_CHECKING, Any, Literal, Mapping
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field, create_model

from agentstack.core.errors import MissingPathParameterError, PathTemplateError
from agentstack.core.schema import Schema

if TYPE_CHECKING:
    from agentstack.contracts.handler import ApiHandler

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]
HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE")
BODYLESS_METHODS = frozenset({"GET", "DELETE"})

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

# encodeURIComponent leaves these unescaped in addition to A-Z a-z 0-9 - _ . ~
_URI_COMPONENT_SAFE = "!*'()"


def parse_path_template(template: str) -> tuple[str, ...]:
    """
    Return the placeholder names of ``template`` in order of first appearance.

    Duplicate names collapse to one entry.

    Raises:
        PathTemplateError: On an unterminated ``{``, a nested ``{`` or ``{}``.
    """
    names: list[str] = []
    pos = 0
    while True:
        start = template.find("{", pos)
        if start == -1:
            break
        end = template.find("}", start + 1)
        if end == -1:
            raise PathTemplateError(
                f"Unterminated '{{' at position {start} in path template '{template}'"
            )
        name = template[start + 1 : end]
        if not name or "{" in name:
            raise PathTemplateError(
                f"Malformed placeholder at position {start} in path template '{template}'"
            )
        if name not in names:
            names.append(name)
        pos = end + 1
    return tuple(names)


def path_parameters_model(
    template: str, model_name: str = "PathParameters"
) -> type[BaseModel]:
    """Pydantic model with one required ``str`` field per placeholder."""
    fields: dict[str, Any] = {}
    for i, name in enumerate(parse_path_template(template)):
        if name.isidentifier() and not name.startswith("_"):
            fields[name] = (str, ...)
        else:
            fields[f"param_{i}"] = (str, Field(..., alias=name))
    return create_model(
        model_name,
        __config__=ConfigDict(extra="forbid", populate_by_name=True),
        **fields,
    )


def _model_name(name: str | None) -> str:
    base = "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\W]+", name or "") if part)
    return f"{base or 'Endpoint'}PathParameters"


@dataclass(frozen=True)
class EndpointContract:
    """
    Pure endpoint configuration shared by client and server.

    Attributes:
        path: URL path template with ``{param}`` placeholders
        method: One of GET, POST, PUT, DELETE
        request_schema: Optional schema for the request body
        response_schema: Optional schema for the response body
        description: Human-readable description (used by tool generators)
        name: Logical catalog key, set when the contract is registered
    """

    path: str
    method: str
    request_schema: Schema | None = None
    response_schema: Schema | None = None
    description: str | None = None
    name: str | None = None
    path_parameter_names: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        method = str(self.method).upper()
        if method not in HTTP_METHODS:
            raise ValueError(
                f"Unsupported HTTP method '{self.method}', expected one of {HTTP_METHODS}"
            )
        path = self.path if self.path.startswith("/") else f"/{self.path}"

        object.__setattr__(self, "method", method)
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "request_schema", Schema.coerce(self.request_schema))
        object.__setattr__(self, "response_schema", Schema.coerce(self.response_schema))
        object.__setattr__(self, "path_parameter_names", parse_path_template(path))

    @property
    def sends_body(self) -> bool:
        return self.method not in BODYLESS_METHODS

    @cached_property
    def path_parameters_schema(self) -> type[BaseModel]:
        return path_parameters_model(self.path, _model_name(self.name))

    def resolve_path(self, path_parameters: Mapping[str, Any] | None) -> str:
        """
        Substitute every placeholder with its URL-escaped value.

        Raises:
            MissingPathParameterError: If a placeholder has no value.
        """
        path = self.path
        for key, value in (path_parameters or {}).items():
            path = path.replace(
                "{" + key + "}", quote(str(value), safe=_URI_COMPONENT_SAFE)
            )
        missing = [n for n in self.path_parameter_names if "{" + n + "}" in path]
        if missing:
            raise MissingPathParameterError(self.path, missing)
        return path

    @cached_property
    def _matcher(self) -> tuple[re.Pattern[str], dict[str, str]]:
        groups = {name: f"p{i}" for i, name in enumerate(self.path_parameter_names)}
        parts: list[str] = []
        seen: set[str] = set()
        pos = 0
        for m in _PLACEHOLDER.finditer(self.path):
            parts.append(re.escape(self.path[pos : m.start()]))
            name = m.group(1)
            group = groups[name]
            parts.append(f"(?P={group})" if name in seen else f"(?P<{group}>[^/]+)")
            seen.add(name)
            pos = m.end()
        parts.append(re.escape(self.path[pos:]))
        return re.compile("^" + "".join(parts) + "$"), groups

    def match_path(self, path: str) -> dict[str, str] | None:
        """Path parameters extracted from a concrete path, or ``None``."""
        if len(path) > 1:
            path = path.rstrip("/")
        pattern, groups = self._matcher
        m = pattern.match(path)
        if m is None:
            return None
        return {name: unquote(m.group(group)) for name, group in groups.items()}

    def named(self, name: str) -> EndpointContract:
        return self if self.name == name else replace(self, name=name)

    def with_handler(self, handler: ApiHandler) -> EndpointWithHandler:
        """Attach a business handler (server side only)."""
        return EndpointWithHandler(endpoint=self, handler=handler)


@dataclass(frozen=True)
class EndpointWithHandler:
    endpoint: EndpointContract
    handler: ApiHandler


def define_endpoint(
    path: str,
    method: HttpMethod | str,
    *,
    request: Any = None,
    response: Any = None,
    description: str | None = None,
    name: str | None = None,
) -> EndpointContract:
    """
    Define an endpoint contract. Pure, no I/O.

    ``request``/``response`` accept a pydantic type, a JSON Schema ``dict``
    or a :class:`Schema`.
    """
    return EndpointContract(
        path=path,
        method=method,
        request_schema=request,
        response_schema=response,
        description=description,
        name=name,
    )
