# agentstack/contracts/handler.py
"""
Types exchanged between the server wrapper and business handlers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

TBody = TypeVar("TBody")


@dataclass(frozen=True)
class HandlerRequest(Generic[TBody]):
    """
    Normalized inbound request handed to a business handler.

    Every mapping is string-keyed and never ``None``; ``event`` is the raw
    transport event kept as an escape hatch.
    """

    body: TBody
    event: Mapping[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    method: str = ""
    path: str = ""
    path_parameters: dict[str, str] = field(default_factory=dict)
    query_string_parameters: dict[str, str] = field(default_factory=dict)


@dataclass
class HandlerResponse:
    """``data`` is JSON-encoded unless it already is a string."""

    data: Any
    headers: dict[str, str] | None = None
    status_code: int | None = None


ApiHandler = Callable[[HandlerRequest[Any]], Awaitable[HandlerResponse | None]]
