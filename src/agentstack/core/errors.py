# agentstack/core/errors.py
from __future__ import annotations

from typing import Any


class ContractError(Exception):
    pass


class PathTemplateError(ContractError, ValueError):
    pass


class MissingPathParameterError(ContractError, ValueError):
    def __init__(self, path: str, missing: list[str]):
        self.path = path
        self.missing = missing
        super().__init__(
            f"Unresolved path parameter(s) {missing} in '{path}'"
        )


class PayloadParseError(ContractError, ValueError):
    """Raised when a body is not valid JSON (before any schema check)."""


class SchemaValidationError(ContractError, ValueError):
    """Raised when a payload does not conform to its schema."""

    def __init__(
        self,
        message: str,
        *,
        kind: str = "validation",
        errors: list[Any] | None = None,
        context: str | None = None,
    ):
        self.kind = kind
        self.errors = errors or []
        self.context = context
        super().__init__(message)


class TransportError(ContractError):
    def __init__(self, status_code: int, status_text: str, body: str):
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(
            f"Error making IAM request - status: {status_code} ({status_text}), "
            f"reason: {body}"
        )


class CredentialsUnavailableError(ContractError):
    pass
