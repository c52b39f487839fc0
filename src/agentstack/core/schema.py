# agentstack/core/schema.py
"""
Schema layer shared by the client and the server wrapper.

A :class:`Schema` wraps either a pydantic type (usually a ``BaseModel``) or
an inline JSON Schema document and exposes one validation entry point that
never raises: it returns a :class:`ValidatedPayload` carrying either the
typed value or the list of field-level violations.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import jsonschema
from jsonschema.validators import validator_for
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from agentstack.core.errors import SchemaValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldViolation:
    """One failed rule. ``loc`` is a dotted path into the payload."""

    loc: str
    message: str
    type: str

    def __str__(self) -> str:
        return f"{self.loc or '<root>'}: {self.message}"


@dataclass(frozen=True)
class ValidatedPayload:
    """
    Outcome of validating one payload.

    Either ``errors`` is empty and ``value`` holds the conforming (typed)
    value, or ``errors`` lists every violation and ``value`` is ``None``.
    """

    value: Any = None
    errors: tuple[FieldViolation, ...] = field(default_factory=tuple)
    kind: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self, context: str | None = None) -> Any:
        if self.ok:
            return self.value
        raise SchemaValidationError(
            _summarize(self.errors, context),
            kind=self.kind or "validation",
            errors=list(self.errors),
            context=context,
        )


def _summarize(errors: tuple[FieldViolation, ...], context: str | None) -> str:
    summary = "; ".join(str(e) for e in errors[:3])
    if len(errors) > 3:
        summary += f" ... and {len(errors) - 3} more"
    prefix = f"Validation error in {context}" if context else "Validation error"
    return f"{prefix}: {summary}"


class Schema:
    """
    Declarative data shape plus validation rules.

    ``source`` is a pydantic-validatable type or a JSON Schema ``dict``.
    """

    def __init__(self, source: Any) -> None:
        self.source = source
        self._adapter: TypeAdapter | None = None
        self._validator: jsonschema.protocols.Validator | None = None

        if isinstance(source, dict):
            cls = validator_for(source, default=jsonschema.Draft202012Validator)
            cls.check_schema(source)
            self._validator = cls(source)
        else:
            self._adapter = TypeAdapter(source)

    @classmethod
    def coerce(cls, source: Any) -> Schema | None:
        if source is None or isinstance(source, Schema):
            return source
        return cls(source)

    @property
    def name(self) -> str:
        if self._validator is not None:
            return str(self.source.get("title", "JsonSchema"))
        return getattr(self.source, "__name__", repr(self.source))

    def validate(self, value: Any) -> ValidatedPayload:
        if self._validator is not None:
            return self._validate_json_schema(value)

        try:
            typed = self._adapter.validate_python(value)
        except PydanticValidationError as exc:
            errors = tuple(
                FieldViolation(
                    loc=".".join(str(p) for p in err["loc"]),
                    message=err["msg"],
                    type=err["type"],
                )
                for err in exc.errors()
            )
            return ValidatedPayload(errors=errors, kind="validation")
        return ValidatedPayload(value=typed)

    def _validate_json_schema(self, value: Any) -> ValidatedPayload:
        found = sorted(self._validator.iter_errors(value), key=lambda e: e.json_path)
        if not found:
            return ValidatedPayload(value=value)
        errors = tuple(
            FieldViolation(
                loc=".".join(str(p) for p in err.absolute_path),
                message=err.message,
                type=str(err.validator),
            )
            for err in found
        )
        return ValidatedPayload(errors=errors, kind="validation")

    def require(self, value: Any, context: str | None = None) -> Any:
        """Validate and return the typed value, raising on violations."""
        return self.validate(value).unwrap(context)

    def dump(self, value: Any) -> Any:
        """JSON-compatible form of a validated value; unset optionals omitted."""
        if self._adapter is not None:
            return self._adapter.dump_python(
                value, mode="json", by_alias=True, exclude_unset=True
            )
        return to_jsonable_python(value)

    def json_schema(self) -> dict[str, Any]:
        if self._validator is not None:
            return dict(self.source)
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        return f"Schema({self.name})"


def to_jsonable(value: Any) -> Any:
    """Plain JSON data for any value pydantic knows how to serialize."""
    return to_jsonable_python(value)
