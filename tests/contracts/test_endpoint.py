# tests/contracts/test_endpoint.py
from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from agentstack.contracts.endpoint import (
    define_endpoint,
    parse_path_template,
    path_parameters_model,
)
from agentstack.core.errors import MissingPathParameterError, PathTemplateError
from agentstack.core.schema import Schema


class Body(BaseModel):
    name: str


class TestParsePathTemplate:
    def test_no_params(self):
        assert parse_path_template("/heroes") == ()

    def test_order_of_first_appearance(self):
        assert parse_path_template("/users/{userId}/posts/{postId}") == ("userId", "postId")

    def test_duplicates_collapse(self):
        assert parse_path_template("/{a}/{b}/{a}/{c}/{b}") == ("a", "b", "c")

    def test_unterminated_brace_raises(self):
        with pytest.raises(PathTemplateError, match="Unterminated"):
            parse_path_template("/heroes/{hero/rescues")

    def test_empty_placeholder_raises(self):
        with pytest.raises(PathTemplateError):
            parse_path_template("/heroes/{}")

    def test_nested_brace_raises(self):
        with pytest.raises(PathTemplateError):
            parse_path_template("/heroes/{a{b}")


class TestPathParametersModel:
    def test_fields_are_required_strings(self):
        model = path_parameters_model("/users/{userId}/posts/{postId}")

        assert list(model.model_fields) == ["userId", "postId"]
        assert model(userId="1", postId="2").model_dump() == {"userId": "1", "postId": "2"}
        with pytest.raises(ValidationError):
            model(userId="1")

    def test_non_identifier_names_use_aliases(self):
        model = path_parameters_model("/items/{item-id}")

        schema = model.model_json_schema()
        assert schema["required"] == ["item-id"]
        assert model.model_validate({"item-id": "x"}).model_dump(by_alias=True) == {"item-id": "x"}


class TestEndpointContract:
    def test_define_endpoint(self):
        ep = define_endpoint(
            "/heroes/{hero}/rescues",
            "post",
            request=Body,
            response={"type": "object"},
            description="Add a rescue",
        )

        assert ep.method == "POST"
        assert ep.path_parameter_names == ("hero",)
        assert isinstance(ep.request_schema, Schema)
        assert isinstance(ep.response_schema, Schema)
        assert ep.description == "Add a rescue"
        assert ep.sends_body is True

    def test_get_and_delete_send_no_body(self):
        assert define_endpoint("/x", "GET").sends_body is False
        assert define_endpoint("/x", "DELETE").sends_body is False
        assert define_endpoint("/x", "PUT").sends_body is True

    def test_invalid_method(self):
        with pytest.raises(ValueError, match="Unsupported HTTP method"):
            define_endpoint("/x", "PATCH")

    def test_leading_slash_added(self):
        assert define_endpoint("heroes", "GET").path == "/heroes"

    def test_malformed_template_raises_at_definition(self):
        with pytest.raises(PathTemplateError):
            define_endpoint("/heroes/{hero", "GET")

    def test_contract_is_immutable(self):
        ep = define_endpoint("/heroes", "GET")
        with pytest.raises(AttributeError):
            ep.path = "/other"

    def test_path_parameters_schema_named_after_endpoint(self):
        ep = define_endpoint("/heroes/{hero}", "GET", name="list_hero_rescues")

        assert ep.path_parameters_schema.__name__ == "ListHeroRescuesPathParameters"
        assert list(ep.path_parameters_schema.model_fields) == ["hero"]

    def test_named_returns_copy(self):
        ep = define_endpoint("/heroes/{hero}", "GET")
        named = ep.named("get_hero")

        assert named.name == "get_hero"
        assert ep.name is None
        assert named.path_parameter_names == ("hero",)


class TestResolvePath:
    def test_substitutes_and_escapes(self):
        ep = define_endpoint("/heroes/{hero}/rescues", "GET")

        assert ep.resolve_path({"hero": "Wonder Woman/1"}) == "/heroes/Wonder%20Woman%2F1/rescues"

    def test_keeps_uri_component_safe_chars(self):
        ep = define_endpoint("/t/{v}", "GET")

        assert ep.resolve_path({"v": "a-b_c.d~e!f*g'h(i)"}) == "/t/a-b_c.d~e!f*g'h(i)"

    def test_repeated_placeholder_substituted_everywhere(self):
        ep = define_endpoint("/{a}/x/{a}", "GET")

        assert ep.resolve_path({"a": "1"}) == "/1/x/1"

    def test_missing_parameter_fails_loudly(self):
        ep = define_endpoint("/users/{userId}/posts/{postId}", "GET")

        with pytest.raises(MissingPathParameterError) as exc_info:
            ep.resolve_path({"userId": "1"})

        assert exc_info.value.missing == ["postId"]

    def test_value_with_braces_is_escaped(self):
        ep = define_endpoint("/t/{a}", "GET")

        assert ep.resolve_path({"a": "{a}"}) == "/t/%7Ba%7D"


class TestMatchPath:
    def test_extracts_decoded_parameters(self):
        ep = define_endpoint("/heroes/{hero}/rescues", "GET")

        assert ep.match_path("/heroes/Wonder%20Woman/rescues") == {"hero": "Wonder Woman"}

    def test_no_match(self):
        ep = define_endpoint("/heroes/{hero}/rescues", "GET")

        assert ep.match_path("/heroes/x") is None
        assert ep.match_path("/heroes/a/b/rescues") is None

    def test_trailing_slash_tolerated(self):
        ep = define_endpoint("/heroes", "GET")

        assert ep.match_path("/heroes/") == {}

    def test_repeated_placeholder_must_agree(self):
        ep = define_endpoint("/{a}/x/{a}", "GET")

        assert ep.match_path("/1/x/1") == {"a": "1"}
        assert ep.match_path("/1/x/2") is None

    def test_literal_segments_are_escaped(self):
        ep = define_endpoint("/v1.0/items", "GET")

        assert ep.match_path("/v1.0/items") == {}
        assert ep.match_path("/v1x0/items") is None
