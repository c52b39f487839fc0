# tests/conftest.py
from __future__ import annotations

import copy
import re
from typing import Any

import httpx
import pytest
from botocore.exceptions import ClientError

from agentstack.core.auth.credentials import CredentialSet, StaticCredentialsProvider
from agentstack.core.auth.signer import RequestSigner
from agentstack.core.context import ServiceContext
from agentstack.core.transport import IamTransport

TEST_CREDENTIALS = CredentialSet(
    access_key="AKIDEXAMPLE",
    secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
)


def _evaluate(condition: Any, item: dict[str, Any]) -> bool:
    """Evaluate the subset of boto3 conditions used by the hero handlers."""
    expr = condition.get_expression()
    op = expr["operator"]
    values = expr["values"]
    if op == "AND":
        return all(_evaluate(v, item) for v in values)
    name = values[0].name
    if op == "=":
        return item.get(name) == values[1]
    if op == "begins_with":
        return str(item.get(name, "")).startswith(values[1])
    if op == "attribute_exists":
        return name in item
    if op == "attribute_not_exists":
        return name not in item
    raise NotImplementedError(op)


_SET_IF_NOT_EXISTS = re.compile(r"^(\w+) = if_not_exists\(\1, (:\w+)\) \+ (:\w+)$")
_SET_VALUE = re.compile(r"^(\w+) = (:\w+)$")


class FakeTable:
    """In-memory stand-in for a boto3 DynamoDB ``Table``."""

    def __init__(self, name: str = "heroes") -> None:
        self.name = name
        self.items: dict[tuple[str, str], dict[str, Any]] = {}

    def _conditional_failure(self, operation: str) -> ClientError:
        return ClientError(
            {"Error": {"Code": "ConditionalCheckFailedException", "Message": "The conditional request failed"}},
            operation,
        )

    def put_item(self, *, Item, ConditionExpression=None):
        key = (Item["pk"], Item["sk"])
        current = self.items.get(key, {})
        if ConditionExpression is not None and not _evaluate(ConditionExpression, current):
            raise self._conditional_failure("PutItem")
        self.items[key] = copy.deepcopy(Item)
        return {}

    def update_item(
        self,
        *,
        Key,
        UpdateExpression,
        ExpressionAttributeValues,
        ConditionExpression=None,
        ReturnValues="NONE",
    ):
        key = (Key["pk"], Key["sk"])
        current = self.items.get(key, {})
        if ConditionExpression is not None and not _evaluate(ConditionExpression, current):
            raise self._conditional_failure("UpdateItem")

        updated = {**Key, **current}
        assert UpdateExpression.startswith("SET ")
        for clause in re.split(r",\s*(?=\w+ = )", UpdateExpression[4:]):
            clause = clause.strip()
            m = _SET_IF_NOT_EXISTS.match(clause)
            if m:
                attr, default, inc = m.groups()
                updated[attr] = updated.get(attr, ExpressionAttributeValues[default]) + ExpressionAttributeValues[inc]
                continue
            m = _SET_VALUE.match(clause)
            assert m, clause
            updated[m.group(1)] = ExpressionAttributeValues[m.group(2)]

        self.items[key] = updated
        return {"Attributes": copy.deepcopy(updated)} if ReturnValues == "ALL_NEW" else {}

    def query(self, *, KeyConditionExpression, FilterExpression=None):
        found = [
            copy.deepcopy(item)
            for item in self.items.values()
            if _evaluate(KeyConditionExpression, item)
            and (FilterExpression is None or _evaluate(FilterExpression, item))
        ]
        found.sort(key=lambda i: i["sk"])
        return {"Items": found, "Count": len(found)}


class FakeDynamoResource:
    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {}

    def Table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable(name))


@pytest.fixture
def credentials() -> CredentialSet:
    return TEST_CREDENTIALS


@pytest.fixture
def signer(credentials) -> RequestSigner:
    return RequestSigner(
        region="us-east-1",
        credentials_provider=StaticCredentialsProvider(credentials),
    )


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_transport(signer, recorded_requests):
    """Build an IamTransport whose wire is an httpx.MockTransport."""

    def factory(handler, **kwargs) -> IamTransport:
        async def record(request: httpx.Request):
            recorded_requests.append(request)
            result = handler(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result

        return IamTransport(
            signer=signer,
            source_fn="test-fn",
            transport=httpx.MockTransport(record),
            **kwargs,
        )

    return factory


@pytest.fixture
def dynamo() -> FakeDynamoResource:
    return FakeDynamoResource()


@pytest.fixture
def service_context(dynamo) -> ServiceContext:
    return ServiceContext(table_name="heroes", dynamodb_factory=lambda: dynamo)
