"""
Pytest configuration and fixtures for fieldlineage tests.
"""

from __future__ import annotations

import os
from typing import Dict, Generator

import pytest

from fieldlineage.config import reset_config
from fieldlineage.operations import (
    EndPoint,
    InputField,
    Operation,
    ReadOperation,
    TransformOperation,
    WriteOperation,
)


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def test_env() -> Dict[str, str]:
    """Test environment variables."""
    return {
        "FIELDLINEAGE_SERVICE_NAME": "fieldlineage-tests",
        "FIELDLINEAGE_LOG_FORMAT": "text",
    }


@pytest.fixture(autouse=True)
def set_test_env(test_env: Dict[str, str]) -> Generator[None, None, None]:
    """Set test environment variables and a fresh config for each test."""
    original = {}
    for key, value in test_env.items():
        original[key] = os.environ.get(key)
        os.environ[key] = value
    reset_config()

    yield

    for key, value in original.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    reset_config()


# ============================================================================
# Operation Fixtures
# ============================================================================


def endpoint(name: str) -> EndPoint:
    return EndPoint.of("ns", name)


@pytest.fixture
def person_operations() -> list[Operation]:
    """Person/code file pipeline.

    pRead: personFile -> (offset, body)
    parse: body -> (id, name, address)
    cRead: codeFile -> id
    codeGen: (parse.id, cRead.id) -> id
    sWrite: (codeGen.id, parse.name, parse.address) -> secureStore
    iWrite: (parse.id, parse.name, parse.address) -> insecureStore
    """
    return [
        ReadOperation(name="pRead", source=endpoint("personFile"), outputs={"offset", "body"}),
        TransformOperation(
            name="parse",
            inputs={InputField.of("pRead", "body")},
            outputs={"id", "name", "address"},
        ),
        ReadOperation(name="cRead", source=endpoint("codeFile"), outputs={"id"}),
        TransformOperation(
            name="codeGen",
            inputs={InputField.of("parse", "id"), InputField.of("cRead", "id")},
            outputs={"id"},
        ),
        WriteOperation(
            name="sWrite",
            destination=endpoint("secureStore"),
            inputs={
                InputField.of("codeGen", "id"),
                InputField.of("parse", "name"),
                InputField.of("parse", "address"),
            },
        ),
        WriteOperation(
            name="iWrite",
            destination=endpoint("insecureStore"),
            inputs={
                InputField.of("parse", "id"),
                InputField.of("parse", "name"),
                InputField.of("parse", "address"),
            },
        ),
    ]


@pytest.fixture
def normalize_operations() -> list[Operation]:
    """read -> parse -> normalize -> write, plus read.offset -> write directly."""
    return [
        ReadOperation(name="read", source=endpoint("file"), outputs={"offset", "body"}),
        TransformOperation(
            name="parse",
            inputs={InputField.of("read", "body")},
            outputs={"first_name", "last_name"},
        ),
        TransformOperation(
            name="normalize",
            inputs={InputField.of("parse", "first_name"), InputField.of("parse", "last_name")},
            outputs={"name"},
        ),
        WriteOperation(
            name="write",
            destination=endpoint("table"),
            inputs={InputField.of("read", "offset"), InputField.of("normalize", "name")},
        ),
    ]
