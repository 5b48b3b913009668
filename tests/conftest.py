"""Pytest configuration and shared fixtures for ecsdeploy tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from ecsdeploy.models.deployment import DeployConfig
from ecsdeploy.models.deployment_state import DeploymentState

ACCOUNT_ID = "123456789012"
REGISTRY_URI = f"{ACCOUNT_ID}.dkr.ecr.us-east-1.amazonaws.com/bia-app"


@pytest.fixture
def make_client_error() -> Callable[..., ClientError]:
    """Factory for botocore ClientError instances."""

    def _make(
        code: str, message: str = "error", operation: str = "Operation"
    ) -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": message}}, operation)

    return _make


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """Path of the deployment state file inside a temporary directory."""
    return tmp_path / ".deploy_state.json"


@pytest.fixture
def deploy_config(state_path: Path) -> DeployConfig:
    """Default configuration with the state file in a temporary directory."""
    return DeployConfig(state_file=str(state_path), timeout=5, poll_interval=1)


@pytest.fixture
def mock_clients() -> MagicMock:
    """AwsClients stand-in exposing MagicMock ecs/ecr/sts clients."""
    clients = MagicMock()
    clients.region = "us-east-1"
    clients.sts.get_caller_identity.return_value = {"Account": ACCOUNT_ID}
    return clients


@pytest.fixture
def built_state() -> DeploymentState:
    """State as written by a successful build."""
    return DeploymentState(version_identifier="abc1234", registry_uri=REGISTRY_URI)


@pytest.fixture
def registry_uri() -> str:
    """ECR URI for the default repository and test account."""
    return REGISTRY_URI


@pytest.fixture
def task_definition_factory() -> Callable[..., dict[str, Any]]:
    """Factory for DescribeTaskDefinition payloads of an operator-tuned family."""
    return _described_task_definition


def _described_task_definition(
    revision: int = 3,
    image: str = f"{REGISTRY_URI}:old111",
    memory: str = "1024",
) -> dict[str, Any]:
    return {
        "taskDefinitionArn": (
            f"arn:aws:ecs:us-east-1:{ACCOUNT_ID}:task-definition/bia-tf:{revision}"
        ),
        "family": "bia-tf",
        "revision": revision,
        "status": "ACTIVE",
        "networkMode": "awsvpc",
        "requiresCompatibilities": ["EC2"],
        "compatibilities": ["EC2"],
        "requiresAttributes": [
            {"name": "com.amazonaws.ecs.capability.logging-driver.awslogs"}
        ],
        "placementConstraints": [],
        "registeredAt": "2026-01-01T00:00:00Z",
        "registeredBy": f"arn:aws:iam::{ACCOUNT_ID}:user/ops",
        "cpu": "512",
        "memory": memory,
        "executionRoleArn": f"arn:aws:iam::{ACCOUNT_ID}:role/ecsTaskExecutionRole",
        "containerDefinitions": [
            {
                "name": "bia-container",
                "image": image,
                "essential": True,
                "portMappings": [{"containerPort": 8080, "protocol": "tcp"}],
                "environment": [
                    {"name": "NODE_ENV", "value": "production"},
                    {"name": "DB_HOST", "value": "db.internal"},
                ],
            },
            {"name": "sidecar", "image": "public.ecr.aws/xray/aws-xray-daemon:3"},
        ],
    }
