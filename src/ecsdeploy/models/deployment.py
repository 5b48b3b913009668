"""Pydantic models for deployment configuration.

This module defines the immutable configuration shared by every deployment
component, plus small result types returned by the components.
"""

import re
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ecsdeploy.config.defaults import (
    DEFAULT_CONTAINER_ENVIRONMENT,
    DEFAULT_DEPLOY_CONFIG,
    DEFAULT_TASK_SPEC,
)

# Regex patterns for validation
REPOSITORY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._/-]*[a-z0-9]$|^[a-z0-9]$")
REGION_PATTERN = re.compile(r"^[a-z]{2}(-gov)?-[a-z]+-\d$")


class StabilityOutcome(str, Enum):
    """Result of waiting for a service to converge."""

    STABLE = "stable"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class DeployConfig(BaseModel):
    """Deployment configuration, built once per invocation.

    Constructed from built-in defaults, ``ECSDEPLOY_*`` environment variables
    and command-line options, then passed explicitly to every component.

    Attributes:
        region: AWS region for ECS, ECR and STS calls
        cluster: ECS cluster name
        service: ECS service name
        family: Task definition family
        repository: ECR repository name
        build_context: Docker build context directory
        dockerfile: Dockerfile path relative to the build context
        platform: Target platform for the image
        timeout: Seconds to wait for the service to become stable
        poll_interval: Seconds between stability polls
        state_file: Path of the deployment state handoff file
        container_name: Container name used when bootstrapping a family
        container_port: Container port used when bootstrapping a family
        cpu: Task CPU units used when bootstrapping a family
        memory: Task memory (MiB) used when bootstrapping a family
        execution_role_name: IAM role name for the task execution role
        environment: Container environment used when bootstrapping a family
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    region: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["region"]), description="AWS region"
    )
    cluster: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["cluster"]), description="ECS cluster name"
    )
    service: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["service"]), description="ECS service name"
    )
    family: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["family"]),
        description="Task definition family",
    )
    repository: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["repository"]),
        description="ECR repository name",
    )
    build_context: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["build_context"]),
        description="Docker build context directory",
    )
    dockerfile: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["dockerfile"]),
        description="Dockerfile path relative to the build context",
    )
    platform: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["platform"]),
        description="Target platform for the image (e.g., linux/amd64)",
    )
    timeout: float = Field(
        default=float(DEFAULT_DEPLOY_CONFIG["timeout"]),
        gt=0,
        description="Seconds to wait for the service to become stable",
    )
    poll_interval: float = Field(
        default=float(DEFAULT_DEPLOY_CONFIG["poll_interval"]),
        gt=0,
        description="Seconds between stability polls",
    )
    state_file: str = Field(
        default=str(DEFAULT_DEPLOY_CONFIG["state_file"]),
        description="Deployment state handoff file",
    )
    container_name: str = Field(
        default=str(DEFAULT_TASK_SPEC["container_name"]),
        description="Container name for a bootstrapped task definition",
    )
    container_port: Annotated[int, Field(ge=1, le=65535)] = Field(
        default=int(DEFAULT_TASK_SPEC["container_port"]),
        description="Container port for a bootstrapped task definition",
    )
    cpu: str = Field(
        default=str(DEFAULT_TASK_SPEC["cpu"]),
        description="Task CPU units for a bootstrapped task definition",
    )
    memory: str = Field(
        default=str(DEFAULT_TASK_SPEC["memory"]),
        description="Task memory (MiB) for a bootstrapped task definition",
    )
    execution_role_name: str = Field(
        default=str(DEFAULT_TASK_SPEC["execution_role_name"]),
        description="IAM role name for the task execution role",
    )
    environment: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CONTAINER_ENVIRONMENT),
        description="Container environment for a bootstrapped task definition",
    )

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        """Validate repository name pattern."""
        if not REPOSITORY_PATTERN.match(v):
            raise ValueError(
                f"Invalid repository name: {v}. "
                "Must contain only lowercase letters, numbers, '.', '_', '/', '-'"
            )
        return v

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Validate AWS region format (e.g., us-east-1)."""
        if not REGION_PATTERN.match(v):
            raise ValueError(f"Invalid AWS region: {v}. Expected e.g. 'us-east-1'")
        return v

    @field_validator("cluster", "service", "family")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty resource names."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v
