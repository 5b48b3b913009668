"""Data models for ecsdeploy."""

from ecsdeploy.models.deployment import DeployConfig, StabilityOutcome
from ecsdeploy.models.deployment_state import DeploymentState
from ecsdeploy.models.task_spec import BootstrapSettings, TaskSpecification

__all__ = [
    "BootstrapSettings",
    "DeployConfig",
    "DeploymentState",
    "StabilityOutcome",
    "TaskSpecification",
]
