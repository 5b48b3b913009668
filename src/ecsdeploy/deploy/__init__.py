"""ecsdeploy deployment engine.

This package provides the deployment steps (version resolution, image
publishing, task definition registration, service update) and the
orchestrator that composes them.
"""

from ecsdeploy.deploy.builder import BuildResult, ContainerBuilder, get_oci_labels
from ecsdeploy.deploy.orchestrator import DeploymentOrchestrator
from ecsdeploy.deploy.publisher import ArtifactPublisher, compute_registry_uri
from ecsdeploy.deploy.service import ServiceUpdater
from ecsdeploy.deploy.task_spec import TaskSpecManager
from ecsdeploy.deploy.version import VersionResolver

__all__ = [
    "ArtifactPublisher",
    "BuildResult",
    "ContainerBuilder",
    "DeploymentOrchestrator",
    "ServiceUpdater",
    "TaskSpecManager",
    "VersionResolver",
    "compute_registry_uri",
    "get_oci_labels",
]
