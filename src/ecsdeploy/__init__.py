"""ecsdeploy - Build, publish and roll out container images on Amazon ECS.

Main features:
- Version images by git revision and publish them to ECR
- Derive each task definition from the active one, changing only the image
- Update the ECS service and wait for it to become stable
- Roll back to any previously published version
"""

from ecsdeploy.lib.errors import ConfigError, DeploymentError, EcsDeployError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigError",
    "DeploymentError",
    "EcsDeployError",
]
