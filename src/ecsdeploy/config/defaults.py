"""Built-in defaults for ecsdeploy."""

# Deployment target defaults
DEFAULT_DEPLOY_CONFIG: dict[str, str | int | float] = {
    "region": "us-east-1",
    "cluster": "bia-cluster-alb",
    "service": "bia-service",
    "family": "bia-tf",
    "repository": "bia-app",
    "build_context": ".",
    "dockerfile": "Dockerfile",
    "platform": "linux/amd64",
    "timeout": 600,  # seconds, same budget as `aws ecs wait services-stable`
    "poll_interval": 15,  # seconds
    "state_file": ".deploy_state.json",
}

# Bootstrap task definition, used only when the family has never been registered
DEFAULT_TASK_SPEC: dict[str, str | int] = {
    "container_name": "bia-container",
    "container_port": 8080,
    "cpu": "256",
    "memory": "512",
    "execution_role_name": "ecsTaskExecutionRole",
    "network_mode": "awsvpc",
    "launch_type": "EC2",
    "log_stream_prefix": "ecs",
}

DEFAULT_CONTAINER_ENVIRONMENT: dict[str, str] = {"NODE_ENV": "production"}

# Floating tag pushed alongside every version tag
LATEST_TAG = "latest"

# Number of revisions shown by `ecsdeploy list`
DEFAULT_LIST_LIMIT = 10

# Length of the abbreviated git SHA used as the version identifier
VERSION_LENGTH = 7
