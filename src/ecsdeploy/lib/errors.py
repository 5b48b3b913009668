"""Custom exception hierarchy for ecsdeploy configuration and operations."""


class EcsDeployError(Exception):
    """Base exception for all ecsdeploy errors.

    All ecsdeploy-specific exceptions inherit from this class, enabling
    centralized exception handling at the CLI boundary.
    """

    pass


class ConfigError(EcsDeployError):
    """Exception raised for configuration errors.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class DeploymentError(EcsDeployError):
    """Exception raised when a deployment step fails.

    Every external-call failure inside a step is surfaced as a subclass of
    this error. ``operation`` names the step so the operator knows where to
    resume.

    Attributes:
        operation: Name of the failing step (build, push, register, ...)
        message: Human-readable error message
    """

    def __init__(self, operation: str, message: str) -> None:
        """Create a deployment error for a named step.

        Args:
            operation: Name of the failing step
            message: Descriptive error message
        """
        self.operation = operation
        self.message = message
        super().__init__(f"{operation}: {message}")


class DockerNotAvailableError(DeploymentError):
    """Error raised when the Docker daemon cannot be reached."""

    def __init__(self, operation: str = "build") -> None:
        """Create the error for the step that needed Docker."""
        super().__init__(
            operation=operation,
            message=(
                "Docker is not available. Ensure the Docker daemon is running "
                "and DOCKER_HOST is set correctly."
            ),
        )


# Preconditions


class PreconditionError(DeploymentError):
    """A prerequisite for the requested command is missing.

    The message tells the operator which prior command to run.
    """


class NotAVersionControlledTreeError(PreconditionError):
    """The working directory is not inside a git checkout."""

    def __init__(self, path: str, detail: str | None = None) -> None:
        """Create the error for the directory that was inspected."""
        self.path = path
        message = f"Not a valid git repository: {path}"
        if detail:
            message += f" ({detail})"
        super().__init__(operation="version", message=message)


class MissingStateError(PreconditionError):
    """The deployment state file (or a field in it) is missing."""

    def __init__(self, operation: str, state_path: str, hint: str) -> None:
        """Create the error naming the command the operator must run first."""
        self.state_path = state_path
        super().__init__(
            operation=operation,
            message=f"Deployment state not found in {state_path}. {hint}",
        )


# Authentication


class AuthError(DeploymentError):
    """Identity or registry credentials were rejected.

    Not retried: this is almost always an external credential problem.
    """


class MissingAccountIdentityError(AuthError):
    """The caller identity (account id) lookup failed."""

    def __init__(self, detail: str) -> None:
        """Create the error with the underlying cause."""
        super().__init__(
            operation="identity",
            message=f"Unable to determine AWS account id: {detail}",
        )


class RegistryAuthError(AuthError):
    """Logging in to the image registry failed."""

    def __init__(self, registry: str, detail: str) -> None:
        """Create the error for the registry host."""
        self.registry = registry
        super().__init__(
            operation="push",
            message=f"Registry login to {registry} failed: {detail}",
        )


# Remote objects


class NotFoundError(DeploymentError):
    """A remote object required by the command does not exist."""


class ServiceNotFoundError(NotFoundError):
    """The cluster or service is unknown to the control plane."""

    def __init__(self, cluster: str, service: str, detail: str) -> None:
        """Create the error for the service descriptor."""
        self.cluster = cluster
        self.service = service
        super().__init__(
            operation="update-service",
            message=f"Service '{service}' not found in cluster '{cluster}': {detail}",
        )


class ArtifactNotFoundError(NotFoundError):
    """No image with the requested tag exists in the registry."""

    def __init__(self, repository: str, tag: str) -> None:
        """Create the error for the missing image tag."""
        self.repository = repository
        self.tag = tag
        super().__init__(
            operation="rollback",
            message=f"Image with tag '{tag}' not found in repository '{repository}'",
        )


# Control plane and registry


class RegistrationRejectedError(DeploymentError):
    """The control plane rejected a task definition.

    Fatal: retrying without an operator fix repeats the failure.
    """

    def __init__(self, family: str, detail: str) -> None:
        """Create the error for the rejected family."""
        self.family = family
        super().__init__(
            operation="register",
            message=f"Task definition for family '{family}' was rejected: {detail}",
        )


class PushFailedError(DeploymentError):
    """Pushing an image tag to the registry failed."""

    def __init__(self, image: str, detail: str) -> None:
        """Create the error for the image reference being pushed."""
        self.image = image
        super().__init__(operation="push", message=f"Push of {image} failed: {detail}")


class RegistryError(DeploymentError):
    """Unexpected registry error."""


class ControlPlaneError(DeploymentError):
    """Unexpected control plane error."""


class ControlPlaneUnreachableError(ControlPlaneError):
    """The control plane could not be reached."""


class DeploymentUnconfirmedError(DeploymentError):
    """The service update was submitted but convergence was not observed.

    Distinct from a failed deployment: the update stays in place and the
    operator decides what to do next.

    Attributes:
        task_spec_arn: Task definition the service was pointed at
        outcome: Stability outcome that ended the wait
    """

    def __init__(self, service: str, task_spec_arn: str, outcome: str) -> None:
        """Create the error for an unconfirmed service update."""
        self.service = service
        self.task_spec_arn = task_spec_arn
        self.outcome = outcome
        super().__init__(
            operation="await-stable",
            message=(
                f"Service '{service}' did not report stable ({outcome}). "
                f"The update to {task_spec_arn} was submitted and was not "
                "rolled back; inspect the service before retrying."
            ),
        )
