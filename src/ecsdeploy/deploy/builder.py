"""Container image builder.

This module wraps the Docker SDK for the image operations a deployment
needs: build, tag, registry login and push.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import docker
from docker.errors import APIError, BuildError, DockerException, ImageNotFound

from ecsdeploy.lib.errors import (
    DeploymentError,
    DockerNotAvailableError,
    PushFailedError,
    RegistryAuthError,
)
from ecsdeploy.lib.logging_config import get_logger

if TYPE_CHECKING:
    from docker.models.images import Image

logger = get_logger(__name__)


@dataclass
class BuildResult:
    """Result of a container image build operation.

    Attributes:
        image_id: The SHA256 ID of the built image
        image_name: The repository/image name
        tag: The image tag
        full_name: Full image reference (name:tag)
        extra_tags: Additional references the image was tagged with
        log_lines: Build log output lines
    """

    image_id: str
    image_name: str
    tag: str
    full_name: str
    extra_tags: list[str] = field(default_factory=list)
    log_lines: list[str] = field(default_factory=list)

    @classmethod
    def from_image(
        cls,
        image: Image,
        image_name: str,
        tag: str,
        log_lines: list[str] | None = None,
    ) -> BuildResult:
        """Create BuildResult from a Docker image object.

        Args:
            image: Docker image object from build
            image_name: Repository/image name
            tag: Image tag
            log_lines: Optional build log lines

        Returns:
            BuildResult instance
        """
        image_id = image.id or ""
        return cls(
            image_id=image_id,
            image_name=image_name,
            tag=tag,
            full_name=f"{image_name}:{tag}",
            log_lines=log_lines or [],
        )


def get_oci_labels(
    title: str,
    version: str,
    source_sha: str | None = None,
) -> dict[str, str]:
    """Generate OCI-compliant container image labels.

    Args:
        title: Image title (the repository name)
        version: Version string for the image
        source_sha: Optional git SHA for source tracking

    Returns:
        Dictionary of OCI labels

    Example:
        >>> labels = get_oci_labels("bia-app", "abc1234")
        >>> labels["org.opencontainers.image.title"]
        'bia-app'
    """
    created = datetime.now(timezone.utc).isoformat()

    labels = {
        "org.opencontainers.image.title": title,
        "org.opencontainers.image.version": version,
        "org.opencontainers.image.created": created,
        "com.ecsdeploy.managed": "true",
    }

    if source_sha:
        labels["org.opencontainers.image.revision"] = source_sha

    return labels


def _stream_errors(entries: Any) -> tuple[list[str], list[str]]:
    """Split Docker streaming output into log lines and error messages."""
    log_lines: list[str] = []
    errors: list[str] = []
    for entry in entries:
        # Docker SDK returns dict[str, Any] for decoded entries
        if not isinstance(entry, dict):
            continue
        if "error" in entry:
            errors.append(str(entry["error"]))
        elif "errorDetail" in entry:
            errors.append(str(entry["errorDetail"].get("message", entry["errorDetail"])))
        elif "stream" in entry and isinstance(entry["stream"], str):
            log_lines.append(entry["stream"].rstrip("\n"))
        elif "status" in entry:
            progress = entry.get("id")
            status = str(entry["status"])
            log_lines.append(f"{progress}: {status}" if progress else status)
    return log_lines, errors


class ContainerBuilder:
    """Docker image operations for a deployment.

    Uses the Docker SDK to build, tag, and push container images. Handles
    Docker daemon connection and error translation.

    Example:
        >>> builder = ContainerBuilder()
        >>> result = builder.build(
        ...     build_context=".",
        ...     image_name="bia-app",
        ...     tag="abc1234",
        ... )
        >>> print(result.full_name)
        'bia-app:abc1234'
    """

    def __init__(self) -> None:
        """Initialize the container builder.

        Connects to the Docker daemon using the environment configuration.

        Raises:
            DockerNotAvailableError: If Docker daemon is not available
        """
        try:
            self.client = docker.from_env()  # type: ignore[attr-defined]
        except DockerException as e:
            raise DockerNotAvailableError(operation="build") from e

    def build(
        self,
        build_context: str,
        image_name: str,
        tag: str,
        labels: dict[str, str] | None = None,
        dockerfile: str = "Dockerfile",
        platform: str = "linux/amd64",
        **build_kwargs: Any,
    ) -> BuildResult:
        """Build a container image from the specified context.

        Args:
            build_context: Path to the build context directory
            image_name: Repository/image name for the built image
            tag: Tag for the built image
            labels: Optional OCI labels to apply
            dockerfile: Path to Dockerfile relative to context
            platform: Target platform for the image (default: linux/amd64)
            **build_kwargs: Additional arguments passed to Docker build

        Returns:
            BuildResult with image details and build logs

        Raises:
            DeploymentError: If build context doesn't exist or build fails
        """
        context_path = Path(build_context)
        if not context_path.exists():
            raise DeploymentError(
                operation="build",
                message=f"Build context not found: {build_context}",
            )
        if not (context_path / dockerfile).exists():
            raise DeploymentError(
                operation="build",
                message=f"Dockerfile not found: {context_path / dockerfile}",
            )

        full_tag = f"{image_name}:{tag}"
        logger.debug(f"Building {full_tag} from {context_path} ({platform})")

        try:
            image, build_logs = self.client.images.build(
                path=str(context_path),
                tag=full_tag,
                dockerfile=dockerfile,
                labels=labels or {},
                rm=True,  # Remove intermediate containers
                platform=platform,
                pull=True,  # Always pull base image to get correct platform
                **build_kwargs,
            )
        except BuildError as e:
            raise DeploymentError(
                operation="build",
                message=f"Docker build failed: {e.msg}",
            ) from e
        except DockerException as e:
            raise DeploymentError(
                operation="build",
                message=f"Docker error during build: {e}",
            ) from e

        log_lines, errors = _stream_errors(build_logs)
        log_lines.extend(f"ERROR: {error}" for error in errors)

        return BuildResult.from_image(
            image=image,
            image_name=image_name,
            tag=tag,
            log_lines=log_lines,
        )

    def tag(self, source: str, repository: str, tag: str) -> str:
        """Tag an existing local image with another reference.

        Args:
            source: Existing image reference or id
            repository: Target repository (e.g., registry URI)
            tag: Target tag

        Returns:
            The new full reference (repository:tag)

        Raises:
            DeploymentError: If the source image does not exist or tagging fails
        """
        target = f"{repository}:{tag}"
        try:
            image = self.client.images.get(source)
            if not image.tag(repository, tag=tag):
                raise DeploymentError(
                    operation="build", message=f"Failed to tag {source} as {target}"
                )
        except ImageNotFound as e:
            raise DeploymentError(
                operation="build", message=f"Local image not found: {source}"
            ) from e
        except DockerException as e:
            raise DeploymentError(
                operation="build", message=f"Failed to tag {source} as {target}: {e}"
            ) from e

        logger.debug(f"Tagged {source} as {target}")
        return target

    def login(self, username: str, password: str, registry: str) -> None:
        """Authenticate the Docker client against a registry.

        Raises:
            RegistryAuthError: If the registry rejects the credentials
        """
        try:
            self.client.login(
                username=username, password=password, registry=registry, reauth=True
            )
        except (APIError, DockerException) as e:
            raise RegistryAuthError(registry, str(e)) from e

    def push(self, repository: str, tag: str) -> list[str]:
        """Push a tagged image to its registry.

        Args:
            repository: Repository part of the reference (registry URI)
            tag: Tag to push

        Returns:
            Push progress lines

        Raises:
            PushFailedError: If the push stream reports an error or the Docker
                API call fails
        """
        reference = f"{repository}:{tag}"
        try:
            output = self.client.images.push(
                repository, tag=tag, stream=True, decode=True
            )
            log_lines, errors = _stream_errors(output)
        except DockerException as e:
            raise PushFailedError(reference, str(e)) from e

        if errors:
            raise PushFailedError(reference, "; ".join(errors))
        return log_lines
