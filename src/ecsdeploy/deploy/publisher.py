"""Artifact publishing: build, tag and push images to ECR."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from ecsdeploy.config.defaults import LATEST_TAG
from ecsdeploy.deploy.aws import error_code, error_message
from ecsdeploy.deploy.builder import BuildResult, ContainerBuilder, get_oci_labels
from ecsdeploy.lib.errors import (
    MissingAccountIdentityError,
    RegistryAuthError,
    RegistryError,
)
from ecsdeploy.lib.logging_config import get_logger

if TYPE_CHECKING:
    from ecsdeploy.deploy.aws import AwsClients
    from ecsdeploy.models.deployment import DeployConfig
    from ecsdeploy.models.deployment_state import DeploymentState

logger = get_logger(__name__)

# describe_images error codes that mean "no such image"
_IMAGE_MISSING_CODES = ("ImageNotFoundException", "RepositoryNotFoundException")


def compute_registry_uri(account_id: str, region: str, repository: str) -> str:
    """Compose the ECR repository URI.

    Example:
        >>> compute_registry_uri("123456789012", "us-east-1", "bia-app")
        '123456789012.dkr.ecr.us-east-1.amazonaws.com/bia-app'
    """
    return f"{account_id}.dkr.ecr.{region}.amazonaws.com/{repository}"


class ArtifactPublisher:
    """Build and publish versioned images to the configured ECR repository."""

    def __init__(
        self,
        config: DeployConfig,
        clients: AwsClients,
        builder: ContainerBuilder | None = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            config: Deployment configuration
            clients: boto3 clients for the configured region
            builder: Docker image builder; created on first use when omitted
        """
        self._config = config
        self._clients = clients
        self._builder = builder

    @property
    def builder(self) -> ContainerBuilder:
        """Docker builder, connected lazily so rollback never needs Docker."""
        if self._builder is None:
            self._builder = ContainerBuilder()
        return self._builder

    def lookup_account_id(self) -> str:
        """Return the account id of the caller identity.

        Raises:
            MissingAccountIdentityError: If the identity lookup fails
        """
        try:
            identity = self._clients.sts.get_caller_identity()
        except ClientError as exc:
            raise MissingAccountIdentityError(error_message(exc)) from exc
        except BotoCoreError as exc:
            raise MissingAccountIdentityError(str(exc)) from exc

        account_id = identity.get("Account")
        if not account_id:
            raise MissingAccountIdentityError("caller identity has no Account field")
        return str(account_id)

    def registry_uri(self, account_id: str | None = None) -> str:
        """Registry URI for the configured repository and region."""
        return compute_registry_uri(
            account_id or self.lookup_account_id(),
            self._config.region,
            self._config.repository,
        )

    def build(self, version: str, registry_uri: str) -> BuildResult:
        """Build the image and tag it with the version and ``latest``.

        The local build is named ``{repository}:{version}``; the registry
        references ``{registry_uri}:{version}`` and ``{registry_uri}:latest``
        are added as extra tags.

        Raises:
            DockerNotAvailableError: If Docker daemon is not available
            DeploymentError: If the build or tagging fails
        """
        labels = get_oci_labels(
            title=self._config.repository, version=version, source_sha=version
        )
        result = self.builder.build(
            build_context=self._config.build_context,
            image_name=self._config.repository,
            tag=version,
            labels=labels,
            dockerfile=self._config.dockerfile,
            platform=self._config.platform,
        )
        for tag in (version, LATEST_TAG):
            result.extra_tags.append(
                self.builder.tag(result.full_name, registry_uri, tag)
            )
        return result

    def authenticate(self, registry_host: str) -> None:
        """Log the Docker client in to ECR using an authorization token.

        Raises:
            RegistryAuthError: If the token cannot be obtained or decoded, or
                the registry rejects the login
        """
        try:
            response = self._clients.ecr.get_authorization_token()
            auth_data = response["authorizationData"][0]
            token = base64.b64decode(auth_data["authorizationToken"]).decode("utf-8")
            username, password = token.split(":", 1)
        except ClientError as exc:
            raise RegistryAuthError(registry_host, error_message(exc)) from exc
        except BotoCoreError as exc:
            raise RegistryAuthError(registry_host, str(exc)) from exc
        except (KeyError, IndexError, ValueError, binascii.Error) as exc:
            raise RegistryAuthError(
                registry_host, f"malformed authorization token: {exc}"
            ) from exc

        endpoint = auth_data.get("proxyEndpoint") or f"https://{registry_host}"
        self.builder.login(username=username, password=password, registry=endpoint)
        logger.debug(f"Logged in to {endpoint}")

    def push(self, state: DeploymentState) -> list[str]:
        """Push the version tag and ``latest`` for the state's image.

        Safe to re-run: pushing the same tag with the same bytes is a no-op
        on the registry side.

        Returns:
            The pushed image references

        Raises:
            RegistryAuthError: If registry login fails
            PushFailedError: If either push fails
        """
        self.authenticate(state.registry_host)
        pushed: list[str] = []
        for tag in (state.version_identifier, LATEST_TAG):
            logger.info(f"Pushing {state.registry_uri}:{tag}")
            self.builder.push(state.registry_uri, tag)
            pushed.append(f"{state.registry_uri}:{tag}")
        return pushed

    def image_exists(self, tag: str) -> bool:
        """Check whether the configured repository holds an image tag.

        Raises:
            RegistryError: For registry errors other than a missing image
        """
        try:
            response = self._clients.ecr.describe_images(
                repositoryName=self._config.repository,
                imageIds=[{"imageTag": tag}],
            )
        except ClientError as exc:
            if error_code(exc) in _IMAGE_MISSING_CODES:
                return False
            raise RegistryError(
                operation="rollback",
                message=f"Failed to query image '{tag}': {error_message(exc)}",
            ) from exc
        except BotoCoreError as exc:
            raise RegistryError(
                operation="rollback",
                message=f"Failed to query image '{tag}': {exc}",
            ) from exc

        return bool(response.get("imageDetails"))
