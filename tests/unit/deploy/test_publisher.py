"""Unit tests for ArtifactPublisher."""

from __future__ import annotations

import base64
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from ecsdeploy.deploy.builder import BuildResult
from ecsdeploy.deploy.publisher import ArtifactPublisher, compute_registry_uri
from ecsdeploy.lib.errors import (
    MissingAccountIdentityError,
    PushFailedError,
    RegistryAuthError,
    RegistryError,
)
from ecsdeploy.models.deployment import DeployConfig
from ecsdeploy.models.deployment_state import DeploymentState


@pytest.fixture
def mock_builder() -> MagicMock:
    builder = MagicMock()
    builder.build.return_value = BuildResult(
        image_id="sha256:abc",
        image_name="bia-app",
        tag="abc1234",
        full_name="bia-app:abc1234",
    )
    builder.tag.side_effect = lambda source, repository, tag: f"{repository}:{tag}"
    return builder


@pytest.fixture
def publisher(
    deploy_config: DeployConfig, mock_clients: MagicMock, mock_builder: MagicMock
) -> ArtifactPublisher:
    return ArtifactPublisher(deploy_config, mock_clients, builder=mock_builder)


def _auth_response(token: str = "AWS:secret") -> dict:
    encoded = base64.b64encode(token.encode()).decode()
    return {
        "authorizationData": [
            {
                "authorizationToken": encoded,
                "proxyEndpoint": "https://123456789012.dkr.ecr.us-east-1.amazonaws.com",
            }
        ]
    }


class TestComputeRegistryUri:
    """Tests for registry URI composition."""

    def test_compose(self) -> None:
        assert (
            compute_registry_uri("123456789012", "us-west-2", "bia-app")
            == "123456789012.dkr.ecr.us-west-2.amazonaws.com/bia-app"
        )


class TestAccountIdentity:
    """Tests for caller identity lookup."""

    def test_lookup_account_id(
        self, publisher: ArtifactPublisher, registry_uri: str
    ) -> None:
        assert publisher.lookup_account_id() == "123456789012"
        assert publisher.registry_uri() == registry_uri

    def test_lookup_failure(
        self,
        publisher: ArtifactPublisher,
        mock_clients: MagicMock,
        make_client_error: Callable[..., ClientError],
    ) -> None:
        """An STS failure is reported as a missing account identity."""
        mock_clients.sts.get_caller_identity.side_effect = make_client_error(
            "ExpiredToken", "The security token included in the request is expired"
        )

        with pytest.raises(MissingAccountIdentityError, match="expired"):
            publisher.lookup_account_id()

    def test_lookup_without_account(
        self, publisher: ArtifactPublisher, mock_clients: MagicMock
    ) -> None:
        mock_clients.sts.get_caller_identity.return_value = {}

        with pytest.raises(MissingAccountIdentityError):
            publisher.lookup_account_id()


class TestBuild:
    """Tests for building and tagging."""

    def test_build_tags_version_and_latest(
        self, publisher: ArtifactPublisher, mock_builder: MagicMock, registry_uri: str
    ) -> None:
        result = publisher.build("abc1234", registry_uri)

        build_kwargs = mock_builder.build.call_args[1]
        assert build_kwargs["image_name"] == "bia-app"
        assert build_kwargs["tag"] == "abc1234"
        assert build_kwargs["build_context"] == "."
        assert result.extra_tags == [
            f"{registry_uri}:abc1234",
            f"{registry_uri}:latest",
        ]


class TestPush:
    """Tests for registry authentication and push."""

    def test_push_both_tags(
        self,
        publisher: ArtifactPublisher,
        mock_clients: MagicMock,
        mock_builder: MagicMock,
        built_state: DeploymentState,
    ) -> None:
        mock_clients.ecr.get_authorization_token.return_value = _auth_response()

        pushed = publisher.push(built_state)

        mock_builder.login.assert_called_once_with(
            username="AWS",
            password="secret",
            registry="https://123456789012.dkr.ecr.us-east-1.amazonaws.com",
        )
        assert [c[0] for c in mock_builder.push.call_args_list] == [
            (built_state.registry_uri, "abc1234"),
            (built_state.registry_uri, "latest"),
        ]
        assert pushed[0] == built_state.image_uri

    def test_token_failure_is_auth_error(
        self,
        publisher: ArtifactPublisher,
        mock_clients: MagicMock,
        mock_builder: MagicMock,
        built_state: DeploymentState,
        make_client_error: Callable[..., ClientError],
    ) -> None:
        mock_clients.ecr.get_authorization_token.side_effect = make_client_error(
            "AccessDeniedException", "not authorized to perform ecr:GetAuthorizationToken"
        )

        with pytest.raises(RegistryAuthError, match="GetAuthorizationToken"):
            publisher.push(built_state)

        mock_builder.push.assert_not_called()

    def test_malformed_token(
        self,
        publisher: ArtifactPublisher,
        mock_clients: MagicMock,
        built_state: DeploymentState,
    ) -> None:
        mock_clients.ecr.get_authorization_token.return_value = _auth_response(
            "no-separator"
        )

        with pytest.raises(RegistryAuthError, match="malformed"):
            publisher.push(built_state)

    def test_push_failure_propagates(
        self,
        publisher: ArtifactPublisher,
        mock_clients: MagicMock,
        mock_builder: MagicMock,
        built_state: DeploymentState,
    ) -> None:
        """A failed version push stops before pushing latest."""
        mock_clients.ecr.get_authorization_token.return_value = _auth_response()
        mock_builder.push.side_effect = PushFailedError(built_state.image_uri, "reset")

        with pytest.raises(PushFailedError):
            publisher.push(built_state)

        assert mock_builder.push.call_count == 1


class TestImageExists:
    """Tests for the registry existence query."""

    def test_image_exists(
        self, publisher: ArtifactPublisher, mock_clients: MagicMock
    ) -> None:
        mock_clients.ecr.describe_images.return_value = {
            "imageDetails": [{"imageTags": ["def5678"]}]
        }

        assert publisher.image_exists("def5678") is True
        mock_clients.ecr.describe_images.assert_called_once_with(
            repositoryName="bia-app", imageIds=[{"imageTag": "def5678"}]
        )

    @pytest.mark.parametrize(
        "code", ["ImageNotFoundException", "RepositoryNotFoundException"]
    )
    def test_image_missing(
        self,
        publisher: ArtifactPublisher,
        mock_clients: MagicMock,
        make_client_error: Callable[..., ClientError],
        code: str,
    ) -> None:
        mock_clients.ecr.describe_images.side_effect = make_client_error(code)

        assert publisher.image_exists("ffffff0") is False

    def test_other_registry_error(
        self,
        publisher: ArtifactPublisher,
        mock_clients: MagicMock,
        make_client_error: Callable[..., ClientError],
    ) -> None:
        mock_clients.ecr.describe_images.side_effect = make_client_error(
            "ServerException"
        )

        with pytest.raises(RegistryError):
            publisher.image_exists("def5678")

    def test_unreachable_registry(
        self, publisher: ArtifactPublisher, mock_clients: MagicMock
    ) -> None:
        mock_clients.ecr.describe_images.side_effect = EndpointConnectionError(
            endpoint_url="https://api.ecr.us-east-1.amazonaws.com"
        )

        with pytest.raises(RegistryError, match="Failed to query image"):
            publisher.image_exists("def5678")
