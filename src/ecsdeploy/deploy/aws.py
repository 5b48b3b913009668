"""boto3 client access shared by the deployment components."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from boto3.session import Session

# Fail fast on transport errors; the operator re-runs the command instead
_CLIENT_CONFIG = Config(retries={"max_attempts": 3, "mode": "standard"})


class AwsClients:
    """Lazily created boto3 clients for a single region.

    Example:
        >>> clients = AwsClients("us-east-1")
        >>> clients.ecs.list_clusters()  # doctest: +SKIP
    """

    def __init__(self, region: str, session: Session | None = None) -> None:
        """Initialize the client factory.

        Args:
            region: AWS region for every client
            session: Optional boto3 session (defaults to a new session)
        """
        self.region = region
        self._session = session or boto3.session.Session(region_name=region)
        self._clients: dict[str, Any] = {}

    def client(self, service_name: str) -> Any:
        """Return a cached client for a service."""
        if service_name not in self._clients:
            self._clients[service_name] = self._session.client(
                service_name, region_name=self.region, config=_CLIENT_CONFIG
            )
        return self._clients[service_name]

    @property
    def ecs(self) -> Any:
        return self.client("ecs")

    @property
    def ecr(self) -> Any:
        return self.client("ecr")

    @property
    def sts(self) -> Any:
        return self.client("sts")


def error_code(exc: ClientError) -> str:
    """Return the AWS error code of a ClientError."""
    return str(exc.response.get("Error", {}).get("Code", ""))


def error_message(exc: ClientError) -> str:
    """Return the AWS error message of a ClientError, or its string form."""
    return str(exc.response.get("Error", {}).get("Message") or exc)
