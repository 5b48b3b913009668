"""Service update and stability wait."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from ecsdeploy.deploy.aws import error_code, error_message
from ecsdeploy.lib.errors import (
    ControlPlaneError,
    ControlPlaneUnreachableError,
    ServiceNotFoundError,
)
from ecsdeploy.lib.logging_config import get_logger
from ecsdeploy.models.deployment import StabilityOutcome

if TYPE_CHECKING:
    from ecsdeploy.deploy.aws import AwsClients

logger = get_logger(__name__)

_SERVICE_MISSING_CODES = (
    "ServiceNotFoundException",
    "ServiceNotActiveException",
    "ClusterNotFoundException",
)


def is_service_stable(service: dict[str, Any], task_spec_arn: str | None = None) -> bool:
    """Check whether a DescribeServices entry has converged.

    Stable means a single deployment remains, it targets ``task_spec_arn``
    (when given), and every desired task is running with none pending.
    """
    if service.get("status") != "ACTIVE":
        return False

    deployments = service.get("deployments") or []
    if len(deployments) != 1:
        return False

    primary = deployments[0]
    if task_spec_arn and primary.get("taskDefinition") != task_spec_arn:
        return False

    desired = service.get("desiredCount", 0)
    return (
        service.get("runningCount", 0) == desired
        and service.get("pendingCount", 0) == 0
        and primary.get("runningCount", desired) == desired
    )


class ServiceUpdater:
    """Point an ECS service at a task definition and wait for it to settle."""

    def __init__(self, clients: AwsClients, poll_interval: float = 15.0) -> None:
        """Initialize the updater.

        Args:
            clients: boto3 clients for the configured region
            poll_interval: Seconds between DescribeServices polls
        """
        self._clients = clients
        self.poll_interval = poll_interval

    def update_service_task_spec(
        self, cluster: str, service: str, task_spec_arn: str
    ) -> None:
        """Submit the service update.

        Raises:
            ServiceNotFoundError: If the cluster or service is unknown
            ControlPlaneError: For other service errors
            ControlPlaneUnreachableError: If ECS cannot be reached
        """
        try:
            self._clients.ecs.update_service(
                cluster=cluster, service=service, taskDefinition=task_spec_arn
            )
        except ClientError as exc:
            if error_code(exc) in _SERVICE_MISSING_CODES:
                raise ServiceNotFoundError(cluster, service, error_message(exc)) from exc
            raise ControlPlaneError(
                operation="update-service",
                message=f"Failed to update service '{service}': {error_message(exc)}",
            ) from exc
        except BotoCoreError as exc:
            raise ControlPlaneUnreachableError(
                operation="update-service",
                message=f"Failed to update service '{service}': {exc}",
            ) from exc

        logger.info(f"Service '{service}' updated to {task_spec_arn}")

    def describe(self, cluster: str, service: str) -> dict[str, Any]:
        """Return the DescribeServices entry for a service.

        Raises:
            ServiceNotFoundError: If the service is not returned
            ControlPlaneUnreachableError: If ECS cannot be reached
        """
        try:
            response = self._clients.ecs.describe_services(
                cluster=cluster, services=[service]
            )
        except ClientError as exc:
            if error_code(exc) in _SERVICE_MISSING_CODES:
                raise ServiceNotFoundError(cluster, service, error_message(exc)) from exc
            raise ControlPlaneUnreachableError(
                operation="await-stable",
                message=f"Failed to describe service '{service}': {error_message(exc)}",
            ) from exc
        except BotoCoreError as exc:
            raise ControlPlaneUnreachableError(
                operation="await-stable",
                message=f"Failed to describe service '{service}': {exc}",
            ) from exc

        services = response.get("services") or []
        if not services:
            reasons = ", ".join(
                str(failure.get("reason")) for failure in response.get("failures", [])
            )
            raise ServiceNotFoundError(cluster, service, reasons or "MISSING")
        return dict(services[0])

    def await_stable(
        self,
        cluster: str,
        service: str,
        timeout: float,
        task_spec_arn: str | None = None,
        cancel: threading.Event | None = None,
    ) -> StabilityOutcome:
        """Block until the service is stable or the timeout elapses.

        Polls DescribeServices every ``poll_interval`` seconds. The submitted
        update is never reverted, whatever the outcome.

        Args:
            cluster: Cluster name
            service: Service name
            timeout: Seconds to wait before giving up
            task_spec_arn: Task definition the service must converge to
            cancel: Event checked between polls; setting it ends the wait

        Returns:
            STABLE, TIMED_OUT, or CANCELLED

        Raises:
            ServiceNotFoundError: If the service disappears while waiting
            ControlPlaneUnreachableError: If ECS cannot be reached
        """
        cancel = cancel or threading.Event()
        deadline = time.monotonic() + timeout
        polls = 0

        while True:
            polls += 1
            description = self.describe(cluster, service)
            if is_service_stable(description, task_spec_arn):
                logger.debug(f"Service '{service}' stable after {polls} poll(s)")
                return StabilityOutcome.STABLE

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(
                    f"Service '{service}' not stable after {timeout:.0f}s "
                    f"(running {description.get('runningCount', 0)}/"
                    f"{description.get('desiredCount', 0)})"
                )
                return StabilityOutcome.TIMED_OUT

            logger.debug(
                f"Waiting for '{service}': running "
                f"{description.get('runningCount', 0)}/"
                f"{description.get('desiredCount', 0)}, "
                f"{len(description.get('deployments') or [])} deployment(s)"
            )
            if cancel.wait(min(self.poll_interval, remaining)):
                logger.warning(f"Stopped waiting for service '{service}'")
                return StabilityOutcome.CANCELLED
