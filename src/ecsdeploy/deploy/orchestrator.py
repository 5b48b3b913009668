"""Deployment orchestration.

Composes version resolution, image publishing, task definition registration
and the service update into the forward deploy and rollback workflows.

Every step that produces new information saves the DeploymentState, so a
failed run can be resumed from its last checkpoint without repeating the
earlier steps. The state file is removed only after a workflow completes.
"""

from __future__ import annotations

import threading
from pathlib import Path

from ecsdeploy.config.defaults import DEFAULT_LIST_LIMIT
from ecsdeploy.deploy.aws import AwsClients
from ecsdeploy.deploy.publisher import ArtifactPublisher
from ecsdeploy.deploy.service import ServiceUpdater
from ecsdeploy.deploy.state import clear_state, load_state, save_state
from ecsdeploy.deploy.task_spec import TaskSpecManager, bootstrap_settings
from ecsdeploy.deploy.version import VersionResolver
from ecsdeploy.lib.errors import (
    ArtifactNotFoundError,
    DeploymentUnconfirmedError,
    MissingStateError,
)
from ecsdeploy.lib.logging_config import get_logger
from ecsdeploy.models.deployment import DeployConfig, StabilityOutcome
from ecsdeploy.models.deployment_state import DeploymentState

logger = get_logger(__name__)


class DeploymentOrchestrator:
    """Run deployment workflows against one cluster/service/family.

    Example:
        >>> orchestrator = DeploymentOrchestrator.from_config(DeployConfig())
        >>> orchestrator.full_deploy()  # doctest: +SKIP
    """

    def __init__(
        self,
        config: DeployConfig,
        *,
        resolver: VersionResolver,
        publisher: ArtifactPublisher,
        task_specs: TaskSpecManager,
        services: ServiceUpdater,
        cancel: threading.Event | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self.publisher = publisher
        self.task_specs = task_specs
        self.services = services
        self.cancel = cancel
        self.state_path = Path(config.state_file)

    @classmethod
    def from_config(
        cls, config: DeployConfig, cancel: threading.Event | None = None
    ) -> DeploymentOrchestrator:
        """Wire the default collaborators for a configuration."""
        clients = AwsClients(config.region)
        return cls(
            config,
            resolver=VersionResolver(config.build_context),
            publisher=ArtifactPublisher(config, clients),
            task_specs=TaskSpecManager(clients),
            services=ServiceUpdater(clients, poll_interval=config.poll_interval),
            cancel=cancel,
        )

    # State boundary

    def load(self, operation: str, hint: str) -> DeploymentState:
        """Load the saved state or fail with an actionable precondition."""
        state = load_state(self.state_path)
        if state is None:
            raise MissingStateError(operation, str(self.state_path), hint)
        return state

    def _checkpoint(self, state: DeploymentState) -> DeploymentState:
        save_state(self.state_path, state)
        return state

    # Individual steps

    def build(self) -> DeploymentState:
        """Resolve the version, build and tag the image, and save the state."""
        version = self.resolver.resolve()
        registry_uri = self.publisher.registry_uri()

        logger.info("Starting image build...")
        logger.info(f"Commit hash: {version}")
        logger.info(f"ECR URI: {registry_uri}")

        result = self.publisher.build(version, registry_uri)
        for line in result.log_lines:
            logger.debug(line)
        logger.info(f"Build complete: {', '.join(result.extra_tags)}")

        return self._checkpoint(
            DeploymentState(version_identifier=version, registry_uri=registry_uri)
        )

    def push(self, state: DeploymentState | None = None) -> DeploymentState:
        """Push the built image; loads the saved state when none is given."""
        state = state or self.load("push", "Run 'build' first.")
        logger.info(f"Logging in to {state.registry_host}...")
        self.publisher.push(state)
        logger.info("Push complete")
        return state

    def register_task_spec(self, state: DeploymentState) -> DeploymentState:
        """Register the next task definition for the state's image."""
        logger.info(f"Creating new task definition for {state.image_uri}...")
        arn = self.task_specs.create_or_update(
            self.config.family,
            state.image_uri,
            bootstrap_settings(self.config, state.account_id),
        )
        return self._checkpoint(state.with_task_spec(arn))

    def update_service(self, state: DeploymentState) -> StabilityOutcome:
        """Point the service at the state's task definition and wait.

        Raises:
            MissingStateError: If no task definition has been registered
            DeploymentUnconfirmedError: If the service did not report stable
        """
        if not state.task_spec_arn:
            raise MissingStateError(
                "update-service",
                str(self.state_path),
                "No task definition recorded; run 'deploy' first.",
            )

        logger.info(f"Updating service '{self.config.service}'...")
        self.services.update_service_task_spec(
            self.config.cluster, self.config.service, state.task_spec_arn
        )
        logger.info("Waiting for deployment to complete...")
        try:
            outcome = self.services.await_stable(
                self.config.cluster,
                self.config.service,
                timeout=self.config.timeout,
                task_spec_arn=state.task_spec_arn,
                cancel=self.cancel,
            )
        except KeyboardInterrupt as exc:
            raise DeploymentUnconfirmedError(
                self.config.service, state.task_spec_arn, "interrupted"
            ) from exc
        if outcome is not StabilityOutcome.STABLE:
            raise DeploymentUnconfirmedError(
                self.config.service, state.task_spec_arn, outcome.value
            )

        logger.info(f"Deployed version: {state.version_identifier}")
        return outcome

    # Workflows

    def full_deploy(self) -> DeploymentState:
        """Build, push, register, update and wait; then clear the state."""
        logger.info("Starting full deploy...")
        state = self.build()
        self.push(state)
        return self._release(state)

    def resume(self) -> DeploymentState:
        """Continue a deploy from the saved state.

        Registers a task definition only if none was recorded, then updates
        the service and waits. Build and push are never repeated.

        Raises:
            MissingStateError: If no state was saved, or the built image was
                never pushed to the registry
        """
        state = self.load("deploy", "Run 'build' and 'push' first.")
        if not state.task_spec_arn and not self.publisher.image_exists(
            state.version_identifier
        ):
            raise MissingStateError(
                "deploy",
                str(self.state_path),
                f"Image {state.image_uri} is not in the registry. Run 'push' first.",
            )
        logger.info(f"Resuming deploy of {state.image_uri}")
        return self._release(state)

    def rollback(self, target_version: str) -> DeploymentState:
        """Redeploy a previously published version.

        Verifies the image exists before anything is registered, then runs the
        same register/update/wait path as a forward deploy. A new task
        definition revision is always registered.

        Raises:
            ArtifactNotFoundError: If no image has the requested tag
        """
        logger.info(f"Starting rollback to version: {target_version}")
        if not self.publisher.image_exists(target_version):
            raise ArtifactNotFoundError(self.config.repository, target_version)

        state = self._checkpoint(
            DeploymentState(
                version_identifier=target_version,
                registry_uri=self.publisher.registry_uri(),
            )
        )
        state = self._release(state)
        logger.info(f"Rollback complete for version: {target_version}")
        return state

    def list_versions(self, limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        """Return the most recent task definition ARNs, newest first."""
        logger.info(f"Listing the last {limit} task definitions...")
        return self.task_specs.list_recent(self.config.family, limit=limit)

    def _release(self, state: DeploymentState) -> DeploymentState:
        if not state.task_spec_arn:
            state = self.register_task_spec(state)
        self.update_service(state)
        clear_state(self.state_path)
        return state
