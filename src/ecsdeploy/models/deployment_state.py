"""Deployment state model for the cross-step handoff file."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeploymentState(BaseModel):
    """Handoff record passed between deployment steps.

    Written after each step that produces new information and consumed by the
    next one. Steps invoked as separate commands (``build`` then ``push`` then
    ``deploy --resume``) communicate only through this record.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version_identifier: str = Field(
        ..., description="Image tag derived from the git revision"
    )
    registry_uri: str = Field(..., description="Registry repository URI")
    task_spec_arn: str | None = Field(
        default=None, description="Registered task definition ARN"
    )

    @property
    def image_uri(self) -> str:
        """Full image reference (registry URI and version tag)."""
        return f"{self.registry_uri}:{self.version_identifier}"

    @property
    def registry_host(self) -> str:
        """Registry host part of the URI."""
        return self.registry_uri.split("/", 1)[0]

    @property
    def account_id(self) -> str:
        """Account id the registry URI was composed from."""
        return self.registry_host.split(".", 1)[0]

    def with_task_spec(self, task_spec_arn: str) -> DeploymentState:
        """Return a copy carrying a registered task definition ARN."""
        return self.model_copy(update={"task_spec_arn": task_spec_arn})
