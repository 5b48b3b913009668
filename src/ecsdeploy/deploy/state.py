"""Deployment state file helpers."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from ecsdeploy.lib.errors import DeploymentError
from ecsdeploy.models.deployment_state import DeploymentState


def load_state(state_path: Path) -> DeploymentState | None:
    """Load deployment state from disk.

    Returns:
        The saved state, or None if the file is missing or empty

    Raises:
        DeploymentError: If the file cannot be read or is malformed
    """
    if not state_path.exists():
        return None

    try:
        content = state_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DeploymentError(
            operation="state",
            message=f"Failed to read deployment state at {state_path}: {exc}",
        ) from exc

    if not content.strip():
        return None

    try:
        return DeploymentState.model_validate_json(content)
    except ValidationError as exc:
        raise DeploymentError(
            operation="state",
            message=f"Invalid deployment state format in {state_path}: {exc}",
        ) from exc


def save_state(state_path: Path, state: DeploymentState) -> None:
    """Persist deployment state to disk, replacing any previous content."""
    try:
        state_path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(state.model_dump(mode="json"), indent=2, sort_keys=True)
        state_path.write_text(payload + "\n", encoding="utf-8")
    except OSError as exc:
        raise DeploymentError(
            operation="state",
            message=f"Failed to write deployment state to {state_path}: {exc}",
        ) from exc


def clear_state(state_path: Path) -> None:
    """Remove the deployment state file if present."""
    try:
        state_path.unlink(missing_ok=True)
    except OSError as exc:
        raise DeploymentError(
            operation="state",
            message=f"Failed to remove deployment state {state_path}: {exc}",
        ) from exc
