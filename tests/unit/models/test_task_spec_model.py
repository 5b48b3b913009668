"""Tests for task definition value types."""

import dataclasses

import pytest

from ecsdeploy.models.task_spec import (
    CONTROL_PLANE_FIELDS,
    BootstrapSettings,
    TaskSpecification,
)


def _document() -> dict:
    return {
        "taskDefinitionArn": "arn:aws:ecs:us-east-1:1:task-definition/bia-tf:2",
        "family": "bia-tf",
        "revision": 2,
        "status": "ACTIVE",
        "registeredAt": "2026-01-01T00:00:00Z",
        "cpu": "256",
        "containerDefinitions": [{"name": "bia-container", "image": "repo:one"}],
    }


class TestTaskSpecification:
    """Tests for TaskSpecification."""

    def test_properties(self) -> None:
        spec = TaskSpecification(_document())

        assert spec.family == "bia-tf"
        assert spec.revision == 2
        assert spec.image == "repo:one"
        assert spec.is_registered

    def test_input_is_copied(self) -> None:
        document = _document()
        spec = TaskSpecification(document)

        document["containerDefinitions"][0]["image"] = "repo:changed"

        assert spec.image == "repo:one"

    def test_register_kwargs_is_copy(self) -> None:
        spec = TaskSpecification(_document())

        kwargs = spec.to_register_kwargs()
        kwargs["cpu"] = "4096"

        assert spec.document["cpu"] == "256"

    def test_without_control_plane_fields(self) -> None:
        stripped = TaskSpecification(_document()).without_control_plane_fields()

        assert not any(field in stripped.document for field in CONTROL_PLANE_FIELDS)
        assert stripped.document["cpu"] == "256"
        assert not stripped.is_registered
        assert stripped.revision is None

    def test_empty_containers(self) -> None:
        spec = TaskSpecification({"family": "bia-tf"})

        assert spec.containers == []
        assert spec.image is None

    def test_frozen(self) -> None:
        spec = TaskSpecification(_document())

        with pytest.raises(dataclasses.FrozenInstanceError):
            spec.document = {}  # type: ignore[misc]


class TestBootstrapSettings:
    """Tests for BootstrapSettings."""

    def test_log_group(self) -> None:
        settings = BootstrapSettings(region="us-east-1", execution_role_arn="arn:role")

        assert settings.log_group("bia-tf") == "/ecs/bia-tf"
        assert settings.network_mode == "awsvpc"
        assert settings.launch_type == "EC2"
