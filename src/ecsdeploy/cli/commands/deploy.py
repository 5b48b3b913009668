"""CLI commands for building, publishing and deploying to ECS.

Implements the 'ecsdeploy build|push|deploy|rollback|list' commands. Each
command resolves its configuration, runs one orchestrator workflow, and
translates failures into a leveled message and an exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any, TypeVar

import click

from ecsdeploy.config.defaults import DEFAULT_DEPLOY_CONFIG, DEFAULT_LIST_LIMIT
from ecsdeploy.config.loader import resolve_deploy_config
from ecsdeploy.deploy.orchestrator import DeploymentOrchestrator
from ecsdeploy.lib.errors import (
    ConfigError,
    DeploymentError,
    DeploymentUnconfirmedError,
)
from ecsdeploy.lib.logging_config import get_logger, setup_logging
from ecsdeploy.models.deployment import DeployConfig
from ecsdeploy.models.deployment_state import DeploymentState

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Exit codes
EXIT_FAILURE = 1
EXIT_UNCONFIRMED = 2

# CLI option name -> DeployConfig field
_OPTION_FIELDS = {
    "region": "region",
    "cluster": "cluster",
    "service": "service",
    "family": "family",
    "ecr_repo": "repository",
    "timeout": "timeout",
    "poll_interval": "poll_interval",
    "state_file": "state_file",
}


@contextmanager
def handle_deployment_errors() -> Generator[None, None, None]:
    """Context manager for consistent error handling in deployment commands.

    Exit codes:
        1: Configuration error, failed step, or unexpected error
        2: Service update submitted but stability not confirmed
    """
    try:
        yield
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        click.secho("Error: Configuration error", fg="red", err=True)
        click.echo(f"  {e.message}", err=True)
        sys.exit(EXIT_FAILURE)
    except DeploymentUnconfirmedError as e:
        logger.warning(f"Deployment unconfirmed: {e}")
        click.secho("Warning: deployment unconfirmed", fg="yellow", err=True)
        click.echo(f"  {e.message}", err=True)
        sys.exit(EXIT_UNCONFIRMED)
    except DeploymentError as e:
        logger.error(f"Deployment error: {e}")
        click.secho(f"Error: {e.operation} failed", fg="red", err=True)
        click.echo(f"  {e.message}", err=True)
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(EXIT_FAILURE)


def common_options(func: F) -> F:
    """Attach the target and output options shared by every command."""
    options = [
        click.option(
            "--region",
            "-r",
            type=str,
            default=None,
            help=f"AWS region (default: {DEFAULT_DEPLOY_CONFIG['region']})",
        ),
        click.option(
            "--cluster",
            "-c",
            type=str,
            default=None,
            help=f"ECS cluster name (default: {DEFAULT_DEPLOY_CONFIG['cluster']})",
        ),
        click.option(
            "--service",
            "-s",
            type=str,
            default=None,
            help=f"ECS service name (default: {DEFAULT_DEPLOY_CONFIG['service']})",
        ),
        click.option(
            "--family",
            "-f",
            type=str,
            default=None,
            help=f"Task definition family (default: {DEFAULT_DEPLOY_CONFIG['family']})",
        ),
        click.option(
            "--ecr-repo",
            "-e",
            type=str,
            default=None,
            help=f"ECR repository name (default: {DEFAULT_DEPLOY_CONFIG['repository']})",
        ),
        click.option(
            "--timeout",
            type=float,
            default=None,
            help="Seconds to wait for the service to become stable "
            f"(default: {DEFAULT_DEPLOY_CONFIG['timeout']})",
        ),
        click.option(
            "--poll-interval",
            type=float,
            default=None,
            help="Seconds between stability checks "
            f"(default: {DEFAULT_DEPLOY_CONFIG['poll_interval']})",
        ),
        click.option(
            "--state-file",
            type=click.Path(dir_okay=False),
            default=None,
            help=f"Deployment state file (default: {DEFAULT_DEPLOY_CONFIG['state_file']})",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable verbose debug logging",
        ),
        click.option(
            "--quiet",
            "-q",
            is_flag=True,
            help="Suppress progress output",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _prepare(options: dict[str, Any]) -> tuple[DeployConfig, bool]:
    """Set up logging and resolve configuration from command options.

    Returns:
        Tuple of (resolved DeployConfig, quiet flag)
    """
    verbose = bool(options.pop("verbose", False))
    quiet = bool(options.pop("quiet", False))
    setup_logging(verbose=verbose, quiet=quiet)

    cli_options = {
        field: options.get(name)
        for name, field in _OPTION_FIELDS.items()
        if options.get(name) is not None
    }
    return resolve_deploy_config(cli_options), quiet


def _create_orchestrator(config: DeployConfig) -> DeploymentOrchestrator:
    return DeploymentOrchestrator.from_config(config)


def _display_target(config: DeployConfig) -> None:
    click.echo()
    click.secho("Deploy Configuration:", bold=True)
    click.echo(f"  Region:    {config.region}")
    click.echo(f"  Cluster:   {config.cluster}")
    click.echo(f"  Service:   {config.service}")
    click.echo(f"  Family:    {config.family}")
    click.echo(f"  ECR repo:  {config.repository}")
    click.echo()


def _display_success(title: str, state: DeploymentState, quiet: bool) -> None:
    if quiet:
        click.echo(state.task_spec_arn or state.image_uri)
        return

    click.echo()
    click.secho("=" * 60, fg="green")
    click.secho(f"  {title}", fg="green", bold=True)
    click.secho("=" * 60, fg="green")
    click.echo()
    click.echo(f"  Version:          {state.version_identifier}")
    click.echo(f"  Image:            {state.image_uri}")
    if state.task_spec_arn:
        click.echo(f"  Task definition:  {state.task_spec_arn}")
    click.echo()


@click.command()
@common_options
def build(**options: Any) -> None:
    """Build the image tagged with the current commit hash.

    Saves the version and registry URI to the state file for 'push'.

    Example:

        ecsdeploy build

        ecsdeploy build --ecr-repo my-app
    """
    with handle_deployment_errors():
        config, quiet = _prepare(options)
        state = _create_orchestrator(config).build()

        if quiet:
            click.echo(state.image_uri)
            return
        _display_success("Build Successful!", state, quiet)
        click.secho("  Next steps:", bold=True)
        click.echo("    Push to registry:  ecsdeploy push")
        click.echo()


@click.command()
@common_options
def push(**options: Any) -> None:
    """Push the built image (version tag and latest) to ECR.

    Requires the state file written by 'build'.
    """
    with handle_deployment_errors():
        config, quiet = _prepare(options)
        state = _create_orchestrator(config).push()

        if quiet:
            click.echo(state.image_uri)
            return
        _display_success("Push Successful!", state, quiet)
        click.secho("  Next steps:", bold=True)
        click.echo("    Deploy:  ecsdeploy deploy --resume")
        click.echo()


@click.command()
@common_options
@click.option(
    "--resume",
    is_flag=True,
    help="Continue from the saved state instead of building again",
)
def deploy(resume: bool, **options: Any) -> None:
    """Build, push and deploy a new task definition, then wait for stability.

    With --resume, skip build and push and continue the deploy recorded in
    the state file (for example after a failed service update).

    Example:

        ecsdeploy deploy

        ecsdeploy deploy --region us-west-2

        ecsdeploy deploy --resume
    """
    with handle_deployment_errors():
        config, quiet = _prepare(options)
        if not quiet:
            _display_target(config)

        orchestrator = _create_orchestrator(config)
        state = orchestrator.resume() if resume else orchestrator.full_deploy()
        _display_success("Deploy Successful!", state, quiet)


@click.command()
@common_options
@click.option(
    "--tag",
    "-t",
    type=str,
    default=None,
    help="Version (image tag) to roll back to",
)
def rollback(tag: str | None, **options: Any) -> None:
    """Roll back the service to a previously published version.

    Registers a new task definition revision pointing at the existing image
    and waits for the service to become stable.

    Example:

        ecsdeploy rollback --tag abc1234
    """
    with handle_deployment_errors():
        config, quiet = _prepare(options)
        if not tag:
            raise ConfigError(
                field="tag",
                message="Rollback tag not specified. Use --tag or -t",
            )
        if not quiet:
            _display_target(config)

        state = _create_orchestrator(config).rollback(tag)
        _display_success(f"Rollback complete: {tag}", state, quiet)


@click.command(name="list")
@common_options
@click.option(
    "--limit",
    type=click.IntRange(min=1, max=100),
    default=DEFAULT_LIST_LIMIT,
    show_default=True,
    help="Number of task definitions to show",
)
def list_versions(limit: int, **options: Any) -> None:
    """List the most recent task definition revisions, newest first."""
    with handle_deployment_errors():
        config, quiet = _prepare(options)
        arns = _create_orchestrator(config).list_versions(limit=limit)

        if quiet:
            for arn in arns:
                click.echo(arn)
            return

        click.echo()
        click.secho(f"Task definitions for '{config.family}':", bold=True)
        if not arns:
            click.echo("  (none registered)")
        for arn in arns:
            click.echo(f"  {arn}")
        click.echo()
