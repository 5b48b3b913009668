"""Entry point for the ecsdeploy command-line interface.

Usage errors (unknown command, unknown option) exit with status 1 like every
other fatal error.
"""

from __future__ import annotations

from typing import Any

import click

from ecsdeploy import __version__
from ecsdeploy.cli.commands.deploy import (
    EXIT_FAILURE,
    build,
    deploy,
    list_versions,
    push,
    rollback,
)


class DeployGroup(click.Group):
    """Command group that reports usage errors with exit status 1."""

    def make_context(
        self,
        info_name: str | None,
        args: list[str],
        parent: click.Context | None = None,
        **extra: Any,
    ) -> click.Context:
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = EXIT_FAILURE
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = EXIT_FAILURE
            raise


@click.group(
    cls=DeployGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(__version__, prog_name="ecsdeploy")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Build, publish and deploy container images to Amazon ECS.

    Commands:

        build     Build the image tagged with the commit hash

        push      Push the image to ECR

        deploy    Full deploy (build + push + new task definition + update)

        rollback  Roll back to a previous version (--tag)

        list      List the last 10 task definitions

    Deploy flow:

        1. Build the image tagged with the commit hash
        2. Push the image to ECR
        3. Register a new task definition
        4. Update the ECS service
        5. Wait for the deploy to complete

    Every deploy registers a new task definition revision, so history is kept
    and any published version can be rolled back to.
    """
    ctx.ensure_object(dict)

    if ctx.invoked_subcommand is None:
        click.secho("Error: no command specified", fg="red", err=True)
        click.echo(ctx.get_help())
        ctx.exit(EXIT_FAILURE)


@cli.command(name="help")
@click.pass_context
def help_command(ctx: click.Context) -> None:
    """Show this help message."""
    parent = ctx.parent or ctx
    click.echo(parent.get_help())


cli.add_command(build)
cli.add_command(push)
cli.add_command(deploy)
cli.add_command(rollback)
cli.add_command(list_versions)


def main() -> None:
    """Run the ecsdeploy CLI."""
    cli()


if __name__ == "__main__":
    main()
