"""Command-line interface for the Jenkins DinD setup."""

import logging
import sys

import click

from . import config, env
from .utils import SetupError


class AliasedGroup(click.Group):
    """A Click Group that supports command aliases."""

    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        # Check if cmd_name is an alias for any command
        for cmd in self.commands.values():
            if cmd_name in getattr(cmd, "aliases", ()):
                return cmd
        return None

    def format_commands(self, ctx, formatter):
        """List commands with their aliases."""
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue

            cmd_name = subcommand
            if getattr(cmd, "aliases", None):
                cmd_name = f"{subcommand} ({', '.join(cmd.aliases)})"

            commands.append((cmd_name, cmd))

        if commands:
            limit = formatter.width - 6 - max(len(cmd[0]) for cmd in commands)
            rows = [(name, cmd.get_short_help_str(limit)) for name, cmd in commands]
            with formatter.section("Commands"):
                formatter.write_dl(rows)


def _confirm_callback(assume_yes: bool) -> env.Confirm:
    if assume_yes:
        return lambda prompt: True
    return lambda prompt: click.confirm(prompt, default=False)


def _fail(e: SetupError) -> None:
    click.echo(f"❌ Error: {e}", err=True)
    sys.exit(1)


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file")
@click.option("--verbose", "-v", is_flag=True, help="Log every docker command")
@click.pass_context
def cli(ctx, env_file, verbose):
    """Jenkins DinD - Provision a local Jenkins that can run Docker builds.

    Without a command, runs `up`.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config.get_config(env_file)
    if ctx.invoked_subcommand is None:
        ctx.invoke(env_up)


@cli.command("up")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every prompt")
@click.option("--wait", is_flag=True, help="Wait until the Jenkins UI answers")
def env_up(assume_yes=False, wait=False):
    """Build the Jenkins image and start the DinD and Jenkins containers."""
    try:
        env.setup(confirm=_confirm_callback(assume_yes), wait=wait)
    except SetupError as e:
        _fail(e)


env_up.aliases = ["setup"]


@cli.command("down")
@click.option("--volumes", is_flag=True, help="Also remove the certificate and Jenkins home volumes")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation")
def env_down(volumes, assume_yes):
    """Remove the containers and the network."""
    what = "containers, network and volumes" if volumes else "containers and network"
    if not assume_yes and not click.confirm(f"Remove the Jenkins DinD {what}?", default=False):
        click.echo("Teardown cancelled.")
        return
    try:
        env.teardown(volumes=volumes)
    except SetupError as e:
        _fail(e)


env_down.aliases = ["teardown"]


@cli.command("status")
def env_status():
    """Show the state of the network, containers and volumes."""
    try:
        report = env.status()
    except SetupError as e:
        _fail(e)
    for resource, state in report.items():
        click.echo(f"{resource:<40} {state}")


@cli.command("password")
def env_password():
    """Print the initial Jenkins admin password."""
    try:
        click.echo(env.initial_admin_password())
    except SetupError as e:
        _fail(e)


@cli.command("dockerfile")
@click.argument("target_dir", default=".", type=click.Path(file_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing Dockerfile")
def env_dockerfile(target_dir, force):
    """Write the Jenkins Blue Ocean Dockerfile into a build context."""
    try:
        env.write_dockerfile(target_dir, force=force)
    except SetupError as e:
        _fail(e)


if __name__ == "__main__":
    cli()
