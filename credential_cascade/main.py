"""CLI entry point for the credential cascade.

The commands mirror ``git credential``: each reads a credential context in
``key=value`` form from stdin.

    $ printf 'url=https://example.com/owner/repo\\n\\n' | credential-cascade fill
    protocol=https
    host=example.com
    path=owner/repo
    username=alice
    password=s3cret
    url=https://example.com/owner/repo
"""

import sys

import click
import structlog

from credential_cascade.config.settings import CascadeSettings
from credential_cascade.enums import PromptMode
from credential_cascade.exceptions import ConfigurationError, CredentialError
from credential_cascade.helper.action import Action, Outcome
from credential_cascade.prompt import PromptOptions
from credential_cascade.protocol.context import Context
from credential_cascade.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option("--config", default=None, help="Path to YAML configuration file")
@click.option("--log-level", default=None, help="Logging level (overrides configuration)")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """credential-cascade: resolve credentials through a chain of git credential helpers."""
    try:
        if config:
            settings = CascadeSettings.from_yaml(config)
        else:
            settings = CascadeSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)

    configure_logging(log_level or settings.log_level)
    ctx.obj = {"settings": settings}


@cli.command()
@click.option("--no-prompt", is_flag=True, help="Never ask for missing fields interactively")
@click.pass_context
def fill(ctx: click.Context, no_prompt: bool) -> None:
    """Retrieve credentials for the context read from stdin."""
    settings: CascadeSettings = ctx.obj["settings"]
    prompt = settings.prompt_options()
    if no_prompt:
        prompt = prompt.with_mode(PromptMode.DISABLED)

    action = Action.get(_read_context())
    outcome = _run(settings, action, prompt)
    if outcome is None:
        click.echo("Error: No credentials were produced", err=True)
        sys.exit(1)

    if not outcome.is_complete:
        if outcome.quit:
            click.echo("Error: Credential lookup stopped by a helper", err=True)
        else:
            target = outcome.next.to_url() or "the requested resource"
            click.echo(f"Error: Could not resolve credentials for {target}", err=True)
        sys.exit(1)

    try:
        output = outcome.next.to_bytes()
    except CredentialError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    click.echo(output.decode("utf-8"), nl=False)


@cli.command()
@click.pass_context
def approve(ctx: click.Context) -> None:
    """Store the credentials read from stdin in every helper."""
    settings: CascadeSettings = ctx.obj["settings"]
    _run(settings, Action.store(_read_context()), settings.prompt_options())


@cli.command()
@click.pass_context
def reject(ctx: click.Context) -> None:
    """Erase the credentials read from stdin from every helper."""
    settings: CascadeSettings = ctx.obj["settings"]
    _run(settings, Action.erase(_read_context()), settings.prompt_options())


def _read_context() -> Context:
    """Read a credential context from stdin, exiting on malformed input.

    Reading stops at the blank line ending the request, so anything after it
    stays available to the prompt when there is no terminal.
    """
    lines = []
    for line in iter(sys.stdin.readline, ""):
        lines.append(line)
        if not line.rstrip("\r\n"):
            break

    try:
        return Context.from_bytes("".join(lines).encode("utf-8"))
    except CredentialError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)


def _run(settings: CascadeSettings, action: Action, prompt: PromptOptions) -> Outcome | None:
    """Invoke the cascade, turning failures into an exit status."""
    try:
        cascade = settings.build_cascade()
        return cascade.invoke(action, prompt)
    except CredentialError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("cascade_failed", action=str(action.kind), context=action.context, exc_info=True)
        sys.exit(1)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)


if __name__ == "__main__":
    cli()
