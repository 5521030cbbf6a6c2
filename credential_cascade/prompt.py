"""Interactive fallback for credential fields no helper could supply.

Input is read from the controlling terminal with ``click.prompt``, echoing
for user names and masking for passwords. Stdin usually carries the credential
request, so it is only read from when there is no terminal. When an askpass
program is configured (``GIT_ASKPASS``/``SSH_ASKPASS`` or settings) it is
asked instead, with the prompt text as its only argument and the answer read
from the first line of its stdout.

Example:
    >>> options = PromptOptions(mode=PromptMode.HIDDEN)
    >>> password = ask("Password for https://example.com: ", options)
"""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

import click
import structlog
from pydantic import BaseModel

from credential_cascade.enums import PromptMode
from credential_cascade.exceptions import PromptError
from credential_cascade.protocol.context import parse_bool

log = structlog.get_logger(__name__)

ASKPASS_ENV_VARS = ("GIT_ASKPASS", "SSH_ASKPASS")
TERMINAL = "/dev/tty"


class PromptOptions(BaseModel):
    """How to ask the user for a missing field.

    Attributes:
        mode: Whether to prompt at all and whether to echo input
        askpass: Program to ask instead of the terminal
    """

    mode: PromptMode = PromptMode.HIDDEN
    askpass: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PromptOptions:
        """Build options from git's prompt environment variables.

        ``GIT_TERMINAL_PROMPT`` set to a false boolean disables prompting;
        ``GIT_ASKPASS`` and then ``SSH_ASKPASS`` name an askpass program.

        Args:
            environ: Environment to read; defaults to ``os.environ``
        """
        env = os.environ if environ is None else environ

        mode = PromptMode.HIDDEN
        terminal_prompt = env.get("GIT_TERMINAL_PROMPT")
        if terminal_prompt is not None and parse_bool(terminal_prompt) is False:
            mode = PromptMode.DISABLED

        askpass = next((env[var] for var in ASKPASS_ENV_VARS if env.get(var)), None)
        return cls(mode=mode, askpass=askpass)

    def with_mode(self, mode: PromptMode) -> PromptOptions:
        """Return a copy using ``mode``, leaving this instance untouched."""
        return self.model_copy(update={"mode": mode})


def ask(message: str, options: PromptOptions) -> str:
    """Ask the user for a value.

    Args:
        message: The prompt text, shown verbatim
        options: Prompt configuration

    Returns:
        The user's answer (possibly empty)

    Raises:
        PromptError: If prompting is disabled, the askpass program fails or
            input is aborted
    """
    if options.mode == PromptMode.DISABLED:
        raise PromptError("Prompting is disabled", prompt=message)

    if options.askpass:
        return _ask_with_program(options.askpass, message)

    try:
        with _terminal_input():
            value: str = click.prompt(
                message,
                default="",
                show_default=False,
                prompt_suffix="",
                hide_input=options.mode == PromptMode.HIDDEN,
                err=True,
            )
    except click.Abort as e:
        raise PromptError("Prompt was aborted", prompt=message) from e
    return value


@contextmanager
def _terminal_input() -> Iterator[None]:
    """Read visible answers from the controlling terminal inside the block.

    Hidden input already goes through ``getpass``, which opens the terminal
    itself. Stdin is left in place when there is no terminal.
    """
    try:
        tty = click.open_file(TERMINAL, "r")
    except OSError as e:
        log.debug("terminal_unavailable", terminal=TERMINAL, error=str(e))
        tty = None

    if tty is None:
        yield
        return

    saved_stdin = sys.stdin
    sys.stdin = tty
    try:
        yield
    finally:
        sys.stdin = saved_stdin
        tty.close()


def _ask_with_program(program: str, message: str) -> str:
    """Run an askpass program and return its first line of output."""
    log.debug("askpass_starting", program=program)
    try:
        result = subprocess.run(  # nosec B603 # askpass program chosen by the user
            [program, message],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise PromptError(f"Askpass program {program!r} could not be run: {e}", prompt=message) from e

    if result.returncode != 0:
        raise PromptError(
            f"Askpass program {program!r} exited with status {result.returncode}",
            prompt=message,
        )
    lines = result.stdout.splitlines()
    return lines[0] if lines else ""
