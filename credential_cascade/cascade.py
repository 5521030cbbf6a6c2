"""Credential resolution across an ordered list of helper programs.

The cascade asks each configured helper in turn and merges their partial
answers into the action's context. Later helpers overwrite fields set by
earlier ones, and the cascade stops as soon as both a user name and a password
are known, or a helper answers ``quit``. When retrieving, fields no helper
could supply are then asked of the user.

Helpers are best-effort: a helper that is missing or exits unsuccessfully is
skipped. Other helper failures abort a retrieval but are ignored when storing
or erasing, so every configured store still gets the request.

Example:
    >>> cascade = Cascade().extend(
    ...     Program.from_custom_definition(d) for d in ["cache", "store"]
    ... )
    >>> action = Action.get(Context(url="https://example.com/owner/repo"))
    >>> outcome = cascade.invoke(action, PromptOptions())
    >>> outcome.username, outcome.is_complete
    ('alice', True)
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable

import structlog

from credential_cascade.enums import PromptMode
from credential_cascade.exceptions import (
    ContextFormatError,
    HelperCommunicationError,
    HelperUnusableError,
    PromptError,
)
from credential_cascade.helper.action import Action, Outcome
from credential_cascade.helper.invoke import invoke_helper
from credential_cascade.helper.program import Program
from credential_cascade.prompt import PromptOptions, ask
from credential_cascade.protocol.context import Context

log = structlog.get_logger(__name__)

HelperInvoker = Callable[[Program, Action], bytes | None]
Prompter = Callable[[str, PromptOptions], str]

# Fields a helper's reply overwrites when present, in application order.
# ``url`` is handled separately since it must be destructured after copying.
MERGED_FIELDS = ("path", "protocol", "host", "username", "password")

# (field, prompt label, mode) for each field the user may be asked for
PROMPTED_FIELDS = (
    ("username", "Username", PromptMode.VISIBLE),
    ("password", "Password", PromptMode.HIDDEN),
)

# Helper git installations typically configure per platform
PLATFORM_HELPERS = {
    "darwin": "osxkeychain",
    "linux": "libsecret",
    "win32": "manager-core",
    "cygwin": "manager-core",
}


class Cascade:
    """Resolve, store or erase credentials through an ordered list of helpers.

    Attributes:
        programs: Helpers to consult, highest precedence first
        stderr: Whether helpers may write to the user's stderr; applied to
            every program before it runs
    """

    def __init__(
        self,
        programs: Iterable[Program] | None = None,
        stderr: bool = True,
        invoker: HelperInvoker | None = None,
        prompter: Prompter | None = None,
    ) -> None:
        """Initialize the cascade.

        Args:
            programs: Initial helpers, in order
            stderr: Helper stderr visibility
            invoker: Runs one helper; defaults to ``invoke_helper``
            prompter: Asks the user for one field; defaults to ``ask``
        """
        self.programs: list[Program] = list(programs) if programs is not None else []
        self.stderr = stderr
        self._invoke_helper = invoker or invoke_helper
        self._ask = prompter or ask

    @staticmethod
    def platform_builtin(platform: str | None = None) -> list[Program]:
        """Return the helper a typical git installation uses on this platform.

        These usually go first, with configured helpers following. A guess is
        acceptable here since helpers that don't exist are skipped.

        Args:
            platform: A ``sys.platform`` value; defaults to the current one

        Returns:
            A list with zero or one program
        """
        platform = platform or sys.platform
        name = next(
            (helper for prefix, helper in PLATFORM_HELPERS.items() if platform.startswith(prefix)),
            None,
        )
        if name is None:
            return []
        return [Program.from_custom_definition(name)]

    def extend(self, programs: Iterable[Program]) -> Cascade:
        """Append ``programs`` to the helper list.

        Returns:
            self, for chaining
        """
        self.programs.extend(programs)
        return self

    def invoke(self, action: Action, prompt: PromptOptions) -> Outcome | None:
        """Run ``action`` through every helper, then prompt for anything missing.

        The action's context is updated in place and keeps whatever progress
        was made if an error is raised.

        A retrieval yields an ``Outcome`` even if the user name or password
        are still missing, e.g. with prompting disabled. Callers must check
        ``Outcome.is_complete`` (and ``Outcome.quit``) themselves.

        Args:
            action: What to do, and the context to do it for
            prompt: Prompt configuration; ``PromptMode.DISABLED`` skips prompting

        Returns:
            The outcome of a retrieval, or None when storing or erasing

        Raises:
            UrlParseError: If the context's or a helper's URL is malformed
            HelperCommunicationError: If a helper fails while retrieving
            PromptError: If asking the user fails
        """
        ctx = action.context
        if ctx.url:
            ctx.destructure_url()

        for program in self.programs:
            program.stderr = self.stderr
            try:
                reply = self._consult(program, action)
            except HelperUnusableError as e:
                log.info("helper_unusable_skipped", helper=program.definition, error=e.message)
                continue
            except HelperCommunicationError as e:
                if action.is_get:
                    raise
                log.warning(
                    "helper_failure_ignored",
                    helper=program.definition,
                    action=str(action.kind),
                    error=e.message,
                )
                continue

            if reply is None:
                log.debug("helper_no_output", helper=program.definition)
                continue

            # Only retrievals take answers; stores and erases go to every helper
            if not action.is_get:
                continue

            if self._merge(ctx, reply, program):
                break

        if action.is_get and prompt.mode != PromptMode.DISABLED:
            self._prompt_for_missing(ctx, prompt)

        if not action.is_get:
            return None

        return Outcome(
            username=ctx.username,
            password=ctx.password,
            quit=bool(ctx.quit),
            next=ctx.model_copy(),
        )

    def _consult(self, program: Program, action: Action) -> Context | None:
        """Run one helper and decode its reply.

        Raises:
            HelperUnusableError: Propagated from the invoker
            HelperCommunicationError: From the invoker, or if the reply can't
                be decoded
        """
        stdout = self._invoke_helper(program, action)
        if stdout is None:
            return None

        try:
            return Context.from_bytes(stdout)
        except ContextFormatError as e:
            raise HelperCommunicationError(
                f"Credential helper sent a malformed reply: {e.message}",
                program=program,
            ) from e

    @staticmethod
    def _merge(ctx: Context, reply: Context, program: Program) -> bool:
        """Overwrite fields of ``ctx`` with those present in ``reply``.

        Returns:
            True if the cascade should stop consulting helpers

        Raises:
            UrlParseError: If the reply carries a malformed URL
        """
        merged = []
        for name in MERGED_FIELDS:
            value = getattr(reply, name)
            if value is not None:
                setattr(ctx, name, value)
                merged.append(name)

        if reply.url is not None:
            ctx.url = reply.url
            merged.append("url")
            ctx.destructure_url()

        log.info("helper_output_merged", helper=program.definition, fields=merged)

        if ctx.has_credentials:
            log.info("cascade_complete", helper=program.definition)
            return True

        if reply.quit:
            ctx.quit = reply.quit
            log.info("cascade_quit", helper=program.definition)
            return True

        return False

    def _prompt_for_missing(self, ctx: Context, prompt: PromptOptions) -> None:
        """Ask the user for each credential field still missing from ``ctx``.

        Raises:
            PromptError: Carrying the prompt text, if asking fails
        """
        for name, label, mode in PROMPTED_FIELDS:
            if getattr(ctx, name) is not None:
                continue

            message = ctx.to_prompt(label)
            log.debug("prompting_for_field", field=name, mode=str(mode))
            try:
                value = self._ask(message, prompt.with_mode(mode))
            except PromptError as e:
                raise PromptError(e.message, prompt=message) from e
            except Exception as e:
                raise PromptError(f"Failed to ask for {name}: {e}", prompt=message) from e

            setattr(ctx, name, value)
