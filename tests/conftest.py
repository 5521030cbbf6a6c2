"""Pytest configuration and shared fixtures."""

import pytest

from credential_cascade.cascade import Cascade
from credential_cascade.enums import PromptMode
from credential_cascade.helper.action import Action
from credential_cascade.helper.program import Program
from credential_cascade.prompt import PromptOptions
from credential_cascade.protocol.context import Context


class ScriptedInvoker:
    """Stand-in for ``invoke_helper`` answering from a table keyed by helper definition.

    A value may be raw bytes, None (no output) or an exception to raise.
    """

    def __init__(self, replies: dict[str, bytes | Exception | None]) -> None:
        self.replies = replies
        self.calls: list[str] = []
        self.stderr_flags: list[bool] = []

    def __call__(self, program: Program, action: Action) -> bytes | None:
        self.calls.append(program.definition)
        self.stderr_flags.append(program.stderr)
        reply = self.replies.get(program.definition)
        if isinstance(reply, Exception):
            raise reply
        return reply


class RecordingPrompter:
    """Stand-in for ``ask`` returning canned answers and recording each prompt."""

    def __init__(self, username: str = "prompted-user", password: str = "prompted-pass") -> None:
        self.answers = {PromptMode.VISIBLE: username, PromptMode.HIDDEN: password}
        self.prompts: list[tuple[str, PromptMode]] = []

    def __call__(self, message: str, options: PromptOptions) -> str:
        self.prompts.append((message, options.mode))
        return self.answers[options.mode]


@pytest.fixture
def context() -> Context:
    """Context for a typical HTTPS remote."""
    return Context(protocol="https", host="example.com", path="owner/repo")


@pytest.fixture
def prompter() -> RecordingPrompter:
    """Prompter answering with fixed credentials."""
    return RecordingPrompter()


@pytest.fixture
def no_prompt() -> PromptOptions:
    """Prompt options with prompting disabled."""
    return PromptOptions(mode=PromptMode.DISABLED)


@pytest.fixture
def make_cascade(prompter):
    """Factory building a cascade over scripted helpers.

    Helpers are created from the keys of ``replies``, in order.
    """

    def _make(replies: dict[str, bytes | Exception | None], stderr: bool = True):
        invoker = ScriptedInvoker(replies)
        programs = [Program.from_custom_definition(name) for name in replies]
        cascade = Cascade(programs, stderr=stderr, invoker=invoker, prompter=prompter)
        return cascade, invoker

    return _make
