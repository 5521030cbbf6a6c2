"""Credential resolution through an ordered cascade of git credential helpers.

This package provides:
- A cascade that merges partial answers from several helper programs
- The ``key=value`` credential context wire format and URL destructuring
- An interactive fallback for fields no helper could supply
- Type-safe settings with YAML loading

Example usage:

    from credential_cascade import Action, Cascade, Context, Program, PromptOptions

    cascade = Cascade().extend([Program.from_custom_definition("cache")])
    outcome = cascade.invoke(
        Action.get(Context(url="https://example.com/owner/repo")),
        PromptOptions(),
    )
    if outcome is not None and outcome.is_complete:
        print(outcome.username)
"""

from credential_cascade.cascade import Cascade
from credential_cascade.enums import ActionKind, ProgramKind, PromptMode
from credential_cascade.exceptions import (
    ConfigurationError,
    ContextFormatError,
    CredentialCascadeError,
    CredentialError,
    HelperCommunicationError,
    HelperError,
    HelperUnusableError,
    PromptError,
    UrlParseError,
)
from credential_cascade.helper import Action, Outcome, Program, invoke_helper
from credential_cascade.prompt import PromptOptions, ask
from credential_cascade.protocol import Context

__all__ = [
    # Cascade
    "Cascade",
    # Protocol
    "Action",
    "ActionKind",
    "Context",
    "Outcome",
    # Helpers
    "Program",
    "ProgramKind",
    "invoke_helper",
    # Prompt
    "PromptMode",
    "PromptOptions",
    "ask",
    # Exceptions
    "CredentialCascadeError",
    "ConfigurationError",
    "CredentialError",
    "UrlParseError",
    "ContextFormatError",
    "HelperError",
    "HelperUnusableError",
    "HelperCommunicationError",
    "PromptError",
]
