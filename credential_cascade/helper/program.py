"""Credential helper program descriptors.

A program is parsed from a helper definition using git's ``credential.helper``
rules:

- ``!some shell snippet``: run through the shell, the action appended as ``$1``
- ``/absolute/path/to/helper --flag``: run directly with its arguments
- ``name --flag``: expanded to ``git credential-name --flag``

Example:
    >>> program = Program.from_custom_definition("store --file ~/.creds")
    >>> program.command(ActionKind.GET)
    ['git', 'credential-store', '--file', '~/.creds', 'get']
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field

from credential_cascade.enums import ActionKind, ProgramKind
from credential_cascade.exceptions import ConfigurationError

SHELL = "sh"


@dataclass
class Program:
    """An external credential helper.

    Attributes:
        kind: How the program is launched
        definition: The helper definition it was built from
        args: Command line without the trailing action verb
        stderr: Whether the helper's stderr reaches the user; the cascade
            overwrites this before every invocation
    """

    kind: ProgramKind
    definition: str
    args: list[str] = field(default_factory=list)
    stderr: bool = True

    @classmethod
    def builtin(cls) -> Program:
        """The ``git credential`` command itself."""
        return cls(kind=ProgramKind.BUILTIN, definition="git credential", args=["git", "credential"])

    @classmethod
    def from_custom_definition(cls, definition: str) -> Program:
        """Parse a git ``credential.helper`` style definition.

        Args:
            definition: Helper definition, e.g. ``osxkeychain``,
                ``/usr/local/bin/helper --opt`` or ``!f() { ...; }; f``

        Returns:
            The corresponding program

        Raises:
            ConfigurationError: If the definition is empty or can't be split
                into arguments
        """
        text = definition.strip()
        if not text or text == "!":
            raise ConfigurationError(f"Empty credential helper definition: {definition!r}")

        if text.startswith("!"):
            script = text[1:]
            return cls(
                kind=ProgramKind.EXTERNAL_SHELL_SCRIPT,
                definition=text,
                args=[SHELL, "-c", f'{script} "$@"', script],
            )

        try:
            words = shlex.split(text)
        except ValueError as e:
            raise ConfigurationError(f"Invalid credential helper definition {definition!r}: {e}") from e

        if os.path.isabs(words[0]):
            return cls(kind=ProgramKind.EXTERNAL_PATH, definition=text, args=words)

        return cls(
            kind=ProgramKind.EXTERNAL_NAME,
            definition=text,
            args=["git", f"credential-{words[0]}", *words[1:]],
        )

    def command(self, action: ActionKind) -> list[str]:
        """Build the full command line for ``action``."""
        if self.kind == ProgramKind.BUILTIN:
            return [*self.args, action.to_builtin_verb()]
        return [*self.args, action.value]

    def __str__(self) -> str:
        return self.definition
