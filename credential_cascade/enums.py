"""Enumerations for credential actions, helper kinds and prompt modes."""

from enum import Enum


class ActionKind(str, Enum):
    """Operations a credential helper can be asked to perform.

    The values are the verbs passed to external helpers on their command line.
    """

    GET = "get"
    STORE = "store"
    ERASE = "erase"

    def __str__(self) -> str:
        return self.value

    def to_builtin_verb(self) -> str:
        """Convert to the matching ``git credential`` sub-command.

        Returns:
            ``fill``, ``approve`` or ``reject``
        """
        if self == ActionKind.GET:
            return "fill"
        elif self == ActionKind.STORE:
            return "approve"
        else:
            return "reject"


class ProgramKind(str, Enum):
    """How a credential helper program is launched.

    - builtin: ``git credential`` itself
    - external-name: a short name expanded to ``git credential-<name>``
    - external-path: an absolute path to an executable, plus arguments
    - external-shell-script: a ``!``-prefixed snippet run by the shell
    """

    BUILTIN = "builtin"
    EXTERNAL_NAME = "external-name"
    EXTERNAL_PATH = "external-path"
    EXTERNAL_SHELL_SCRIPT = "external-shell-script"

    def __str__(self) -> str:
        return self.value


class PromptMode(str, Enum):
    """How the user is asked for a missing field.

    - disabled: never prompt
    - visible: echo input (usernames)
    - hidden: mask input (passwords)
    """

    DISABLED = "disabled"
    VISIBLE = "visible"
    HIDDEN = "hidden"

    def __str__(self) -> str:
        return self.value
