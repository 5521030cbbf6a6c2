"""Actions sent to credential helpers and the outcome of a retrieval."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

from credential_cascade.enums import ActionKind
from credential_cascade.protocol.context import Context


@dataclass
class Action:
    """A request to get, store or erase credentials for a context.

    The cascade mutates ``context`` in place; callers keep a reference to the
    action to observe partial progress even when ``invoke`` raises.

    Attributes:
        kind: Which operation to perform
        context: The credential record the operation applies to
    """

    kind: ActionKind
    context: Context

    @classmethod
    def get(cls, context: Context) -> Action:
        """Build a retrieval action; ``username``/``password`` may be missing."""
        return cls(ActionKind.GET, context)

    @classmethod
    def store(cls, context: Context) -> Action:
        """Build an action persisting a complete context in every helper."""
        return cls(ActionKind.STORE, context)

    @classmethod
    def erase(cls, context: Context) -> Action:
        """Build an action removing a context from every helper."""
        return cls(ActionKind.ERASE, context)

    @property
    def is_get(self) -> bool:
        return self.kind == ActionKind.GET


class Outcome(BaseModel):
    """Result of a retrieval.

    The cascade reports an outcome even when credentials are still missing
    (for example with prompting disabled); check ``is_complete`` and ``quit``
    before using it.

    Attributes:
        username: Resolved user name, if any
        password: Resolved password, if any
        quit: Whether a helper asked to stop the cascade
        next: The full resulting context, for storing or retrying
    """

    username: str | None = None
    password: str | None = None
    quit: bool = False
    next: Context

    @property
    def is_complete(self) -> bool:
        """Whether both a user name and a password were resolved."""
        return self.username is not None and self.password is not None
