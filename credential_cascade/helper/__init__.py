"""Credential helper programs: descriptors, actions and invocation.

Example:
    >>> from credential_cascade.helper import Action, Program, invoke_helper
    >>> program = Program.from_custom_definition("cache")
    >>> output = invoke_helper(program, Action.get(context))
"""

from credential_cascade.helper.action import Action, Outcome
from credential_cascade.helper.invoke import invoke_helper
from credential_cascade.helper.program import Program

__all__ = [
    "Action",
    "Outcome",
    "Program",
    "invoke_helper",
]
