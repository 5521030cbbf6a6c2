"""Running a single credential helper.

The helper receives the action verb as its last argument and the context on
stdin. For ``get`` its stdout is the answer; for ``store`` and ``erase`` the
output is discarded.

Failures are classified so the cascade can decide what to do with them:

- ``HelperUnusableError``: the program is missing, not executable or exited
  with a non-zero status. Always skipped by the cascade.
- ``HelperCommunicationError``: anything else that goes wrong while talking
  to the program (I/O errors, timeouts).

Example:
    >>> program = Program.from_custom_definition("!echo username=alice; echo password=secret")
    >>> invoke_helper(program, Action.get(Context(host="example.com")))
    b'username=alice\\npassword=secret\\n'
"""

import subprocess

import structlog

from credential_cascade.exceptions import (
    ContextFormatError,
    HelperCommunicationError,
    HelperUnusableError,
)
from credential_cascade.helper.action import Action
from credential_cascade.helper.program import Program

log = structlog.get_logger(__name__)


def invoke_helper(program: Program, action: Action, timeout: float | None = None) -> bytes | None:
    """Run ``program`` for ``action`` and return its raw output.

    Args:
        program: Helper to run
        action: What to ask of it; its context is written to stdin
        timeout: Seconds to wait for the helper, or None to wait indefinitely

    Returns:
        The helper's stdout for a retrieval, or None if it printed nothing or
        the action isn't a retrieval

    Raises:
        HelperUnusableError: If the program can't be started or exits non-zero
        HelperCommunicationError: On I/O errors or timeout
    """
    cmd = program.command(action.kind)
    try:
        payload = action.context.to_bytes()
    except ContextFormatError as e:
        raise HelperCommunicationError(
            f"Cannot send credential context to helper: {e.message}",
            program=program,
        ) from e

    log.debug("helper_starting", helper=program.definition, action=str(action.kind))

    try:
        result = subprocess.run(  # nosec B603 # argv built from configured helper definitions
            cmd,
            input=payload,
            stdout=subprocess.PIPE if action.is_get else subprocess.DEVNULL,
            stderr=None if program.stderr else subprocess.DEVNULL,
            timeout=timeout,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise HelperUnusableError(
            f"Credential helper could not be started: {e}",
            program=program,
        ) from e
    except subprocess.TimeoutExpired as e:
        raise HelperCommunicationError(
            f"Credential helper timed out after {timeout} seconds",
            program=program,
        ) from e
    except OSError as e:
        raise HelperCommunicationError(
            f"Failed to communicate with credential helper: {e}",
            program=program,
        ) from e

    if result.returncode != 0:
        raise HelperUnusableError(
            f"Credential helper exited with status {result.returncode}",
            program=program,
        )

    if not action.is_get:
        return None

    stdout = result.stdout or b""
    if not stdout.strip():
        return None
    return stdout
