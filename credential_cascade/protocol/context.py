"""Credential context model and its ``key=value`` wire format.

A context is the record exchanged with credential helpers: what resource is
being accessed (``protocol``, ``host``, ``path`` or a whole ``url``) and, once
known, the ``username`` and ``password`` for it. Helpers may also answer with
``quit`` to stop the cascade early.

On the wire a context is one ``key=value`` pair per line, terminated by a blank
line or end of input::

    protocol=https
    host=example.com
    username=alice
    password=s3cret

Example:
    >>> ctx = Context.from_bytes(b"protocol=https\\nhost=example.com\\n\\n")
    >>> ctx.to_prompt("Username")
    'Username for https://example.com: '
"""

from __future__ import annotations

from pydantic import BaseModel

from credential_cascade.exceptions import ContextFormatError, UrlParseError
from credential_cascade.protocol.url import parse_url

# Encoding order of fields on the wire
WIRE_FIELDS = ("protocol", "host", "path", "username", "password", "url")

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


def parse_bool(value: str) -> bool | None:
    """Interpret ``value`` as a git boolean.

    Returns:
        True or False, or None if the value isn't a recognized boolean
    """
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    return None


class Context(BaseModel):
    """The credential record being resolved.

    All fields are optional. A context is owned by a single resolution and
    mutated in place while helpers answer and the user is prompted.

    Attributes:
        protocol: Scheme of the resource (``https``, ``ssh``, ...)
        host: Host, with ``:port`` if non-default
        path: Path on the host, without surrounding slashes
        username: User name, once known
        password: Password or token, once known
        url: Whole URL; ``protocol``/``host``/``path`` are derived from it
        quit: A helper's request to stop consulting further helpers
    """

    protocol: str | None = None
    host: str | None = None
    path: str | None = None
    username: str | None = None
    password: str | None = None
    url: str | None = None
    quit: bool | None = None

    @classmethod
    def from_bytes(cls, data: bytes) -> Context:
        """Decode a context from its wire format.

        Decoding stops at the first blank line. Unknown keys are ignored and
        later occurrences of a key win.

        Args:
            data: Raw helper output

        Returns:
            Decoded context

        Raises:
            ContextFormatError: If the data isn't UTF-8 or a line lacks ``=``
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ContextFormatError(f"Credential context is not valid UTF-8: {e}") from e

        ctx = cls()
        for line in text.split("\n"):
            line = line.removesuffix("\r")
            if not line:
                break

            key, sep, value = line.partition("=")
            if not sep:
                raise ContextFormatError(
                    f"Invalid format in line {line!r}, expecting key=value",
                )

            if key in WIRE_FIELDS:
                setattr(ctx, key, value)
            elif key == "quit":
                ctx.quit = parse_bool(value)

        return ctx

    def to_bytes(self) -> bytes:
        """Encode this context in its wire format, including the terminating blank line.

        Raises:
            ContextFormatError: If a value contains a newline or NUL byte
        """
        lines = []
        for key in WIRE_FIELDS:
            value = getattr(self, key)
            if value is None:
                continue
            if "\n" in value or "\0" in value:
                raise ContextFormatError(
                    f"Value of {key!r} must not contain newlines or NUL bytes",
                )
            lines.append(f"{key}={value}\n")

        if self.quit:
            lines.append("quit=1\n")

        lines.append("\n")
        return "".join(lines).encode("utf-8")

    def destructure_url(self) -> Context:
        """Overwrite ``protocol``, ``host`` and ``path`` with the components of ``url``.

        Does nothing when ``url`` is unset. An empty ``url`` is malformed.

        Returns:
            self, for chaining

        Raises:
            UrlParseError: If ``url`` is malformed
        """
        if self.url is None:
            return self

        parsed = parse_url(self.url)
        self.protocol = parsed.protocol
        self.host = parsed.host
        self.path = parsed.path
        return self

    def to_url(self) -> str | None:
        """Rebuild a URL from the individual fields.

        Returns:
            ``protocol://[username@]host[/path]``, or None without a protocol
        """
        if self.protocol is None:
            return None

        url = f"{self.protocol}://"
        if self.username is not None:
            url += f"{self.username}@"
        if self.host is not None:
            url += self.host
        if self.path is not None:
            if not self.path.startswith("/"):
                url += "/"
            url += self.path
        return url

    def to_prompt(self, field: str) -> str:
        """Build a human-readable prompt asking for ``field``."""
        url = self.to_url()
        if url is None:
            return f"{field}: "
        return f"{field} for {url}: "

    def redacted(self) -> Context:
        """Return a copy safe for logs and error messages."""
        update = {}
        if self.password is not None:
            update["password"] = "<redacted>"
        if self.url is not None:
            update["url"] = UrlParseError.redact_url(self.url)
        return self.model_copy(update=update)

    @property
    def has_credentials(self) -> bool:
        """Whether both ``username`` and ``password`` are present."""
        return self.username is not None and self.password is not None
