"""Credential helper protocol: contexts, their wire format and URL destructuring.

Example:
    >>> from credential_cascade.protocol import Context
    >>> ctx = Context(url="https://example.com/owner/repo").destructure_url()
    >>> ctx.host
    'example.com'
"""

from credential_cascade.protocol.context import Context, parse_bool
from credential_cascade.protocol.url import ParsedUrl, UrlParser, parse_url

__all__ = [
    "Context",
    "parse_bool",
    "ParsedUrl",
    "UrlParser",
    "parse_url",
]
