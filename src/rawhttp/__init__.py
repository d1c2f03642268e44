"""Very low-level HTTP client library.

This library gives the caller exact control over the bytes sent to an HTTP
server and parses whatever comes back, including malformed responses. It
is meant for tools that break the rules of HTTP on purpose, like security
scanners and protocol fuzzers, and not for general use.

TLS connections do not verify the certificate of the server by default;
see `rawhttp.connection` for details.
"""

from .client import do, send
from .errors import (
    CertPoolError,
    ConnectionError,
    Error,
    ParseError,
    TLSError,
    TransferError,
    URLParseError,
)
from .request import RawRequest, Request, Requester
from .response import Response
from .version import __version__, __version_info__

__all__ = (
    "__version__",
    "__version_info__",
    "CertPoolError",
    "ConnectionError",
    "Error",
    "ParseError",
    "RawRequest",
    "Request",
    "Requester",
    "Response",
    "TLSError",
    "TransferError",
    "URLParseError",
    "do",
    "send",
)
