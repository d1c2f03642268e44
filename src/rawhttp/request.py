"""Request objects for the raw HTTP client.

Two kinds of requests are supported. `Request` is assembled from discrete
fields and rendered into the wire format by the library, while `RawRequest`
holds the exact text to send to the server and is passed on verbatim.
Neither of them validates anything; the whole point of this library is to
let the caller send requests that a well-behaved HTTP client would refuse
to send.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol
from urllib.parse import urlsplit

from .errors import URLParseError

__all__ = (
    "DEFAULT_EOL",
    "DEFAULT_PROTO",
    "DEFAULT_TIMEOUT",
    "RawRequest",
    "Request",
    "Requester",
    "find_header",
)


DEFAULT_EOL = "\r\n"
"""Line terminator used by requests unless specified otherwise."""

DEFAULT_PROTO = "HTTP/1.1"
"""Protocol specifier used in the request line unless specified otherwise."""

DEFAULT_TIMEOUT = 30.0
"""Connection timeout of requests, in seconds, unless specified otherwise."""

ENCODING = "utf-8"
"""Encoding used to turn the wire text of a request into bytes."""


class Requester(Protocol):
    """Interface specification for objects that can be sent to a server
    with `rawhttp.client.send()`.
    """

    def is_tls(self) -> bool:
        """Returns whether the connection should be made using TLS."""
        ...

    def host(self) -> str:
        """Returns the ``hostname:port`` pair to connect to."""
        ...

    def encode(self) -> bytes:
        """Returns the exact bytes to send to the server."""
        ...

    def get_timeout(self) -> float:
        """Returns the connection timeout in seconds."""
        ...


def find_header(headers: Iterable[str], name: str) -> str:
    """Finds the value of a header in a sequence of raw ``Name: value``
    header lines.

    The name of the header is matched case-insensitively. Lines that do not
    contain a colon are skipped.

    Parameters:
        headers: the raw header lines to search
        name: the name of the header to look for

    Returns:
        the value of the first matching header with leading and trailing
        whitespace removed, or an empty string if there is no such header
    """
    name = name.lower()
    for header in headers:
        key, sep, value = header.partition(":")
        if sep and key.lower() == name:
            return value.strip()
    return ""


def _default_port(tls: bool) -> str:
    return "443" if tls else "80"


def _split_authority(authority: str) -> tuple[str, str]:
    """Splits the authority part of a URL into a hostname and a port,
    keeping the hostname exactly as it was written. Square brackets around
    IPv6 addresses are removed.
    """
    hostport = authority.rpartition("@")[2]
    if hostport.startswith("["):
        hostname, _, rest = hostport[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
    else:
        hostname, _, port = hostport.partition(":")
    return hostname, port


@dataclass
class Request:
    """HTTP request assembled from discrete fields.

    The request gives fine-grained control over every part of the request
    line and the headers. Nothing is added automatically; in particular, the
    ``Host`` and ``Content-Length`` headers are sent only if they were added
    explicitly (see `auto_set_host()` and `auto_set_content_length()`).
    """

    tls: bool = False
    """Whether the connection should be made using TLS."""

    method: str = "GET"
    """The HTTP verb, e.g., ``GET``."""

    scheme: str = ""
    """The protocol scheme, e.g., ``https``. Defaults to ``https`` or
    ``http`` depending on `tls`.
    """

    hostname: str = ""
    """The name of the host to connect to, e.g., ``localhost``."""

    port: str = ""
    """The port to connect to. Defaults to 443 for TLS and 80 otherwise."""

    path: str = "/"
    """The path to request, e.g., ``/security.txt``."""

    query: str = ""
    """The query string of the path without the leading ``?``."""

    fragment: str = ""
    """The part after the ``#`` in the path."""

    proto: str = DEFAULT_PROTO
    """The protocol specifier in the request line."""

    headers: list[str] = field(default_factory=list)
    """Raw header lines to send, in order, e.g., ``["Host: localhost"]``."""

    body: str = ""
    """The data to send after the headers."""

    eol: str = DEFAULT_EOL
    """The line terminator to use in the request."""

    timeout: Optional[float] = None
    """Connection timeout in seconds; `None` or zero means the default."""

    def __post_init__(self):
        if not self.scheme:
            self.scheme = "https" if self.tls else "http"
        if not self.port:
            self.port = _default_port(self.tls)
        if not self.path:
            self.path = "/"

    @classmethod
    def from_url(cls, method: str, url: str) -> "Request":
        """Creates a request for the given method and URL with sane defaults
        for all the other fields.

        The path, the query string and the fragment are taken verbatim from
        the URL; they are not normalized, decoded or re-encoded in any way.

        Parameters:
            method: the HTTP verb to use
            url: the URL to request

        Returns:
            the constructed request

        Raises:
            URLParseError: if the URL cannot be parsed
        """
        if any(ord(ch) < 32 or ord(ch) == 127 for ch in url):
            raise URLParseError(f"Invalid control character in URL: {url!r}")

        try:
            parts = urlsplit(url)
            parts.port  # raises ValueError for invalid ports
        except ValueError as ex:
            raise URLParseError(f"Invalid URL: {url!r}") from ex

        _, sep, rest = url.partition("//")
        if not sep:
            raise URLParseError(f"Invalid URL: {url!r}")

        # The authority ends at the first '/', '?' or '#'
        end = len(rest)
        for ch in "/?#":
            index = rest.find(ch)
            if 0 <= index < end:
                end = index
        authority, tail = rest[:end], rest[end:]

        tail, _, fragment = tail.partition("#")
        path, _, query = tail.partition("?")
        hostname, port = _split_authority(authority)

        tls = parts.scheme == "https"
        return cls(
            tls=tls,
            method=method,
            scheme=parts.scheme,
            hostname=hostname,
            port=port or _default_port(tls),
            path=path or "/",
            query=query,
            fragment=fragment,
            timeout=DEFAULT_TIMEOUT,
        )

    def add_header(self, header: str) -> None:
        """Appends a raw header line such as ``Accept: */*`` to the request.

        Duplicates are allowed and the line is not validated in any way.
        """
        self.headers.append(header)

    def auto_set_host(self) -> None:
        """Adds a ``Host`` header to the request with the hostname of the
        request as its value. The port is never included.
        """
        self.add_header(f"Host: {self.hostname}")

    def auto_set_content_length(self) -> None:
        """Adds a ``Content-Length`` header to the request with the length
        of the body in bytes as its value.

        The length is calculated when this method is called, so it should be
        called after the body has been set.
        """
        self.add_header(f"Content-Length: {len(self.body.encode(ENCODING))}")

    def encode(self) -> bytes:
        """Returns the wire format of the request as bytes."""
        return str(self).encode(ENCODING)

    def full_path(self) -> str:
        """Returns the path of the request, including the query string and
        the fragment if they are not empty.
        """
        result = self.path
        if self.query:
            result += "?" + self.query
        if self.fragment:
            result += "#" + self.fragment
        return result

    def get_timeout(self) -> float:
        """Returns the connection timeout of the request in seconds, falling
        back to `DEFAULT_TIMEOUT` when it is not set.
        """
        return self.timeout or DEFAULT_TIMEOUT

    def header(self, name: str) -> str:
        """Returns the value of the first header of the request with the
        given name (case-insensitive), or an empty string if there is no
        such header.
        """
        return find_header(self.headers, name)

    def host(self) -> str:
        """Returns the ``hostname:port`` pair to connect to."""
        return f"{self.hostname}:{self.port}"

    def is_tls(self) -> bool:
        """Returns whether the connection should be made using TLS."""
        return self.tls

    def request_line(self) -> str:
        """Returns the request line, e.g., ``GET / HTTP/1.1``."""
        return f"{self.method} {self.full_path()} {self.proto}"

    def url(self) -> str:
        """Returns the complete URL of the request."""
        return f"{self.scheme}://{self.host()}{self.full_path()}"

    def __str__(self) -> str:
        eol = self.eol
        lines = [self.request_line()]
        lines.extend(self.headers)
        return "".join(line + eol for line in lines) + eol + self.body


@dataclass
class RawRequest:
    """The most basic request; it holds the literal text to send to the
    server, without any validation or processing.
    """

    tls: bool = False
    """Whether the connection should be made using TLS."""

    hostname: str = ""
    """The name of the host to connect to, e.g., ``localhost``."""

    port: str = ""
    """The port to connect to, e.g., ``80``."""

    request: str = ""
    """The message to send to the server, e.g.,
    ``GET / HTTP/1.1\\r\\nHost: localhost\\r\\n``.
    """

    timeout: Optional[float] = None
    """Connection timeout in seconds; `None` or zero means the default."""

    def encode(self) -> bytes:
        """Returns the message to send to the server as bytes."""
        return self.request.encode(ENCODING)

    def get_timeout(self) -> float:
        """Returns the connection timeout of the request in seconds, falling
        back to `DEFAULT_TIMEOUT` when it is not set.
        """
        return self.timeout or DEFAULT_TIMEOUT

    def host(self) -> str:
        """Returns the ``hostname:port`` pair to connect to."""
        return f"{self.hostname}:{self.port}"

    def is_tls(self) -> bool:
        """Returns whether the connection should be made using TLS."""
        return self.tls

    def __str__(self) -> str:
        return self.request
