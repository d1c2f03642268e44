"""Error classes for the raw HTTP client."""

__all__ = (
    "Error",
    "URLParseError",
    "ConnectionError",
    "TLSError",
    "CertPoolError",
    "TransferError",
    "ParseError",
)


class Error(RuntimeError):
    """Base class for all exceptions that are thrown from the raw HTTP
    client.
    """

    pass


class URLParseError(Error):
    """Error thrown when a request cannot be constructed from a URL because
    the URL is malformed.
    """

    pass


class ConnectionError(Error):
    """Error thrown when the connection to the remote server could not be
    established, either because it was refused or because it timed out.
    """

    pass


class TLSError(ConnectionError):
    """Error thrown when the TLS handshake with the remote server failed or
    timed out.
    """

    pass


class CertPoolError(ConnectionError):
    """Error thrown when the trusted root certificates of the platform could
    not be loaded.
    """

    pass


class TransferError(Error):
    """Error thrown when the request could not be written to the connection
    or when the connection was closed before the expected amount of data was
    received.
    """

    pass


class ParseError(Error):
    """Error thrown when the response of the server cannot be parsed; for
    instance, when there is no status line at all or when the value of the
    ``Content-Length`` header is not an integer.
    """

    pass
