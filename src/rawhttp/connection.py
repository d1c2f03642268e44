"""Opening plain and TLS connections to HTTP servers.

Warning:
    TLS connections do *not* verify the certificate of the server unless
    `open_connection()` is called with ``verify=True``. This library exists
    to probe servers with broken, expired or self-signed certificates, so
    skipping the verification is the right default here, but it also means
    that the connection is open to man-in-the-middle attacks. Do not use
    the defaults when talking to servers that you need to trust.
"""

import ssl

from trio import (
    BrokenResourceError,
    SSLStream,
    TooSlowError,
    aclose_forcefully,
    current_time,
    fail_at,
    open_tcp_stream,
)
from trio.abc import Stream

from .errors import CertPoolError, ConnectionError, TLSError
from .request import DEFAULT_TIMEOUT

__all__ = ("create_ssl_context", "open_connection", "split_host_port")


def create_ssl_context(verify: bool = False) -> ssl.SSLContext:
    """Creates an SSL context for client connections that trusts the root
    certificates of the platform.

    Parameters:
        verify: whether to verify the certificate and the hostname of the
            server. Defaults to ``False``, i.e. any certificate is accepted.

    Raises:
        CertPoolError: if the root certificates of the platform cannot be
            loaded
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        context.load_default_certs()
    except OSError as ex:
        raise CertPoolError(
            "Failed to load the trusted root certificates of the platform"
        ) from ex

    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    return context


def split_host_port(destination: str) -> tuple[str, int]:
    """Splits a ``hostname:port`` pair into a hostname and a numeric port.

    Square brackets around IPv6 addresses are removed from the hostname.

    Raises:
        ConnectionError: if the destination has no valid port
    """
    hostname, sep, port = destination.rpartition(":")
    if not sep:
        raise ConnectionError(f"Missing port in destination: {destination!r}")

    if hostname.startswith("[") and hostname.endswith("]"):
        hostname = hostname[1:-1]

    try:
        return hostname, int(port)
    except ValueError:
        raise ConnectionError(
            f"Invalid port in destination: {destination!r}"
        ) from None


async def open_connection(
    destination: str,
    tls: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    *,
    verify: bool = False,
) -> Stream:
    """Opens a connection to the given destination.

    The timeout applies to establishing the connection only, including the
    TLS handshake. Reading from and writing to the returned stream is not
    time-limited.

    Parameters:
        destination: the ``hostname:port`` pair to connect to
        tls: whether to wrap the connection in TLS
        timeout: the maximum number of seconds to spend on establishing the
            connection
        verify: whether to verify the certificate of the server when using
            TLS. See the warning in the module documentation.

    Returns:
        the stream of the connection

    Raises:
        ConnectionError: if the connection was refused or timed out
        CertPoolError: if the root certificates of the platform cannot be
            loaded
        TLSError: if the TLS handshake failed or timed out
    """
    hostname, port = split_host_port(destination)
    ssl_context = create_ssl_context(verify) if tls else None
    deadline = current_time() + timeout

    try:
        with fail_at(deadline):
            stream = await open_tcp_stream(hostname, port)
    except TooSlowError:
        raise ConnectionError(f"Timed out while connecting to {destination}") from None
    except OSError as ex:
        raise ConnectionError(f"Failed to connect to {destination}: {ex}") from ex

    if ssl_context is None:
        return stream

    ssl_stream = SSLStream(
        stream,
        ssl_context,
        server_hostname=hostname or None,
        https_compatible=True,
    )

    try:
        with fail_at(deadline):
            await ssl_stream.do_handshake()
    except TooSlowError:
        await aclose_forcefully(ssl_stream)
        raise TLSError(f"TLS handshake with {destination} timed out") from None
    except BrokenResourceError as ex:
        await aclose_forcefully(ssl_stream)
        raise TLSError(f"TLS handshake with {destination} failed") from ex

    return ssl_stream
