"""Sending requests to HTTP servers and receiving their responses."""

import logging

from functools import partial

from trio import BrokenResourceError, run

from .connection import open_connection
from .errors import TransferError
from .request import Requester
from .response import Response, read_response

__all__ = ("do", "send")

log = logging.getLogger(__name__)


async def send(request: Requester, *, verify: bool = False) -> Response:
    """Sends a request to the server and reads its response.

    The wire format of the request is sent as-is, followed by an extra
    ``\\r\\n`` so the header section is terminated even if the request
    itself lacks the final empty line. A new connection is opened for every
    request, and it is closed when the function returns, no matter whether
    it succeeded or not.

    Parameters:
        request: the request to send
        verify: whether to verify the certificate of the server for TLS
            requests. The default is not to verify anything; see
            `rawhttp.connection` for the implications.

    Returns:
        the response of the server

    Raises:
        ConnectionError: if the connection could not be established
        TransferError: if the request could not be sent or the response
            ended prematurely
        ParseError: if the response could not be parsed
    """
    destination = request.host()
    tls = request.is_tls()

    log.debug("Connecting to %s (TLS: %s)", destination, tls)
    stream = await open_connection(
        destination, tls, request.get_timeout(), verify=verify
    )

    async with stream:
        data = request.encode()
        try:
            await stream.send_all(data)
            await stream.send_all(b"\r\n")
        except BrokenResourceError as ex:
            raise TransferError(f"Failed to send request to {destination}") from ex

        log.debug("Sent %d bytes to %s", len(data) + 2, destination)

        response = await read_response(stream)

    log.debug("Received %r from %s", response.status_line, destination)
    return response


def do(request: Requester, *, verify: bool = False) -> Response:
    """Synchronous variant of `send()` that runs it in a new Trio event
    loop. Must not be called from within a running event loop.
    """
    return run(partial(send, verify=verify), request)
