"""Response objects and the response parser of the raw HTTP client.

The parser is deliberately tolerant: it expects a status line, then reads
header lines until the first empty line or until the stream ends, and then
reads the body. The body is framed either by the ``Content-Length`` header
or, in the absence of one, by the server closing the connection. Chunked
transfer encoding is *not* decoded; chunk sizes end up in the body as-is.
"""

from __future__ import annotations

import re

from typing import Generator, Optional, Sequence, TYPE_CHECKING

from trio import BrokenResourceError

from .errors import ParseError, TransferError
from .request import find_header
from .streams import PushbackStreamWrapper

if TYPE_CHECKING:
    from trio.abc import ReceiveStream

    from .request import Request

__all__ = ("MAX_LINE_LENGTH", "Response", "read_response")


MAX_LINE_LENGTH: Optional[int] = None
"""Default maximum length of the status line or a single header line, in
bytes; `None` means that lines may be arbitrarily long.
"""

HEADER_ENCODING = "latin-1"
"""Encoding used to turn the status line and the header lines into strings.
Latin-1 maps every byte to a single character so nothing is lost.
"""

_CONTENT_LENGTH_PATTERN = re.compile(r"[+-]?[0-9]+")
_WHITESPACE = b" \t\r\n\v\f"


class LineReader:
    """Helper object for Trio that takes a ReceiveStream and parses lines
    out of it.
    """

    stream: ReceiveStream
    _buffer: bytearray
    _line_generator: Generator[Optional[bytes], Optional[bytes], None]

    def __init__(
        self, stream: ReceiveStream, max_line_length: Optional[int] = MAX_LINE_LENGTH
    ):
        self.stream = stream

        self._buffer = bytearray()
        self._line_generator = self.generate_lines(max_line_length, self._buffer)

    @staticmethod
    def generate_lines(
        max_line_length: Optional[int], buf: bytearray
    ) -> Generator[Optional[bytes], Optional[bytes], None]:
        find_start = 0
        while True:
            newline_idx = buf.find(b"\n", find_start)
            if newline_idx < 0:
                # no b'\n' found in buf
                if max_line_length is not None and len(buf) > max_line_length:
                    raise ParseError("Line too long in response")
                # next time, start the search where this one left off
                find_start = len(buf)
                more_data = yield
            else:
                # b'\n' found in buf so return the line and move up buf
                line = bytes(buf[: newline_idx + 1])
                # Update the buffer in place, to take advantage of bytearray's
                # optimized delete-from-beginning feature.
                del buf[: newline_idx + 1]
                # next time, start the search from the beginning
                find_start = 0
                more_data = yield line

            if more_data is not None:
                buf += more_data

    def get_remainder(self) -> bytes:
        """Stops the line parser and returns the bytes that were received
        from the stream but not returned as a line yet.
        """
        self._line_generator.close()
        remainder = bytes(self._buffer)
        self._buffer.clear()
        return remainder

    async def readline(self) -> bytes:
        """Reads the next line from the stream, including the terminating
        newline character.

        When the stream ends in the middle of a line, the partial line is
        returned without a newline character at its end. An empty bytes
        object is returned when the stream is exhausted.
        """
        line = next(self._line_generator)
        while line is None:
            more_data = await self.stream.receive_some(1024)
            if not more_data:
                return self.get_remainder()
            line = self._line_generator.send(more_data)
        return line


class Response:
    """HTTP response received from a server.

    The status line and the headers are stored exactly as they were received
    (apart from removing surrounding whitespace from each line); lookups by
    header name are case-insensitive.
    """

    _raw_status: str
    _headers: tuple[str, ...]
    _body: bytes

    def __init__(self, raw_status: str, headers: Sequence[str], body: bytes):
        """Constructor.

        Parameters:
            raw_status: the full status line of the response
            headers: the raw header lines of the response, in the order they
                were received
            body: the body of the response
        """
        self._raw_status = raw_status
        self._headers = tuple(headers)
        self._body = bytes(body)

    @property
    def body(self) -> bytes:
        """The body of the response."""
        return self._body

    def header(self, name: str) -> str:
        """Returns the value of the first header with the given name.

        Parameters:
            name: the name of the header; it is matched case-insensitively

        Returns:
            the value of the header without surrounding whitespace, or an
            empty string if the response has no such header
        """
        return find_header(self._headers, name)

    @property
    def headers(self) -> tuple[str, ...]:
        """The raw header lines of the response, in the order they were
        received. Duplicate headers are kept.
        """
        return self._headers

    def parse_location(self, request: Request) -> str:
        """Returns the absolute URL from the ``Location`` header of the
        response, using the request that produced the response to resolve
        relative locations.

        Protocol-relative locations (``//host/path``) inherit the scheme of
        the request; absolute paths (``/path``) inherit its scheme and
        hostname. Anything else is returned unchanged.

        Parameters:
            request: the request that the response was received for

        Returns:
            the resolved location, or an empty string if the response has no
            ``Location`` header
        """
        location = self.header("Location")
        if not location:
            return ""

        if len(location) > 2 and location.startswith("//"):
            return f"{request.scheme}:{location}"

        if location.startswith("/"):
            return f"{request.scheme}://{request.hostname}{location}"

        return location

    @property
    def status_code(self) -> str:
        """The status code of the response as a string, e.g., ``200``, or an
        empty string if the status line does not consist of three parts.
        """
        parts = self._raw_status.split(" ", 2)
        return parts[1] if len(parts) == 3 else ""

    @property
    def status_line(self) -> str:
        """The full status line of the response, e.g., ``HTTP/1.1 200 OK``."""
        return self._raw_status

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} {self._raw_status!r}, "
            f"{len(self._headers)} headers, {len(self._body)} bytes>"
        )


def _decode_line(line: bytes) -> str:
    return line.strip(_WHITESPACE).decode(HEADER_ENCODING)


async def read_response(
    stream: ReceiveStream, max_line_length: Optional[int] = MAX_LINE_LENGTH
) -> Response:
    """Reads and parses an HTTP response from the given stream.

    Parameters:
        stream: the stream to read the response from
        max_line_length: maximum length of the status line and of a single
            header line; `None` means no limit

    Returns:
        the parsed response

    Raises:
        ParseError: if there is no status line in the stream, if a line is
            longer than `max_line_length` or if the ``Content-Length`` header
            is not an integer
        TransferError: if the stream broke while reading the status line or
            the body, or if it ended before the whole body was received
    """
    line_reader = LineReader(stream, max_line_length)

    try:
        line = await line_reader.readline()
    except BrokenResourceError as ex:
        raise TransferError("Connection broken while reading status line") from ex

    if not line.endswith(b"\n"):
        raise ParseError("Connection closed before a status line was received")

    raw_status = _decode_line(line)

    # A broken stream or a missing final newline ends the headers quietly
    headers = []
    while True:
        try:
            line = await line_reader.readline()
        except BrokenResourceError:
            line_reader.get_remainder()
            break

        if not line.endswith(b"\n"):
            break

        header = _decode_line(line)
        if not header:
            break

        headers.append(header)

    body_stream = PushbackStreamWrapper(stream)
    body_stream.push_back(line_reader.get_remainder())

    content_length = find_header(headers, "Content-Length")
    if content_length:
        if not _CONTENT_LENGTH_PATTERN.fullmatch(content_length):
            raise ParseError(f"Invalid Content-Length header: {content_length!r}")

        length = int(content_length)
        body = await body_stream.receive_exactly(length) if length > 0 else b""
    else:
        body = await body_stream.receive_until_eof()

    return Response(raw_status, headers, body)
