"""Stream helpers for reading HTTP responses from Trio streams."""

from typing import Optional

from trio import BrokenResourceError
from trio.abc import ReceiveStream

from .errors import TransferError

__all__ = ("PushbackStreamWrapper",)


class PushbackStreamWrapper(ReceiveStream):
    """Trio stream that allows us to push some data in front of the "real"
    stream. Used to hand back the bytes that were read past the end of the
    response headers so they can be consumed as the body.
    """

    _remainder: bytearray
    _stream: ReceiveStream

    def __init__(self, stream: ReceiveStream, block_size: int = 4096):
        """Constructor.

        Parameters:
            stream: the original stream that this stream wraps.
            block_size: number of bytes to request from the wrapped stream
                in a single read
        """
        self._block_size = block_size
        self._remainder = bytearray()
        self._stream = stream

    async def aclose(self) -> None:
        await self._stream.aclose()

    def push_back(self, data: bytes) -> None:
        self._remainder = bytearray(data) + self._remainder

    async def receive_some(self, max_bytes: Optional[int] = None) -> bytes:
        if self._remainder:
            available = len(self._remainder)
            to_return = (
                min(max_bytes, available) if max_bytes is not None else available
            )
            result = bytes(self._remainder[:to_return])
            del self._remainder[:to_return]
            return result

        return await self._stream.receive_some(max_bytes)  # type: ignore

    async def receive_exactly(self, num_bytes: int) -> bytes:
        """Reads exactly the given number of bytes from the stream.

        Raises:
            TransferError: if the stream ended or broke before the given
                number of bytes were received
        """
        result = bytearray()
        while len(result) < num_bytes:
            to_read = min(num_bytes - len(result), self._block_size)
            chunk = await self._receive_or_fail(to_read)
            if not chunk:
                raise TransferError(
                    f"Stream ended after {len(result)} bytes while expecting "
                    f"{num_bytes} bytes"
                )
            result += chunk
        return bytes(result)

    async def receive_until_eof(self) -> bytes:
        """Reads all the remaining bytes from the stream until the remote
        side closes it.

        Raises:
            TransferError: if the stream broke before it was closed
        """
        chunks = []
        while True:
            chunk = await self._receive_or_fail(self._block_size)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    async def _receive_or_fail(self, max_bytes: int) -> bytes:
        try:
            return await self.receive_some(max_bytes)
        except BrokenResourceError as ex:
            raise TransferError("Connection broken while reading response") from ex
