"""Multipart body adapter for relaying a download stream into an upload.

WHY: Beey's upload endpoint takes the media as a multipart "File" field and
needs the file size before the upload starts. When the media lives behind
a URL we do not want to buffer or persist it just to upload it again, so
the download stream is passed through chunk by chunk.

HOW: MultipartRelay wraps an async byte iterator of known length. Iterating
it yields the multipart part header, each inbound chunk as it arrives, and
the closing boundary. httpx accepts it directly as request ``content``;
``headers`` carries the matching Content-Type and exact Content-Length.

RULES:
- At most one inbound chunk is held at a time
- The inbound stream must deliver exactly ``size`` bytes, else RelaySizeError
- Closing the inbound stream is the owner's job (the client's
  ``async with`` around the download)
"""

from __future__ import annotations

import binascii
import os
from typing import AsyncIterator, Dict, Optional

from beey_transcriber.api.errors import RelaySizeError


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")


class MultipartRelay:
    """Streams one multipart/form-data file field from an async byte source."""

    def __init__(
        self,
        chunks: AsyncIterator[bytes],
        size: int,
        filename: str,
        field_name: str = "File",
        content_type: str = "application/octet-stream",
        boundary: Optional[str] = None,
    ) -> None:
        if size < 0:
            raise ValueError(f"Relay size must not be negative, got {size}")
        self._chunks = chunks
        self.size = size
        self.boundary = boundary or binascii.hexlify(os.urandom(16)).decode("ascii")
        self._head = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{_quote(field_name)}"; '
            f'filename="{_quote(filename)}"\r\n'
            f"Content-Type: {content_type}\r\n"
            "\r\n"
        ).encode("utf-8")
        self._tail = f"\r\n--{self.boundary}--\r\n".encode("ascii")
        self.bytes_relayed = 0

    @property
    def content_length(self) -> int:
        return len(self._head) + self.size + len(self._tail)

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": f"multipart/form-data; boundary={self.boundary}",
            "Content-Length": str(self.content_length),
        }

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield self._head
        async for chunk in self._chunks:
            if not chunk:
                continue
            self.bytes_relayed += len(chunk)
            if self.bytes_relayed > self.size:
                raise RelaySizeError(
                    f"Source delivered more than the declared {self.size} bytes"
                )
            yield chunk
        if self.bytes_relayed != self.size:
            raise RelaySizeError(
                f"Source delivered {self.bytes_relayed} of the declared {self.size} bytes"
            )
        yield self._tail
