"""Error types raised by the Beey API client.

WHY: Callers should only have to catch one exception type at the client
boundary, yet diagnostics need to know whether a call failed on the
network, on a bad status code, on an unreadable response body, or before
any request was sent because a local resource was unusable.

HOW: BeeyError is the single public exception. Its ``kind`` attribute holds
an ErrorKind member, ``status_code`` is set for STATUS failures, and the
original exception is chained as ``__cause__``.

RULES:
- Message format: "Error <operation>: <cause>"
- A 404 from get_project is not an error (returns None)
- No distinction between 4xx and 5xx beyond status_code
"""

from __future__ import annotations

import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Why a Beey API call failed."""

    TRANSPORT = "transport"
    STATUS = "status"
    RESPONSE = "response"
    LOCAL_RESOURCE = "local_resource"


class BeeyError(Exception):
    """Raised when any Beey API operation fails.

    RULES:
    - Always include the failing operation in the message
    - kind is one of ErrorKind
    - status_code is only set when kind is STATUS (or the source download
      of a URL relay returned a non-200 status)
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        status_code: Optional[int] = None,
    ) -> None:
        self.message = message
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)


class UnexpectedStatusError(Exception):
    """A response came back with a status code other than the expected one."""

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Returned status code {status_code}")


class LocalResourceError(Exception):
    """A local file or a relayed download cannot be used as an upload source."""


class RelaySizeError(LocalResourceError):
    """A relayed stream delivered a different number of bytes than declared."""
