"""Beey Transcriber — typed async client for the Beey transcription API.

WHY: Beey (XAPI v2) exposes projects, media upload, transcription jobs and
exports over plain HTTP with loosely-typed JSON. This package puts a typed,
error-translating facade in front of it so applications never touch raw
requests or status codes.

HOW: Two layers: config (environment and httpx transport) and api (client,
DTOs, request defaults, streaming relay). The CLI is a thin front end over
the client.

RULES:
- All HTTP calls go through BeeyClient
- Every client failure surfaces as BeeyError
- The package never polls, retries, or caches
"""

from beey_transcriber.api import (
    BeeyClient,
    BeeyError,
    ErrorKind,
    ExportFormat,
    ProcessingState,
    Project,
    SubtitleVariant,
)

__version__ = "0.1.0"

__all__ = [
    "BeeyClient",
    "BeeyError",
    "ErrorKind",
    "ExportFormat",
    "ProcessingState",
    "Project",
    "SubtitleVariant",
    "__version__",
]
