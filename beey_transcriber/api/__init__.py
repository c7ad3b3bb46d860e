"""Beey API client package — async HTTP interface to the Beey service.

WHY: Creating projects, uploading media, enqueuing transcription and
fetching exports all follow the same request/verify/parse pattern. This
package keeps that pattern in one client class.

HOW: BeeyClient (client.py) issues the requests through httpx. Responses are
parsed into the frozen dataclasses in models.py, request defaults live in
params.py, and streaming.py holds the multipart relay for URL uploads.

RULES:
- No direct httpx usage outside this package and config.create_http_client
- Authentication is the pre-shared key from config
- Callers catch BeeyError only
"""

from beey_transcriber.api.client import BeeyClient
from beey_transcriber.api.errors import BeeyError, ErrorKind
from beey_transcriber.api.models import (
    ExportFormat,
    KeywordHighlight,
    MediaInfo,
    ProcessingState,
    Project,
    ProjectDescription,
    SubtitleVariant,
)
from beey_transcriber.api.params import merge_options

__all__ = [
    "BeeyClient",
    "BeeyError",
    "ErrorKind",
    "ExportFormat",
    "KeywordHighlight",
    "MediaInfo",
    "ProcessingState",
    "Project",
    "ProjectDescription",
    "SubtitleVariant",
    "merge_options",
]
