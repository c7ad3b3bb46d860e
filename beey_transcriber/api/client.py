"""Async HTTP client for the Beey transcription API (XAPI v2).

WHY: Applications need to create transcription projects, upload media,
start transcription, check status, and pull results (TRSX, exports,
subtitles) without dealing with HTTP details, status codes, or Beey's
loosely-typed JSON.

HOW: BeeyClient wraps an httpx.AsyncClient. Every public method builds one
request, sends it, requires status 200, and parses the body into a
Project, a list of descriptor records, or raw text/bytes. Any failure along
the way is re-raised as BeeyError naming the operation and the cause.

RULES:
- Either pass a configured httpx.AsyncClient, or use the client as an async
  context manager and it builds (and closes) one from config
- Only status 200 is success; get_project maps 404 to None
- No retries, no polling helpers, no caching: callers poll get_project
- Local files and relayed downloads are validated before the upload request
- File handles and download streams are closed on every exit path
"""

from __future__ import annotations

import contextlib
import logging
import os
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, AsyncIterator, List, Mapping, Optional, Union

import httpx

from beey_transcriber.api.errors import (
    BeeyError,
    ErrorKind,
    LocalResourceError,
    UnexpectedStatusError,
)
from beey_transcriber.api.models import (
    ExportFormat,
    Project,
    SubtitleVariant,
    format_timestamp,
    unwrap_data_list,
)
from beey_transcriber.api.params import (
    ENQUEUE_DEFAULTS,
    PROJECT_EXPORT_DEFAULTS,
    SUBTITLE_EXPORT_DEFAULTS,
    merge_options,
)
from beey_transcriber.api.streaming import MultipartRelay
from beey_transcriber.config import (
    BEEY_TIMEOUT,
    UPLOAD_CHUNK_SIZE,
    create_http_client,
)

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def _translating_errors(action: str) -> AsyncIterator[None]:
    """Re-raise anything that goes wrong inside the block as BeeyError."""
    try:
        yield
    except BeeyError:
        raise
    except UnexpectedStatusError as exc:
        raise _failure(action, exc, ErrorKind.STATUS, exc.status_code) from exc
    except LocalResourceError as exc:
        raise _failure(action, exc, ErrorKind.LOCAL_RESOURCE) from exc
    except (httpx.HTTPError, httpx.StreamError, httpx.InvalidURL) as exc:
        raise _failure(action, exc, ErrorKind.TRANSPORT) from exc
    except OSError as exc:
        raise _failure(action, exc, ErrorKind.LOCAL_RESOURCE) from exc
    except (ValueError, KeyError, TypeError) as exc:
        raise _failure(action, exc, ErrorKind.RESPONSE) from exc


def _failure(
    action: str,
    exc: BaseException,
    kind: ErrorKind,
    status_code: Optional[int] = None,
) -> BeeyError:
    cause = str(exc) or type(exc).__name__
    logger.warning("Error %s: %s", action, cause)
    return BeeyError(f"Error {action}: {cause}", kind=kind, status_code=status_code)


def _require_ok(response: httpx.Response) -> None:
    if response.status_code != 200:
        raise UnexpectedStatusError(response.status_code)


def _local_file_size(path: Path) -> int:
    if not path.is_file() or not os.access(path, os.R_OK):
        raise LocalResourceError(f"File not readable: {path}")
    try:
        return path.stat().st_size
    except OSError as exc:
        raise LocalResourceError(f"Could not determine file size for {path}") from exc


def _declared_length(response: httpx.Response) -> int:
    raw = response.headers.get("content-length")
    if raw is None:
        raise LocalResourceError(
            "Source server did not provide a Content-Length header, "
            "cannot determine file size"
        )
    try:
        size = int(raw)
    except ValueError:
        size = -1
    if size < 0:
        raise LocalResourceError(f"Source server sent an invalid Content-Length: {raw!r}")
    return size


def _filename_from_url(url: str) -> str:
    return PurePosixPath(httpx.URL(url).path).name or "media"


class BeeyClient:
    """Async client for the Beey transcription API.

    WHY: Provides a typed interface for the whole project workflow:
    create -> upload -> enqueue -> (caller polls get_project) -> export.

    HOW: Each method is one request through the shared httpx transport,
    wrapped in _translating_errors so callers only ever see BeeyError.

    RULES:
    - Use as: async with BeeyClient() as client: ...
      or BeeyClient(http_client) with a transport you manage yourself
    - An injected http_client is never closed by BeeyClient
    - download_client is only used by upload_media_file_from_url
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        download_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._client = http_client
        self._owns_client = False
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._download_client = download_client

    async def __aenter__(self) -> BeeyClient:
        if self._client is None:
            self._client = create_http_client(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if there is none."""
        if self._client is None:
            raise RuntimeError(
                "BeeyClient needs an http_client or must be used as an async "
                "context manager: async with BeeyClient() as client: ..."
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        client = self._ensure_client()
        logger.debug("%s %s params=%s", method, path, kwargs.get("params"))
        return await client.request(method, path, **kwargs)

    @contextlib.asynccontextmanager
    async def _download_session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._download_client is not None:
            yield self._download_client
            return
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(self._timeout or BEEY_TIMEOUT),
        ) as downloader:
            yield downloader

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def add_project(
        self,
        name: str,
        custom_path: Optional[str] = None,
        transcribe_at: Optional[datetime] = None,
    ) -> Project:
        """Create a new transcription project.

        Args:
            name: Project name.
            custom_path: Optional folder path inside Beey.
            transcribe_at: Optional scheduled start of the transcription; a
                naive value is taken as UTC.

        Returns:
            The created Project.
        """
        payload = {
            "CustomPath": custom_path,
            "Name": name,
            "Start": format_timestamp(transcribe_at),
        }
        async with _translating_errors("adding project"):
            response = await self._request(
                "POST",
                "projects",
                json={key: value for key, value in payload.items() if value is not None},
            )
            _require_ok(response)
            project = Project.from_dict(response.json())
        logger.info("Created project %s (%s)", project.id, name)
        return project

    async def get_project(self, project_id: int) -> Optional[Project]:
        """Return the project, or None if Beey answers 404."""
        async with _translating_errors(f"fetching project {project_id}"):
            response = await self._request("GET", f"projects/{project_id}")
            if response.status_code == 404:
                return None
            _require_ok(response)
            return Project.from_dict(response.json())

    async def delete_project(self, project_id: int) -> Project:
        """Delete a project and return it as the service last reported it."""
        async with _translating_errors(f"deleting project {project_id}"):
            response = await self._request("DELETE", f"projects/{project_id}")
            _require_ok(response)
            project = Project.from_dict(response.json())
        logger.info("Deleted project %s", project_id)
        return project

    # ------------------------------------------------------------------
    # Media upload
    # ------------------------------------------------------------------

    async def upload_media_file(
        self,
        project_id: int,
        file_path: Union[str, Path],
    ) -> None:
        """Upload a local audio/video file to a project.

        WHY: Beey requires the file size as a query parameter before the
        body is streamed, so the file is checked and sized up front and no
        request is sent if that fails.

        HOW: Streams the open file as the multipart "File" field; httpx
        reads it in chunks rather than loading it into memory.
        """
        async with _translating_errors(f"uploading media file to project {project_id}"):
            path = Path(file_path)
            size = _local_file_size(path)
            try:
                handle = open(path, "rb")
            except OSError as exc:
                raise LocalResourceError(f"Could not open file: {path}") from exc
            with handle:
                response = await self._request(
                    "POST",
                    f"projects/{project_id}/files/uploadmediafile",
                    params={"FileSize": size},
                    files={"File": (path.name, handle)},
                )
            _require_ok(response)
        logger.info("Uploaded %s (%d bytes) to project %s", path.name, size, project_id)

    async def upload_media_file_from_url(self, project_id: int, url: str) -> None:
        """Relay a media file from an HTTP(S) URL into a project.

        WHY: Saves downloading the media to disk first. The file is never
        stored; chunks go straight from the download into the upload body.

        HOW: Opens the download as a stream, takes the size from its
        Content-Length header, and passes the raw byte stream through a
        MultipartRelay as the upload request content.

        RULES:
        - The source must answer 200 and declare a Content-Length
        - Nothing is sent to Beey when either check fails
        - The download stream is closed whether the upload succeeds or not
        """
        action = f"uploading media file from URL to project {project_id}"
        async with _translating_errors(action):
            async with self._download_session() as downloader:
                async with downloader.stream(
                    "GET", url, headers={"Accept-Encoding": "identity"}
                ) as source:
                    if source.status_code != 200:
                        raise UnexpectedStatusError(
                            source.status_code,
                            "Failed to download file from URL, status: "
                            f"{source.status_code}",
                        )
                    size = _declared_length(source)
                    relay = MultipartRelay(
                        source.aiter_raw(UPLOAD_CHUNK_SIZE),
                        size=size,
                        filename=_filename_from_url(url),
                    )
                    response = await self._request(
                        "POST",
                        f"projects/{project_id}/files/uploadmediafile",
                        params={"FileSize": size},
                        content=relay,
                        headers=relay.headers,
                    )
            _require_ok(response)
        logger.info("Relayed %d bytes from %s to project %s", size, url, project_id)

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    async def enqueue_project(
        self,
        project_id: int,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Project:
        """Start transcription of the uploaded media.

        Caller options are merged over ENQUEUE_DEFAULTS (e.g.
        ``{"Lang": "en-US", "WithSpeakerId": "true"}``); keys that end up
        None are left out. The returned Project reflects the queued state;
        poll get_project until processing_state.is_terminal.

        See https://docs.beey.io/v2/transcription/01-enqueue_project.html
        """
        async with _translating_errors(f"enqueuing project {project_id}"):
            params = merge_options(ENQUEUE_DEFAULTS, options)
            response = await self._request(
                "GET", f"projects/{project_id}/enqueue", params=params
            )
            _require_ok(response)
            project = Project.from_dict(response.json())
        logger.info("Enqueued project %s (lang=%s)", project_id, params.get("Lang"))
        return project

    # ------------------------------------------------------------------
    # Files and exports
    # ------------------------------------------------------------------

    async def get_project_media_file(self, project_id: int) -> bytes:
        """Download the project's media file."""
        async with _translating_errors(f"fetching media file for project {project_id}"):
            response = await self._request("GET", f"projects/{project_id}/files/mediafile")
            _require_ok(response)
            return response.content

    async def get_trsx(self, project_id: int) -> bytes:
        """Download the project's TRSX transcript document."""
        async with _translating_errors(f"fetching TRSX for project {project_id}"):
            response = await self._request("GET", f"projects/{project_id}/files/trsx")
            _require_ok(response)
            return response.content

    async def _get_data_list(self, path: str) -> List[Any]:
        response = await self._request("GET", path)
        _require_ok(response)
        return unwrap_data_list(response.json())

    async def get_subtitle_export_formats(self) -> List[ExportFormat]:
        async with _translating_errors("fetching subtitle export formats"):
            items = await self._get_data_list("projects/export/subtitles/fileformats")
            return [ExportFormat.from_dict(item) for item in items]

    async def get_subtitle_export_variants(self) -> List[SubtitleVariant]:
        async with _translating_errors("fetching subtitle export variants"):
            items = await self._get_data_list("projects/export/subtitles/variants")
            return [SubtitleVariant.from_dict(item) for item in items]

    async def get_export_project_formats(self) -> List[ExportFormat]:
        async with _translating_errors("fetching project export formats"):
            items = await self._get_data_list("projects/export/formats")
            return [ExportFormat.from_dict(item) for item in items]

    async def export_project(self, project_id: int, format_id: str = "txt") -> str:
        """Export the transcript in one of get_export_project_formats().

        See https://docs.beey.io/v2/exports/03-export_project.html
        """
        params = merge_options(PROJECT_EXPORT_DEFAULTS, {"FormatId": format_id})
        async with _translating_errors(f"exporting project {project_id}"):
            response = await self._request(
                "GET", f"projects/{project_id}/export", params=params
            )
            _require_ok(response)
            return response.text

    async def export_subtitles(
        self,
        project_id: int,
        file_format_id: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Export subtitles, e.g. ``export_subtitles(7, "srt")``.

        Options are merged over SUBTITLE_EXPORT_DEFAULTS the same way
        enqueue_project merges its options.

        See https://docs.beey.io/v2/exports/04-export_subtitles.html
        """
        params = merge_options(
            {**SUBTITLE_EXPORT_DEFAULTS, "FileFormatId": file_format_id},
            options,
        )
        async with _translating_errors(f"exporting subtitles for project {project_id}"):
            response = await self._request(
                "GET", f"projects/{project_id}/export/subtitles", params=params
            )
            _require_ok(response)
            return response.text

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def add_tag(self, project_id: int, tag: str, access_token: int) -> Project:
        """Tag a project. access_token comes from Project.access_token."""
        async with _translating_errors(f"adding tag to project {project_id}"):
            response = await self._request(
                "POST",
                f"projects/{project_id}/tags",
                params={"AccessToken": access_token},
                json={"Tag": tag},
            )
            _require_ok(response)
            return Project.from_dict(response.json())

    async def get_tags(self, project_id: int) -> List[str]:
        async with _translating_errors(f"fetching tags for project {project_id}"):
            response = await self._request("GET", f"projects/{project_id}/tags")
            _require_ok(response)
            body = response.json()
            data = body.get("Data") if isinstance(body, Mapping) else None
            if not isinstance(data, Mapping):
                return []
            return [str(tag) for tag in data.get("Tags") or []]

    async def delete_tag(self, project_id: int, tag: str, access_token: int) -> Project:
        """Remove a tag. access_token comes from Project.access_token."""
        async with _translating_errors(f"removing tag from project {project_id}"):
            response = await self._request(
                "DELETE",
                f"projects/{project_id}/tags",
                params={"AccessToken": access_token},
                json={"Tag": tag},
            )
            _require_ok(response)
            return Project.from_dict(response.json())
