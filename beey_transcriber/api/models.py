"""Beey API response dataclasses.

WHY: The Beey API returns loosely-typed JSON where almost every field may be
missing. Typed, immutable dataclasses give callers a stable shape with
deterministic defaults, and keep the free-form parts (transcription config)
out of the way as opaque values.

HOW: Each dataclass maps 1:1 to a Beey JSON object. Factory methods
(from_dict) parse raw API responses, to_dict maps back to the wire keys.
Project.from_dict unwraps the "Data" envelope most endpoints use.

RULES:
- Missing fields never raise: booleans -> False, counts -> 0, collections ->
  empty, optional scalars and timestamps -> None
- An empty-string timestamp counts as missing
- Malformed timestamps or unknown processing states raise ValueError
- Timestamps serialize as YYYY-MM-DDTHH:MM:SS+HH:MM; naive values are UTC
- Nested records serialize only the keys that were present, and carry
  unknown keys through unchanged in `extra`
- KeywordsHighlight entries that are not JSON objects are dropped
- transcription_config is passed through untouched
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


class ProcessingState(str, enum.Enum):
    """Lifecycle stage of a project, owned by the remote service.

    The client observes these values; transitions happen server-side.
    """

    NONE = "None"
    IN_PROGRESS = "InProgress"
    CANCELED = "Canceled"
    COMPLETED = "Completed"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        """True once the service will not move the project any further."""
        return self in (
            ProcessingState.CANCELED,
            ProcessingState.COMPLETED,
            ProcessingState.FAILED,
        )


# ---------------------------------------------------------------------------
# Field helpers (module-private)
# ---------------------------------------------------------------------------


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")
    # .NET-style timestamps carry up to 7 fractional digits
    text = _EXTRA_FRACTION.sub(r"\1", value.strip())
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render YYYY-MM-DDTHH:MM:SS+HH:MM, taking a naive value as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=0).isoformat()


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _compact(record: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in record.items() if value is not None}


def _unknown_keys(data: Mapping[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


# ---------------------------------------------------------------------------
# Nested records
# ---------------------------------------------------------------------------


_DESCRIPTION_KEYS = ("Author", "Name", "Notes", "Start")
_KEYWORD_KEYS = ("Category", "Highlight", "Text", "TimestampMs", "Type")
_MEDIA_INFO_KEYS = ("HasVideo", "IsPackaged")


@dataclass(frozen=True)
class ProjectDescription:
    """Free-text metadata attached to a project."""

    author: Optional[str] = None
    name: Optional[str] = None
    notes: Optional[str] = None
    start: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProjectDescription:
        return cls(
            author=data.get("Author"),
            name=data.get("Name"),
            notes=data.get("Notes"),
            start=data.get("Start"),
            extra=_unknown_keys(data, _DESCRIPTION_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "Author": self.author,
            "Name": self.name,
            "Notes": self.notes,
            "Start": self.start,
        }) | self.extra


@dataclass(frozen=True)
class KeywordHighlight:
    """A keyword hit the service highlighted in the transcript."""

    category: Optional[str] = None
    highlight: Optional[str] = None
    text: Optional[str] = None
    timestamp_ms: Optional[int] = None
    type: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> KeywordHighlight:
        return cls(
            category=data.get("Category"),
            highlight=data.get("Highlight"),
            text=data.get("Text"),
            timestamp_ms=_optional_int(data.get("TimestampMs")),
            type=data.get("Type"),
            extra=_unknown_keys(data, _KEYWORD_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "Category": self.category,
            "Highlight": self.highlight,
            "Text": self.text,
            "TimestampMs": self.timestamp_ms,
            "Type": self.type,
        }) | self.extra


@dataclass(frozen=True)
class MediaInfo:
    """What the service knows about the uploaded media."""

    has_video: Optional[bool] = None
    is_packaged: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MediaInfo:
        has_video = data.get("HasVideo")
        is_packaged = data.get("IsPackaged")
        return cls(
            has_video=None if has_video is None else bool(has_video),
            is_packaged=None if is_packaged is None else bool(is_packaged),
            extra=_unknown_keys(data, _MEDIA_INFO_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "HasVideo": self.has_video,
            "IsPackaged": self.is_packaged,
        }) | self.extra


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Project:
    """One transcription project (job + document) on the Beey service.

    WHY: Nearly every Beey endpoint answers with a project record. Callers
    poll processing_state, need access_token for tag mutations, and read
    the rest for display.

    HOW: Built only through from_dict. Frozen so it can be shared freely;
    the client never caches or tracks instances.

    RULES:
    - id and access_token default to 0 when absent
    - length is kept verbatim as returned (not parsed into a duration)
    - tags keep the order the service returned them in
    """

    id: int = 0
    access_token: int = 0
    created: Optional[datetime] = None
    creator_id: Optional[int] = None
    delete_at: Optional[datetime] = None
    description: Optional[ProjectDescription] = None
    expiration_date: Optional[datetime] = None
    is_read_only: bool = False
    is_team_project: bool = False
    keywords_highlight: Tuple[KeywordHighlight, ...] = ()
    length: str = ""
    media_info: Optional[MediaInfo] = None
    processing_state: ProcessingState = ProcessingState.NONE
    share_count: int = 0
    tags: Tuple[str, ...] = ()
    transcription_config: Any = None
    updated: Optional[datetime] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Project:
        """Parse a Project from a raw API response dict.

        HOW: Unwraps the "Data" envelope when present, then maps each known
        key with its default.

        Raises:
            ValueError: On an unparsable timestamp or processing state.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Expected a JSON object for a project")
        envelope = payload.get("Data")
        data: Mapping[str, Any] = envelope if isinstance(envelope, Mapping) else payload

        description = data.get("Description")
        media_info = data.get("MediaInfo")
        keywords = data.get("KeywordsHighlight")
        tags = data.get("Tags")
        state = data.get("ProcessingState")

        return cls(
            id=int(data.get("Id") or 0),
            access_token=int(data.get("AccessToken") or 0),
            created=_parse_timestamp(data.get("Created")),
            creator_id=_optional_int(data.get("CreatorId")),
            delete_at=_parse_timestamp(data.get("DeleteAt")),
            description=(
                ProjectDescription.from_dict(description)
                if isinstance(description, Mapping) else None
            ),
            expiration_date=_parse_timestamp(data.get("ExpirationDate")),
            is_read_only=bool(data.get("IsReadOnly", False)),
            is_team_project=bool(data.get("IsTeamProject", False)),
            keywords_highlight=(
                tuple(KeywordHighlight.from_dict(k) for k in keywords if isinstance(k, Mapping))
                if isinstance(keywords, list) else ()
            ),
            length="" if data.get("Length") is None else str(data["Length"]),
            media_info=(
                MediaInfo.from_dict(media_info)
                if isinstance(media_info, Mapping) else None
            ),
            processing_state=(
                ProcessingState.NONE if state is None else ProcessingState(state)
            ),
            share_count=int(data.get("ShareCount") or 0),
            tags=tuple(str(t) for t in tags) if isinstance(tags, list) else (),
            transcription_config=data.get("TranscriptionConfig"),
            updated=_parse_timestamp(data.get("Updated")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Map back to the wire representation (same key set as the API)."""
        return {
            "Id": self.id,
            "AccessToken": self.access_token,
            "Created": format_timestamp(self.created),
            "CreatorId": self.creator_id,
            "DeleteAt": format_timestamp(self.delete_at),
            "Description": self.description.to_dict() if self.description else None,
            "ExpirationDate": format_timestamp(self.expiration_date),
            "IsReadOnly": self.is_read_only,
            "IsTeamProject": self.is_team_project,
            "KeywordsHighlight": [k.to_dict() for k in self.keywords_highlight],
            "Length": self.length,
            "MediaInfo": self.media_info.to_dict() if self.media_info else None,
            "ProcessingState": self.processing_state.value,
            "ShareCount": self.share_count,
            "Tags": list(self.tags),
            "TranscriptionConfig": self.transcription_config,
            "Updated": format_timestamp(self.updated),
        }


# ---------------------------------------------------------------------------
# Export descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExportFormat:
    """A format offered by the project or subtitle export endpoints."""

    id: str
    description: str = ""
    extension: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExportFormat:
        return cls(
            id=str(data["Id"]),
            description=data.get("Description") or "",
            extension=data.get("Extension") or "",
        )


@dataclass(frozen=True)
class SubtitleVariant:
    """A subtitle layout variant (e.g. broadcast standard) for exports."""

    id: str
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SubtitleVariant:
        return cls(
            id=str(data["Id"]),
            description=data.get("Description") or "",
        )


def unwrap_data_list(payload: Any) -> List[Any]:
    """Return the "Data" array of a list response (empty when absent)."""
    if not isinstance(payload, Mapping):
        raise ValueError("Expected a JSON object in the response body")
    data = payload.get("Data")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("Expected 'Data' to be a list")
    return data
