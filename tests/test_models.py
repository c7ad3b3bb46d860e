"""Unit tests for the Beey response dataclasses.

WHY: Project.from_dict is the one place where Beey's loosely-typed JSON
becomes typed data. A missing default or a mis-mapped key would surface
far away in caller code, so the mapping is pinned down here.

HOW: Tests are grouped by concern:
  - TestProjectDefaults: empty and partial payloads
  - TestDataEnvelope: "Data" unwrapping
  - TestProjectMapping: every field of a full payload
  - TestRoundTrip: to_dict(from_dict(x)) reproduces x
  - TestTimestamps: parsing and normalization
  - TestMalformedInput: the inputs that must raise ValueError
  - TestDescriptors / TestProcessingState

RULES:
- Payloads come from conftest (FULL_PROJECT) or are built inline
- No HTTP involved
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from beey_transcriber.api.models import (
    ExportFormat,
    KeywordHighlight,
    MediaInfo,
    ProcessingState,
    Project,
    ProjectDescription,
    SubtitleVariant,
    unwrap_data_list,
)


# ---------------------------------------------------------------------------
# TestProjectDefaults
# ---------------------------------------------------------------------------


class TestProjectDefaults:
    """Absent fields fall back to deterministic defaults."""

    def test_empty_payload_yields_defaults(self):
        project = Project.from_dict({})
        assert project.id == 0
        assert project.access_token == 0
        assert project.created is None
        assert project.creator_id is None
        assert project.delete_at is None
        assert project.description is None
        assert project.expiration_date is None
        assert project.is_read_only is False
        assert project.is_team_project is False
        assert project.keywords_highlight == ()
        assert project.length == ""
        assert project.media_info is None
        assert project.processing_state is ProcessingState.NONE
        assert project.share_count == 0
        assert project.tags == ()
        assert project.transcription_config is None
        assert project.updated is None

    def test_only_id_present(self):
        project = Project.from_dict({"Id": 12})
        assert project.id == 12
        assert project.tags == ()
        assert project.processing_state is ProcessingState.NONE

    def test_null_values_are_treated_as_absent(self):
        project = Project.from_dict({
            "Id": 3,
            "CreatorId": None,
            "Tags": None,
            "ShareCount": None,
            "IsReadOnly": None,
            "ProcessingState": None,
            "Length": None,
        })
        assert project.creator_id is None
        assert project.tags == ()
        assert project.share_count == 0
        assert project.is_read_only is False
        assert project.processing_state is ProcessingState.NONE
        assert project.length == ""

    def test_empty_string_timestamps_are_absent(self):
        project = Project.from_dict({"Created": "", "Updated": "", "DeleteAt": ""})
        assert project.created is None
        assert project.updated is None
        assert project.delete_at is None

    def test_wrongly_shaped_collections_fall_back(self):
        project = Project.from_dict({
            "Description": "not a record",
            "MediaInfo": [],
            "KeywordsHighlight": {"Text": "x"},
            "Tags": "radio",
        })
        assert project.description is None
        assert project.media_info is None
        assert project.keywords_highlight == ()
        assert project.tags == ()

    def test_project_is_frozen(self):
        project = Project.from_dict({"Id": 1})
        with pytest.raises(dataclasses.FrozenInstanceError):
            project.id = 2  # type: ignore[misc]


# ---------------------------------------------------------------------------
# TestDataEnvelope
# ---------------------------------------------------------------------------


class TestDataEnvelope:
    """Beey wraps most records under "Data"; unwrapping is transparent."""

    def test_wrapped_equals_unwrapped(self, full_project, wrapped_project):
        assert Project.from_dict(wrapped_project) == Project.from_dict(full_project)

    def test_wrapped_empty_record(self):
        assert Project.from_dict({"Data": {}}) == Project.from_dict({})

    def test_non_mapping_data_is_not_unwrapped(self):
        project = Project.from_dict({"Data": None, "Id": 8})
        assert project.id == 8


# ---------------------------------------------------------------------------
# TestProjectMapping
# ---------------------------------------------------------------------------


class TestProjectMapping:
    """Every wire key lands in the right typed field."""

    def test_scalar_fields(self, full_project):
        project = Project.from_dict(full_project)
        assert project.id == 4711
        assert project.access_token == 987654
        assert project.creator_id == 12
        assert project.is_read_only is True
        assert project.is_team_project is True
        assert project.length == "00:42:17.3200000"
        assert project.processing_state is ProcessingState.COMPLETED
        assert project.share_count == 3

    def test_nested_records(self, full_project):
        project = Project.from_dict(full_project)
        assert project.description == ProjectDescription(
            author="Jana Novak",
            name="Morning show",
            notes="Second hour only",
            start="08:00",
        )
        assert project.media_info == MediaInfo(has_video=False, is_packaged=True)
        assert project.keywords_highlight[0] == KeywordHighlight(
            category="people",
            highlight="yellow",
            text="Prague",
            timestamp_ms=15230,
            type="keyword",
        )
        assert project.keywords_highlight[1] == KeywordHighlight(
            text="budget", timestamp_ms=90210
        )

    def test_tags_keep_order(self, full_project):
        project = Project.from_dict(full_project)
        assert project.tags == ("radio", "news", "archive")

    def test_transcription_config_is_passed_through(self, full_project):
        project = Project.from_dict(full_project)
        assert project.transcription_config == full_project["TranscriptionConfig"]

    def test_numeric_strings_are_coerced(self):
        project = Project.from_dict({"Id": "15", "AccessToken": "99", "ShareCount": "2"})
        assert project.id == 15
        assert project.access_token == 99
        assert project.share_count == 2


# ---------------------------------------------------------------------------
# TestRoundTrip
# ---------------------------------------------------------------------------


class TestRoundTrip:
    """to_dict(from_dict(x)) reproduces x, modulo timestamp normalization."""

    def test_full_payload_round_trips(self, full_project):
        assert Project.from_dict(full_project).to_dict() == full_project

    def test_wrapped_payload_round_trips_to_record(self, wrapped_project, full_project):
        assert Project.from_dict(wrapped_project).to_dict() == full_project

    def test_same_key_set_as_wire_format(self, full_project):
        assert set(Project.from_dict({}).to_dict()) == set(full_project)

    def test_timestamps_are_renormalized(self, full_project):
        full_project["Created"] = "2024-03-01T10:15:30.1234567Z"
        full_project["Updated"] = "2024-03-02T08:00:00"
        out = Project.from_dict(full_project).to_dict()
        assert out["Created"] == "2024-03-01T10:15:30+00:00"
        assert out["Updated"] == "2024-03-02T08:00:00+00:00"
        for key in full_project:
            if key not in ("Created", "Updated"):
                assert out[key] == full_project[key], key

    def test_partial_nested_records_keep_their_shape(self):
        payload = {
            "Description": {"Name": "Only a name"},
            "MediaInfo": {"HasVideo": True},
        }
        out = Project.from_dict(payload).to_dict()
        assert out["Description"] == {"Name": "Only a name"}
        assert out["MediaInfo"] == {"HasVideo": True}

    def test_unknown_nested_keys_survive(self, full_project):
        full_project["Description"]["Language"] = "cs"
        full_project["KeywordsHighlight"][1]["Score"] = 0.93
        full_project["MediaInfo"]["Duration"] = 2537.32
        project = Project.from_dict(full_project)
        assert project.keywords_highlight[1].extra == {"Score": 0.93}
        assert project.to_dict() == full_project

    def test_non_object_keyword_entries_are_dropped(self):
        out = Project.from_dict({"KeywordsHighlight": ["loose", {"Text": "a"}]}).to_dict()
        assert out["KeywordsHighlight"] == [{"Text": "a"}]

    def test_nested_records_stay_hashable(self, full_project):
        project = Project.from_dict(full_project)
        assert hash(project.description) == hash(project.description)
        assert len({*project.keywords_highlight}) == 2


# ---------------------------------------------------------------------------
# TestTimestamps
# ---------------------------------------------------------------------------


class TestTimestamps:
    """ISO-8601 parsing with UTC for naive values."""

    def test_zulu_timestamp(self):
        project = Project.from_dict({"Created": "2024-03-01T10:15:30Z"})
        assert project.created == datetime(2024, 3, 1, 10, 15, 30, tzinfo=timezone.utc)

    def test_offset_is_preserved(self):
        project = Project.from_dict({"ExpirationDate": "2025-03-01T10:15:30+01:00"})
        assert project.expiration_date.utcoffset() == timedelta(hours=1)
        assert project.to_dict()["ExpirationDate"] == "2025-03-01T10:15:30+01:00"

    def test_naive_timestamp_is_utc(self):
        project = Project.from_dict({"DeleteAt": "2024-06-01T00:00:00"})
        assert project.delete_at.tzinfo == timezone.utc

    def test_seven_fractional_digits(self):
        project = Project.from_dict({"Updated": "2024-03-02T08:00:00.9999999+00:00"})
        assert project.updated.microsecond == 999999


# ---------------------------------------------------------------------------
# TestMalformedInput
# ---------------------------------------------------------------------------


class TestMalformedInput:
    """Only genuinely malformed raw input raises."""

    def test_unparsable_timestamp(self):
        with pytest.raises(ValueError):
            Project.from_dict({"Created": "yesterday"})

    def test_non_string_timestamp(self):
        with pytest.raises(ValueError):
            Project.from_dict({"Created": 1709288130})

    def test_unknown_processing_state(self):
        with pytest.raises(ValueError):
            Project.from_dict({"ProcessingState": "Exploded"})

    def test_non_mapping_payload(self):
        with pytest.raises(ValueError):
            Project.from_dict(["Id", 1])  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# TestDescriptors
# ---------------------------------------------------------------------------


class TestDescriptors:
    """Export format and subtitle variant records."""

    def test_export_format(self):
        fmt = ExportFormat.from_dict(
            {"Id": "srt", "Extension": ".srt", "Description": "SubRip subtitles"}
        )
        assert fmt == ExportFormat(id="srt", description="SubRip subtitles", extension=".srt")

    def test_export_format_without_extension(self):
        fmt = ExportFormat.from_dict({"Id": "txt"})
        assert fmt.extension == ""
        assert fmt.description == ""

    def test_subtitle_variant(self):
        variant = SubtitleVariant.from_dict({"Id": "EBU", "Description": "EBU-TT"})
        assert variant == SubtitleVariant(id="EBU", description="EBU-TT")

    def test_descriptor_requires_id(self):
        with pytest.raises(KeyError):
            SubtitleVariant.from_dict({"Description": "nameless"})

    def test_unwrap_data_list(self):
        assert unwrap_data_list({"Data": [{"Id": "a"}]}) == [{"Id": "a"}]
        assert unwrap_data_list({}) == []

    def test_unwrap_data_list_rejects_non_list(self):
        with pytest.raises(ValueError):
            unwrap_data_list({"Data": {"Id": "a"}})


# ---------------------------------------------------------------------------
# TestProcessingState
# ---------------------------------------------------------------------------


class TestProcessingState:
    """The closed five-value enumeration."""

    def test_wire_values(self):
        assert [s.value for s in ProcessingState] == [
            "None", "InProgress", "Canceled", "Completed", "Failed",
        ]

    def test_terminal_states(self):
        assert not ProcessingState.NONE.is_terminal
        assert not ProcessingState.IN_PROGRESS.is_terminal
        assert ProcessingState.CANCELED.is_terminal
        assert ProcessingState.COMPLETED.is_terminal
        assert ProcessingState.FAILED.is_terminal
