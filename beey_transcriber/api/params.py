"""Default query parameters for the Beey enqueue and export endpoints.

WHY: Beey applies its own server-side defaults to anything we omit, and
those defaults can change without notice. Spelling out the documented
defaults here pins the behaviour we rely on, while callers can still
override any key.

HOW: Plain module-level dicts, one per endpoint, plus merge_options(),
a pure function that overlays caller options and drops None values.

RULES:
- A None default means "let the service decide" and is never sent
- Caller options win key-for-key; a caller None removes the key
- Booleans are rendered as "true"/"false" (the service's query convention)
- merge_options never mutates its inputs

See https://docs.beey.io/v2/transcription/01-enqueue_project.html and
https://docs.beey.io/v2/exports/04-export_subtitles.html
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

ENQUEUE_DEFAULTS: Dict[str, Any] = {
    "StartTranscriptionAt": None,
    "TranscriptionDuration": None,
    "Lang": "cs-CZ",
    # Time formatting and capitalization
    "WithPPC": "true",
    # Voice activity detection, helps with low-quality recordings
    "WithVAD": "true",
    "WithPunctuation": "true",
    "SaveTrsx": "true",
    "WithSpeakerId": "false",
    # Speaker turn detection
    "WithDiarization": "true",
    "DiarizationProfile": None,
    "TranscriptionProfile": None,
    # Apply the user's replacement rules
    "WithUserLex": "true",
    "StartTranscriptionAtSeconds": None,
    "TranscriptionDurationInSeconds": None,
    "ExternalMessageStreams": None,
    "WithSongParagraphs": None,
}

PROJECT_EXPORT_DEFAULTS: Dict[str, Any] = {
    "FormatId": "txt",
    "WithTimeStamps": "false",
    "FrontEndNormalize": "true",
    "IsRightToLeft": "false",
}

SUBTITLE_EXPORT_DEFAULTS: Dict[str, Any] = {
    "FileFormatId": None,
    "VariantId": None,
    "SubtitleLineLength": None,
    "KeepStripped": "false",
    "CodePageNumber": None,
    "DiskFormatCode": None,
    "DisplayStandardCode": None,
    "LanguageCode": None,
    "UseBoxAroundText": None,
    "ForceSingleLine": "false",
    "SpeakerSignPlacement": None,
    "PauseBetweenCaptionsMs": 80,
    "AutofillPauseBetweenCaptionsMs": 0,
    "UseSpeakerName": "false",
    "Language": None,
    "RemoveNoises": "true",
    "CharsPerSecond": 16,
    "MinLineDurationMs": 2000,
    "Ellipsis": "…",
    "EllipsisGapDurationMs": 300,
    "SpeakerSign": "-",
    "FormattingMode": None,
    "MakeAllUpperCase": "false",
    "KeepInnerLinesStripped": "false",
    "IsRightToLeft": "false",
    "HighlightingMode": "None",
    "UnhighlightedColor": "White",
    "UnhighlightedBackgroundColor": "White",
}


def _render(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def merge_options(
    defaults: Mapping[str, Any],
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Overlay caller options on a default map and drop None values.

    Args:
        defaults: The endpoint's documented default parameters.
        overrides: Caller-supplied options; these win key-for-key.

    Returns:
        A new dict ready to be sent as query parameters.
    """
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return {key: _render(value) for key, value in merged.items() if value is not None}
