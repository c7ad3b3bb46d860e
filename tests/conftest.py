"""Shared test fixtures for the beey_transcriber test suite.

WHY: Model, client and CLI tests all need the same realistic project
record and the same way of faking the Beey API. Centralizing them keeps
the payload in one place.

HOW: FULL_PROJECT is a complete project record as Beey returns it, with
timestamps already in the normalized output format so it round-trips
byte for byte. make_client() builds a BeeyClient over httpx.MockTransport
handlers; run() drives a coroutine from a synchronous test.

RULES:
- No test talks to the network (all transports are MockTransport)
- FULL_PROJECT timestamps stay in YYYY-MM-DDTHH:MM:SS+HH:MM form
- Fixtures return copies so tests may mutate them freely
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Callable, Dict, Optional

import httpx
import pytest

from beey_transcriber.api.client import BeeyClient

BASE_URL = "https://beey.test/XAPI/v2/"

FULL_PROJECT: Dict[str, Any] = {
    "Id": 4711,
    "AccessToken": 987654,
    "Created": "2024-03-01T10:15:30+00:00",
    "CreatorId": 12,
    "DeleteAt": "2024-06-01T00:00:00+00:00",
    "Description": {
        "Author": "Jana Novak",
        "Name": "Morning show",
        "Notes": "Second hour only",
        "Start": "08:00",
    },
    "ExpirationDate": "2025-03-01T10:15:30+01:00",
    "IsReadOnly": True,
    "IsTeamProject": True,
    "KeywordsHighlight": [
        {
            "Category": "people",
            "Highlight": "yellow",
            "Text": "Prague",
            "TimestampMs": 15230,
            "Type": "keyword",
        },
        {"Text": "budget", "TimestampMs": 90210},
    ],
    "Length": "00:42:17.3200000",
    "MediaInfo": {"HasVideo": False, "IsPackaged": True},
    "ProcessingState": "Completed",
    "ShareCount": 3,
    "Tags": ["radio", "news", "archive"],
    "TranscriptionConfig": {
        "Language": "cs-CZ",
        "Profile": {"Name": "default", "Version": 4},
        "Flags": [1, 2, 3],
    },
    "Updated": "2024-03-02T08:00:00+00:00",
}


@pytest.fixture
def full_project() -> Dict[str, Any]:
    """A complete project record (no "Data" envelope)."""
    return copy.deepcopy(FULL_PROJECT)


@pytest.fixture
def wrapped_project() -> Dict[str, Any]:
    """The same record inside Beey's "Data" envelope."""
    return {"Data": copy.deepcopy(FULL_PROJECT)}


Handler = Callable[[httpx.Request], httpx.Response]


def make_client(
    handler: Handler,
    download_handler: Optional[Handler] = None,
) -> BeeyClient:
    """BeeyClient wired to mock transports for the API and the relay source."""
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url=BASE_URL,
        headers={"Authorization": "test-key"},
    )
    download = None
    if download_handler is not None:
        download = httpx.AsyncClient(transport=httpx.MockTransport(download_handler))
    return BeeyClient(http, download_client=download)


def run(coro):
    """Run a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)
