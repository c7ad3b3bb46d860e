"""Configuration constants, .env loading, and the configured HTTP transport.

WHY: The Beey API needs a base URI, a pre-shared authorization key, and a
request timeout. Keeping them in one place makes them easy to find and
override, and keeps the key out of source code.

HOW: python-dotenv loads the .env file on import. Defaults are module-level
constants read from the environment. create_http_client() turns them into
an authenticated httpx.AsyncClient that BeeyClient consumes.

RULES:
- API key is loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from typing import Optional

import httpx
from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# API configuration defaults
# ---------------------------------------------------------------------------

BEEY_BASE_URL = os.getenv("BEEY_BASE_URL", "https://www.beey.io/XAPI/v2/")
BEEY_TIMEOUT = float(os.getenv("BEEY_TIMEOUT", "300"))
BEEY_CONNECT_TIMEOUT = float(os.getenv("BEEY_CONNECT_TIMEOUT", "30"))

UPLOAD_CHUNK_SIZE = 64 * 1024
"""Chunk size in bytes used when relaying a download into an upload."""


def load_api_key() -> str:
    """Load the Beey API key from the environment.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("BEEY_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Beey API key not configured. "
            "Add BEEY_API_KEY to the .env file or the environment."
        )
    return key


def create_http_client(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> httpx.AsyncClient:
    """Build the authenticated httpx transport for the Beey API.

    WHY: The client itself only consumes an "issue a request, get a status
    code and a body" capability. Constructing that capability (base URL,
    headers, timeouts) lives here so tests can swap it for a mock transport.

    Args:
        api_key: Pre-shared key; defaults to load_api_key().
        base_url: API base URI; defaults to BEEY_BASE_URL.
        timeout: Read/write timeout in seconds; defaults to BEEY_TIMEOUT.

    Returns:
        An httpx.AsyncClient the caller is responsible for closing.
    """
    return httpx.AsyncClient(
        base_url=base_url or BEEY_BASE_URL,
        headers={
            "Authorization": api_key or load_api_key(),
            "Accept": "application/json",
        },
        timeout=httpx.Timeout(
            timeout if timeout is not None else BEEY_TIMEOUT,
            connect=BEEY_CONNECT_TIMEOUT,
        ),
    )
