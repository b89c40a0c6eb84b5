"""Woolball scaffold configuration.

Typed settings for the scaffolder. All settings use Pydantic v2 models so they
are validated at construction time and can be overridden from environment
variables without boiler-plate.

The API key itself is deliberately *not* part of this model: it is read once
per invocation and handed straight to the materializer.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, Field

DEFAULT_PLACEHOLDER = "{{API_KEY}}"
DEFAULT_KEY_URL = "https://woolball.xyz/Identity/Account/Manage/"
API_KEY_ENV = "WOOLBALL_API_KEY"


class ScaffoldConfig(BaseModel):
    """Global scaffolder configuration.

    Created once by the CLI entry point and passed to the fetcher and
    materializer.
    """

    placeholder: str = Field(
        default=DEFAULT_PLACEHOLDER,
        min_length=1,
        description="Literal token replaced by the API key in service files",
    )
    fetch_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    connect_timeout: float = Field(default=10.0, gt=0, description="TCP connect timeout in seconds")
    key_url: str = Field(default=DEFAULT_KEY_URL, description="Where users obtain an API key")
    base_dir: Path = Field(
        default=Path("."),
        description="Directory that relative destination roots are resolved against",
    )

    def http_timeout(self) -> httpx.Timeout:
        """Return the ``httpx.Timeout`` used for template downloads."""
        return httpx.Timeout(self.fetch_timeout, connect=self.connect_timeout)

    def resolve_destination(self, destination_root: Path) -> Path:
        """Anchor a manifest destination at :attr:`base_dir` unless it is absolute."""
        if destination_root.is_absolute():
            return destination_root
        return self.base_dir / destination_root

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            WOOLBALL_FETCH_TIMEOUT, WOOLBALL_CONNECT_TIMEOUT,
            WOOLBALL_BASE_DIR, WOOLBALL_KEY_URL.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("WOOLBALL_FETCH_TIMEOUT"):
            kwargs["fetch_timeout"] = float(os.environ["WOOLBALL_FETCH_TIMEOUT"])
        if os.environ.get("WOOLBALL_CONNECT_TIMEOUT"):
            kwargs["connect_timeout"] = float(os.environ["WOOLBALL_CONNECT_TIMEOUT"])
        if os.environ.get("WOOLBALL_BASE_DIR"):
            kwargs["base_dir"] = Path(os.environ["WOOLBALL_BASE_DIR"])
        if os.environ.get("WOOLBALL_KEY_URL"):
            kwargs["key_url"] = os.environ["WOOLBALL_KEY_URL"]
        return cls(**kwargs)


def api_key_from_env() -> str | None:
    """Return the API key from ``WOOLBALL_API_KEY``, or ``None`` when unset or blank.

    A non-blank value is returned verbatim.
    """
    value = os.environ.get(API_KEY_ENV, "")
    return value if value.strip() else None
