"""Shared pytest fixtures for the woolball-scaffold test suite.

Provides reusable fixtures for:
- A small two-file manifest with one substitutable entry
- An in-memory template server built on ``httpx.MockTransport``
- Scaffold configuration rooted in a temporary directory
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from woolball_scaffold.config import ScaffoldConfig
from woolball_scaffold.fetcher import TemplateFetcher
from woolball_scaffold.scaffolder.models import SecretTarget, TemplateManifest

URL_A = "https://templates.example.test/a.txt"
URL_SERVICE = "https://templates.example.test/service.cs"

# Either a body, a status-code response, or an exception to raise.
Route = bytes | httpx.Response | Exception


class TemplateServer:
    """In-memory stand-in for the template host.

    Maps absolute URLs to the body (or error) to return and records every
    requested URL.
    """

    def __init__(self, routes: dict[str, Route] | None = None) -> None:
        self.routes: dict[str, Route] = dict(routes or {})
        self.requested: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, content=route)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def fetcher(self) -> TemplateFetcher:
        return TemplateFetcher(transport=self.transport())


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_manifest() -> TemplateManifest:
    """``a.txt`` passes through; ``service.cs`` receives the API key."""
    return TemplateManifest(
        destination_root=Path("out"),
        entries={"a.txt": URL_A, "service.cs": URL_SERVICE},
        secret_targets=(SecretTarget(pattern="service.cs"),),
    )


@pytest.fixture
def nested_manifest() -> TemplateManifest:
    """Multi-segment relative paths, matched by path fragment."""
    return TemplateManifest(
        destination_root=Path("."),
        entries={
            "app/api/speech-to-text/route.ts": "https://templates.example.test/route.ts",
            "app/speech-to-text/page.tsx": "https://templates.example.test/usage.tsx",
        },
        secret_targets=(
            SecretTarget(pattern="api/speech-to-text/route.ts", mode="contains"),
        ),
    )


# ---------------------------------------------------------------------------
# Network & config
# ---------------------------------------------------------------------------

@pytest.fixture
def template_server() -> TemplateServer:
    """Template server preloaded with the bodies used by ``sample_manifest``."""
    return TemplateServer(
        {
            URL_A: b"plain {{API_KEY}} text\r\n\x00\xff",
            URL_SERVICE: b"key={{API_KEY}}",
        }
    )


@pytest.fixture
def make_server() -> Callable[[dict[str, Route]], TemplateServer]:
    """Factory for a template server with custom routes."""
    return TemplateServer


@pytest.fixture
def scaffold_config(tmp_path: Path) -> ScaffoldConfig:
    """Configuration whose destinations resolve under ``tmp_path``."""
    return ScaffoldConfig(base_dir=tmp_path)
