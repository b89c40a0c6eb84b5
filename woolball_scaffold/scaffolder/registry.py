"""Static registry of template manifests.

Maps every supported (feature, stack, variant) triple to its
:class:`TemplateManifest`. The table is built once at import time and exposed
read-only; lookups are pure and perform no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import TypeVar

from woolball_scaffold.errors import UnknownSelection

from .models import (
    Feature,
    MatchMode,
    NextSteps,
    ProjectCheck,
    SecretTarget,
    Stack,
    TemplateKey,
    TemplateManifest,
    Variant,
)

TEMPLATES_BASE_URL = (
    "https://raw.githubusercontent.com/woolball-xyz/woolball-templates/main/stt-template"
)

DOTNET_SERVICE_FILE = "WoolBallSpeechToTextWebService.cs"


def _stt(path: str) -> str:
    return f"{TEMPLATES_BASE_URL}/{path}"


# ---------------------------------------------------------------------------
# Registry data
# ---------------------------------------------------------------------------

_MANIFESTS: dict[TemplateKey, TemplateManifest] = {
    TemplateKey(Feature.SPEECH_TO_TEXT, Stack.DOTNET, Variant.SELF_CONTAINED): TemplateManifest(
        destination_root=Path("./WoolBallWebServices"),
        entries={
            DOTNET_SERVICE_FILE: _stt(f"dotnet/self-contained/{DOTNET_SERVICE_FILE}"),
            "Usage.cs": _stt("dotnet/self-contained/Usage.cs"),
        },
        secret_targets=(SecretTarget(pattern=DOTNET_SERVICE_FILE),),
        project_check=ProjectCheck.DOTNET_PROJECT,
    ),
    TemplateKey(Feature.SPEECH_TO_TEXT, Stack.DOTNET, Variant.MINIMAL_API): TemplateManifest(
        destination_root=Path("./WoolBallMinimalApi"),
        entries={
            "Program.cs": _stt("dotnet/minimal-api/Program.cs"),
            "minimal-api.csproj": _stt("dotnet/minimal-api/minimal-api.csproj"),
            "appsettings.json": _stt("dotnet/minimal-api/appsettings.json"),
            DOTNET_SERVICE_FILE: _stt(f"dotnet/minimal-api/{DOTNET_SERVICE_FILE}"),
        },
        secret_targets=(SecretTarget(pattern=DOTNET_SERVICE_FILE),),
        next_steps=(
            NextSteps(
                heading="To run the project:",
                lines=("1. cd ./WoolBallMinimalApi", "2. dotnet run"),
            ),
        ),
    ),
    TemplateKey(Feature.SPEECH_TO_TEXT, Stack.NODEJS, Variant.SELF_CONTAINED): TemplateManifest(
        destination_root=Path("./WoolBallWebServices"),
        entries={
            "usage.js": _stt("nodejs/self-contained/usage.js"),
            "woolball-speech-to-text.js": _stt("nodejs/self-contained/woolball-speech-to-text.js"),
        },
        secret_targets=(SecretTarget(pattern="woolball-speech-to-text.js"),),
        next_steps=(
            NextSteps(
                heading="To use the files:",
                lines=(
                    "1. Copy the files to your project",
                    "2. Import and use as shown in usage.js",
                ),
            ),
        ),
    ),
    TemplateKey(Feature.SPEECH_TO_TEXT, Stack.NODEJS, Variant.EXPRESS): TemplateManifest(
        destination_root=Path("./WoolBallExpress"),
        entries={
            "package.json": _stt("nodejs/express/package.json"),
            "server.js": _stt("nodejs/express/server.js"),
            "usage.js": _stt("nodejs/express/usage.js"),
        },
        secret_targets=(SecretTarget(pattern="server.js"),),
        next_steps=(
            NextSteps(
                heading="To run the project:",
                lines=("1. cd ./WoolBallExpress", "2. npm install", "3. node server.js"),
            ),
        ),
    ),
    TemplateKey(Feature.SPEECH_TO_TEXT, Stack.NODEJS, Variant.NEXTJS): TemplateManifest(
        destination_root=Path("."),
        entries={
            "app/api/speech-to-text/route.ts": _stt("nodejs/nextjs-api-route/route.ts"),
            "app/speech-to-text/page.tsx": _stt("nodejs/nextjs-api-route/usage.tsx"),
        },
        secret_targets=(
            SecretTarget(pattern="api/speech-to-text/route.ts", mode=MatchMode.CONTAINS),
        ),
        next_steps=(
            NextSteps(
                heading="API endpoint will be available at:",
                lines=("http://localhost:3000/api/speech-to-text",),
            ),
            NextSteps(
                heading="Demo page will be available at:",
                lines=("http://localhost:3000/speech-to-text",),
            ),
        ),
        project_check=ProjectCheck.NEXTJS_PROJECT,
    ),
}

REGISTRY: Mapping[TemplateKey, TemplateManifest] = MappingProxyType(_MANIFESTS)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: type[E], value: E | str) -> E | None:
    """Map *value* onto *enum_cls*, ignoring case. ``None`` if it is not a member."""
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if member.value.lower() == text.lower() or member.name.lower() == text.lower():
            return member
    return None


def resolve(
    feature: Feature | str,
    stack: Stack | str,
    variant: Variant | str,
) -> TemplateManifest:
    """Return the manifest registered for the triple.

    Accepts enum members or their string values (case-insensitive).

    Raises:
        UnknownSelection: If the triple is not registered.
    """
    key = _key_for(feature, stack, variant)
    if key is None or key not in REGISTRY:
        raise UnknownSelection(_label(feature), _label(stack), _label(variant))
    return REGISTRY[key]


def _key_for(
    feature: Feature | str,
    stack: Stack | str,
    variant: Variant | str,
) -> TemplateKey | None:
    f = _coerce(Feature, feature)
    s = _coerce(Stack, stack)
    v = _coerce(Variant, variant)
    if f is None or s is None or v is None:
        return None
    return TemplateKey(f, s, v)


def _label(value: Enum | str) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def entries() -> list[TemplateKey]:
    """Every registered key, in registration order."""
    return list(REGISTRY)


def features() -> list[Feature]:
    """Features that have at least one template."""
    return list(dict.fromkeys(key.feature for key in REGISTRY))


def stacks(feature: Feature | str) -> list[Stack]:
    """Stacks registered for *feature*; empty if the feature is unknown."""
    f = _coerce(Feature, feature)
    return list(dict.fromkeys(key.stack for key in REGISTRY if key.feature is f))


def variants(feature: Feature | str, stack: Stack | str) -> list[Variant]:
    """Variants registered for *feature* on *stack*; empty if either is unknown."""
    f = _coerce(Feature, feature)
    s = _coerce(Stack, stack)
    return [key.variant for key in REGISTRY if key.feature is f and key.stack is s]
