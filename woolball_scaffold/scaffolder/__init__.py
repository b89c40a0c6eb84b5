"""Woolball scaffolder -- resolves template manifests and writes them to disk.

Quick usage::

    from woolball_scaffold.scaffolder import materialize, resolve

    manifest = resolve("SPEECH-TO-TEXT", "DOTNET", "minimal-api")
    result = await materialize(manifest, api_key)
    for path in result.sorted_paths():
        print(path)
"""

from woolball_scaffold.scaffolder.materializer import Materializer, materialize, substitute_secret
from woolball_scaffold.scaffolder.models import (
    Feature,
    MaterializationResult,
    Stack,
    TemplateKey,
    TemplateManifest,
    Variant,
)
from woolball_scaffold.scaffolder.registry import REGISTRY, resolve

__all__ = [
    "Feature",
    "MaterializationResult",
    "Materializer",
    "REGISTRY",
    "Stack",
    "TemplateKey",
    "TemplateManifest",
    "Variant",
    "materialize",
    "resolve",
    "substitute_secret",
]
