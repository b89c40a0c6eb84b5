"""Pydantic v2 models for template manifests and materialization results."""

from __future__ import annotations

import posixpath
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Feature(str, Enum):
    """Product features that have templates."""
    SPEECH_TO_TEXT = "SPEECH-TO-TEXT"


class Stack(str, Enum):
    """Technology stacks a template can target."""
    DOTNET = "DOTNET"
    NODEJS = "NODEJS"


class Variant(str, Enum):
    """Template flavours within a stack."""
    SELF_CONTAINED = "self-contained"
    MINIMAL_API = "minimal-api"
    EXPRESS = "express"
    NEXTJS = "nextjs"


class MatchMode(str, Enum):
    """How a :class:`SecretTarget` pattern is compared with a relative path."""
    EXACT = "exact"
    CONTAINS = "contains"


class ProjectCheck(str, Enum):
    """Sanity check run against the working directory before scaffolding."""
    NONE = "none"
    DOTNET_PROJECT = "dotnet-project"
    NEXTJS_PROJECT = "nextjs-project"


class TemplateKey(NamedTuple):
    """Registry key: one supported feature x stack x variant combination."""
    feature: Feature
    stack: Stack
    variant: Variant

    def label(self) -> str:
        return f"{self.feature.value} / {self.stack.value} / {self.variant.value}"


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------

class SecretTarget(BaseModel):
    """Relative-path predicate selecting entries that receive the API key."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(..., min_length=1)
    mode: MatchMode = MatchMode.EXACT

    def matches(self, relative_path: str) -> bool:
        if self.mode is MatchMode.CONTAINS:
            return self.pattern in relative_path
        return relative_path == self.pattern


class NextSteps(BaseModel):
    """A heading plus instruction lines printed after a successful scaffold."""

    model_config = ConfigDict(frozen=True)

    heading: str
    lines: tuple[str, ...] = ()


class TemplateManifest(BaseModel):
    """Everything needed to materialize one template.

    ``entries`` maps a POSIX-style relative path (which may contain
    subdirectories) to the URL it is downloaded from. Whether an entry is
    substitutable is not stored per entry; it is derived from
    ``secret_targets`` via :meth:`is_substitutable`.
    """

    model_config = ConfigDict(frozen=True)

    destination_root: Path
    entries: dict[str, str] = Field(..., min_length=1)
    secret_targets: tuple[SecretTarget, ...] = ()
    next_steps: tuple[NextSteps, ...] = ()
    project_check: ProjectCheck = ProjectCheck.NONE

    @field_validator("entries")
    @classmethod
    def _check_entries(cls, entries: dict[str, str]) -> dict[str, str]:
        for relative_path, url in entries.items():
            _check_relative_path(relative_path)
            if not url.startswith("https://"):
                raise ValueError(f"{relative_path!r}: source must be an https:// URL, got {url!r}")
        return entries

    @model_validator(mode="after")
    def _check_rooted(self) -> "TemplateManifest":
        root = posixpath.normpath(self.destination_root.as_posix())
        for relative_path in self.entries:
            joined = posixpath.normpath(posixpath.join(root, relative_path))
            if root != "." and not (joined == root or joined.startswith(root.rstrip("/") + "/")):
                raise ValueError(f"{relative_path!r} escapes {self.destination_root}")
        return self

    def is_substitutable(self, relative_path: str) -> bool:
        """Return ``True`` if the entry's content must receive the API key."""
        return any(target.matches(relative_path) for target in self.secret_targets)

    def substitutable_paths(self) -> list[str]:
        """Sorted relative paths that receive the API key."""
        return sorted(p for p in self.entries if self.is_substitutable(p))

    def target_paths(self, root: Path | None = None) -> list[Path]:
        """Destination path of every entry, anchored at *root* (default: ``destination_root``)."""
        base = root if root is not None else self.destination_root
        return [base / PurePosixPath(p) for p in sorted(self.entries)]


def _check_relative_path(relative_path: str) -> None:
    if not relative_path or not relative_path.strip():
        raise ValueError("relative path must not be empty")
    if "\\" in relative_path:
        raise ValueError(f"{relative_path!r}: use '/' as the path separator")
    path = PurePosixPath(relative_path)
    if path.is_absolute():
        raise ValueError(f"{relative_path!r} must be relative")
    if any(part in ("..", "") for part in relative_path.split("/")):
        raise ValueError(f"{relative_path!r} contains an empty or '..' segment")
    if path.name in ("", "."):
        raise ValueError(f"{relative_path!r} does not name a file")


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

class MaterializationResult(BaseModel):
    """Outcome of a successful materialization, keyed by relative path."""

    destination_root: Path
    written: dict[str, Path] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.written)

    def sorted_paths(self) -> list[Path]:
        """Written absolute paths ordered by their relative path."""
        return [self.written[key] for key in sorted(self.written)]
