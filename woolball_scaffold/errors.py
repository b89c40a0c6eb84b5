"""Exception hierarchy for the scaffolder.

Every error raised by the core derives from :class:`ScaffoldError` and carries
enough context (URL or path plus the underlying cause) for the CLI to report
it without a traceback.
"""

from __future__ import annotations

from pathlib import Path

import httpx


class ScaffoldError(Exception):
    """Base class for all scaffolder failures."""


class UnknownSelection(ScaffoldError):
    """Raised when a (feature, stack, variant) triple has no registered manifest."""

    def __init__(self, feature: str, stack: str, variant: str) -> None:
        self.feature = feature
        self.stack = stack
        self.variant = variant
        super().__init__(
            f"Unsupported template: feature={feature!r} stack={stack!r} variant={variant!r}"
        )


class NetworkError(ScaffoldError):
    """Raised when downloading a single template file fails."""

    def __init__(
        self,
        url: str,
        cause: BaseException,
        relative_path: str | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        self.relative_path = relative_path
        target = f"{relative_path} ({url})" if relative_path else url
        super().__init__(f"Error downloading {target}: {_describe(cause)}")

    def for_entry(self, relative_path: str) -> "NetworkError":
        """Return a copy of this error attributed to a manifest entry."""
        return NetworkError(self.url, self.cause, relative_path=relative_path)


class FilesystemError(ScaffoldError):
    """Raised when creating a directory or writing a file fails."""

    def __init__(
        self,
        path: Path,
        cause: BaseException,
        relative_path: str | None = None,
    ) -> None:
        self.path = path
        self.cause = cause
        self.relative_path = relative_path
        target = relative_path or str(path)
        super().__init__(f"Error writing {target}: {cause}")


class OperationCancelled(ScaffoldError):
    """Raised when the user declines to continue (e.g. refuses to overwrite)."""


class NotAProjectRoot(ScaffoldError):
    """Raised when a template must be added to an existing project and none is found."""

    def __init__(self, directory: Path, expected: str) -> None:
        self.directory = directory
        self.expected = expected
        super().__init__(f"{directory} is not a {expected} project directory")


def _describe(cause: BaseException) -> str:
    if isinstance(cause, httpx.HTTPStatusError):
        return f"HTTP {cause.response.status_code}"
    return str(cause)
