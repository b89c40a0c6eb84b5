"""Template materialization: fetch every manifest entry and write it to disk.

All entries of a manifest are downloaded concurrently on the running event
loop. Blocking file-system calls are pushed to worker threads with
``asyncio.to_thread`` so one slow write never stalls the other downloads.

The first failing entry cancels its still-running siblings and is re-raised.
Files that siblings already wrote stay on disk, so a failed run may leave the
destination partially populated. Each file is written to a temporary name and
moved into place, so a destination path is either absent, the previous file,
or the complete new content.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import stat
import tempfile
from collections.abc import Iterable
from pathlib import Path

from woolball_scaffold.config import ScaffoldConfig
from woolball_scaffold.errors import FilesystemError, NetworkError
from woolball_scaffold.fetcher import TemplateFetcher

from .models import MaterializationResult, TemplateManifest

logger = logging.getLogger(__name__)

NEW_FILE_MODE = 0o666


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def substitute_secret(content: bytes, secret: str, placeholder: str) -> bytes:
    """Replace the first occurrence of *placeholder* in *content* with *secret*.

    Content without the placeholder is returned unchanged. Bytes outside the
    replaced token are never touched.
    """
    return content.replace(placeholder.encode("utf-8"), secret.encode("utf-8"), 1)


def default_file_mode() -> int:
    """Permission bits a plain ``open()`` would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return NEW_FILE_MODE & ~umask


def write_file_atomic(path: Path, content: bytes, mode: int | None = None) -> None:
    """Write *content* to *path* via a temporary sibling file and ``os.replace``.

    Missing parent directories are created. An existing file at *path* is
    overwritten and keeps its permission bits. A new file gets *mode*, which
    defaults to :func:`default_file_mode`.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        if mode is None:
            mode = default_file_mode()
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(content)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp_name)


# ---------------------------------------------------------------------------
# Materializer
# ---------------------------------------------------------------------------


class Materializer:
    """Drive one fetch-substitute-write pass per manifest entry.

    Attributes:
        fetcher: Downloads entry content.
        config: Supplies the placeholder token and the base directory that
            relative destination roots are anchored at.
    """

    def __init__(self, fetcher: TemplateFetcher, config: ScaffoldConfig | None = None) -> None:
        self.fetcher = fetcher
        self.config = config or ScaffoldConfig()

    # -- Public API --------------------------------------------------------

    async def materialize(self, manifest: TemplateManifest, secret: str) -> MaterializationResult:
        """Fetch and write every entry of *manifest*.

        Args:
            manifest: The resolved template manifest.
            secret: API key inlined into substitutable entries.

        Returns:
            A result mapping each relative path to its absolute written path.

        Raises:
            NetworkError: A download failed.
            FilesystemError: A directory or file could not be written.
        """
        root = self.config.resolve_destination(manifest.destination_root)
        try:
            await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(root, exc) from exc
        root = root.resolve()
        # Read on the loop thread: os.umask briefly changes process state.
        file_mode = default_file_mode()

        logger.debug("Materializing %d file(s) into %s", len(manifest.entries), root)

        tasks: dict[str, asyncio.Task[Path]] = {
            relative_path: asyncio.create_task(
                self._materialize_entry(
                    root,
                    relative_path,
                    url,
                    secret if manifest.is_substitutable(relative_path) else None,
                    file_mode,
                ),
                name=f"materialize:{relative_path}",
            )
            for relative_path, url in manifest.entries.items()
        }

        try:
            done, pending = await asyncio.wait(
                tasks.values(), return_when=asyncio.FIRST_EXCEPTION
            )
            failure = _first_failure(tasks, done)
            if failure is not None:
                await _cancel_all(pending)
                raise failure
        finally:
            # Reached with tasks still running only if we were cancelled ourselves.
            await _cancel_all(t for t in tasks.values() if not t.done())

        written = {relative_path: task.result() for relative_path, task in tasks.items()}
        return MaterializationResult(destination_root=root, written=written)

    # -- Per-entry pipeline -----------------------------------------------

    async def _materialize_entry(
        self,
        root: Path,
        relative_path: str,
        url: str,
        secret: str | None,
        file_mode: int,
    ) -> Path:
        try:
            content = await self.fetcher.fetch(url)
        except NetworkError as exc:
            # Chain to the transport error itself, not the unattributed copy.
            raise exc.for_entry(relative_path) from exc.cause

        if secret is not None:
            placeholder = self.config.placeholder
            if placeholder.encode("utf-8") not in content:
                logger.warning("No %s placeholder found in %s", placeholder, relative_path)
            content = substitute_secret(content, secret, placeholder)

        target = root.joinpath(*relative_path.split("/"))
        try:
            await asyncio.to_thread(write_file_atomic, target, content, file_mode)
        except OSError as exc:
            raise FilesystemError(target, exc, relative_path=relative_path) from exc

        logger.debug("Wrote %s (%d bytes)", target, len(content))
        return target


def _first_failure(
    tasks: dict[str, asyncio.Task[Path]],
    done: set[asyncio.Task[Path]],
) -> BaseException | None:
    """Return the exception of a failed task in *done*, or ``None``.

    Tasks are scanned in manifest order, so when several entries failed
    within the same wait batch the one listed first in the manifest is
    reported. Completion order inside a batch is not observable.
    """
    for task in tasks.values():
        if task in done and not task.cancelled() and task.exception() is not None:
            return task.exception()
    return None


async def _cancel_all(tasks: Iterable[asyncio.Task[Path]]) -> None:
    pending = list(tasks)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


# ---------------------------------------------------------------------------
# Convenience entry point
# ---------------------------------------------------------------------------


async def materialize(
    manifest: TemplateManifest,
    secret: str,
    config: ScaffoldConfig | None = None,
    fetcher: TemplateFetcher | None = None,
) -> MaterializationResult:
    """Materialize *manifest* with a fetcher scoped to this call.

    A caller-supplied *fetcher* is used as-is and left open.
    """
    config = config or ScaffoldConfig()
    if fetcher is not None:
        return await Materializer(fetcher, config).materialize(manifest, secret)
    async with TemplateFetcher(timeout=config.http_timeout()) as scoped:
        return await Materializer(scoped, config).materialize(manifest, secret)
