import logging
import os
from asyncio import TaskGroup, Task
from pathlib import Path
from typing import NamedTuple, Callable, Awaitable

from ..errors import InvalidRootError, ScanCancelled, UnreadableFileError
from ..report.duplicate_group import DuplicateGroup, DuplicateReport
from ..utils.throttler import Throttler
from ..utils.walker import WalkPolicy, walk_with_policy, never_follow, follow_file_symlinks_outside

logger = logging.getLogger(__name__)


class ScanSettings(NamedTuple):
    """Options of a single scan."""
    # Record symlinks whose chain ends at a regular file outside the root
    follow_symlinks: bool = False
    # Polled between files; returning True stops the scan with ScanCancelled
    cancelled: Callable[[], bool] | None = None
    # Digest requests in flight at once, defaults to twice the worker count
    throttle: int | None = None


class ScanArgs(NamedTuple):
    """Arguments for the scan operation."""
    root: Path
    calculate_digest: Callable[[Path], Awaitable[str]]
    concurrency: int
    settings: ScanSettings


def validate_root(root: str | os.PathLike) -> Path:
    """Check that root names an existing path.

    Raises:
        InvalidRootError: root is empty or does not exist
    """
    if not os.fspath(root):
        raise InvalidRootError(root)

    path = Path(root)
    if not path.exists():
        raise InvalidRootError(root)

    return path


async def do_scan(args: ScanArgs) -> DuplicateReport:
    """Async implementation of the scan operation."""
    return await ScanProcessor(args).run()


class ScanProcessor:
    """Runs the traverse, group-by-name, group-by-digest, aggregate pipeline for one root."""

    def __init__(self, args: ScanArgs):
        self._root = args.root
        self._calculate_digest = args.calculate_digest
        self._concurrency = args.concurrency
        self._settings = args.settings
        self._skipped: list[tuple[Path, str]] = []

    async def run(self) -> DuplicateReport:
        if not self._root.is_dir():
            logger.warning(f"{self._root} is not a directory, nothing to scan")
            return DuplicateReport(self._root)

        name_index = self._index_names()

        digest_tasks: dict[str, list[tuple[Path, Task]]] = {}
        cancelled = False
        async with TaskGroup() as tg:
            throttler = Throttler(tg, self._throttle())

            for name in sorted(name_index):
                paths = name_index[name]
                if len(paths) < 2:
                    continue

                scheduled = []
                for path in paths:
                    if self._is_cancelled():
                        cancelled = True
                        break
                    scheduled.append((path, await throttler.schedule(self._digest(path))))
                digest_tasks[name] = scheduled

                if cancelled:
                    break

        if cancelled:
            raise ScanCancelled()

        groups = []
        for name, scheduled in digest_tasks.items():
            for digest, paths in self._group_by_digest(scheduled).items():
                if len(paths) > 1:
                    groups.append(self._build_group(name, digest, paths))

        groups.sort(key=lambda group: (group.name, group.paths[0]))
        return DuplicateReport(self._root, tuple(groups), tuple(self._skipped))

    def _index_names(self) -> dict[str, list[Path]]:
        """Map each base name to the regular files carrying it."""
        if self._settings.follow_symlinks:
            should_follow_symlink = follow_file_symlinks_outside(self._root)
        else:
            should_follow_symlink = never_follow

        name_index: dict[str, list[Path]] = {}
        for file_path, context in walk_with_policy(self._root, WalkPolicy(should_follow_symlink)):
            if self._is_cancelled():
                raise ScanCancelled()

            if context.is_file():
                name_index.setdefault(file_path.name, []).append(file_path)

        for paths in name_index.values():
            paths.sort()

        logger.info(f"Found {sum(len(paths) for paths in name_index.values())} files "
                    f"under {len(name_index)} names in {self._root}")
        return name_index

    async def _digest(self, path: Path) -> str | None:
        try:
            return await self._calculate_digest(path)
        except UnreadableFileError as e:
            logger.warning(f"Excluding unreadable file: {e}")
            self._skipped.append((path, e.reason))
            return None

    @staticmethod
    def _group_by_digest(scheduled: list[tuple[Path, Task]]) -> dict[str, list[Path]]:
        hash_index: dict[str, list[Path]] = {}
        for path, task in scheduled:
            digest = task.result()
            if digest is not None:
                hash_index.setdefault(digest, []).append(path)
        return hash_index

    @staticmethod
    def _build_group(name: str, digest: str, paths: list[Path]) -> DuplicateGroup:
        sizes = []
        for path in paths:
            try:
                sizes.append(path.stat().st_size)
            except OSError as e:
                logger.warning(f"Cannot determine size of {path}: {e.strerror or e}")
                sizes.append(None)
        return DuplicateGroup(name, digest, tuple(paths), tuple(sizes))

    def _throttle(self) -> int:
        if self._settings.throttle is not None:
            return self._settings.throttle
        return self._concurrency * 2

    def _is_cancelled(self) -> bool:
        return self._settings.cancelled is not None and self._settings.cancelled()
