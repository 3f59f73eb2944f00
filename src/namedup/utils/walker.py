import logging
import os
import stat
from pathlib import Path
from typing import Generator, Iterator, NamedTuple, Callable

logger = logging.getLogger(__name__)


class FileContext:
    """A file system entry met during traversal.

    The stat result is taken with lstat semantics unless a substitute context carrying
    the stat of a followed symlink target is supplied.
    """
    def __init__(self, parent, name: str | None, path: Path | None = None, st: os.stat_result | None = None):
        self._parent: FileContext | None = parent
        self._name: str | None = name
        self._stat: os.stat_result | None = st
        self._path: Path | None = path

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def parent(self) -> 'FileContext':
        if self._parent is None:
            raise LookupError("no parent")

        return self._parent

    @property
    def stat(self) -> os.stat_result:
        if self._stat is None:
            if self._path is None:
                raise LookupError("stat not available and path not provided")
            self._stat = self._path.stat(follow_symlinks=False)
        return self._stat

    def is_file(self):
        return stat.S_ISREG(self.stat.st_mode)

    def is_dir(self):
        return stat.S_ISDIR(self.stat.st_mode)

    def is_symlink(self):
        return stat.S_ISLNK(self.stat.st_mode)


def walk(path: Path, parent: FileContext) -> Generator[tuple[Path, FileContext], None | FileContext, None]:
    """Recursively traverse a directory.

    The consumer may send a substitute FileContext to be used in place of the entry just
    yielded. Directories that cannot be listed and entries that disappear before they
    are stat'ed are skipped.
    """
    try:
        children = sorted(path.iterdir())
    except OSError as e:
        logger.warning(f"Skipping directory {path}: {e.strerror or e}")
        return

    child: Path
    for child in children:
        context = FileContext(parent, child.name, path=child)
        try:
            context.stat
        except FileNotFoundError:
            logger.info(f"Entry vanished during traversal: {child}")
            continue
        except OSError as e:
            logger.warning(f"Skipping {child}: {e.strerror or e}")
            continue

        substitute_context = yield child, context

        if substitute_context is not None:
            context = substitute_context

        if context.is_dir():
            yield from walk(child, context)


class WalkPolicy(NamedTuple):
    """Policy controlling filesystem traversal behavior.

    Attributes:
        should_follow_symlink: Function that takes (absolute_path, file_context) and returns
                              a substitute FileContext if the symlink should be followed, or None
    """
    should_follow_symlink: Callable[[Path, FileContext], FileContext | None]


def walk_with_policy(path: Path, policy: WalkPolicy) -> Iterator[tuple[Path, FileContext]]:
    """Walk a tree, substituting followed symlinks as decided by policy.

    Yields:
        Tuples of (path, file_context) for each entry encountered below path
    """
    gen = walk(path, FileContext(None, None, path))
    pending = None

    try:
        while True:
            file_path, file_context = gen.send(pending)
            pending = None

            substitute = policy.should_follow_symlink(file_path, file_context)
            if substitute is not None:
                pending = file_context = substitute

            yield file_path, file_context
    except StopIteration:
        pass
    finally:
        gen.close()


def resolve_symlink_target(file_path: Path, boundary_paths: set[Path]) -> Path | None:
    """Follow a symlink chain one hop at a time and return its final target.

    Returns None when the chain loops, is broken, or passes through any of
    boundary_paths. Targets inside a boundary are reachable by the walk itself.
    """
    current_path = file_path.absolute()
    visited = set()
    boundaries = [boundary.absolute() for boundary in boundary_paths]

    while current_path.is_symlink():
        if current_path in visited:
            return None
        visited.add(current_path)

        try:
            target = current_path.readlink()
        except OSError:
            return None

        if not target.is_absolute():
            target = current_path.parent / target
        target = Path(os.path.normpath(target))

        if any(target.is_relative_to(boundary) for boundary in boundaries):
            return None

        current_path = target

    try:
        current_path.stat()
    except OSError:
        return None
    return current_path


def never_follow(file_path: Path, file_context: FileContext) -> FileContext | None:
    return None


def follow_file_symlinks_outside(root: Path) -> Callable[[Path, FileContext], FileContext | None]:
    """Build a should_follow_symlink function for symlinks to regular files outside root.

    Symlinks to directories are never followed, which keeps the walk free of cycles.
    """
    boundaries = {root.absolute(), root.resolve()}

    def should_follow(file_path: Path, file_context: FileContext) -> FileContext | None:
        if not file_context.is_symlink():
            return None

        target = resolve_symlink_target(file_path, boundaries)
        if target is None:
            return None

        try:
            st = target.stat()
        except OSError:
            return None

        if not stat.S_ISREG(st.st_mode):
            return None

        logger.info(f"Following symlink {file_path} -> {target}")
        return FileContext(file_context.parent, file_context.name, path=file_path, st=st)

    return should_follow
