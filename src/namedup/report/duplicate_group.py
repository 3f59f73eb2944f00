"""Result types produced by a duplicate scan."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class DuplicateGroup:
    """Files sharing both a base name and a content digest.

    Attributes:
        name: The base name shared by every path
        digest: Hex SHA-256 digest shared by every path
        paths: Paths of the duplicates, sorted
        sizes: Size in bytes for each entry of paths, measured when the report was built.
               None marks a file that vanished before it could be sized.
    """
    name: str
    digest: str
    paths: tuple[Path, ...]
    sizes: tuple[int | None, ...]

    def __post_init__(self):
        if len(self.paths) < 2:
            raise ValueError(f"a duplicate group needs at least two paths: {self.paths!r}")
        if len(self.paths) != len(self.sizes):
            raise ValueError("paths and sizes differ in length")

    @property
    def total_size(self) -> int:
        return sum(size for size in self.sizes if size is not None)

    @property
    def total_items(self) -> int:
        return sum(1 for size in self.sizes if size is not None)


@dataclass(frozen=True)
class DuplicateReport:
    """Outcome of scanning one root.

    Attributes:
        root: The scanned root as given by the caller
        groups: Duplicate groups ordered by name, then by first path
        skipped: (path, reason) for each file left out because it could not be read
    """
    root: Path
    groups: tuple[DuplicateGroup, ...] = ()
    skipped: tuple[tuple[Path, str], ...] = field(default=(), compare=False)

    @property
    def total_size(self) -> int:
        """Bytes occupied by every sized file of every duplicate group."""
        return sum(group.total_size for group in self.groups)

    @property
    def total_items(self) -> int:
        """Number of sized files across every duplicate group."""
        return sum(group.total_items for group in self.groups)

    @property
    def reclaimable_size(self) -> int:
        """Estimate of the bytes freed by keeping one copy.

        One average-sized file of the whole duplicate pool is treated as the copy worth
        keeping. This is not the per-group sum of size * (count - 1).
        """
        total_items = self.total_items
        if total_items == 0:
            return 0
        total_size = self.total_size
        return total_size - total_size // total_items

    def has_duplicates(self) -> bool:
        return bool(self.groups)
