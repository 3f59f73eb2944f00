import abc

from ..errors import InvalidRootError
from .duplicate_group import DuplicateGroup, DuplicateReport


def format_size(size_bytes: int) -> str:
    """Format byte size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size string (e.g., "1.50 MB")
    """
    size: float = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            if unit == 'B':
                return f"{int(size)} {unit}"
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


class Output(metaclass=abc.ABCMeta):
    def __init__(self):
        self.verbosity = 0
        self.use_bytes = True

    @abc.abstractmethod
    def _offer(self, record: list[str]):
        raise NotImplementedError()

    def _size(self, size_bytes: int) -> str:
        if self.use_bytes:
            return f"{size_bytes} bytes"
        return format_size(size_bytes)

    def describe_duplicate_group(self, group: DuplicateGroup):
        record = [f"Duplicate files found for name: {group.name}"]
        if self.verbosity >= 1:
            record.append(f"## sha256: {group.digest}")

        for path, size in zip(group.paths, group.sizes):
            if self.verbosity >= 1:
                size_text = "vanished" if size is None else self._size(size)
                record.append(f" - {path} ({size_text})")
            else:
                record.append(f" - {path}")

        self._offer(record)

    def describe_invalid_root(self, error: InvalidRootError):
        self._offer([str(error)])

    def describe_no_duplicates(self):
        self._offer(["No duplicate files found."])

    def describe_reclaimable(self, report: DuplicateReport):
        record = [f"Reclaimable space: {self._size(report.reclaimable_size)}"]
        if self.verbosity >= 1:
            record.append(f"## {report.total_items} duplicate files occupying {self._size(report.total_size)}")
        self._offer(record)

    def describe_report(self, report: DuplicateReport):
        if not report.has_duplicates():
            self.describe_no_duplicates()
            return

        for group in report.groups:
            self.describe_duplicate_group(group)
        self.describe_reclaimable(report)


class StandardOutput(Output):
    def __init__(self):
        super().__init__()

    def _offer(self, record):
        for part in record:
            print(part)
