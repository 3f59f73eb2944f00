import asyncio
import os
from pathlib import Path
from typing import Callable, Awaitable

from .commands.scan import do_scan, validate_root, ScanArgs, ScanSettings
from .report.duplicate_group import DuplicateReport
from .utils.processor import Processor


class DuplicateScanner:
    """Finds files that share both a base name and their content under a root directory.

    Files are first grouped by base name. Only names carried by two or more files are
    hashed, and those files are then split by SHA-256 digest. Files with equal content
    but different names are never reported together.

    The scanner owns no state between runs; every call to scan() walks the tree again.
    """

    def __init__(self, processor: Processor, settings: ScanSettings | None = None):
        """
        Args:
            processor: Worker pool used for digest computation
            settings: Traversal and cancellation options, defaults to ScanSettings()
        """
        self._processor = processor
        self._settings = settings if settings is not None else ScanSettings()

        self._hash_algorithms = {
            'sha256': self._processor.sha256
        }
        self._default_hash_algorithm = 'sha256'

    def scan(self, root: str | os.PathLike) -> DuplicateReport:
        """Scan root and report duplicate groups with their aggregate sizes.

        Raises:
            InvalidRootError: root is empty or does not exist, checked before traversal
            ScanCancelled: settings.cancelled returned True during the scan
        """
        root_path = validate_root(root)

        return asyncio.run(do_scan(ScanArgs(
            root_path,
            self._get_hash_algorithm(),
            self._processor.concurrency,
            self._settings
        )))

    def _get_hash_algorithm(self) -> Callable[[Path], Awaitable[str]]:
        return self._hash_algorithms[self._default_hash_algorithm]
