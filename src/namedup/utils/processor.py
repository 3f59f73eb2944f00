import asyncio
import hashlib
import logging
import multiprocessing
from multiprocessing.pool import Pool
import os
import pathlib
import stat
from typing import Awaitable

from ..errors import UnreadableFileError
from .profiling import profile_worker

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@profile_worker
def compute_sha256_for_path(path: pathlib.Path) -> str:
    """Stream a regular file through SHA-256 and return the lowercase hex digest.

    Raises:
        UnreadableFileError: The path is not a regular file, or it cannot be opened or read
    """
    try:
        # FIFOs and devices must be rejected before open() can block on them
        if not stat.S_ISREG(os.stat(path).st_mode):
            raise UnreadableFileError(path, "not a regular file")

        with open(path, "rb") as f:
            if not stat.S_ISREG(os.fstat(f.fileno()).st_mode):
                raise UnreadableFileError(path, "not a regular file")

            accumulator = hashlib.sha256()
            while chunk := f.read(CHUNK_SIZE):
                accumulator.update(chunk)
    except OSError as e:
        raise UnreadableFileError(path, e.strerror or str(e)) from e

    return accumulator.hexdigest()


class Processor:
    """Worker pool computing file digests off the event loop thread."""

    def __init__(self, concurrency: int | None = None):
        if concurrency is None:
            concurrency = multiprocessing.cpu_count()

        if concurrency < 1:
            raise ValueError(f"concurrency must be positive: {concurrency}")

        self._concurrency = concurrency
        self._pool: Pool = Pool(self._concurrency)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._pool.close()
        self._pool.join()

    @property
    def concurrency(self):
        return self._concurrency

    def sha256(self, path: pathlib.Path) -> Awaitable[str]:
        logger.info(f"Starting hash computation for: {path}")

        async def log_and_compute():
            result = await self._evaluate(compute_sha256_for_path, path)
            logger.info(f"Completed hash computation for: {path}")
            return result

        return log_and_compute()

    def _evaluate(self, func, *args):
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def resolve(value):
            if not future.done():
                future.set_result(value)

        def reject(error):
            if not future.done():
                future.set_exception(error)

        self._pool.apply_async(func, args=args,
                               callback=lambda v: loop.call_soon_threadsafe(resolve, v),
                               error_callback=lambda e: loop.call_soon_threadsafe(reject, e))

        return future
