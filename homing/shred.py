"""
Secure delete: overwrite a file's contents with zeros, then unlink it.
"""

import os

from .config import SHRED_CHUNK_SIZE
from .logging_config import get_logger

logger = get_logger(__name__)


def _overwrite(f, size: int) -> None:
    zeros = bytes(SHRED_CHUNK_SIZE)
    full, rest = divmod(size, SHRED_CHUNK_SIZE)
    for _ in range(full):
        f.write(zeros)
    if rest:
        f.write(zeros[:rest])


def srm(path: str, force: bool = False) -> None:
    """
    Zero the existing length of *path*, sync it to disk and delete it.

    If the overwrite fails the file is kept and the error raised, unless
    *force* is set, in which case the file is deleted anyway and the overwrite
    error is still raised.  If the file cannot be opened nothing is deleted.
    """
    fd = os.open(path, os.O_WRONLY)
    error: OSError | None = None
    try:
        with os.fdopen(fd, "wb") as f:
            _overwrite(f, os.fstat(f.fileno()).st_size)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        error = e

    if error is None or force:
        try:
            os.remove(path)
        except OSError as e:
            if error is None:
                error = e

    if error is not None:
        raise error
    logger.debug(f"Shredded {path}")
