"""
Streaming plumbing for uploads: a bounded in-memory pipe and a
multipart/form-data encoder that writes into it.

The producer thread encodes files into the pipe while the HTTP transport
drains it, so no more than PIPE_CAPACITY bytes are ever buffered:

    producer ── MultipartWriter ──> Pipe ──> iter_chunks() ──> httpx

Wire layout of the body (one block per part, boundary chosen at random):

    --<boundary>\\r\\n
    Content-Disposition: form-data; name="file0"; filename="a.txt"\\r\\n
    Content-Type: application/octet-stream\\r\\n
    \\r\\n
    <bytes>\\r\\n
    --<boundary>--\\r\\n
"""

import secrets
import threading

from .config import BUFFER_SIZE, DEFAULT_CONTENT_TYPE, PIPE_CAPACITY
from .errors import DeadlineExceededError, PipeClosedError
from .utils import remaining


# ---------------------------------------------------------------------------
# Pipe
# ---------------------------------------------------------------------------


class Pipe:
    """
    A bounded byte pipe connecting one writer thread to one reader thread.

    write() blocks while the buffer is full, giving the writer backpressure
    from a slow reader.  Either side can close its end with an error:
      - close_writer(err) makes the reader raise *err* on its next read.
      - close_reader(err) makes any pending or future write raise
        PipeClosedError.
    """

    def __init__(self, capacity: int = PIPE_CAPACITY):
        self._capacity = capacity
        self._buffer = bytearray()
        self._cond = threading.Condition()
        self._writer_closed = False
        self._writer_error: BaseException | None = None
        self._reader_error: BaseException | None = None

    # --- write end ---

    def write(self, data) -> int:
        view = memoryview(data)
        with self._cond:
            while len(view):
                while (
                    self._reader_error is None
                    and not self._writer_closed
                    and len(self._buffer) >= self._capacity
                ):
                    self._cond.wait()
                if self._reader_error is not None:
                    raise PipeClosedError("read end closed", self._reader_error)
                if self._writer_closed:
                    raise PipeClosedError("write to closed pipe")
                n = min(self._capacity - len(self._buffer), len(view))
                self._buffer += view[:n]
                view = view[n:]
                self._cond.notify_all()
        return len(data)

    def close_writer(self, error: BaseException | None = None) -> None:
        """Signal end of data, or abort the reader with *error*."""
        with self._cond:
            if self._writer_closed:
                return
            self._writer_closed = True
            self._writer_error = error
            self._cond.notify_all()

    # --- read end ---

    def read(self, size: int = BUFFER_SIZE, deadline: float | None = None) -> bytes:
        """
        Return up to *size* bytes, or b"" once the writer has closed cleanly.

        Raises the writer's error if it closed with one, and
        DeadlineExceededError once *deadline* has passed.
        """
        with self._cond:
            while True:
                if self._reader_error is not None:
                    raise PipeClosedError("read from closed pipe")
                if self._writer_error is not None:
                    raise self._writer_error
                if deadline is not None and remaining(deadline) <= 0:
                    raise DeadlineExceededError("deadline exceeded while streaming body")
                if self._buffer:
                    chunk = bytes(self._buffer[:size])
                    del self._buffer[:size]
                    self._cond.notify_all()
                    return chunk
                if self._writer_closed:
                    return b""
                self._cond.wait(None if deadline is None else remaining(deadline))

    def close_reader(self, error: BaseException | None = None) -> None:
        """Tear down the read end; blocked writers are released."""
        with self._cond:
            if self._reader_error is not None:
                return
            self._reader_error = error or PipeClosedError("read end closed")
            self._buffer.clear()
            self._cond.notify_all()

    def iter_chunks(self, deadline: float | None = None):
        """Yield chunks until the writer closes; suitable as an httpx body."""
        while True:
            chunk = self.read(BUFFER_SIZE, deadline)
            if not chunk:
                return
            yield chunk


# ---------------------------------------------------------------------------
# Multipart encoding
# ---------------------------------------------------------------------------


def _escape_quotes(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class _Part:
    """File-like handle for the body of one form field."""

    def __init__(self, fp):
        self._fp = fp

    def write(self, data) -> int:
        return self._fp.write(data)

    def flush(self) -> None:
        pass


class MultipartWriter:
    """Incremental multipart/form-data encoder writing into *fp*."""

    def __init__(self, fp, boundary: str | None = None):
        self._fp = fp
        self.boundary = boundary or secrets.token_hex(16)
        self._parts = 0
        self._closed = False

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def create_form_file(self, fieldname: str, filename: str) -> _Part:
        """Start a new file field and return a writer for its content."""
        if self._closed:
            raise ValueError("multipart writer is closed")
        # Undecodable filename bytes from the filesystem are sent unchanged.
        header = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{_escape_quotes(fieldname)}"; '
            f'filename="{_escape_quotes(filename)}"\r\n'
            f"Content-Type: {DEFAULT_CONTENT_TYPE}\r\n"
            "\r\n"
        ).encode("utf-8", "surrogateescape")
        if self._parts:
            header = b"\r\n" + header
        self._fp.write(header)
        self._parts += 1
        return _Part(self._fp)

    def close(self) -> None:
        """Write the closing boundary.  No parts may be added afterwards."""
        if self._closed:
            return
        self._closed = True
        trailer = f"--{self.boundary}--\r\n".encode("ascii")
        if self._parts:
            trailer = b"\r\n" + trailer
        self._fp.write(trailer)
